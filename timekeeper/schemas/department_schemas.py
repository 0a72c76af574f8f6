from datetime import datetime
from pydantic import BaseModel, Field


class DepartmentCreate(BaseModel):
    """Schema for creating a department"""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    manager_id: int | None = Field(None, gt=0)


class DepartmentUpdate(BaseModel):
    """Schema for updating a department"""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    manager_id: int | None = Field(None, gt=0)
    is_active: bool | None = None


class DepartmentResponse(BaseModel):
    """Schema for department response"""

    id: int
    tenant_id: int
    name: str
    description: str | None
    manager_id: int | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
