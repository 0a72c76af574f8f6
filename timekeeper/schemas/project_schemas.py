from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from timekeeper.models.project import ProjectStatus, Priority, AssignmentRole


class ProjectCreate(BaseModel):
    """Schema for creating a project (tenant is taken from the caller)"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    client_name: Optional[str] = Field(None, max_length=255)
    color: str = Field(default="#1976D2", pattern=r"^#[0-9A-Fa-f]{6}$")
    status: ProjectStatus = ProjectStatus.ACTIVE
    priority: Priority = Priority.MEDIUM
    budget: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    department_id: Optional[int] = Field(None, gt=0)
    manager_id: Optional[int] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_billable: bool = True
    requires_approval: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    """Schema for updating a project (partial)"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    client_name: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    budget: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    department_id: Optional[int] = Field(None, gt=0)
    manager_id: Optional[int] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_billable: Optional[bool] = None
    requires_approval: Optional[bool] = None


class ProjectResponse(BaseModel):
    """Schema for project response"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    name: str
    description: Optional[str]
    client_name: Optional[str]
    color: str
    status: ProjectStatus
    priority: Priority
    budget: Optional[float]
    hourly_rate: Optional[float]
    department_id: Optional[int]
    manager_id: Optional[int]
    start_date: Optional[date]
    end_date: Optional[date]
    is_billable: bool
    requires_approval: bool
    created_at: datetime
    updated_at: datetime


class ProjectListResponse(BaseModel):
    """Schema for list of projects"""

    projects: list[ProjectResponse]
    total: int


class AssignmentCreate(BaseModel):
    """Assign a tenant user to a project"""

    user_id: int = Field(..., gt=0)
    role: AssignmentRole = AssignmentRole.MEMBER


class AssignmentResponse(BaseModel):
    """Schema for project assignment response"""

    model_config = {"from_attributes": True}

    id: int
    project_id: int
    user_id: int
    role: AssignmentRole
    assigned_by: Optional[int]
    created_at: datetime
