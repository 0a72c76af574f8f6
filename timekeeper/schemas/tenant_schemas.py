from pydantic import BaseModel, Field
from datetime import datetime


class TenantResponse(BaseModel):
    """Tenant details response"""

    id: int
    name: str
    slug: str
    domain: str | None
    subdomain: str | None
    plan: str
    max_users: int
    is_active: bool
    trial_ends_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TenantSummary(BaseModel):
    """Public tenant fields returned by slug validation"""

    id: int
    name: str
    slug: str
    plan: str

    model_config = {"from_attributes": True}


class TenantValidateResponse(BaseModel):
    """Result of validating a tenant slug"""

    valid: bool
    tenant: TenantSummary


class TenantUpdate(BaseModel):
    """Update tenant details (ADMIN or OWNER)"""

    name: str | None = Field(None, min_length=1, max_length=255)
    domain: str | None = Field(None, max_length=255)
    subdomain: str | None = Field(None, max_length=100)
