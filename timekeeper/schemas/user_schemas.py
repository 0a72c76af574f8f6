from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from timekeeper.models.role import UserRole


class UserResponse(BaseModel):
    """Schema for user response (never includes the password hash)"""

    id: int
    tenant_id: int
    username: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    timezone: str
    is_active: bool
    last_login_at: datetime | None
    invited_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Schema for updating a user (ADMIN or OWNER)"""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    role: UserRole | None = None
    timezone: str | None = Field(None, min_length=1, max_length=50)
    is_active: bool | None = None


class UserListResponse(BaseModel):
    """Schema for list of users"""

    users: list[UserResponse]
    total: int


class InviteRequest(BaseModel):
    """Invite a new user into the caller's tenant"""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.USER


class InviteResponse(BaseModel):
    """Invited user plus the temporary password to hand over out of band"""

    message: str
    user: UserResponse
    temp_password: str
