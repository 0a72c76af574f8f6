from pydantic import BaseModel, EmailStr, Field
from timekeeper.models.role import UserRole
from timekeeper.schemas.tenant_schemas import TenantResponse
from timekeeper.schemas.user_schemas import UserResponse


class LoginRequest(BaseModel):
    """Credentials for login within the resolved tenant"""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """
    Registration payload.

    Supplying tenant_name and tenant_slug while no tenant is resolved
    creates a new tenant with the registering user as owner.
    """

    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.USER
    timezone: str = Field(default="UTC", min_length=1, max_length=50)

    tenant_name: str | None = Field(None, min_length=1, max_length=255)
    tenant_slug: str | None = Field(
        None, min_length=2, max_length=100, pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$"
    )
    subdomain: str | None = Field(None, max_length=100)
    domain: str | None = Field(None, max_length=255)


class TokenResponse(BaseModel):
    """Access token issued on login/registration"""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
    tenant: TenantResponse


class RegisterResponse(TokenResponse):
    """Registration result"""

    is_new_tenant: bool


class CurrentUserResponse(BaseModel):
    """Authenticated user with their tenant"""

    user: UserResponse
    tenant: TenantResponse


class MessageResponse(BaseModel):
    """Plain message response"""

    message: str
