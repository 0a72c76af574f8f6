from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context, require_roles, resolve_tenant
from timekeeper.models.role import APPROVER_ROLES
from timekeeper.models.tenant import Tenant
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.auth_schemas import (
    CurrentUserResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from timekeeper.schemas.tenant_schemas import TenantResponse, TenantSummary, TenantValidateResponse
from timekeeper.schemas.user_schemas import InviteRequest, InviteResponse, UserResponse
from timekeeper.services.auth_service import AuthService
from timekeeper.services.tenant_service import TenantService

router = APIRouter()


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: LoginRequest,
    request: Request,
    tenant: Tenant | None = Depends(resolve_tenant),
    db: Session = Depends(get_db),
):
    """
    Log in to the tenant addressed by the request.

    - Tenant comes from X-Tenant-Slug, custom domain or subdomain
    - Fails with 400 if no tenant is resolved, 401 on bad credentials
    """
    service = AuthService(db)
    user, token = service.login(tenant, credentials.username, credentials.password, _client_ip(request))
    return TokenResponse(
        **token,
        user=UserResponse.model_validate(user),
        tenant=TenantResponse.model_validate(user.tenant),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    request: Request,
    tenant: Tenant | None = Depends(resolve_tenant),
    db: Session = Depends(get_db),
):
    """
    Register a user.

    - Joins the resolved tenant, or
    - Creates a new tenant (caller becomes owner) when no tenant is resolved
      and tenant_name + tenant_slug are given
    """
    service = AuthService(db)
    user, token, is_new_tenant = service.register(data, tenant, _client_ip(request))
    return RegisterResponse(
        **token,
        user=UserResponse.model_validate(user),
        tenant=TenantResponse.model_validate(user.tenant),
        is_new_tenant=is_new_tenant,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Revoke the bearer token used for this request."""
    service = AuthService(db)
    service.logout(context.token_payload)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=CurrentUserResponse)
async def get_current_user_info(context: TenantContext = Depends(get_tenant_context)):
    """Authenticated user with their tenant."""
    return CurrentUserResponse(
        user=UserResponse.model_validate(context.user),
        tenant=TenantResponse.model_validate(context.tenant),
    )


@router.post("/invite", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def invite_user(
    invite_request: InviteRequest,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Invite a user into the caller's tenant.

    - **Requires MANAGER, ADMIN or OWNER**
    - Only owners may invite owners or admins
    - The account stays inactive until an admin activates it
    """
    service = AuthService(db)
    user, temp_password = service.invite(invite_request, context)
    return InviteResponse(
        message="User invited successfully",
        user=UserResponse.model_validate(user),
        temp_password=temp_password,
    )


@router.get("/tenant/validate/{slug}", response_model=TenantValidateResponse)
async def validate_tenant(slug: str, db: Session = Depends(get_db)):
    """Check that a slug names an active tenant (404 otherwise)."""
    service = TenantService(db)
    tenant = service.validate_slug(slug)
    return TenantValidateResponse(valid=True, tenant=TenantSummary.model_validate(tenant))
