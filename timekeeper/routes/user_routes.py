from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import require_roles
from timekeeper.models.role import ADMIN_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.user_schemas import UserListResponse, UserResponse, UserUpdate
from timekeeper.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    context: TenantContext = Depends(require_roles(*ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """List users of the caller's tenant (ADMIN or OWNER)."""
    service = UserService(db)
    users = service.list_users(context)
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users], total=len(users))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_update: UserUpdate,
    context: TenantContext = Depends(require_roles(*ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Update a user of the caller's tenant.

    - **Requires ADMIN or OWNER**
    - Returns 404 for users of other tenants
    - Only owners may grant owner/admin or modify owner/admin accounts
    """
    service = UserService(db)
    return service.update_user(user_id, user_update, context)
