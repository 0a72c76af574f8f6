"""
Request authorization pipeline.

Each stage is a FastAPI dependency that short-circuits on failure:

    resolve_tenant -> get_current_user -> get_tenant_context -> require_roles(...)

Services then verify that every referenced entity belongs to
``context.tenant_id`` and answer 404 when it does not.
"""

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from timekeeper.core.exceptions import ForbiddenException, UnauthorizedException
from timekeeper.core.security import decode_jwt
from timekeeper.database import get_db
from timekeeper.models.role import UserRole
from timekeeper.models.tenant import Tenant
from timekeeper.models.tenant_context import TenantContext
from timekeeper.models.user import User
from timekeeper.repositories.revoked_token_repository import RevokedTokenRepository
from timekeeper.repositories.user_repository import UserRepository
from timekeeper.services.tenant_resolver import resolve_tenant_for_request

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported as our own 401
security = HTTPBearer(auto_error=False)


async def resolve_tenant(request: Request, db: Session = Depends(get_db)) -> Tenant | None:
    """
    Resolve the tenant addressed by the request and attach it to request.state.

    Never fails; routes that need a tenant decide how to reject None.
    """
    tenant = resolve_tenant_for_request(
        db, request.headers.get("host"), request.headers.get("x-tenant-slug")
    )
    request.state.tenant = tenant
    return tenant


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tenant: Tenant | None = Depends(resolve_tenant),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the bearer token and load the user it names.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate signature, expiry and required claims
    3. Reject tokens revoked by logout
    4. Load the user within the token's tenant; user and tenant must be active
    5. If the request addressed a tenant, it must be the token's tenant

    Raises:
        UnauthorizedException: Missing, invalid, expired or revoked token,
            unknown or inactive user, inactive tenant
        ForbiddenException: Token tenant differs from the resolved tenant
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = decode_jwt(credentials.credentials)

    if RevokedTokenRepository(db).is_revoked(payload["jti"]):
        raise UnauthorizedException("Token has been revoked")

    user = UserRepository(db).get_by_id_and_tenant(payload["sub"], payload["tid"])
    if user is None or not user.is_active:
        raise UnauthorizedException("User not found or inactive")

    if not user.tenant.is_active:
        raise UnauthorizedException("Tenant is inactive")

    if tenant is not None and tenant.id != user.tenant_id:
        logger.warning(
            "User %s from tenant %s addressed tenant %s", user.id, user.tenant_id, tenant.id
        )
        raise ForbiddenException("Access denied for this tenant")

    request.state.token_payload = payload
    return user


async def get_tenant_context(
    request: Request,
    user: User = Depends(get_current_user),
) -> TenantContext:
    """
    Build the TenantContext for the authenticated user.

    The tenant is always the user's own; a client-supplied tenant id is
    never consulted.
    """
    return TenantContext(
        user=user,
        tenant=user.tenant,
        token_payload=request.state.token_payload,
        ip_address=request.client.host if request.client else None,
    )


def require_roles(*roles: UserRole):
    """
    Dependency factory for a flat role allow-list.

    Usage:
        context: TenantContext = Depends(require_roles(UserRole.ADMIN, UserRole.OWNER))
    """

    async def check_roles(context: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if not context.has_role(*roles):
            raise ForbiddenException("Insufficient permissions")
        return context

    return check_roles
