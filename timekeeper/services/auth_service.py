import logging
import re
import secrets
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timekeeper.config import settings
from timekeeper.core.exceptions import (
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
)
from timekeeper.core.security import (
    create_access_token,
    hash_password,
    pwd_context,
    token_expiry,
    verify_password,
)
from timekeeper.models.base import utcnow
from timekeeper.models.role import ADMIN_ROLES, UserRole
from timekeeper.models.tenant import Tenant
from timekeeper.models.tenant_context import TenantContext
from timekeeper.models.user import User
from timekeeper.repositories.revoked_token_repository import RevokedTokenRepository
from timekeeper.repositories.tenant_repository import TenantRepository
from timekeeper.repositories.user_repository import UserRepository
from timekeeper.schemas.auth_schemas import RegisterRequest
from timekeeper.schemas.user_schemas import InviteRequest
from timekeeper.services.audit_service import AuditService
from timekeeper.services.tenant_service import TenantService

logger = logging.getLogger(__name__)


class AuthService:
    """Login, registration, logout and invitations"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.user_repo = UserRepository(db)
        self.revoked_repo = RevokedTokenRepository(db)
        self.audit = AuditService(db)

    def issue_token(self, user: User) -> dict:
        """Mint an access token for a user and describe its lifetime"""
        return {
            "access_token": create_access_token(user.id, user.tenant_id, user.role.value),
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_HOURS * 3600,
        }

    def login(
        self,
        tenant: Tenant | None,
        username: str,
        password: str,
        ip_address: str | None = None,
    ) -> tuple[User, dict]:
        """
        Authenticate a user within the resolved tenant.

        Args:
            tenant: Tenant resolved from the request, if any
            username: Username (case-insensitive within the tenant)
            password: Plaintext password
            ip_address: Client address for the audit record

        Returns:
            Tuple of (user, token data)

        Raises:
            ValidationException: If no tenant was resolved (fail closed)
            UnauthorizedException: If the credentials are not valid
        """
        if tenant is None:
            raise ValidationException("Tenant not found")

        user = self.user_repo.get_by_username_and_tenant(username, tenant.id)
        if user is None:
            # Burn comparable time so unknown usernames are not distinguishable
            pwd_context.dummy_verify()
            logger.info("Login failed for unknown user in tenant %s", tenant.slug)
            raise UnauthorizedException("Invalid credentials")

        if not verify_password(password, user.password_hash):
            logger.info("Login failed for user %s in tenant %s", user.id, tenant.slug)
            raise UnauthorizedException("Invalid credentials")

        if not user.is_active:
            logger.info("Login refused for inactive user %s in tenant %s", user.id, tenant.slug)
            raise UnauthorizedException("Invalid credentials")

        user.last_login_at = utcnow()
        self.audit.record(tenant.id, user.id, "login", "user", user.id, ip_address=ip_address)
        user = self.user_repo.update(user)

        logger.info("User %s logged in to tenant %s", user.id, tenant.slug)
        return user, self.issue_token(user)

    def register(
        self,
        data: RegisterRequest,
        tenant: Tenant | None,
        ip_address: str | None = None,
    ) -> tuple[User, dict, bool]:
        """
        Register a user, creating a new tenant when requested.

        With no resolved tenant and tenant_name + tenant_slug supplied, the
        tenant and its owner are created in one transaction. Otherwise the
        user joins the resolved tenant.

        Returns:
            Tuple of (user, token data, is_new_tenant)

        Raises:
            ValidationException: Missing tenant, duplicates, seat limit
            ForbiddenException: Self-registration claiming owner/admin
        """
        is_new_tenant = tenant is None and bool(data.tenant_name and data.tenant_slug)

        if is_new_tenant:
            host_names = TenantService(self.db)
            host_names.claim_host_name(data.tenant_slug, "tenant slug")
            tenant = self.tenant_repo.create_no_commit(
                Tenant(
                    name=data.tenant_name,
                    slug=data.tenant_slug,
                    subdomain=host_names.claim_host_name(data.subdomain, "subdomain"),
                    domain=host_names.claim_host_name(data.domain, "domain"),
                    plan="trial",
                    max_users=settings.TRIAL_MAX_USERS,
                    is_active=True,
                    trial_ends_at=utcnow() + timedelta(days=settings.TRIAL_DAYS),
                )
            )
            role = UserRole.OWNER
        else:
            if tenant is None:
                raise ValidationException("Tenant context required")
            if data.role in ADMIN_ROLES:
                raise ForbiddenException(f"Cannot self-register with role '{data.role.value}'")
            if self.user_repo.count_active(tenant.id) >= tenant.max_users:
                raise ValidationException("Tenant user limit reached")
            role = data.role

        try:
            self._check_unique(tenant.id, data.username, data.email)
            user = self.user_repo.create_no_commit(
                User(
                    tenant_id=tenant.id,
                    username=data.username,
                    email=data.email.lower(),
                    password_hash=hash_password(data.password),
                    first_name=data.first_name,
                    last_name=data.last_name,
                    role=role,
                    timezone=data.timezone,
                    is_active=True,
                )
            )
            self.audit.record(
                tenant.id,
                user.id,
                "register",
                "user",
                user.id,
                details={"is_new_tenant": is_new_tenant, "role": role.value},
                ip_address=ip_address,
            )
            self.db.commit()
        except ValidationException:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            raise ValidationException("Username, email or tenant slug already registered")

        self.db.refresh(user)
        if is_new_tenant:
            logger.info("Created tenant %s with owner %s", tenant.slug, user.id)
        else:
            logger.info("User %s registered in tenant %s", user.id, tenant.slug)
        return user, self.issue_token(user), is_new_tenant

    def logout(self, token_payload: dict) -> None:
        """Revoke the caller's token until it would have expired"""
        self.revoked_repo.revoke(token_payload["jti"], token_expiry(token_payload))
        self.revoked_repo.purge_expired(utcnow())
        logger.info("User %s logged out", token_payload["sub"])

    def invite(self, invite_request: InviteRequest, context: TenantContext) -> tuple[User, str]:
        """
        Invite a new user into the caller's tenant.

        The user is created inactive with a generated username and a
        temporary password; an admin activates the account later.

        Returns:
            Tuple of (invited user, temporary password)

        Raises:
            ForbiddenException: Non-owner inviting an owner or admin
            ValidationException: Email already present in the tenant
        """
        if invite_request.role in ADMIN_ROLES and not context.is_owner():
            raise ForbiddenException("Only owners can invite owners or admins")

        if self.user_repo.get_by_email_and_tenant(invite_request.email, context.tenant_id):
            raise ValidationException("User already exists in this organization")

        temp_password = secrets.token_urlsafe(12)
        user = User(
            tenant_id=context.tenant_id,
            username=self._generate_username(invite_request.email, context.tenant_id),
            email=invite_request.email.lower(),
            password_hash=hash_password(temp_password),
            first_name=invite_request.first_name,
            last_name=invite_request.last_name,
            role=invite_request.role,
            is_active=False,  # An admin activates the account via PUT /api/users/{id}
            invited_by=context.user.id,
            invited_at=utcnow(),
        )
        try:
            self.user_repo.create_no_commit(user)
            self.audit.record_for(
                context, "invite", "user", user.id, {"email": user.email, "role": user.role.value}
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationException("User already exists in this organization")

        self.db.refresh(user)
        logger.info("User %s invited %s into tenant %s", context.user.id, user.id, context.tenant.slug)
        return user, temp_password

    def _check_unique(self, tenant_id: int, username: str, email: str) -> None:
        if self.user_repo.get_by_username_and_tenant(username, tenant_id):
            raise ValidationException("Username already exists")
        if self.user_repo.get_by_email_and_tenant(email, tenant_id):
            raise ValidationException("Email already exists")

    def _generate_username(self, email: str, tenant_id: int) -> str:
        base = re.sub(r"[^a-z0-9_.-]", "", email.split("@", 1)[0].lower()) or "user"
        while True:
            candidate = f"{base}_{secrets.token_hex(3)}"
            if self.user_repo.get_by_username_and_tenant(candidate, tenant_id) is None:
                return candidate
