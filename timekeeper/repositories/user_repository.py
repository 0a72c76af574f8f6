from sqlalchemy import func
from sqlalchemy.orm import Session
from timekeeper.models.user import User


class UserRepository:
    """Repository for User model operations, always scoped by tenant"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_tenant(self, user_id: int, tenant_id: int) -> User | None:
        """
        Get user ensuring it belongs to tenant (multi-tenant safety).

        Returns None if user doesn't exist or belongs to another tenant.
        """
        return (
            self.db.query(User)
            .filter(User.id == user_id, User.tenant_id == tenant_id)
            .first()
        )

    def get_by_username_and_tenant(self, username: str, tenant_id: int) -> User | None:
        """Look up a user by username within one tenant"""
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id, func.lower(User.username) == username.lower())
            .first()
        )

    def get_by_email_and_tenant(self, email: str, tenant_id: int) -> User | None:
        """Look up a user by email within one tenant"""
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id, func.lower(User.email) == email.lower())
            .first()
        )

    def get_by_tenant(self, tenant_id: int) -> list[User]:
        """Get all users of a tenant"""
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id)
            .order_by(User.id)
            .all()
        )

    def count_active(self, tenant_id: int) -> int:
        """Count active users (seats in use) for a tenant"""
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id, User.is_active.is_(True))
            .count()
        )

    def create_no_commit(self, user: User) -> User:
        """Add user without committing (for atomic ops)"""
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user: User) -> User:
        """Update existing user"""
        self.db.commit()
        self.db.refresh(user)
        return user
