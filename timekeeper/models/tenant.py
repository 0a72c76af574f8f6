"""Tenant model for multi-tenant isolation."""

from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from timekeeper.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from timekeeper.models.user import User
    from timekeeper.models.project import Project


class Tenant(Base, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    A tenant is an organization whose users, projects, tasks and
    timesheets are never visible to any other tenant. Every tenant-owned
    table carries a tenant_id foreign key to this table.

    Requests are mapped to a tenant by the X-Tenant-Slug header, a custom
    domain, or a subdomain (see services.tenant_resolver).
    """

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    domain: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True, index=True)
    subdomain: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True, index=True)
    plan: Mapped[str] = mapped_column(String(50), nullable=False, default="free")
    max_users: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
    projects: Mapped[list["Project"]] = relationship(
        "Project",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, slug='{self.slug}')>"
