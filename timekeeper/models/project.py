from datetime import date
from enum import Enum as PyEnum
from sqlalchemy import (
    String,
    Integer,
    Numeric,
    Boolean,
    Date,
    Text,
    ForeignKey,
    Enum,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from timekeeper.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from timekeeper.models.tenant import Tenant
    from timekeeper.models.task import Task


class ProjectStatus(str, PyEnum):
    """Project status enumeration"""

    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, PyEnum):
    """Priority shared by projects and tasks"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AssignmentRole(str, PyEnum):
    """Role of a user on a single project"""

    MEMBER = "member"
    LEAD = "lead"
    VIEWER = "viewer"


def _enum(enum_cls):
    return Enum(enum_cls, native_enum=False, values_callable=lambda x: [e.value for e in x])


class Project(Base, TimestampMixin):
    """
    Client or internal project that time is logged against.

    Tasks, timesheet entries and assignments referencing a project always
    share its tenant_id.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#1976D2")
    status: Mapped[ProjectStatus] = mapped_column(
        _enum(ProjectStatus), nullable=False, default=ProjectStatus.ACTIVE, index=True
    )
    priority: Mapped[Priority] = mapped_column(
        _enum(Priority), nullable=False, default=Priority.MEDIUM
    )
    budget: Mapped[float | None] = mapped_column(
        Numeric(precision=10, scale=2, asdecimal=False), nullable=True
    )
    hourly_rate: Mapped[float | None] = mapped_column(
        Numeric(precision=8, scale=2, asdecimal=False), nullable=True
    )
    department_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    manager_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="projects")
    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",  # Delete tasks if project deleted
    )
    assignments: Mapped[list["ProjectAssignment"]] = relationship(
        "ProjectAssignment",
        back_populates="project",
        cascade="all, delete-orphan",
    )


class ProjectAssignment(Base, TimestampMixin):
    """Membership of a user on a project (creator is assigned as lead)."""

    __tablename__ = "project_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[AssignmentRole] = mapped_column(
        _enum(AssignmentRole), nullable=False, default=AssignmentRole.MEMBER
    )
    assigned_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    project: Mapped["Project"] = relationship("Project", back_populates="assignments")

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_user"),
    )
