from datetime import date, datetime
from enum import Enum as PyEnum
from sqlalchemy import (
    String,
    Integer,
    Numeric,
    Boolean,
    Date,
    DateTime,
    Text,
    ForeignKey,
    Enum,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from timekeeper.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from timekeeper.models.user import User


class TimesheetStatus(str, PyEnum):
    """
    Approval lifecycle of a weekly timesheet.

    draft -> submitted -> approved | rejected, and approved -> locked.
    Only draft timesheets accept entry changes.
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    LOCKED = "locked"


# Per-day hour columns on TimesheetEntry, Monday first
DAY_FIELDS = (
    "monday_hours",
    "tuesday_hours",
    "wednesday_hours",
    "thursday_hours",
    "friday_hours",
    "saturday_hours",
    "sunday_hours",
)

HOURS_PER_DAY = 24


def _hours_column():
    return mapped_column(
        Numeric(precision=5, scale=2, asdecimal=False), nullable=False, default=0.0
    )


class Timesheet(Base, TimestampMixin):
    """
    One user's logged hours for one week (Monday to Sunday).

    Totals are derived values: recomputed from all entries whenever an
    entry changes and when the timesheet is submitted.
    """

    __tablename__ = "timesheets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    week_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[TimesheetStatus] = mapped_column(
        Enum(TimesheetStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TimesheetStatus.DRAFT,
        index=True,
    )
    total_hours: Mapped[float] = _hours_column()
    billable_hours: Mapped[float] = _hours_column()
    overtime_hours: Mapped[float] = _hours_column()
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="timesheets", foreign_keys=[user_id]
    )
    entries: Mapped[list["TimesheetEntry"]] = relationship(
        "TimesheetEntry",
        back_populates="timesheet",
        cascade="all, delete-orphan",
        order_by="TimesheetEntry.id",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "week_start_date", name="uq_timesheet_user_week"),
        Index("ix_timesheets_tenant_status", "tenant_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Timesheet(id={self.id}, user_id={self.user_id}, "
            f"week={self.week_start_date}, status={self.status.value})>"
        )


class TimesheetEntry(Base, TimestampMixin):
    """
    Hours logged against one project (and optionally one task) for a week.

    total_hours is the sum of the seven per-day fields.
    """

    __tablename__ = "timesheet_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    timesheet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("timesheets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True
    )
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    monday_hours: Mapped[float] = _hours_column()
    tuesday_hours: Mapped[float] = _hours_column()
    wednesday_hours: Mapped[float] = _hours_column()
    thursday_hours: Mapped[float] = _hours_column()
    friday_hours: Mapped[float] = _hours_column()
    saturday_hours: Mapped[float] = _hours_column()
    sunday_hours: Mapped[float] = _hours_column()
    is_billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    total_hours: Mapped[float] = _hours_column()

    timesheet: Mapped["Timesheet"] = relationship("Timesheet", back_populates="entries")

    def compute_total(self) -> float:
        """Recompute total_hours from the per-day fields and return it"""
        self.total_hours = round(sum(float(getattr(self, f) or 0) for f in DAY_FIELDS), 2)
        return self.total_hours
