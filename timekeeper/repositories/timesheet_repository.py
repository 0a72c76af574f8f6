from datetime import date
from typing import Optional
from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from timekeeper.models.base import utcnow
from timekeeper.models.timesheet import DAY_FIELDS, Timesheet, TimesheetEntry, TimesheetStatus


class TimesheetRepository:
    """Repository for Timesheet and TimesheetEntry data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_tenant(
        self, timesheet_id: int, tenant_id: int, for_update: bool = False
    ) -> Optional[Timesheet]:
        """
        Get timesheet by ID, ensuring it belongs to the tenant.

        Args:
            timesheet_id: Timesheet ID
            tenant_id: Tenant ID
            for_update: Take a row lock (ignored by SQLite)

        Returns:
            Timesheet object or None if not found or belongs to different tenant
        """
        query = self.db.query(Timesheet).filter(
            Timesheet.id == timesheet_id,
            Timesheet.tenant_id == tenant_id,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_for_week(self, user_id: int, week_start: date) -> Optional[Timesheet]:
        """Get a user's timesheet for the week starting on week_start"""
        return (
            self.db.query(Timesheet)
            .filter(Timesheet.user_id == user_id, Timesheet.week_start_date == week_start)
            .first()
        )

    def get_by_user(self, user_id: int, tenant_id: int, limit: int = 10) -> list[Timesheet]:
        """Get a user's most recent timesheets, newest week first"""
        return (
            self.db.query(Timesheet)
            .filter(Timesheet.user_id == user_id, Timesheet.tenant_id == tenant_id)
            .order_by(Timesheet.week_start_date.desc())
            .limit(limit)
            .all()
        )

    def get_with_filters(
        self,
        tenant_id: int,
        status: Optional[TimesheetStatus] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Timesheet]:
        """
        Get tenant timesheets with filters, ensuring multi-tenant isolation.

        Args:
            tenant_id: Tenant ID for isolation
            status: Optional status filter
            user_id: Optional owner filter
            start_date: Weeks starting on or after this date
            end_date: Weeks starting on or before this date

        Returns:
            Timesheets ordered by week (newest first)
        """
        query = self.db.query(Timesheet).filter(Timesheet.tenant_id == tenant_id)

        if status is not None:
            query = query.filter(Timesheet.status == status)

        if user_id is not None:
            query = query.filter(Timesheet.user_id == user_id)

        if start_date is not None:
            query = query.filter(Timesheet.week_start_date >= start_date)

        if end_date is not None:
            query = query.filter(Timesheet.week_start_date <= end_date)

        return query.order_by(Timesheet.week_start_date.desc(), Timesheet.id.desc()).all()

    def count_by_status(self, tenant_id: int, status: TimesheetStatus) -> int:
        """Count tenant timesheets in a given status"""
        return (
            self.db.query(Timesheet)
            .filter(Timesheet.tenant_id == tenant_id, Timesheet.status == status)
            .count()
        )

    def sum_hours_by_status(self, tenant_id: int, status: TimesheetStatus) -> float:
        """Sum total_hours of tenant timesheets in a given status"""
        result = (
            self.db.query(func.sum(Timesheet.total_hours))
            .filter(Timesheet.tenant_id == tenant_id, Timesheet.status == status)
            .scalar()
        )
        return float(result) if result is not None else 0.0

    def create(self, timesheet: Timesheet) -> Timesheet:
        """Create a new timesheet"""
        self.db.add(timesheet)
        self.db.commit()
        self.db.refresh(timesheet)
        return timesheet

    def update(self, timesheet: Timesheet) -> Timesheet:
        """Commit pending changes and reload the timesheet"""
        self.db.commit()
        self.db.refresh(timesheet)
        return timesheet

    def compute_totals(self, timesheet_id: int) -> tuple[float, float]:
        """
        Aggregate entry totals for a timesheet from the database.

        Pending session changes are flushed first so the aggregate sees them.

        Returns:
            Tuple of (total_hours, billable_hours)
        """
        self.db.flush()
        total, billable = (
            self.db.query(
                func.sum(TimesheetEntry.total_hours),
                func.sum(
                    case(
                        (TimesheetEntry.is_billable.is_(True), TimesheetEntry.total_hours),
                        else_=0,
                    )
                ),
            )
            .filter(TimesheetEntry.timesheet_id == timesheet_id)
            .one()
        )
        return round(float(total or 0), 2), round(float(billable or 0), 2)

    def get_day_totals(
        self, timesheet_id: int, exclude_entry_id: Optional[int] = None
    ) -> dict[str, float]:
        """
        Sum each day column over a timesheet's entries.

        Args:
            timesheet_id: Timesheet ID
            exclude_entry_id: Entry to leave out (the one being edited)

        Returns:
            Mapping of day field name to hours logged
        """
        query = self.db.query(
            *(func.coalesce(func.sum(getattr(TimesheetEntry, field)), 0) for field in DAY_FIELDS)
        ).filter(TimesheetEntry.timesheet_id == timesheet_id)
        if exclude_entry_id is not None:
            query = query.filter(TimesheetEntry.id != exclude_entry_id)
        return {field: float(hours) for field, hours in zip(DAY_FIELDS, query.one())}

    def transition_status(
        self,
        timesheet_id: int,
        tenant_id: int,
        expected: TimesheetStatus,
        new_status: TimesheetStatus,
        **values,
    ) -> bool:
        """
        Compare-and-set status change in a single UPDATE statement.

        The row only changes if its status still equals ``expected``, so two
        concurrent approve/reject calls cannot both succeed. Does not commit.

        Returns:
            True if exactly one row transitioned
        """
        result = self.db.execute(
            update(Timesheet)
            .where(
                Timesheet.id == timesheet_id,
                Timesheet.tenant_id == tenant_id,
                Timesheet.status == expected,
            )
            .values(status=new_status, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_entry_by_id_and_tenant(self, entry_id: int, tenant_id: int) -> Optional[TimesheetEntry]:
        """
        Get entry by ID, ensuring it belongs to the tenant.

        Returns:
            TimesheetEntry or None if not found or belongs to different tenant
        """
        return (
            self.db.query(TimesheetEntry)
            .filter(TimesheetEntry.id == entry_id, TimesheetEntry.tenant_id == tenant_id)
            .first()
        )

    def has_entries_for_project(self, project_id: int) -> bool:
        """Whether any time has been logged against a project"""
        return (
            self.db.query(TimesheetEntry.id)
            .filter(TimesheetEntry.project_id == project_id)
            .first()
            is not None
        )

    def add_entry_no_commit(self, entry: TimesheetEntry) -> TimesheetEntry:
        """Add entry without committing (caller recomputes totals and commits)"""
        self.db.add(entry)
        self.db.flush()
        return entry

    def delete_entry_no_commit(self, entry: TimesheetEntry) -> None:
        """Delete entry without committing (caller recomputes totals and commits)"""
        self.db.delete(entry)
        self.db.flush()
