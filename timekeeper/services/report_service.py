from datetime import date

from sqlalchemy.orm import Session

from timekeeper.core.exceptions import ValidationException
from timekeeper.models.project import ProjectStatus
from timekeeper.models.tenant_context import TenantContext
from timekeeper.models.timesheet import TimesheetStatus
from timekeeper.repositories.project_repository import ProjectRepository
from timekeeper.repositories.timesheet_repository import TimesheetRepository
from timekeeper.repositories.user_repository import UserRepository


class ReportService:
    """Read-only aggregates over a tenant's timesheets"""

    def __init__(self, db: Session):
        self.db = db
        self.timesheet_repo = TimesheetRepository(db)
        self.project_repo = ProjectRepository(db)
        self.user_repo = UserRepository(db)

    def timesheet_report(
        self,
        context: TenantContext,
        status: TimesheetStatus | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        user_id: int | None = None,
    ) -> dict:
        """
        Tenant timesheets matching the filters, with summed hours.

        Raises:
            ValidationException: If start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationException("start_date must not be after end_date")

        timesheets = self.timesheet_repo.get_with_filters(
            context.tenant_id,
            status=status,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
        )
        return {
            "timesheets": timesheets,
            "total": len(timesheets),
            "total_hours": round(sum(t.total_hours for t in timesheets), 2),
            "billable_hours": round(sum(t.billable_hours for t in timesheets), 2),
        }

    def dashboard_stats(self, context: TenantContext) -> dict:
        """Headline numbers: approved hours, active projects, team size, pending approvals"""
        tenant_id = context.tenant_id
        # Locked timesheets were approved before they were frozen
        approved_hours = self.timesheet_repo.sum_hours_by_status(
            tenant_id, TimesheetStatus.APPROVED
        ) + self.timesheet_repo.sum_hours_by_status(tenant_id, TimesheetStatus.LOCKED)
        return {
            "total_hours": round(approved_hours, 2),
            "active_projects": self.project_repo.count_by_status(tenant_id, ProjectStatus.ACTIVE),
            "team_members": self.user_repo.count_active(tenant_id),
            "pending_approvals": self.timesheet_repo.count_by_status(
                tenant_id, TimesheetStatus.SUBMITTED
            ),
        }
