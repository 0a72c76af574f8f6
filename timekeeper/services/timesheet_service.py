import logging
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timekeeper.config import settings
from timekeeper.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from timekeeper.models.base import utcnow
from timekeeper.models.tenant_context import TenantContext
from timekeeper.models.timesheet import (
    DAY_FIELDS,
    HOURS_PER_DAY,
    Timesheet,
    TimesheetEntry,
    TimesheetStatus,
)
from timekeeper.repositories.project_repository import ProjectRepository
from timekeeper.repositories.task_repository import TaskRepository
from timekeeper.repositories.timesheet_repository import TimesheetRepository
from timekeeper.schemas.timesheet_schemas import (
    TimesheetEntryCreate,
    TimesheetEntryUpdate,
    TimesheetUpdate,
)
from timekeeper.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``"""
    return day - timedelta(days=day.weekday())


class TimesheetService:
    """
    Timesheet lifecycle and entry management.

    Status changes go through ``TimesheetRepository.transition_status``, a
    single compare-and-set UPDATE, so concurrent submit/approve/reject/lock
    calls on one timesheet cannot both succeed. Entries may only change
    while their timesheet is a draft owned by the caller.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimesheetRepository(db)
        self.project_repo = ProjectRepository(db)
        self.task_repo = TaskRepository(db)
        self.audit = AuditService(db)

    # Timesheets

    def get_or_create_week(self, day: date, context: TenantContext) -> Timesheet:
        """
        Get the caller's timesheet for the week containing ``day``.

        A draft is created on first access. A concurrent request creating
        the same week loses on the (user_id, week_start_date) constraint and
        returns the winner's row.
        """
        start = week_start(day)
        timesheet = self.repo.get_for_week(context.user.id, start)
        if timesheet is not None:
            return timesheet

        timesheet = Timesheet(
            tenant_id=context.tenant_id,
            user_id=context.user.id,
            week_start_date=start,
            week_end_date=start + timedelta(days=6),
            status=TimesheetStatus.DRAFT,
        )
        try:
            timesheet = self.repo.create(timesheet)
        except IntegrityError:
            self.db.rollback()
            timesheet = self.repo.get_for_week(context.user.id, start)
            if timesheet is None:
                raise
            return timesheet

        logger.info("Draft timesheet %s created for user %s week %s", timesheet.id, context.user.id, start)
        return timesheet

    def list_my_timesheets(self, context: TenantContext, limit: int = 10) -> list[Timesheet]:
        """Caller's timesheets, newest week first"""
        return self.repo.get_by_user(context.user.id, context.tenant_id, limit=limit)

    def list_pending_approvals(self, context: TenantContext) -> list[Timesheet]:
        """Submitted timesheets of the tenant awaiting a decision"""
        return self.repo.get_with_filters(context.tenant_id, status=TimesheetStatus.SUBMITTED)

    def get_timesheet(self, timesheet_id: int, context: TenantContext) -> Timesheet:
        """
        Get a timesheet the caller may read.

        Owners read their own timesheets; approver roles read any in the
        tenant. Anything else looks exactly like a missing timesheet.

        Raises:
            NotFoundException: If not found, in another tenant, or not readable
        """
        timesheet = self._get_in_tenant(timesheet_id, context)
        if timesheet.user_id != context.user.id and not context.can_approve():
            raise NotFoundException(f"Timesheet {timesheet_id} not found")
        return timesheet

    def update_timesheet(
        self, timesheet_id: int, data: TimesheetUpdate, context: TenantContext
    ) -> Timesheet:
        """
        Update the notes of the caller's draft timesheet.

        Raises:
            NotFoundException: If timesheet not found in this tenant
            ForbiddenException: If the caller does not own the timesheet
            ConflictException: If the timesheet is not a draft
        """
        timesheet = self._get_in_tenant(timesheet_id, context, for_update=True)
        self._check_editable(timesheet, context)

        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(timesheet, field, value)

        self.audit.record_for(context, "update", "timesheet", timesheet.id, {"fields": sorted(update_data)})
        return self.repo.update(timesheet)

    def submit(self, timesheet_id: int, context: TenantContext) -> Timesheet:
        """
        Submit a draft timesheet for approval (owner only).

        Totals are recomputed from the entries and written together with
        the status change in one transaction.

        Raises:
            NotFoundException: If timesheet not found in this tenant
            ForbiddenException: If the caller does not own the timesheet
            ConflictException: If the timesheet is not a draft
        """
        timesheet = self._get_in_tenant(timesheet_id, context, for_update=True)
        if timesheet.user_id != context.user.id:
            raise ForbiddenException("Only the owner can submit a timesheet")

        total, billable = self.repo.compute_totals(timesheet.id)
        self._transition(
            timesheet,
            context,
            TimesheetStatus.DRAFT,
            TimesheetStatus.SUBMITTED,
            "submit",
            submitted_at=utcnow(),
            total_hours=total,
            billable_hours=billable,
            overtime_hours=self._overtime(total),
        )
        return timesheet

    def approve(self, timesheet_id: int, context: TenantContext) -> Timesheet:
        """
        Approve a submitted timesheet (manager, admin or owner).

        Raises:
            ForbiddenException: If the caller has no approver role
            NotFoundException: If timesheet not found in this tenant
            ConflictException: If the timesheet is not submitted
        """
        if not context.can_approve():
            raise ForbiddenException("Insufficient permissions to approve timesheets")
        timesheet = self._get_in_tenant(timesheet_id, context)
        self._transition(
            timesheet,
            context,
            TimesheetStatus.SUBMITTED,
            TimesheetStatus.APPROVED,
            "approve",
            approved_by=context.user.id,
            approved_at=utcnow(),
        )
        return timesheet

    def reject(
        self, timesheet_id: int, context: TenantContext, reason: str | None = None
    ) -> Timesheet:
        """
        Reject a submitted timesheet with an optional reason.

        Rejection is final: the timesheet does not return to draft.

        Raises:
            ForbiddenException: If the caller has no approver role
            NotFoundException: If timesheet not found in this tenant
            ConflictException: If the timesheet is not submitted
        """
        if not context.can_approve():
            raise ForbiddenException("Insufficient permissions to reject timesheets")
        timesheet = self._get_in_tenant(timesheet_id, context)
        self._transition(
            timesheet,
            context,
            TimesheetStatus.SUBMITTED,
            TimesheetStatus.REJECTED,
            "reject",
            approved_by=context.user.id,
            approved_at=utcnow(),
            rejection_reason=reason,
        )
        return timesheet

    def lock(self, timesheet_id: int, context: TenantContext) -> Timesheet:
        """
        Lock an approved timesheet (admin or owner).

        Raises:
            ForbiddenException: If the caller is not admin or owner
            NotFoundException: If timesheet not found in this tenant
            ConflictException: If the timesheet is not approved
        """
        if not context.is_admin_or_owner():
            raise ForbiddenException("Only admins and owners can lock timesheets")
        timesheet = self._get_in_tenant(timesheet_id, context)
        self._transition(
            timesheet, context, TimesheetStatus.APPROVED, TimesheetStatus.LOCKED, "lock"
        )
        return timesheet

    # Entries

    def create_entry(self, data: TimesheetEntryCreate, context: TenantContext) -> TimesheetEntry:
        """
        Add an entry to the caller's draft timesheet and recompute totals.

        Raises:
            NotFoundException: If timesheet, project or task is not in this tenant
            ForbiddenException: If the caller does not own the timesheet
            ConflictException: If the timesheet is not a draft
            ValidationException: If the task belongs to another project or a day exceeds 24 hours
        """
        timesheet = self._get_in_tenant(data.timesheet_id, context, for_update=True)
        self._check_editable(timesheet, context)
        self._check_project_and_task(data.project_id, data.task_id, context)
        self._check_daily_limit(timesheet, data.model_dump())

        entry = TimesheetEntry(tenant_id=context.tenant_id, **data.model_dump())
        entry.compute_total()
        self.repo.add_entry_no_commit(entry)
        self._recompute(timesheet)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def update_entry(
        self, entry_id: int, data: TimesheetEntryUpdate, context: TenantContext
    ) -> TimesheetEntry:
        """
        Update an entry of the caller's draft timesheet and recompute totals.

        Raises:
            NotFoundException: If entry, project or task is not in this tenant
            ForbiddenException: If the caller does not own the timesheet
            ConflictException: If the timesheet is not a draft
            ValidationException: If the task belongs to another project or a day exceeds 24 hours
        """
        entry = self._get_entry(entry_id, context)
        timesheet = self._get_in_tenant(entry.timesheet_id, context, for_update=True)
        self._check_editable(timesheet, context)

        update_data = data.model_dump(exclude_unset=True)
        project_id = update_data.get("project_id") or entry.project_id
        task_id = update_data["task_id"] if "task_id" in update_data else entry.task_id
        self._check_project_and_task(project_id, task_id, context)
        hours = {
            field: update_data[field] if update_data.get(field) is not None else getattr(entry, field)
            for field in DAY_FIELDS
        }
        self._check_daily_limit(timesheet, hours, exclude_entry_id=entry.id)

        for field, value in update_data.items():
            if value is None and (field in DAY_FIELDS or field in ("project_id", "is_billable")):
                continue
            setattr(entry, field, value)

        entry.compute_total()
        self._recompute(timesheet)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def delete_entry(self, entry_id: int, context: TenantContext) -> None:
        """
        Delete an entry of the caller's draft timesheet and recompute totals.

        Raises:
            NotFoundException: If entry not found in this tenant
            ForbiddenException: If the caller does not own the timesheet
            ConflictException: If the timesheet is not a draft
        """
        entry = self._get_entry(entry_id, context)
        timesheet = self._get_in_tenant(entry.timesheet_id, context, for_update=True)
        self._check_editable(timesheet, context)

        self.repo.delete_entry_no_commit(entry)
        self._recompute(timesheet)
        self.db.commit()

    # Helpers

    def _get_in_tenant(
        self, timesheet_id: int, context: TenantContext, for_update: bool = False
    ) -> Timesheet:
        timesheet = self.repo.get_by_id_and_tenant(
            timesheet_id, context.tenant_id, for_update=for_update
        )
        if not timesheet:
            raise NotFoundException(f"Timesheet {timesheet_id} not found")
        return timesheet

    def _get_entry(self, entry_id: int, context: TenantContext) -> TimesheetEntry:
        entry = self.repo.get_entry_by_id_and_tenant(entry_id, context.tenant_id)
        if not entry:
            raise NotFoundException(f"Timesheet entry {entry_id} not found")
        return entry

    def _check_editable(self, timesheet: Timesheet, context: TenantContext) -> None:
        """Only the owner may change a timesheet, and only while it is a draft"""
        if timesheet.user_id != context.user.id:
            raise ForbiddenException("You can only edit your own timesheets")
        if timesheet.status != TimesheetStatus.DRAFT:
            raise ConflictException(
                f"Timesheet is {timesheet.status.value}; it can only change while it is a draft"
            )

    def _check_project_and_task(
        self, project_id: int, task_id: int | None, context: TenantContext
    ) -> None:
        if not self.project_repo.get_by_id_and_tenant(project_id, context.tenant_id):
            raise NotFoundException(f"Project {project_id} not found")
        if task_id is None:
            return
        task = self.task_repo.get_by_id_and_tenant(task_id, context.tenant_id)
        if not task:
            raise NotFoundException(f"Task {task_id} not found")
        if task.project_id != project_id:
            raise ValidationException(f"Task {task_id} does not belong to project {project_id}")

    def _check_daily_limit(
        self, timesheet: Timesheet, hours: dict, exclude_entry_id: int | None = None
    ) -> None:
        """No day of a timesheet may add up to more than HOURS_PER_DAY across its entries"""
        logged = self.repo.get_day_totals(timesheet.id, exclude_entry_id=exclude_entry_id)
        for field in DAY_FIELDS:
            if round(logged[field] + float(hours.get(field) or 0), 2) > HOURS_PER_DAY:
                day = field.removesuffix("_hours").capitalize()
                raise ValidationException(
                    f"{day} would total more than {HOURS_PER_DAY} hours on this timesheet"
                )

    def _recompute(self, timesheet: Timesheet) -> None:
        """Rebuild timesheet totals from all of its entries"""
        total, billable = self.repo.compute_totals(timesheet.id)
        timesheet.total_hours = total
        timesheet.billable_hours = billable
        timesheet.overtime_hours = self._overtime(total)

    @staticmethod
    def _overtime(total: float) -> float:
        return round(max(0.0, total - settings.STANDARD_WEEK_HOURS), 2)

    def _transition(
        self,
        timesheet: Timesheet,
        context: TenantContext,
        expected: TimesheetStatus,
        new_status: TimesheetStatus,
        action: str,
        **values,
    ) -> None:
        """
        Apply a compare-and-set status change and commit it with its audit record.

        Raises:
            ConflictException: If the timesheet was not in ``expected`` status
        """
        changed = self.repo.transition_status(
            timesheet.id, context.tenant_id, expected, new_status, **values
        )
        if not changed:
            self.db.rollback()
            current = timesheet.status
            logger.info(
                "Refused %s of timesheet %s by user %s: status is %s",
                action,
                timesheet.id,
                context.user.id,
                current.value,
            )
            raise ConflictException(
                f"Cannot {action} timesheet: status is '{current.value}', expected '{expected.value}'"
            )

        self.audit.record_for(
            context,
            action,
            "timesheet",
            timesheet.id,
            {"from": expected.value, "to": new_status.value},
        )
        self.db.commit()
        self.db.refresh(timesheet)
        logger.info(
            "Timesheet %s %s -> %s by user %s",
            timesheet.id,
            expected.value,
            new_status.value,
            context.user.id,
        )
