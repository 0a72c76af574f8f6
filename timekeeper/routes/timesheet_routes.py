from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context, require_roles
from timekeeper.models.role import ADMIN_ROLES, APPROVER_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.timesheet_schemas import (
    TimesheetDetailResponse,
    TimesheetListResponse,
    TimesheetRejectRequest,
    TimesheetResponse,
    TimesheetUpdate,
)
from timekeeper.services.timesheet_service import TimesheetService

router = APIRouter()


@router.get("", response_model=TimesheetListResponse)
async def list_my_timesheets(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of weeks"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get the caller's timesheets, newest week first"""
    service = TimesheetService(db)
    timesheets = service.list_my_timesheets(context, limit=limit)
    return TimesheetListResponse(
        timesheets=[TimesheetResponse.model_validate(t) for t in timesheets],
        total=len(timesheets),
    )


@router.get("/week/{week_date}", response_model=TimesheetDetailResponse)
def get_week(
    week_date: date,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Get the caller's timesheet for the week containing week_date.

    - Any day of the week may be given; the week starts on Monday
    - A draft is created on first access
    """
    service = TimesheetService(db)
    timesheet = service.get_or_create_week(week_date, context)
    return TimesheetDetailResponse.model_validate(timesheet)


@router.get("/{timesheet_id}", response_model=TimesheetDetailResponse)
async def get_timesheet(
    timesheet_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get a timesheet with its entries (owner or approver roles)"""
    service = TimesheetService(db)
    return TimesheetDetailResponse.model_validate(service.get_timesheet(timesheet_id, context))


@router.put("/{timesheet_id}", response_model=TimesheetDetailResponse)
def update_timesheet(
    timesheet_id: int,
    data: TimesheetUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Update notes on the caller's timesheet.

    - Only the owner may edit, and only while it is a draft
    - 400 once the timesheet has been submitted
    """
    service = TimesheetService(db)
    return TimesheetDetailResponse.model_validate(service.update_timesheet(timesheet_id, data, context))


@router.post("/{timesheet_id}/submit", response_model=TimesheetDetailResponse)
def submit_timesheet(
    timesheet_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Submit a draft timesheet for approval.

    - Only the owner may submit
    - Totals are recomputed from the entries
    - 400 if the timesheet is not a draft
    """
    service = TimesheetService(db)
    return TimesheetDetailResponse.model_validate(service.submit(timesheet_id, context))


@router.post("/{timesheet_id}/approve", response_model=TimesheetDetailResponse)
def approve_timesheet(
    timesheet_id: int,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Approve a submitted timesheet.

    - **Requires MANAGER, ADMIN or OWNER**
    - 400 if the timesheet is not submitted
    """
    service = TimesheetService(db)
    return TimesheetDetailResponse.model_validate(service.approve(timesheet_id, context))


@router.post("/{timesheet_id}/reject", response_model=TimesheetDetailResponse)
def reject_timesheet(
    timesheet_id: int,
    data: TimesheetRejectRequest | None = None,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Reject a submitted timesheet with an optional reason.

    - **Requires MANAGER, ADMIN or OWNER**
    - 400 if the timesheet is not submitted
    """
    service = TimesheetService(db)
    reason = data.reason if data else None
    return TimesheetDetailResponse.model_validate(service.reject(timesheet_id, context, reason))


@router.post("/{timesheet_id}/lock", response_model=TimesheetDetailResponse)
def lock_timesheet(
    timesheet_id: int,
    context: TenantContext = Depends(require_roles(*ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Lock an approved timesheet.

    - **Requires ADMIN or OWNER**
    - 400 if the timesheet is not approved
    """
    service = TimesheetService(db)
    return TimesheetDetailResponse.model_validate(service.lock(timesheet_id, context))
