from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import require_roles
from timekeeper.models.role import APPROVER_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.models.timesheet import TimesheetStatus
from timekeeper.schemas.timesheet_schemas import (
    DashboardStatsResponse,
    TimesheetListResponse,
    TimesheetReportResponse,
    TimesheetResponse,
)
from timekeeper.services.report_service import ReportService
from timekeeper.services.timesheet_service import TimesheetService

router = APIRouter()


@router.get("/approvals", response_model=TimesheetListResponse)
async def list_pending_approvals(
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """Submitted timesheets of the tenant awaiting approval"""
    service = TimesheetService(db)
    timesheets = service.list_pending_approvals(context)
    return TimesheetListResponse(
        timesheets=[TimesheetResponse.model_validate(t) for t in timesheets],
        total=len(timesheets),
    )


@router.get("/reports/timesheets", response_model=TimesheetReportResponse)
async def timesheet_report(
    status: Optional[TimesheetStatus] = Query(None, description="Filter by status"),
    start_date: Optional[date] = Query(None, description="Weeks starting on or after"),
    end_date: Optional[date] = Query(None, description="Weeks starting on or before"),
    user_id: Optional[int] = Query(None, description="Filter by employee"),
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Timesheet report for the tenant.

    - **Requires MANAGER, ADMIN or OWNER**
    - Returns matching timesheets plus summed total and billable hours
    """
    service = ReportService(db)
    report = service.timesheet_report(
        context, status=status, start_date=start_date, end_date=end_date, user_id=user_id
    )
    report["timesheets"] = [TimesheetResponse.model_validate(t) for t in report["timesheets"]]
    return TimesheetReportResponse(**report)


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """Approved hours, active projects, team size and pending approvals"""
    service = ReportService(db)
    return DashboardStatsResponse(**service.dashboard_stats(context))
