from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from timekeeper.models.timesheet import TimesheetStatus

# Hours for a single day; anything above 24 is a data-entry mistake
DayHours = Field(default=0.0, ge=0, le=24)


class TimesheetEntryCreate(BaseModel):
    """Schema for adding an entry to a draft timesheet"""

    timesheet_id: int = Field(..., gt=0)
    project_id: int = Field(..., gt=0)
    task_id: Optional[int] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=1000)
    monday_hours: float = DayHours
    tuesday_hours: float = DayHours
    wednesday_hours: float = DayHours
    thursday_hours: float = DayHours
    friday_hours: float = DayHours
    saturday_hours: float = DayHours
    sunday_hours: float = DayHours
    is_billable: bool = True


class TimesheetEntryUpdate(BaseModel):
    """Schema for updating an entry (partial; timesheet cannot change)"""

    project_id: Optional[int] = Field(None, gt=0)
    task_id: Optional[int] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=1000)
    monday_hours: Optional[float] = Field(None, ge=0, le=24)
    tuesday_hours: Optional[float] = Field(None, ge=0, le=24)
    wednesday_hours: Optional[float] = Field(None, ge=0, le=24)
    thursday_hours: Optional[float] = Field(None, ge=0, le=24)
    friday_hours: Optional[float] = Field(None, ge=0, le=24)
    saturday_hours: Optional[float] = Field(None, ge=0, le=24)
    sunday_hours: Optional[float] = Field(None, ge=0, le=24)
    is_billable: Optional[bool] = None


class TimesheetEntryResponse(BaseModel):
    """Schema for timesheet entry response"""

    model_config = {"from_attributes": True}

    id: int
    timesheet_id: int
    project_id: int
    task_id: Optional[int]
    description: Optional[str]
    monday_hours: float
    tuesday_hours: float
    wednesday_hours: float
    thursday_hours: float
    friday_hours: float
    saturday_hours: float
    sunday_hours: float
    is_billable: bool
    total_hours: float
    created_at: datetime
    updated_at: datetime


class TimesheetResponse(BaseModel):
    """Schema for timesheet response (without entries)"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    user_id: int
    week_start_date: date
    week_end_date: date
    status: TimesheetStatus
    total_hours: float
    billable_hours: float
    overtime_hours: float
    submitted_at: Optional[datetime]
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    rejection_reason: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


class TimesheetDetailResponse(TimesheetResponse):
    """Timesheet with its entries"""

    entries: list[TimesheetEntryResponse]


class TimesheetListResponse(BaseModel):
    """Schema for list of timesheets"""

    timesheets: list[TimesheetResponse]
    total: int


class TimesheetUpdate(BaseModel):
    """Owner edits to a draft timesheet"""

    notes: Optional[str] = Field(None, max_length=2000)


class TimesheetRejectRequest(BaseModel):
    """Optional reason given to the employee on rejection"""

    reason: Optional[str] = Field(None, max_length=2000)


class TimesheetReportResponse(BaseModel):
    """Tenant timesheet report with aggregate hours"""

    timesheets: list[TimesheetResponse]
    total: int
    total_hours: float
    billable_hours: float


class DashboardStatsResponse(BaseModel):
    """Headline numbers for the tenant dashboard"""

    total_hours: float
    active_projects: int
    team_members: int
    pending_approvals: int
