from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.timesheet_schemas import (
    TimesheetEntryCreate,
    TimesheetEntryResponse,
    TimesheetEntryUpdate,
)
from timekeeper.services.timesheet_service import TimesheetService

router = APIRouter()


@router.post("", response_model=TimesheetEntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(
    data: TimesheetEntryCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Add an entry to one of the caller's timesheets.

    - The timesheet must be a draft owned by the caller
    - project_id and task_id must belong to the caller's tenant
    - Timesheet totals are recomputed
    """
    service = TimesheetService(db)
    return service.create_entry(data, context)


@router.put("/{entry_id}", response_model=TimesheetEntryResponse)
def update_entry(
    entry_id: int,
    data: TimesheetEntryUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Update an entry of a draft timesheet and recompute totals"""
    service = TimesheetService(db)
    return service.update_entry(entry_id, data, context)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Delete an entry of a draft timesheet and recompute totals"""
    service = TimesheetService(db)
    service.delete_entry(entry_id, context)
    return None
