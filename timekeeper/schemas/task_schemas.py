from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from timekeeper.models.project import Priority
from timekeeper.models.task import TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a task"""

    project_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    assigned_to: Optional[int] = Field(None, gt=0)
    status: TaskStatus = TaskStatus.OPEN
    priority: Priority = Priority.MEDIUM
    estimated_hours: Optional[float] = Field(None, ge=0, le=9999)
    due_date: Optional[date] = None
    is_billable: bool = True


class TaskUpdate(BaseModel):
    """Schema for updating a task (project cannot change)"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    assigned_to: Optional[int] = Field(None, gt=0)
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    estimated_hours: Optional[float] = Field(None, ge=0, le=9999)
    due_date: Optional[date] = None
    is_billable: Optional[bool] = None


class TaskResponse(BaseModel):
    """Schema for task response"""

    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    project_id: int
    name: str
    description: Optional[str]
    assigned_to: Optional[int]
    status: TaskStatus
    priority: Priority
    estimated_hours: Optional[float]
    due_date: Optional[date]
    is_billable: bool
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """Schema for list of tasks"""

    tasks: list[TaskResponse]
    total: int
