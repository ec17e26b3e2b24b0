import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from oms.schemas.common import AttachmentOut, EmployeeSummary, UserSummary, UtcDateTime

TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal["assigned", "in-progress", "review", "completed", "overdue"]
# overdue is derived from the due date, never reported
ProgressStatus = Literal["assigned", "in-progress", "review", "completed"]


class TaskCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10)
    assigned_to: uuid.UUID
    priority: TaskPriority = "medium"
    due_date: UtcDateTime
    notes: str | None = None


class TaskUpdateRequest(BaseModel):
    """Admin edit; only the supplied fields change."""
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10)
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    due_date: UtcDateTime | None = None
    notes: str | None = None


class ProgressUpdate(BaseModel):
    progress: int | None = Field(default=None, ge=0, le=100)
    status: ProgressStatus | None = None
    notes: str | None = None
    message: str | None = None


class TaskReviewRequest(BaseModel):
    feedback: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)


class TaskReviewOut(BaseModel):
    id: str
    reviewed_by: UserSummary | None
    review_date: datetime
    feedback: str | None
    rating: int | None


class TaskUpdateOut(BaseModel):
    id: str
    updated_by: UserSummary | None
    update_date: datetime
    message: str
    progress: int


class TaskOut(BaseModel):
    id: str
    title: str
    description: str
    assigned_to: EmployeeSummary
    assigned_by: UserSummary
    priority: str
    status: str
    progress: int
    notes: str | None
    due_date: datetime
    start_date: datetime
    completed_date: datetime | None
    attachments: list[AttachmentOut]
    reviews: list[TaskReviewOut]
    updates: list[TaskUpdateOut]
    created_at: datetime
    updated_at: datetime


class TaskStatsOut(BaseModel):
    status_stats: dict[str, int]
    priority_stats: dict[str, int]
    overdue_tasks: int
    total_tasks: int


class AttachmentUploaded(BaseModel):
    message: str
    attachment: AttachmentOut
