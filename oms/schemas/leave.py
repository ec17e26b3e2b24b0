from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from oms.schemas.common import AttachmentOut, EmployeeSummary, UserSummary

LeaveType = Literal["sick", "vacation", "personal", "emergency", "maternity", "paternity"]


class LeaveReviewRequest(BaseModel):
    # checked by the workflow so an unknown value is reported as "Invalid status"
    status: str
    review_comments: str | None = None


class LeaveOut(BaseModel):
    id: str
    employee: EmployeeSummary
    leave_type: str
    start_date: datetime
    end_date: datetime
    total_days: int
    reason: str
    status: str
    reviewed_by: UserSummary | None
    reviewed_at: datetime | None
    review_comments: str | None
    attachments: list[AttachmentOut]
    created_at: datetime


class LeaveStatusStat(BaseModel):
    count: int
    total_days: int


class LeaveStatsOut(BaseModel):
    status_stats: dict[str, LeaveStatusStat]
    type_stats: dict[str, int]
    total_requests: int
