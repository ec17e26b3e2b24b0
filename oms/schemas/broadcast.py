from datetime import datetime

from pydantic import BaseModel

from oms.schemas.common import AttachmentOut, EmployeeSummary, UserSummary


class RecipientOut(BaseModel):
    employee: EmployeeSummary
    is_read: bool
    read_at: datetime | None


class BroadcastOut(BaseModel):
    id: str
    title: str
    message: str
    sender: UserSummary
    broadcast_type: str
    priority: str
    expires_at: datetime | None
    attachments: list[AttachmentOut]
    created_at: datetime


class MyBroadcastOut(BroadcastOut):
    is_read: bool
    read_at: datetime | None


class BroadcastDetailOut(BroadcastOut):
    recipients: list[RecipientOut]


class ReadStats(BaseModel):
    read: int
    unread: int


class BroadcastStatsOut(BaseModel):
    type_stats: dict[str, int]
    priority_stats: dict[str, int]
    read_stats: ReadStats
    total_broadcasts: int
