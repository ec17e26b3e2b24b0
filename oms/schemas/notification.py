from datetime import datetime

from pydantic import BaseModel

from oms.schemas.pagination import PaginationMeta


class NotificationOut(BaseModel):
    id: str
    title: str
    message: str
    type: str
    priority: str
    is_read: bool
    read_at: datetime | None
    action_url: str | None
    related_id: str | None
    related_model: str | None
    created_at: datetime


class NotificationFeed(BaseModel):
    items: list[NotificationOut]
    pagination: PaginationMeta
    unread_count: int


class MarkAllReadOut(BaseModel):
    message: str
    modified_count: int


class TypeStat(BaseModel):
    type: str
    total: int
    unread: int


class PriorityStat(BaseModel):
    priority: str
    count: int


class NotificationStatsOut(BaseModel):
    type_stats: list[TypeStat]
    priority_stats: list[PriorityStat]
    total_notifications: int
    unread_count: int
