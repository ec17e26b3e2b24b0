import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from oms.schemas.common import UserSummary


class MessageCreate(BaseModel):
    to_user_id: uuid.UUID
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)
    parent_message_id: uuid.UUID | None = None


class EmployeeRef(BaseModel):
    id: str
    full_name: str
    email: str


class DirectMessageOut(BaseModel):
    id: str
    from_user: UserSummary
    to_user: UserSummary
    employee: EmployeeRef
    subject: str
    message: str
    is_read: bool
    read_at: datetime | None
    parent_message_id: str | None
    created_at: datetime


class UnreadCount(BaseModel):
    count: int
