import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from oms.schemas.common import EmployeeSummary, UserSummary, UtcDateTime

MeetingType = Literal["one-on-one", "team", "department", "all-hands"]


class AgendaItemIn(BaseModel):
    item: str = Field(min_length=1)
    duration: int | None = Field(default=None, ge=1)


class MeetingCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str | None = None
    attendees: list[uuid.UUID] = Field(min_length=1)
    meeting_date: UtcDateTime
    duration: int = Field(default=60, ge=15, le=480)
    meeting_type: MeetingType = "one-on-one"
    location: str | None = None
    meeting_link: str | None = None
    agenda: list[AgendaItemIn] = []


class MeetingResponseRequest(BaseModel):
    status: str


class MeetingStatusUpdate(BaseModel):
    status: str


class AttendeeOut(BaseModel):
    id: str
    employee: EmployeeSummary
    status: str
    response_at: datetime | None


class AgendaItemOut(BaseModel):
    id: str
    position: int
    item: str
    duration: int | None


class MeetingOut(BaseModel):
    id: str
    title: str
    description: str | None
    organizer: UserSummary
    attendees: list[AttendeeOut]
    meeting_date: datetime
    duration: int
    meeting_type: str
    location: str | None
    meeting_link: str | None
    agenda: list[AgendaItemOut]
    status: str
    created_at: datetime
