import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from oms.schemas.common import EmployeeSummary, UserSummary, UtcDateTime


class GoalIn(BaseModel):
    goal: str = Field(min_length=1)
    target_date: UtcDateTime | None = None


class MentorAssign(BaseModel):
    mentor_id: uuid.UUID
    mentee_id: uuid.UUID
    end_date: UtcDateTime | None = None
    goals: list[GoalIn] = []


class NoteCreate(BaseModel):
    note: str = ""


class GoalToggle(BaseModel):
    completed: bool


class MentorshipStatusUpdate(BaseModel):
    status: str


class GoalOut(BaseModel):
    id: str
    goal: str
    target_date: datetime | None
    completed: bool
    completed_at: datetime | None


class NoteOut(BaseModel):
    id: str
    note: str
    added_by: UserSummary | None
    added_at: datetime


class MentorshipOut(BaseModel):
    id: str
    mentor: EmployeeSummary
    mentee: EmployeeSummary
    assigned_by: UserSummary
    start_date: datetime
    end_date: datetime | None
    status: str
    goals: list[GoalOut]
    notes: list[NoteOut]
    created_at: datetime


class MyRelationshipsOut(BaseModel):
    as_mentor: list[MentorshipOut]
    as_mentee: MentorshipOut | None
