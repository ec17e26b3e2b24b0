from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr


class InvitationCreate(BaseModel):
    email: EmailStr
    role: Literal["employee", "admin"] = "employee"


class InvitationSummary(BaseModel):
    email: str
    role: str
    expires_at: datetime


class InvitationSent(BaseModel):
    message: str
    invitation: InvitationSummary


class InvitationOut(BaseModel):
    id: str
    email: str
    role: str
    is_used: bool
    expires_at: datetime
    invited_by_email: str | None
    created_at: datetime


class InvitationValidation(BaseModel):
    valid: bool
    email: str
    role: str
