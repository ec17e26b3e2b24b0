from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class EmergencyContact(BaseModel):
    name: str | None = None
    phone: str | None = None


class EmployeeUpdate(BaseModel):
    # start_date is fixed at registration
    full_name: str | None = Field(default=None, min_length=2)
    department: str | None = None
    position: str | None = None
    phone: str | None = None
    address: str | None = None
    emergency_contact: EmergencyContact | None = None

    @field_validator("full_name")
    @classmethod
    def full_name_not_null(cls, v):
        # the column is NOT NULL; omit the field to leave it unchanged
        if v is None:
            raise ValueError("Full name cannot be empty")
        return v


class OnboardingStatusUpdate(BaseModel):
    onboarding_status: Literal["pending", "in-progress", "completed", "rejected"]


class EmployeeOut(BaseModel):
    id: str
    user_id: str
    full_name: str
    email: str
    department: str | None
    position: str | None
    start_date: datetime
    phone: str | None
    address: str | None
    emergency_contact: EmergencyContact
    onboarding_status: str
    profile_picture_url: str | None
    created_at: datetime
    updated_at: datetime


class EmployeeWithUserOut(EmployeeOut):
    user_role: str | None
    user_is_active: bool | None
