from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel

from oms.core.clock import to_naive_utc

# Incoming datetimes are normalized to naive UTC
UtcDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class MessageOut(BaseModel):
    message: str


class UserSummary(BaseModel):
    id: str
    email: str
    role: str


class EmployeeSummary(BaseModel):
    id: str
    full_name: str
    email: str
    department: str | None = None
    position: str | None = None


class AttachmentOut(BaseModel):
    id: str
    file_name: str
    uploaded_at: datetime
