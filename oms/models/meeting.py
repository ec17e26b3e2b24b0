import uuid
from datetime import datetime

from sqlalchemy import (
    String, Text, DateTime, ForeignKey, Integer, Uuid, CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oms.core.clock import utcnow
from oms.db.base import Base

MEETING_TYPES = ("one-on-one", "team", "department", "all-hands")
MEETING_STATUSES = ("scheduled", "in-progress", "completed", "cancelled")
ATTENDEE_STATUSES = ("pending", "accepted", "declined")


class Meeting(Base):
    __tablename__ = "meetings"
    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled','in-progress','completed','cancelled')",
            name="ck_meetings_status",
        ),
        CheckConstraint(
            "meeting_type IN ('one-on-one','team','department','all-hands')",
            name="ck_meetings_type",
        ),
        Index("ix_meetings_organizer_date", "organizer_user_id", "meeting_date"),
        Index("ix_meetings_date_status", "meeting_date", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    organizer_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    meeting_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)  # minutes
    meeting_type: Mapped[str] = mapped_column(String(20), nullable=False, default="one-on-one")
    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    meeting_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    organizer = relationship("User")
    attendees = relationship("MeetingAttendee", cascade="all, delete-orphan")
    agenda = relationship(
        "MeetingAgendaItem", cascade="all, delete-orphan", order_by="MeetingAgendaItem.position"
    )


class MeetingAttendee(Base):
    __tablename__ = "meeting_attendees"
    __table_args__ = (
        UniqueConstraint("meeting_id", "employee_id", name="uq_meeting_attendee"),
        CheckConstraint("status IN ('pending','accepted','declined')", name="ck_meeting_attendees_status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), index=True, nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    response_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    employee = relationship("Employee")


class MeetingAgendaItem(Base):
    __tablename__ = "meeting_agenda_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    meeting_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("meetings.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    item: Mapped[str] = mapped_column(String(300), nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
