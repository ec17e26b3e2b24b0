import uuid
from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Uuid, CheckConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oms.core.clock import utcnow
from oms.db.base import Base

MENTORSHIP_STATUSES = ("active", "completed", "paused")


class Mentorship(Base):
    __tablename__ = "mentorships"
    __table_args__ = (
        CheckConstraint("status IN ('active','completed','paused')", name="ck_mentorships_status"),
        CheckConstraint("mentor_employee_id <> mentee_employee_id", name="ck_mentorships_distinct"),
        # one active mentor per mentee
        Index(
            "uq_mentorships_active_mentee",
            "mentee_employee_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("ix_mentorships_mentor_status", "mentor_employee_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    mentor_employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    mentee_employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    assigned_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    mentor = relationship("Employee", foreign_keys=[mentor_employee_id])
    mentee = relationship("Employee", foreign_keys=[mentee_employee_id])
    assigned_by = relationship("User")
    goals = relationship("MentorshipGoal", cascade="all, delete-orphan", order_by="MentorshipGoal.created_at")
    notes = relationship("MentorshipNote", cascade="all, delete-orphan", order_by="MentorshipNote.added_at")


class MentorshipGoal(Base):
    __tablename__ = "mentorship_goals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    mentorship_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("mentorships.id", ondelete="CASCADE"), index=True, nullable=False
    )
    goal: Mapped[str] = mapped_column(String(500), nullable=False)
    target_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class MentorshipNote(Base):
    __tablename__ = "mentorship_notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    mentorship_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("mentorships.id", ondelete="CASCADE"), index=True, nullable=False
    )
    note: Mapped[str] = mapped_column(Text, nullable=False)
    added_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    added_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    added_by = relationship("User")
