import uuid
from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Uuid, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from oms.core.clock import utcnow
from oms.db.base import Base

NOTIFICATION_TYPES = ("leave", "meeting", "task", "broadcast", "mentor", "document", "general")
RELATED_MODELS = ("Leave", "Meeting", "Task", "Broadcast", "Mentor", "Document")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(
            "type IN ('leave','meeting','task','broadcast','mentor','document','general')",
            name="ck_notifications_type",
        ),
        CheckConstraint("priority IN ('low','medium','high','urgent')", name="ck_notifications_priority"),
        CheckConstraint(
            "related_model IS NULL OR related_model IN ('Leave','Meeting','Task','Broadcast','Mentor','Document')",
            name="ck_notifications_related_model",
        ),
        Index("ix_notifications_recipient_read_created", "recipient_employee_id", "is_read", "created_at"),
        Index("ix_notifications_type_priority", "type", "priority"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    recipient_employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    action_url: Mapped[str | None] = mapped_column(String(300), nullable=True)
    related_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    related_model: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
