import uuid
from datetime import datetime

from sqlalchemy import (
    String, Text, Boolean, DateTime, ForeignKey, Uuid, CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oms.core.clock import utcnow
from oms.db.base import Base

BROADCAST_TYPES = ("announcement", "urgent", "general", "policy")
PRIORITIES = ("low", "medium", "high", "urgent")


class Broadcast(Base):
    __tablename__ = "broadcasts"
    __table_args__ = (
        CheckConstraint(
            "broadcast_type IN ('announcement','urgent','general','policy')",
            name="ck_broadcasts_type",
        ),
        CheckConstraint("priority IN ('low','medium','high','urgent')", name="ck_broadcasts_priority"),
        Index("ix_broadcasts_sender_created", "sender_user_id", "created_at"),
        Index("ix_broadcasts_type_priority", "broadcast_type", "priority"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    sender_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    broadcast_type: Mapped[str] = mapped_column(String(20), nullable=False, default="general")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    sender = relationship("User")
    recipients = relationship("BroadcastRecipient", cascade="all, delete-orphan")
    attachments = relationship(
        "BroadcastAttachment", cascade="all, delete-orphan", order_by="BroadcastAttachment.uploaded_at"
    )


class BroadcastRecipient(Base):
    __tablename__ = "broadcast_recipients"
    __table_args__ = (
        UniqueConstraint("broadcast_id", "employee_id", name="uq_broadcast_recipient"),
        Index("ix_broadcast_recipients_employee_read", "employee_id", "is_read"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    broadcast_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("broadcasts.id", ondelete="CASCADE"), nullable=False
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    employee = relationship("Employee")


class BroadcastAttachment(Base):
    __tablename__ = "broadcast_attachments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    broadcast_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("broadcasts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    file_name: Mapped[str] = mapped_column(String(300), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
