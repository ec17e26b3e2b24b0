import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Integer, Uuid, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oms.core.clock import utcnow
from oms.db.base import Base

LEAVE_TYPES = ("sick", "vacation", "personal", "emergency", "maternity", "paternity")
LEAVE_STATUSES = ("pending", "approved", "rejected")


class Leave(Base):
    __tablename__ = "leaves"
    __table_args__ = (
        CheckConstraint(
            "leave_type IN ('sick','vacation','personal','emergency','maternity','paternity')",
            name="ck_leaves_type",
        ),
        CheckConstraint("status IN ('pending','approved','rejected')", name="ck_leaves_status"),
        CheckConstraint("end_date > start_date", name="ck_leaves_date_order"),
        Index("ix_leaves_employee_status", "employee_id", "status"),
        Index("ix_leaves_dates", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )

    leave_type: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    reviewed_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    review_comments: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee")
    reviewed_by = relationship("User")
    attachments = relationship(
        "LeaveAttachment", cascade="all, delete-orphan", order_by="LeaveAttachment.uploaded_at"
    )


class LeaveAttachment(Base):
    __tablename__ = "leave_attachments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    leave_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("leaves.id", ondelete="CASCADE"), index=True, nullable=False
    )
    file_name: Mapped[str] = mapped_column(String(300), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
