import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from oms.core.clock import utcnow
from oms.db.base import Base

ONBOARDING_STATUSES = ("pending", "in-progress", "completed", "rejected")


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (
        CheckConstraint(
            "onboarding_status IN ('pending','in-progress','completed','rejected')",
            name="ck_employees_onboarding_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)
    position: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Set once at registration
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    emergency_contact_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    onboarding_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    profile_picture_path: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User")

    @validates("start_date")
    def _start_date_is_immutable(self, key, value):
        if self.start_date is not None and value != self.start_date:
            raise ValueError("start_date cannot be changed once set")
        return value
