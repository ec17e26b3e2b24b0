import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, update, delete
from sqlalchemy.orm import Session

from oms.models.notification import Notification


def create_notification(
    *,
    db: Session,
    recipient_id: uuid.UUID,
    title: str,
    message: str,
    type: str,
    priority: str = "medium",
    action_url: str | None = None,
    related_id: uuid.UUID | None = None,
    related_model: str | None = None,
) -> Notification:
    n = Notification(
        recipient_employee_id=recipient_id,
        title=title,
        message=message,
        type=type,
        priority=priority,
        action_url=action_url,
        related_id=related_id,
        related_model=related_model,
    )
    db.add(n)
    return n


def create_bulk_notifications(*, db: Session, items: list[dict[str, Any]]) -> list[Notification]:
    """Each item takes the keyword arguments of create_notification (minus db)."""
    return [create_notification(db=db, **item) for item in items]


def mark_notification_read(
    *, db: Session, notification_id: uuid.UUID, recipient_id: uuid.UUID, now: datetime
) -> Notification | None:
    """Scoped to the recipient; returns None when missing, foreign or already read."""
    n = (
        db.query(Notification)
        .filter(
            Notification.id == notification_id,
            Notification.recipient_employee_id == recipient_id,
            Notification.is_read.is_(False),
        )
        .one_or_none()
    )
    if n is None:
        return None
    n.is_read = True
    n.read_at = now
    db.flush()
    return n


def mark_all_read(*, db: Session, recipient_id: uuid.UUID, now: datetime) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_employee_id == recipient_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def delete_notification(*, db: Session, notification_id: uuid.UUID, recipient_id: uuid.UUID) -> bool:
    result = db.execute(
        delete(Notification)
        .where(Notification.id == notification_id, Notification.recipient_employee_id == recipient_id)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) > 0


def count_unread(*, db: Session, recipient_id: uuid.UUID) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.recipient_employee_id == recipient_id, Notification.is_read.is_(False))
        .scalar()
    ) or 0


def stats_by_type(*, db: Session, recipient_id: uuid.UUID) -> dict[str, Any]:
    type_rows = (
        db.query(Notification.type, Notification.is_read, func.count(Notification.id))
        .filter(Notification.recipient_employee_id == recipient_id)
        .group_by(Notification.type, Notification.is_read)
        .all()
    )
    by_type: dict[str, dict[str, int]] = {}
    total = 0
    unread = 0
    for ntype, is_read, count in type_rows:
        entry = by_type.setdefault(ntype, {"total": 0, "unread": 0})
        entry["total"] += count
        total += count
        if not is_read:
            entry["unread"] += count
            unread += count

    priority_rows = (
        db.query(Notification.priority, func.count(Notification.id))
        .filter(Notification.recipient_employee_id == recipient_id, Notification.is_read.is_(False))
        .group_by(Notification.priority)
        .all()
    )

    return {
        "type_stats": [{"type": t, **v} for t, v in sorted(by_type.items())],
        "priority_stats": [{"priority": p, "count": c} for p, c in sorted(priority_rows)],
        "total_notifications": total,
        "unread_count": unread,
    }
