import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from oms.core.meetings import resolve_employees
from oms.core.notifications import create_bulk_notifications
from oms.models.broadcast import Broadcast, BroadcastAttachment, BroadcastRecipient
from oms.models.employee import Employee
from oms.models.user import User

PREVIEW_LENGTH = 100


def preview(message: str) -> str:
    if len(message) > PREVIEW_LENGTH:
        return message[:PREVIEW_LENGTH] + "..."
    return message


def send_broadcast(
    *,
    db: Session,
    sender: User,
    recipient_ids: list[uuid.UUID],
    title: str,
    message: str,
    broadcast_type: str = "general",
    priority: str = "medium",
    expires_at: datetime | None = None,
    attachments: list[tuple[str, str]] | None = None,
    now: datetime | None = None,
) -> Broadcast:
    """
    One Broadcast row with per-recipient read state, then one Notification per
    recipient referencing it. Both writes share the caller's transaction.
    """
    recipients = resolve_employees(db, recipient_ids, what="recipients")

    b = Broadcast(
        title=title,
        message=message,
        sender_user_id=sender.id,
        broadcast_type=broadcast_type,
        priority=priority,
        expires_at=expires_at,
    )
    for employee in recipients:
        b.recipients.append(BroadcastRecipient(employee_id=employee.id, is_read=False))
    for file_name, file_path in attachments or []:
        att = BroadcastAttachment(file_name=file_name, file_path=file_path)
        if now is not None:
            att.uploaded_at = now
        b.attachments.append(att)
    db.add(b)
    db.flush()

    create_bulk_notifications(
        db=db,
        items=[
            {
                "recipient_id": employee.id,
                "title": f"New {broadcast_type}: {title}",
                "message": preview(message),
                "type": "broadcast",
                "priority": priority,
                "action_url": "/broadcasts",
                "related_id": b.id,
                "related_model": "Broadcast",
            }
            for employee in recipients
        ],
    )
    db.flush()
    return b


def fetch_my_broadcasts(
    *,
    db: Session,
    employee: Employee,
    now: datetime,
    unread_only: bool = False,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[tuple[Broadcast, bool, datetime | None]], int]:
    """
    Returns ((broadcast, is_read, read_at) page, total). Unless unread_only is set,
    every unread entry of this employee is marked read as a side effect; the page
    still reflects the read state from before the fetch.
    """
    q = (
        db.query(Broadcast, BroadcastRecipient)
        .join(BroadcastRecipient, BroadcastRecipient.broadcast_id == Broadcast.id)
        .filter(BroadcastRecipient.employee_id == employee.id)
    )
    if unread_only:
        q = q.filter(BroadcastRecipient.is_read.is_(False))

    total = q.count()
    rows = q.order_by(Broadcast.created_at.desc()).offset(offset).limit(limit).all()
    # read state as it was before this fetch
    page = [(b, r.is_read, r.read_at) for b, r in rows]

    if not unread_only:
        db.execute(
            update(BroadcastRecipient)
            .where(BroadcastRecipient.employee_id == employee.id, BroadcastRecipient.is_read.is_(False))
            .values(is_read=True, read_at=now)
            .execution_options(synchronize_session=False)
        )
        db.expire_all()

    return page, total


def broadcast_stats(db: Session) -> dict:
    type_rows = db.query(Broadcast.broadcast_type, func.count(Broadcast.id)).group_by(Broadcast.broadcast_type).all()
    priority_rows = db.query(Broadcast.priority, func.count(Broadcast.id)).group_by(Broadcast.priority).all()
    read_rows = (
        db.query(BroadcastRecipient.is_read, func.count(BroadcastRecipient.id))
        .group_by(BroadcastRecipient.is_read)
        .all()
    )
    read_stats = {"read": 0, "unread": 0}
    for is_read, count in read_rows:
        read_stats["read" if is_read else "unread"] += count
    return {
        "type_stats": {t: c for t, c in type_rows},
        "priority_stats": {p: c for p, c in priority_rows},
        "read_stats": read_stats,
        "total_broadcasts": db.scalar(select(func.count(Broadcast.id))) or 0,
    }
