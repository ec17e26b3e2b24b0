import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from oms.core.access import get_current_employee
from oms.core.clock import Clock, get_clock
from oms.core.notifications import (
    count_unread,
    delete_notification,
    mark_all_read,
    mark_notification_read,
    stats_by_type,
)
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.notification import Notification
from oms.schemas.common import MessageOut
from oms.schemas.notification import (
    MarkAllReadOut,
    NotificationFeed,
    NotificationOut,
    NotificationStatsOut,
)
from oms.schemas.pagination import PaginationMeta

router = APIRouter(prefix="/notifications", tags=["notifications"])


def notification_to_out(n: Notification) -> NotificationOut:
    return NotificationOut(
        id=str(n.id),
        title=n.title,
        message=n.message,
        type=n.type,
        priority=n.priority,
        is_read=n.is_read,
        read_at=n.read_at,
        action_url=n.action_url,
        related_id=str(n.related_id) if n.related_id else None,
        related_model=n.related_model,
        created_at=n.created_at,
    )


@router.get("", response_model=NotificationFeed)
def list_notifications(
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    query = db.query(Notification).filter(Notification.recipient_employee_id == employee.id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    total = query.count()
    rows = query.order_by(Notification.created_at.desc()).offset(offset).limit(limit).all()
    items = [notification_to_out(n) for n in rows]
    return NotificationFeed(
        items=items,
        pagination=PaginationMeta.build(total=total, limit=limit, offset=offset, returned=len(items)),
        unread_count=count_unread(db=db, recipient_id=employee.id),
    )


@router.get("/stats", response_model=NotificationStatsOut)
def stats(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    return NotificationStatsOut(**stats_by_type(db=db, recipient_id=employee.id))


@router.put("/mark-all-read", response_model=MarkAllReadOut)
def read_all(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    modified = mark_all_read(db=db, recipient_id=employee.id, now=clock.now())
    db.commit()
    return MarkAllReadOut(message="All notifications marked as read", modified_count=modified)


@router.put("/{notification_id}/read", response_model=NotificationOut)
def read_one(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    n = mark_notification_read(db=db, notification_id=notification_id, recipient_id=employee.id, now=clock.now())
    if n is None:
        raise HTTPException(status_code=404, detail="Notification not found or already read")
    db.commit()
    return notification_to_out(n)


@router.delete("/{notification_id}", response_model=MessageOut)
def delete(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    if not delete_notification(db=db, notification_id=notification_id, recipient_id=employee.id):
        raise HTTPException(status_code=404, detail="Notification not found")
    db.commit()
    return MessageOut(message="Notification deleted successfully")
