import uuid
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from oms.api.serializers import attachment_out, employee_summary, user_summary
from oms.core.access import get_current_employee, get_employee_for_user
from oms.core.broadcasts import broadcast_stats, fetch_my_broadcasts, send_broadcast
from oms.core.clock import Clock, get_clock, to_naive_utc
from oms.core.rbac import Role, is_admin, require_roles
from oms.core.security import get_current_user
from oms.core.storage import BROADCAST_POLICY, delete_file, file_exists, save_uploads
from oms.db.session import get_db
from oms.models.broadcast import Broadcast, BroadcastRecipient
from oms.models.employee import Employee
from oms.models.user import User
from oms.schemas.broadcast import (
    BroadcastDetailOut,
    BroadcastOut,
    BroadcastStatsOut,
    MyBroadcastOut,
    RecipientOut,
)
from oms.schemas.pagination import PaginatedResponse, paginate

router = APIRouter(prefix="/broadcasts", tags=["broadcasts"])

MAX_ATTACHMENTS = 5


def _base_fields(b: Broadcast) -> dict:
    return dict(
        id=str(b.id),
        title=b.title,
        message=b.message,
        sender=user_summary(b.sender),
        broadcast_type=b.broadcast_type,
        priority=b.priority,
        expires_at=b.expires_at,
        attachments=[attachment_out(a) for a in b.attachments],
        created_at=b.created_at,
    )


def broadcast_to_detail(b: Broadcast) -> BroadcastDetailOut:
    return BroadcastDetailOut(
        **_base_fields(b),
        recipients=[
            RecipientOut(employee=employee_summary(r.employee), is_read=r.is_read, read_at=r.read_at)
            for r in b.recipients
        ],
    )


@router.get("/my-broadcasts", response_model=PaginatedResponse[MyBroadcastOut])
def my_broadcasts(
    unread_only: bool = Query(default=False, description="Only broadcasts not yet read"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    """
    Broadcasts addressed to the caller, newest first.

    Without `unread_only` this also marks every unread broadcast of the caller
    as read; each item still shows the read state it had before the call.
    """
    page, total = fetch_my_broadcasts(
        db=db,
        employee=employee,
        now=clock.now(),
        unread_only=unread_only,
        limit=limit,
        offset=offset,
    )
    db.commit()
    items = [MyBroadcastOut(**_base_fields(b), is_read=is_read, read_at=read_at) for b, is_read, read_at in page]
    return paginate(items, total=total, limit=limit, offset=offset)


@router.post("/send", response_model=BroadcastDetailOut, status_code=201)
def send(
    title: str = Form(..., min_length=3, max_length=200),
    message: str = Form(..., min_length=10),
    recipients: list[uuid.UUID] = Form(...),
    broadcast_type: Literal["announcement", "urgent", "general", "policy"] = Form(default="general"),
    priority: Literal["low", "medium", "high", "urgent"] = Form(default="medium"),
    expires_at: datetime | None = Form(default=None),
    attachments: list[UploadFile] | None = File(default=None),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    uploads = [a for a in attachments or [] if a.filename]
    saved = save_uploads(BROADCAST_POLICY, uploads, MAX_ATTACHMENTS)
    try:
        b = send_broadcast(
            db=db,
            sender=current_user,
            recipient_ids=recipients,
            title=title,
            message=message,
            broadcast_type=broadcast_type,
            priority=priority,
            expires_at=to_naive_utc(expires_at) if expires_at else None,
            attachments=saved,
            now=clock.now(),
        )
        db.commit()
    except Exception:
        for _, path in saved:
            delete_file(path)
        raise
    db.refresh(b)
    return broadcast_to_detail(b)


@router.get("/all", response_model=PaginatedResponse[BroadcastDetailOut])
def all_broadcasts(
    broadcast_type: str | None = Query(default=None, description="Filter by type"),
    priority: str | None = Query(default=None, description="Filter by priority"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    query = db.query(Broadcast)
    if broadcast_type:
        query = query.filter(Broadcast.broadcast_type == broadcast_type)
    if priority:
        query = query.filter(Broadcast.priority == priority)

    total = query.count()
    items = query.order_by(Broadcast.created_at.desc()).offset(offset).limit(limit).all()
    return paginate([broadcast_to_detail(b) for b in items], total=total, limit=limit, offset=offset)


@router.get("/stats", response_model=BroadcastStatsOut)
def stats(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    return BroadcastStatsOut(**broadcast_stats(db))


@router.get("/{broadcast_id}/attachments/{attachment_id}")
def download_attachment(
    broadcast_id: uuid.UUID,
    attachment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    b = db.get(Broadcast, broadcast_id)
    if not b:
        raise HTTPException(status_code=404, detail="Broadcast not found")

    if not is_admin(current_user):
        employee = get_employee_for_user(db, current_user)
        is_recipient = employee is not None and (
            db.query(BroadcastRecipient.id)
            .filter(BroadcastRecipient.broadcast_id == b.id, BroadcastRecipient.employee_id == employee.id)
            .first()
            is not None
        )
        if not is_recipient:
            raise HTTPException(status_code=403, detail="Access denied")

    att = next((a for a in b.attachments if a.id == attachment_id), None)
    if not att:
        raise HTTPException(status_code=404, detail="Attachment not found")
    if not file_exists(att.file_path):
        raise HTTPException(status_code=404, detail="File not found on server")
    return FileResponse(att.file_path, filename=att.file_name)
