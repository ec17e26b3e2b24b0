import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from oms.api.serializers import user_summary
from oms.core.access import get_employee_for_user, get_employee_or_404, require_employee_for_user
from oms.core.clock import Clock, get_clock
from oms.core.rbac import Role, is_admin, require_roles
from oms.core.security import get_current_user
from oms.db.session import get_db
from oms.models.message import Message
from oms.models.user import User
from oms.schemas.message import DirectMessageOut, EmployeeRef, MessageCreate, UnreadCount

router = APIRouter(prefix="/messages", tags=["messages"])


def message_to_out(m: Message) -> DirectMessageOut:
    return DirectMessageOut(
        id=str(m.id),
        from_user=user_summary(m.from_user),
        to_user=user_summary(m.to_user),
        employee=EmployeeRef(id=str(m.employee.id), full_name=m.employee.full_name, email=m.employee.email),
        subject=m.subject,
        message=m.message,
        is_read=m.is_read,
        read_at=m.read_at,
        parent_message_id=str(m.parent_message_id) if m.parent_message_id else None,
        created_at=m.created_at,
    )


@router.get("", response_model=list[DirectMessageOut])
def my_messages(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Messages sent or received by the caller, newest first."""
    require_employee_for_user(db, current_user)
    messages = (
        db.query(Message)
        .filter(or_(Message.from_user_id == current_user.id, Message.to_user_id == current_user.id))
        .order_by(Message.created_at.desc())
        .all()
    )
    return [message_to_out(m) for m in messages]


@router.post("", response_model=DirectMessageOut, status_code=201)
def send_message(
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Admin messages are filed under the recipient's employee profile; employee
    messages under the sender's own profile.
    """
    to_user = db.get(User, payload.to_user_id)
    if not to_user:
        raise HTTPException(status_code=404, detail="Recipient not found")

    if is_admin(current_user):
        employee = get_employee_for_user(db, to_user)
        if not employee:
            raise HTTPException(status_code=404, detail="Employee not found")
    else:
        employee = require_employee_for_user(db, current_user)

    if payload.parent_message_id and not db.get(Message, payload.parent_message_id):
        raise HTTPException(status_code=404, detail="Parent message not found")

    m = Message(
        from_user_id=current_user.id,
        to_user_id=to_user.id,
        employee_id=employee.id,
        subject=payload.subject,
        message=payload.message,
        parent_message_id=payload.parent_message_id,
    )
    db.add(m)
    db.commit()
    db.refresh(m)
    return message_to_out(m)


@router.get("/unread/count", response_model=UnreadCount)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = (
        db.query(Message)
        .filter(Message.to_user_id == current_user.id, Message.is_read.is_(False))
        .count()
    )
    return UnreadCount(count=count)


@router.get("/employee/{employee_id}", response_model=list[DirectMessageOut])
def employee_messages(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    messages = (
        db.query(Message)
        .filter(Message.employee_id == employee.id)
        .order_by(Message.created_at.desc())
        .all()
    )
    return [message_to_out(m) for m in messages]


@router.put("/{message_id}/read", response_model=DirectMessageOut)
def mark_read(
    message_id: uuid.UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    m = (
        db.query(Message)
        .filter(
            Message.id == message_id,
            Message.to_user_id == current_user.id,
            Message.is_read.is_(False),
        )
        .one_or_none()
    )
    if not m:
        raise HTTPException(status_code=404, detail="Message not found")
    m.is_read = True
    m.read_at = clock.now()
    db.commit()
    return message_to_out(m)
