import math
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from oms.core.accounts import admin_employees
from oms.core.notifications import create_notification
from oms.models.employee import Employee
from oms.models.leave import Leave, LeaveAttachment
from oms.models.user import User

ONE_DAY = timedelta(days=1)


def total_days(start: datetime, end: datetime) -> int:
    """Inclusive of both endpoints."""
    return math.ceil((end - start) / ONE_DAY) + 1


def submit_leave(
    *,
    db: Session,
    employee: Employee,
    leave_type: str,
    start_date: datetime,
    end_date: datetime,
    reason: str,
    now: datetime,
    attachments: list[tuple[str, str]] | None = None,
) -> Leave:
    if start_date < now:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date cannot be in the past")
    if end_date <= start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must be after start_date")

    days = total_days(start_date, end_date)
    leave = Leave(
        employee_id=employee.id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        total_days=days,
        reason=reason,
        status="pending",
    )
    for file_name, file_path in attachments or []:
        leave.attachments.append(LeaveAttachment(file_name=file_name, file_path=file_path, uploaded_at=now))
    db.add(leave)
    db.flush()

    for admin in admin_employees(db):
        create_notification(
            db=db,
            recipient_id=admin.id,
            title="New Leave Request",
            message=f"{employee.full_name} has submitted a {leave_type} leave request for {days} days",
            type="leave",
            priority="medium",
            action_url="/admin/leaves",
            related_id=leave.id,
            related_model="Leave",
        )
    return leave


def review_leave(
    *,
    db: Session,
    leave: Leave,
    decision: str,
    reviewer: User,
    now: datetime,
    comments: str | None = None,
) -> Leave:
    if decision not in ("approved", "rejected"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    leave.status = decision
    leave.review_comments = comments
    leave.reviewed_by_user_id = reviewer.id
    leave.reviewed_at = now
    db.flush()

    create_notification(
        db=db,
        recipient_id=leave.employee_id,
        title=f"Leave Request {decision.capitalize()}",
        message=f"Your {leave.leave_type} leave request has been {decision}{': ' + comments if comments else ''}",
        type="leave",
        priority="medium" if decision == "approved" else "high",
        action_url="/leaves",
        related_id=leave.id,
        related_model="Leave",
    )
    return leave


def leave_stats(db: Session) -> dict:
    status_rows = (
        db.query(Leave.status, func.count(Leave.id), func.coalesce(func.sum(Leave.total_days), 0))
        .group_by(Leave.status)
        .all()
    )
    type_rows = db.query(Leave.leave_type, func.count(Leave.id)).group_by(Leave.leave_type).all()
    return {
        "status_stats": {s: {"count": c, "total_days": int(d)} for s, c, d in status_rows},
        "type_stats": {t: c for t, c in type_rows},
        "total_requests": db.query(func.count(Leave.id)).scalar() or 0,
    }
