import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from oms.api.serializers import attachment_out, employee_summary, user_summary
from oms.core.access import get_current_employee
from oms.core.clock import Clock, get_clock, to_naive_utc
from oms.core.leaves import leave_stats, review_leave, submit_leave
from oms.core.rbac import Role, require_roles
from oms.core.storage import LEAVE_POLICY, delete_file, save_uploads
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.leave import Leave
from oms.models.user import User
from oms.schemas.leave import LeaveOut, LeaveReviewRequest, LeaveStatsOut, LeaveType
from oms.schemas.pagination import PaginatedResponse, paginate

router = APIRouter(prefix="/leaves", tags=["leaves"])

MAX_ATTACHMENTS = 3


def leave_to_out(lv: Leave) -> LeaveOut:
    return LeaveOut(
        id=str(lv.id),
        employee=employee_summary(lv.employee),
        leave_type=lv.leave_type,
        start_date=lv.start_date,
        end_date=lv.end_date,
        total_days=lv.total_days,
        reason=lv.reason,
        status=lv.status,
        reviewed_by=user_summary(lv.reviewed_by),
        reviewed_at=lv.reviewed_at,
        review_comments=lv.review_comments,
        attachments=[attachment_out(a) for a in lv.attachments],
        created_at=lv.created_at,
    )


@router.get("/my-leaves", response_model=PaginatedResponse[LeaveOut])
def my_leaves(
    status: str | None = Query(default=None, description="Filter by status"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    query = db.query(Leave).filter(Leave.employee_id == employee.id)
    if status:
        query = query.filter(Leave.status == status)

    total = query.count()
    leaves = query.order_by(Leave.created_at.desc()).offset(offset).limit(limit).all()
    return paginate([leave_to_out(lv) for lv in leaves], total=total, limit=limit, offset=offset)


@router.post("/request", response_model=LeaveOut, status_code=201)
def request_leave(
    leave_type: LeaveType = Form(...),
    start_date: datetime = Form(...),
    end_date: datetime = Form(...),
    reason: str = Form(..., min_length=10, max_length=500),
    attachments: list[UploadFile] | None = File(default=None),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    """
    Submit a leave request. Total days count both endpoints; every admin gets a
    notification.
    """
    uploads = [a for a in attachments or [] if a.filename]
    saved = save_uploads(LEAVE_POLICY, uploads, MAX_ATTACHMENTS)
    try:
        leave = submit_leave(
            db=db,
            employee=employee,
            leave_type=leave_type,
            start_date=to_naive_utc(start_date),
            end_date=to_naive_utc(end_date),
            reason=reason,
            now=clock.now(),
            attachments=saved,
        )
        db.commit()
    except Exception:
        for _, path in saved:
            delete_file(path)
        raise
    db.refresh(leave)
    return leave_to_out(leave)


@router.get("/all", response_model=PaginatedResponse[LeaveOut])
def all_leaves(
    status: str | None = Query(default=None, description="Filter by status"),
    employee_id: uuid.UUID | None = Query(default=None, description="Filter by employee ID"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    query = db.query(Leave)
    if status:
        query = query.filter(Leave.status == status)
    if employee_id:
        query = query.filter(Leave.employee_id == employee_id)

    total = query.count()
    leaves = query.order_by(Leave.created_at.desc()).offset(offset).limit(limit).all()
    return paginate([leave_to_out(lv) for lv in leaves], total=total, limit=limit, offset=offset)


@router.put("/{leave_id}/review", response_model=LeaveOut)
def review(
    leave_id: uuid.UUID,
    payload: LeaveReviewRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    leave = db.get(Leave, leave_id)
    if not leave:
        raise HTTPException(status_code=404, detail="Leave request not found")
    review_leave(
        db=db,
        leave=leave,
        decision=payload.status,
        reviewer=current_user,
        comments=payload.review_comments,
        now=clock.now(),
    )
    db.commit()
    db.refresh(leave)
    return leave_to_out(leave)


@router.get("/stats", response_model=LeaveStatsOut)
def stats(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    return LeaveStatsOut(**leave_stats(db))
