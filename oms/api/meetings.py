import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from oms.api.serializers import employee_summary, user_summary
from oms.core.access import get_current_employee
from oms.core.clock import Clock, get_clock
from oms.core.meetings import respond_to_meeting, schedule_meeting, set_meeting_status
from oms.core.rbac import Role, require_roles
from oms.core.security import get_current_user
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.meeting import Meeting, MeetingAttendee
from oms.models.user import User
from oms.schemas.meeting import (
    AgendaItemOut,
    AttendeeOut,
    MeetingCreate,
    MeetingOut,
    MeetingResponseRequest,
    MeetingStatusUpdate,
)
from oms.schemas.pagination import PaginatedResponse, paginate

router = APIRouter(prefix="/meetings", tags=["meetings"])


def meeting_to_out(m: Meeting) -> MeetingOut:
    return MeetingOut(
        id=str(m.id),
        title=m.title,
        description=m.description,
        organizer=user_summary(m.organizer),
        attendees=[
            AttendeeOut(
                id=str(a.id),
                employee=employee_summary(a.employee),
                status=a.status,
                response_at=a.response_at,
            )
            for a in m.attendees
        ],
        meeting_date=m.meeting_date,
        duration=m.duration,
        meeting_type=m.meeting_type,
        location=m.location,
        meeting_link=m.meeting_link,
        agenda=[
            AgendaItemOut(id=str(i.id), position=i.position, item=i.item, duration=i.duration)
            for i in m.agenda
        ],
        status=m.status,
        created_at=m.created_at,
    )


@router.get("/my-meetings", response_model=PaginatedResponse[MeetingOut])
def my_meetings(
    status: str | None = Query(default=None, description="Filter by status"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    employee: Employee = Depends(get_current_employee),
):
    """Meetings the caller organizes or is invited to, soonest first."""
    attending = db.query(MeetingAttendee.meeting_id).filter(MeetingAttendee.employee_id == employee.id)
    query = db.query(Meeting).filter(
        or_(Meeting.organizer_user_id == current_user.id, Meeting.id.in_(attending))
    )
    if status:
        query = query.filter(Meeting.status == status)

    total = query.count()
    meetings = query.order_by(Meeting.meeting_date.asc()).offset(offset).limit(limit).all()
    return paginate([meeting_to_out(m) for m in meetings], total=total, limit=limit, offset=offset)


@router.post("/schedule", response_model=MeetingOut, status_code=201)
def schedule(
    payload: MeetingCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    meeting = schedule_meeting(
        db=db,
        organizer=current_user,
        attendee_ids=payload.attendees,
        title=payload.title,
        description=payload.description,
        meeting_date=payload.meeting_date,
        duration=payload.duration,
        meeting_type=payload.meeting_type,
        location=payload.location,
        meeting_link=payload.meeting_link,
        agenda=[(a.item, a.duration) for a in payload.agenda],
        now=clock.now(),
    )
    db.commit()
    db.refresh(meeting)
    return meeting_to_out(meeting)


@router.put("/{meeting_id}/respond", response_model=MeetingOut)
def respond(
    meeting_id: uuid.UUID,
    payload: MeetingResponseRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    meeting = respond_to_meeting(
        db=db,
        meeting_id=meeting_id,
        employee=employee,
        decision=payload.status,
        now=clock.now(),
    )
    db.commit()
    db.refresh(meeting)
    return meeting_to_out(meeting)


@router.get("/all", response_model=PaginatedResponse[MeetingOut])
def all_meetings(
    status: str | None = Query(default=None, description="Filter by status"),
    meeting_type: str | None = Query(default=None, description="Filter by meeting type"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    query = db.query(Meeting)
    if status:
        query = query.filter(Meeting.status == status)
    if meeting_type:
        query = query.filter(Meeting.meeting_type == meeting_type)

    total = query.count()
    meetings = query.order_by(Meeting.meeting_date.desc()).offset(offset).limit(limit).all()
    return paginate([meeting_to_out(m) for m in meetings], total=total, limit=limit, offset=offset)


@router.put("/{meeting_id}/status", response_model=MeetingOut)
def update_status(
    meeting_id: uuid.UUID,
    payload: MeetingStatusUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    meeting = db.get(Meeting, meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    set_meeting_status(db=db, meeting=meeting, new_status=payload.status)
    db.commit()
    db.refresh(meeting)
    return meeting_to_out(meeting)
