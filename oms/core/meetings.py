import uuid
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from oms.core.access import get_employee_for_user
from oms.core.notifications import create_notification
from oms.models.employee import Employee
from oms.models.meeting import Meeting, MeetingAgendaItem, MeetingAttendee, MEETING_STATUSES
from oms.models.user import User


def resolve_employees(db: Session, ids: list[uuid.UUID], *, what: str) -> list[Employee]:
    """All ids must exist, otherwise the whole call fails."""
    unique_ids = list(dict.fromkeys(ids))
    employees = db.query(Employee).filter(Employee.id.in_(unique_ids)).all()
    if len(employees) != len(unique_ids):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Some {what} not found")
    by_id = {e.id: e for e in employees}
    return [by_id[i] for i in unique_ids]


def schedule_meeting(
    *,
    db: Session,
    organizer: User,
    attendee_ids: list[uuid.UUID],
    title: str,
    meeting_date: datetime,
    now: datetime,
    duration: int = 60,
    meeting_type: str = "one-on-one",
    description: str | None = None,
    location: str | None = None,
    meeting_link: str | None = None,
    agenda: list[tuple[str, int | None]] | None = None,
) -> Meeting:
    if meeting_date < now:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="meeting_date cannot be in the past")

    attendees = resolve_employees(db, attendee_ids, what="attendees")

    meeting = Meeting(
        title=title,
        description=description,
        organizer_user_id=organizer.id,
        meeting_date=meeting_date,
        duration=duration,
        meeting_type=meeting_type,
        location=location,
        meeting_link=meeting_link or None,
        status="scheduled",
    )
    for employee in attendees:
        meeting.attendees.append(MeetingAttendee(employee_id=employee.id, status="pending"))
    for position, (item, item_duration) in enumerate(agenda or [], start=1):
        meeting.agenda.append(MeetingAgendaItem(position=position, item=item, duration=item_duration))
    db.add(meeting)
    db.flush()

    for employee in attendees:
        create_notification(
            db=db,
            recipient_id=employee.id,
            title="New Meeting Scheduled",
            message=f'You have been invited to "{title}" on {meeting_date.date().isoformat()}',
            type="meeting",
            priority="medium",
            action_url="/meetings",
            related_id=meeting.id,
            related_model="Meeting",
        )
    return meeting


def respond_to_meeting(
    *,
    db: Session,
    meeting_id: uuid.UUID,
    employee: Employee,
    decision: str,
    now: datetime,
) -> Meeting:
    if decision not in ("accepted", "declined"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid response status")

    attendee = (
        db.query(MeetingAttendee)
        .filter(MeetingAttendee.meeting_id == meeting_id, MeetingAttendee.employee_id == employee.id)
        .one_or_none()
    )
    if not attendee:
        raise HTTPException(status_code=404, detail="Meeting not found or you are not an attendee")

    attendee.status = decision
    attendee.response_at = now
    db.flush()

    meeting = db.get(Meeting, meeting_id)
    organizer_employee = get_employee_for_user(db, meeting.organizer)
    if organizer_employee:
        create_notification(
            db=db,
            recipient_id=organizer_employee.id,
            title="Meeting Response",
            message=f'{employee.full_name} has {decision} the meeting "{meeting.title}"',
            type="meeting",
            priority="low",
            action_url="/admin/meetings",
            related_id=meeting.id,
            related_model="Meeting",
        )
    return meeting


def set_meeting_status(*, db: Session, meeting: Meeting, new_status: str) -> Meeting:
    if new_status not in MEETING_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    meeting.status = new_status
    db.flush()

    for attendee in meeting.attendees:
        create_notification(
            db=db,
            recipient_id=attendee.employee_id,
            title="Meeting Status Updated",
            message=f'Meeting "{meeting.title}" status changed to {new_status}',
            type="meeting",
            priority="high" if new_status == "cancelled" else "low",
            action_url="/meetings",
            related_id=meeting.id,
            related_model="Meeting",
        )
    return meeting
