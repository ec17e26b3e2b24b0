import uuid
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from oms.core.notifications import create_notification
from oms.models.employee import Employee
from oms.models.mentorship import Mentorship, MentorshipGoal, MentorshipNote, MENTORSHIP_STATUSES
from oms.models.user import User

ALREADY_MENTORED = "Mentee already has an active mentor"


def active_mentorship_for_mentee(db: Session, mentee_id: uuid.UUID) -> Mentorship | None:
    return (
        db.query(Mentorship)
        .filter(Mentorship.mentee_employee_id == mentee_id, Mentorship.status == "active")
        .one_or_none()
    )


def assign_mentor(
    *,
    db: Session,
    mentor_id: uuid.UUID,
    mentee_id: uuid.UUID,
    assigner: User,
    now: datetime,
    end_date: datetime | None = None,
    goals: list[tuple[str, datetime | None]] | None = None,
) -> Mentorship:
    if mentor_id == mentee_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Mentor and mentee cannot be the same person",
        )

    mentor = db.get(Employee, mentor_id)
    mentee = db.get(Employee, mentee_id)
    if not mentor or not mentee:
        raise HTTPException(status_code=404, detail="Mentor or mentee not found")

    if active_mentorship_for_mentee(db, mentee_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_MENTORED)

    m = Mentorship(
        mentor_employee_id=mentor.id,
        mentee_employee_id=mentee.id,
        assigned_by_user_id=assigner.id,
        start_date=now,
        end_date=end_date,
        status="active",
    )
    for goal, target_date in goals or []:
        m.goals.append(MentorshipGoal(goal=goal, target_date=target_date))

    # The partial unique index backs up the pre-check against concurrent assigns
    try:
        with db.begin_nested():
            db.add(m)
            db.flush()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_MENTORED)

    create_notification(
        db=db,
        recipient_id=mentor.id,
        title="New Mentee Assigned",
        message=f"You have been assigned as a mentor to {mentee.full_name}",
        type="mentor",
        priority="medium",
        action_url="/mentors",
        related_id=m.id,
        related_model="Mentor",
    )
    create_notification(
        db=db,
        recipient_id=mentee.id,
        title="Mentor Assigned",
        message=f"{mentor.full_name} has been assigned as your mentor",
        type="mentor",
        priority="medium",
        action_url="/mentors",
        related_id=m.id,
        related_model="Mentor",
    )
    return m


def get_active_participation(
    db: Session, *, mentorship_id: uuid.UUID, employee: Employee, not_found: str
) -> Mentorship:
    m = (
        db.query(Mentorship)
        .filter(
            Mentorship.id == mentorship_id,
            Mentorship.status == "active",
            or_(
                Mentorship.mentor_employee_id == employee.id,
                Mentorship.mentee_employee_id == employee.id,
            ),
        )
        .one_or_none()
    )
    if not m:
        raise HTTPException(status_code=404, detail=not_found)
    return m


def add_note(*, db: Session, mentorship: Mentorship, author: User, note: str, now: datetime) -> Mentorship:
    text = (note or "").strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Note content is required")
    mentorship.notes.append(MentorshipNote(note=text, added_by_user_id=author.id, added_at=now))
    db.flush()
    return mentorship


def toggle_goal(
    *, db: Session, mentorship: Mentorship, goal_id: uuid.UUID, completed: bool, now: datetime
) -> Mentorship:
    goal = next((g for g in mentorship.goals if g.id == goal_id), None)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    goal.completed = completed
    goal.completed_at = now if completed else None
    db.flush()
    return mentorship


def set_mentorship_status(*, db: Session, mentorship: Mentorship, new_status: str) -> Mentorship:
    if new_status not in MENTORSHIP_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    if new_status == "active" and mentorship.status != "active":
        other = active_mentorship_for_mentee(db, mentorship.mentee_employee_id)
        if other and other.id != mentorship.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_MENTORED)

    try:
        with db.begin_nested():
            mentorship.status = new_status
            db.flush()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_MENTORED)

    create_notification(
        db=db,
        recipient_id=mentorship.mentor_employee_id,
        title="Mentorship Status Updated",
        message=f"Your mentorship with {mentorship.mentee.full_name} is now {new_status}",
        type="mentor",
        priority="low",
        action_url="/mentors",
        related_id=mentorship.id,
        related_model="Mentor",
    )
    create_notification(
        db=db,
        recipient_id=mentorship.mentee_employee_id,
        title="Mentorship Status Updated",
        message=f"Your mentorship with {mentorship.mentor.full_name} is now {new_status}",
        type="mentor",
        priority="low",
        action_url="/mentors",
        related_id=mentorship.id,
        related_model="Mentor",
    )
    return mentorship
