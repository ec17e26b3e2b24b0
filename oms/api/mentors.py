import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from oms.api.serializers import employee_summary, user_summary
from oms.core.access import get_current_employee
from oms.core.clock import Clock, get_clock
from oms.core.mentorships import (
    active_mentorship_for_mentee,
    add_note,
    assign_mentor,
    get_active_participation,
    set_mentorship_status,
    toggle_goal,
)
from oms.core.rbac import Role, require_roles
from oms.core.security import get_current_user
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.mentorship import Mentorship
from oms.models.user import User
from oms.schemas.mentorship import (
    GoalOut,
    GoalToggle,
    MentorAssign,
    MentorshipOut,
    MentorshipStatusUpdate,
    MyRelationshipsOut,
    NoteCreate,
    NoteOut,
)
from oms.schemas.pagination import PaginatedResponse, paginate

router = APIRouter(prefix="/mentors", tags=["mentors"])

NOT_A_PARTICIPANT = "Mentorship not found or access denied"


def mentorship_to_out(m: Mentorship) -> MentorshipOut:
    return MentorshipOut(
        id=str(m.id),
        mentor=employee_summary(m.mentor),
        mentee=employee_summary(m.mentee),
        assigned_by=user_summary(m.assigned_by),
        start_date=m.start_date,
        end_date=m.end_date,
        status=m.status,
        goals=[
            GoalOut(
                id=str(g.id),
                goal=g.goal,
                target_date=g.target_date,
                completed=g.completed,
                completed_at=g.completed_at,
            )
            for g in m.goals
        ],
        notes=[
            NoteOut(id=str(n.id), note=n.note, added_by=user_summary(n.added_by), added_at=n.added_at)
            for n in m.notes
        ],
        created_at=m.created_at,
    )


@router.get("/my-relationships", response_model=MyRelationshipsOut)
def my_relationships(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    as_mentor = (
        db.query(Mentorship)
        .filter(Mentorship.mentor_employee_id == employee.id, Mentorship.status == "active")
        .order_by(Mentorship.start_date.desc())
        .all()
    )
    as_mentee = active_mentorship_for_mentee(db, employee.id)
    return MyRelationshipsOut(
        as_mentor=[mentorship_to_out(m) for m in as_mentor],
        as_mentee=mentorship_to_out(as_mentee) if as_mentee else None,
    )


@router.post("/assign", response_model=MentorshipOut, status_code=201)
def assign(
    payload: MentorAssign,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    """Pair a mentor with a mentee. A mentee can have only one active mentor."""
    m = assign_mentor(
        db=db,
        mentor_id=payload.mentor_id,
        mentee_id=payload.mentee_id,
        assigner=current_user,
        end_date=payload.end_date,
        goals=[(g.goal, g.target_date) for g in payload.goals],
        now=clock.now(),
    )
    db.commit()
    db.refresh(m)
    return mentorship_to_out(m)


@router.post("/{mentorship_id}/notes", response_model=MentorshipOut)
def create_note(
    mentorship_id: uuid.UUID,
    payload: NoteCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
    employee: Employee = Depends(get_current_employee),
):
    m = get_active_participation(db, mentorship_id=mentorship_id, employee=employee, not_found=NOT_A_PARTICIPANT)
    add_note(db=db, mentorship=m, author=current_user, note=payload.note, now=clock.now())
    db.commit()
    db.refresh(m)
    return mentorship_to_out(m)


@router.put("/{mentorship_id}/goals/{goal_id}", response_model=MentorshipOut)
def update_goal(
    mentorship_id: uuid.UUID,
    goal_id: uuid.UUID,
    payload: GoalToggle,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    m = get_active_participation(db, mentorship_id=mentorship_id, employee=employee, not_found=NOT_A_PARTICIPANT)
    toggle_goal(db=db, mentorship=m, goal_id=goal_id, completed=payload.completed, now=clock.now())
    db.commit()
    db.refresh(m)
    return mentorship_to_out(m)


@router.get("/all", response_model=PaginatedResponse[MentorshipOut])
def all_mentorships(
    status: str = Query(default="active", description="Filter by status"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    query = db.query(Mentorship).filter(Mentorship.status == status)
    total = query.count()
    items = query.order_by(Mentorship.created_at.desc()).offset(offset).limit(limit).all()
    return paginate([mentorship_to_out(m) for m in items], total=total, limit=limit, offset=offset)


@router.put("/{mentorship_id}/status", response_model=MentorshipOut)
def update_status(
    mentorship_id: uuid.UUID,
    payload: MentorshipStatusUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    m = db.get(Mentorship, mentorship_id)
    if not m:
        raise HTTPException(status_code=404, detail="Mentorship not found")
    set_mentorship_status(db=db, mentorship=m, new_status=payload.status)
    db.commit()
    db.refresh(m)
    return mentorship_to_out(m)
