import uuid
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session

from oms.models.employee import Employee
from oms.models.onboarding_step import OnboardingStep

DEFAULT_STEPS = [
    ("Complete Profile", "Fill out your personal information and contact details"),
    ("Upload Documents", "Upload required documents (ID, contracts, etc.)"),
    ("Company Policies", "Review and acknowledge company policies"),
    ("IT Setup", "Set up your work email and access to company systems"),
    ("Team Introduction", "Meet your team members and direct supervisor"),
]


def seed_default_steps(db: Session, employee: Employee) -> list[OnboardingStep]:
    steps = [
        OnboardingStep(
            employee_id=employee.id,
            step_name=name,
            step_description=description,
            order_index=idx,
        )
        for idx, (name, description) in enumerate(DEFAULT_STEPS, start=1)
    ]
    db.add_all(steps)
    return steps


def list_steps(db: Session, employee_id: uuid.UUID) -> list[OnboardingStep]:
    return (
        db.query(OnboardingStep)
        .filter(OnboardingStep.employee_id == employee_id)
        .order_by(OnboardingStep.order_index.asc())
        .all()
    )


def complete_step(db: Session, *, employee: Employee, step_id: uuid.UUID, now: datetime) -> OnboardingStep:
    step = (
        db.query(OnboardingStep)
        .filter(OnboardingStep.id == step_id, OnboardingStep.employee_id == employee.id)
        .one_or_none()
    )
    if not step:
        raise HTTPException(status_code=404, detail="Onboarding step not found")

    step.completed = True
    step.completed_at = now
    db.flush()

    # Recompute the aggregate in the same unit of work
    steps = list_steps(db, employee.id)
    if all(s.completed for s in steps):
        employee.onboarding_status = "completed"
    else:
        employee.onboarding_status = "in-progress"
    db.flush()
    return step


def onboarding_status(db: Session, employee: Employee) -> dict:
    steps = list_steps(db, employee.id)
    completed = sum(1 for s in steps if s.completed)
    progress = (completed / len(steps)) * 100 if steps else 0
    return {
        "status": employee.onboarding_status,
        "progress": progress,
        "total_steps": len(steps),
        "completed_steps": completed,
    }
