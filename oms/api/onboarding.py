import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from oms.core.access import get_current_employee, get_employee_or_404
from oms.core.clock import Clock, get_clock
from oms.core.onboarding import complete_step, list_steps, onboarding_status
from oms.core.rbac import Role, require_roles
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.onboarding_step import OnboardingStep
from oms.models.user import User
from oms.schemas.onboarding import OnboardingStatusOut, OnboardingStepOut

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


def step_to_out(s: OnboardingStep) -> OnboardingStepOut:
    return OnboardingStepOut(
        id=str(s.id),
        employee_id=str(s.employee_id),
        step_name=s.step_name,
        step_description=s.step_description,
        order_index=s.order_index,
        completed=s.completed,
        completed_at=s.completed_at,
    )


@router.get("/steps", response_model=list[OnboardingStepOut])
def my_steps(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    return [step_to_out(s) for s in list_steps(db, employee.id)]


@router.put("/steps/{step_id}/complete", response_model=OnboardingStepOut)
def complete_my_step(
    step_id: uuid.UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    """Mark one checklist item done and recompute the employee's onboarding status."""
    step = complete_step(db, employee=employee, step_id=step_id, now=clock.now())
    db.commit()
    return step_to_out(step)


@router.get("/status", response_model=OnboardingStatusOut)
def my_status(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    return OnboardingStatusOut(**onboarding_status(db, employee))


@router.get("/employee/{employee_id}/steps", response_model=list[OnboardingStepOut])
def employee_steps(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    return [step_to_out(s) for s in list_steps(db, employee.id)]


@router.get("/employee/{employee_id}/status", response_model=OnboardingStatusOut)
def employee_status(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    return OnboardingStatusOut(**onboarding_status(db, employee))


@router.put("/employee/{employee_id}/steps/{step_id}/complete", response_model=OnboardingStepOut)
def complete_employee_step(
    employee_id: uuid.UUID,
    step_id: uuid.UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    step = complete_step(db, employee=employee, step_id=step_id, now=clock.now())
    db.commit()
    return step_to_out(step)
