from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from oms.core.security import get_current_user
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.user import User


def get_employee_for_user(db: Session, user: User) -> Employee | None:
    return db.query(Employee).filter(Employee.user_id == user.id).one_or_none()


def require_employee_for_user(db: Session, user: User) -> Employee:
    emp = get_employee_for_user(db, user)
    if not emp:
        raise HTTPException(status_code=404, detail="Employee profile not found")
    return emp


def get_current_employee(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Employee:
    return require_employee_for_user(db, user)


def get_employee_or_404(db: Session, employee_id) -> Employee:
    emp = db.get(Employee, employee_id)
    if not emp:
        raise HTTPException(status_code=404, detail="Employee not found")
    return emp
