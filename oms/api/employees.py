import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from oms.core.access import get_current_employee, get_employee_or_404
from oms.core.rbac import Role, require_roles
from oms.core.security import get_current_user
from oms.core.storage import PROFILE_PICTURE_POLICY, delete_file, file_exists, save_upload
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.user import User
from oms.schemas.common import MessageOut
from oms.schemas.employee import (
    EmergencyContact,
    EmployeeOut,
    EmployeeUpdate,
    EmployeeWithUserOut,
    OnboardingStatusUpdate,
)

router = APIRouter(prefix="/employees", tags=["employees"])


def employee_to_out(e: Employee, include_user: bool = False) -> EmployeeOut | EmployeeWithUserOut:
    data = dict(
        id=str(e.id),
        user_id=str(e.user_id),
        full_name=e.full_name,
        email=e.email,
        department=e.department,
        position=e.position,
        start_date=e.start_date,
        phone=e.phone,
        address=e.address,
        emergency_contact=EmergencyContact(
            name=e.emergency_contact_name,
            phone=e.emergency_contact_phone,
        ),
        onboarding_status=e.onboarding_status,
        profile_picture_url=f"/api/employees/{e.id}/picture" if e.profile_picture_path else None,
        created_at=e.created_at,
        updated_at=e.updated_at,
    )
    if include_user:
        return EmployeeWithUserOut(
            **data,
            user_role=e.user.role if e.user else None,
            user_is_active=e.user.is_active if e.user else None,
        )
    return EmployeeOut(**data)


def apply_profile_update(e: Employee, payload: EmployeeUpdate) -> None:
    changes = payload.model_dump(exclude_unset=True)
    contact = changes.pop("emergency_contact", None)
    for field, value in changes.items():
        setattr(e, field, value)
    if contact is not None:
        e.emergency_contact_name = contact.get("name")
        e.emergency_contact_phone = contact.get("phone")


@router.get("/profile", response_model=EmployeeOut)
def get_profile(employee: Employee = Depends(get_current_employee)):
    return employee_to_out(employee)


@router.put("/profile", response_model=EmployeeOut)
def update_profile(
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    apply_profile_update(employee, payload)
    db.commit()
    db.refresh(employee)
    return employee_to_out(employee)


@router.post("/profile/picture", response_model=EmployeeOut)
def upload_profile_picture(
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    previous = employee.profile_picture_path
    employee.profile_picture_path = save_upload(PROFILE_PICTURE_POLICY, image)
    db.commit()
    delete_file(previous)
    db.refresh(employee)
    return employee_to_out(employee)


@router.delete("/profile/picture", response_model=MessageOut)
def delete_profile_picture(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    if not employee.profile_picture_path:
        raise HTTPException(status_code=404, detail="No profile picture to delete")
    path = employee.profile_picture_path
    employee.profile_picture_path = None
    db.commit()
    delete_file(path)
    return MessageOut(message="Profile picture deleted successfully")


@router.get("/all", response_model=list[EmployeeWithUserOut])
def list_all_employees(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employees = db.query(Employee).order_by(Employee.created_at.desc()).all()
    return [employee_to_out(e, include_user=True) for e in employees]


@router.get("/{employee_id}", response_model=EmployeeWithUserOut)
def get_employee(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    return employee_to_out(get_employee_or_404(db, employee_id), include_user=True)


@router.get("/{employee_id}/picture")
def get_employee_picture(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    employee = get_employee_or_404(db, employee_id)
    if not file_exists(employee.profile_picture_path):
        raise HTTPException(status_code=404, detail="Profile picture not found")
    return FileResponse(employee.profile_picture_path)


@router.put("/{employee_id}", response_model=EmployeeWithUserOut)
def update_employee(
    employee_id: uuid.UUID,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    apply_profile_update(employee, payload)
    db.commit()
    db.refresh(employee)
    return employee_to_out(employee, include_user=True)


@router.put("/{employee_id}/status", response_model=EmployeeWithUserOut)
def update_onboarding_status(
    employee_id: uuid.UUID,
    payload: OnboardingStatusUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    employee.onboarding_status = payload.onboarding_status
    db.commit()
    db.refresh(employee)
    return employee_to_out(employee, include_user=True)
