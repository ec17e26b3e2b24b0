from oms.models.employee import Employee
from oms.models.user import User
from oms.schemas.common import AttachmentOut, EmployeeSummary, UserSummary


def user_summary(u: User | None) -> UserSummary | None:
    if u is None:
        return None
    return UserSummary(id=str(u.id), email=u.email, role=u.role)


def employee_summary(e: Employee) -> EmployeeSummary:
    return EmployeeSummary(
        id=str(e.id),
        full_name=e.full_name,
        email=e.email,
        department=e.department,
        position=e.position,
    )


def attachment_out(a) -> AttachmentOut:
    # Task, leave and broadcast attachments share the same columns
    return AttachmentOut(id=str(a.id), file_name=a.file_name, uploaded_at=a.uploaded_at)
