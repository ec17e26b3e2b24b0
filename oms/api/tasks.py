import uuid

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from oms.api.serializers import attachment_out, employee_summary, user_summary
from oms.core.access import get_current_employee, get_employee_for_user, get_employee_or_404
from oms.core.clock import Clock, get_clock
from oms.core.notifications import create_notification
from oms.core.rbac import Role, is_admin, require_roles
from oms.core.security import get_current_user
from oms.core.storage import TASK_POLICY, delete_file, file_exists, save_upload
from oms.core.tasks import create_task, delete_task, edit_task, review_task, task_stats, update_progress
from oms.db.session import get_db
from oms.models.employee import Employee
from oms.models.task import Task, TaskAttachment
from oms.models.user import User
from oms.schemas.common import MessageOut
from oms.schemas.pagination import PaginatedResponse, paginate
from oms.schemas.task import (
    AttachmentUploaded,
    ProgressUpdate,
    TaskCreate,
    TaskOut,
    TaskPriority,
    TaskReviewOut,
    TaskReviewRequest,
    TaskStatsOut,
    TaskStatus,
    TaskUpdateOut,
    TaskUpdateRequest,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])

# Columns an admin edit may null out
NULLABLE_EDIT_FIELDS = {"notes"}


def task_to_out(t: Task) -> TaskOut:
    return TaskOut(
        id=str(t.id),
        title=t.title,
        description=t.description,
        assigned_to=employee_summary(t.assigned_to),
        assigned_by=user_summary(t.assigned_by),
        priority=t.priority,
        status=t.status,
        progress=t.progress,
        notes=t.notes,
        due_date=t.due_date,
        start_date=t.start_date,
        completed_date=t.completed_date,
        attachments=[attachment_out(a) for a in t.attachments],
        reviews=[
            TaskReviewOut(
                id=str(r.id),
                reviewed_by=user_summary(r.reviewed_by),
                review_date=r.review_date,
                feedback=r.feedback,
                rating=r.rating,
            )
            for r in t.reviews
        ],
        updates=[
            TaskUpdateOut(
                id=str(u.id),
                updated_by=user_summary(u.updated_by),
                update_date=u.update_date,
                message=u.message,
                progress=u.progress,
            )
            for u in t.updates
        ],
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def get_task_or_404(db: Session, task_id: uuid.UUID) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def get_assigned_task(db: Session, task_id: uuid.UUID, employee: Employee) -> Task:
    task = (
        db.query(Task)
        .filter(Task.id == task_id, Task.assigned_to_employee_id == employee.id)
        .one_or_none()
    )
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def get_visible_task(db: Session, task_id: uuid.UUID, user: User) -> Task:
    """Admins see any task; everyone else only tasks assigned to them."""
    if is_admin(user):
        return get_task_or_404(db, task_id)
    employee = get_employee_for_user(db, user)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee profile not found")
    return get_assigned_task(db, task_id, employee)


@router.get("/my-tasks", response_model=PaginatedResponse[TaskOut])
def my_tasks(
    status: TaskStatus | None = Query(default=None, description="Filter by status"),
    priority: TaskPriority | None = Query(default=None, description="Filter by priority"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    query = db.query(Task).filter(Task.assigned_to_employee_id == employee.id)
    if status:
        query = query.filter(Task.status == status)
    if priority:
        query = query.filter(Task.priority == priority)

    total = query.count()
    tasks = query.order_by(Task.due_date.asc(), Task.created_at.desc()).offset(offset).limit(limit).all()
    return paginate([task_to_out(t) for t in tasks], total=total, limit=limit, offset=offset)


@router.get("/stats/overview", response_model=TaskStatsOut)
def stats_overview(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    return TaskStatsOut(**task_stats(db, now=clock.now()))


@router.get("", response_model=PaginatedResponse[TaskOut])
def list_tasks(
    status: TaskStatus | None = Query(default=None, description="Filter by status"),
    priority: TaskPriority | None = Query(default=None, description="Filter by priority"),
    assigned_to: uuid.UUID | None = Query(default=None, description="Filter by assignee employee ID"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    query = db.query(Task)
    if status:
        query = query.filter(Task.status == status)
    if priority:
        query = query.filter(Task.priority == priority)
    if assigned_to:
        query = query.filter(Task.assigned_to_employee_id == assigned_to)

    total = query.count()
    tasks = query.order_by(Task.created_at.desc()).offset(offset).limit(limit).all()
    return paginate([task_to_out(t) for t in tasks], total=total, limit=limit, offset=offset)


@router.post("", response_model=TaskOut, status_code=201)
def create(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    assignee = get_employee_or_404(db, payload.assigned_to)
    task = create_task(
        db=db,
        assigner=current_user,
        assignee=assignee,
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        priority=payload.priority,
        notes=payload.notes,
        now=clock.now(),
    )
    db.commit()
    db.refresh(task)
    return task_to_out(task)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_to_out(get_visible_task(db, task_id, current_user))


@router.put("/{task_id}/progress", response_model=TaskOut)
def progress(
    task_id: uuid.UUID,
    payload: ProgressUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
    employee: Employee = Depends(get_current_employee),
):
    """
    Assignee progress report. Status is re-derived from progress afterwards:
    100 moves the task to review, any progress moves an assigned task to
    in-progress, and a past due date marks it overdue.
    """
    task = get_assigned_task(db, task_id, employee)
    update_progress(
        task,
        author=current_user,
        now=clock.now(),
        progress=payload.progress,
        status=payload.status,
        notes=payload.notes,
        message=payload.message,
    )
    db.commit()
    db.refresh(task)
    return task_to_out(task)


@router.post("/{task_id}/attachments", response_model=AttachmentUploaded)
def upload_attachment(
    task_id: uuid.UUID,
    attachment: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    employee: Employee = Depends(get_current_employee),
):
    task = get_assigned_task(db, task_id, employee)
    if attachment is None or not attachment.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    path = save_upload(TASK_POLICY, attachment)
    att = TaskAttachment(file_name=attachment.filename, file_path=path, uploaded_at=clock.now())
    task.attachments.append(att)
    try:
        db.commit()
    except Exception:
        delete_file(path)
        raise
    return AttachmentUploaded(message="Attachment uploaded successfully", attachment=attachment_out(att))


@router.get("/{task_id}/attachments/{attachment_id}")
def download_attachment(
    task_id: uuid.UUID,
    attachment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = get_visible_task(db, task_id, current_user)
    att = next((a for a in task.attachments if a.id == attachment_id), None)
    if not att:
        raise HTTPException(status_code=404, detail="Attachment not found")
    if not file_exists(att.file_path):
        raise HTTPException(status_code=404, detail="File not found on server")
    return FileResponse(att.file_path, filename=att.file_name)


@router.put("/{task_id}", response_model=TaskOut)
def update(
    task_id: uuid.UUID,
    payload: TaskUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    task = get_task_or_404(db, task_id)
    changes = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_EDIT_FIELDS
    }
    edit_task(task, changes=changes)
    db.commit()
    db.refresh(task)
    return task_to_out(task)


@router.post("/{task_id}/review", response_model=TaskOut)
def review(
    task_id: uuid.UUID,
    payload: TaskReviewRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    task = get_task_or_404(db, task_id)
    review_task(task, reviewer=current_user, now=clock.now(), feedback=payload.feedback, rating=payload.rating)
    create_notification(
        db=db,
        recipient_id=task.assigned_to_employee_id,
        title="Task Reviewed",
        message=f'Your task "{task.title}" has been reviewed',
        type="task",
        priority="medium",
        action_url="/tasks",
        related_id=task.id,
        related_model="Task",
    )
    db.commit()
    db.refresh(task)
    return task_to_out(task)


@router.delete("/{task_id}", response_model=MessageOut)
def delete(
    task_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    task = get_task_or_404(db, task_id)
    paths = delete_task(db, task)
    db.commit()
    for path in paths:
        delete_file(path)
    return MessageOut(message="Task deleted successfully")
