from datetime import datetime

from fastapi import HTTPException, status as http_status
from sqlalchemy import func
from sqlalchemy.orm import Session

from oms.core.notifications import create_notification
from oms.models.employee import Employee
from oms.models.task import Task, TaskReview, TaskUpdate
from oms.models.user import User


def apply_overdue(task: Task, now: datetime) -> None:
    if now > task.due_date and task.status != "completed":
        task.status = "overdue"


def create_task(
    *,
    db: Session,
    assigner: User,
    assignee: Employee,
    title: str,
    description: str,
    due_date: datetime,
    now: datetime,
    priority: str = "medium",
    notes: str | None = None,
) -> Task:
    if due_date < now:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="due_date cannot be in the past")

    task = Task(
        title=title,
        description=description,
        assigned_to_employee_id=assignee.id,
        assigned_by_user_id=assigner.id,
        priority=priority,
        status="assigned",
        progress=0,
        notes=notes,
        due_date=due_date,
        start_date=now,
    )
    db.add(task)
    db.flush()

    create_notification(
        db=db,
        recipient_id=assignee.id,
        title="New Task Assigned",
        message=f'You have been assigned "{title}" due {due_date.date().isoformat()}',
        type="task",
        priority=priority,
        action_url="/tasks",
        related_id=task.id,
        related_model="Task",
    )
    return task


def edit_task(task: Task, *, changes: dict) -> Task:
    """Admin edit: plain field assignment, no derivation."""
    for field, value in changes.items():
        setattr(task, field, value)
    return task


def update_progress(
    task: Task,
    *,
    author: User,
    now: datetime,
    progress: int | None = None,
    status: str | None = None,
    notes: str | None = None,
    message: str | None = None,
) -> Task:
    """
    Explicit fields are applied first, then status is derived from progress,
    then the overdue overlay. Derivation may override an explicit status.
    """
    if progress is not None:
        task.progress = progress
    if status:
        task.status = status
    if notes:
        task.notes = notes

    if message:
        task.updates.append(
            TaskUpdate(
                updated_by_user_id=author.id,
                update_date=now,
                message=message,
                progress=progress if progress else task.progress,
            )
        )

    if progress == 100 and task.status != "completed":
        task.status = "review"
    elif progress is not None and progress > 0 and task.status == "assigned":
        task.status = "in-progress"

    apply_overdue(task, now)
    return task


def review_task(
    task: Task,
    *,
    reviewer: User,
    now: datetime,
    feedback: str | None,
    rating: int | None,
) -> Task:
    task.reviews.append(
        TaskReview(
            reviewed_by_user_id=reviewer.id,
            review_date=now,
            feedback=feedback,
            rating=rating,
        )
    )
    if task.status == "review":
        task.status = "completed"
        task.completed_date = now
    return task


def delete_task(db: Session, task: Task) -> list[str]:
    """Deletes the task rows and returns the attachment paths to remove once committed."""
    paths = [a.file_path for a in task.attachments]
    db.delete(task)
    db.flush()
    return paths


def task_stats(db: Session, *, now: datetime) -> dict:
    status_rows = db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
    priority_rows = db.query(Task.priority, func.count(Task.id)).group_by(Task.priority).all()
    overdue = (
        db.query(func.count(Task.id))
        .filter(Task.due_date < now, Task.status != "completed")
        .scalar()
    ) or 0
    total = db.query(func.count(Task.id)).scalar() or 0
    return {
        "status_stats": {s: c for s, c in status_rows},
        "priority_stats": {p: c for p, c in priority_rows},
        "overdue_tasks": overdue,
        "total_tasks": total,
    }
