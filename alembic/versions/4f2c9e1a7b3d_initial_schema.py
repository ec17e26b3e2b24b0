"""initial schema

Revision ID: 4f2c9e1a7b3d
Revises:
Create Date: 2026-10-19 10:12:44.518203
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "4f2c9e1a7b3d"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _fk(name: str, target: str, *, ondelete: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(), nullable=False))
    return cols


def _attachment_table(name: str, parent_fk: str, parent_table: str) -> None:
    op.create_table(
        name,
        _id(),
        _fk(parent_fk, f"{parent_table}.id", ondelete="CASCADE"),
        sa.Column("file_name", sa.String(300), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
    )
    op.create_index(f"ix_{name}_{parent_fk}", name, [parent_fk])


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("role IN ('employee','admin')", name="ck_users_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "employees",
        _id(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("department", sa.String(200), nullable=True),
        sa.Column("position", sa.String(200), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("emergency_contact_name", sa.String(200), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(50), nullable=True),
        sa.Column("onboarding_status", sa.String(20), nullable=False),
        sa.Column("profile_picture_path", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "onboarding_status IN ('pending','in-progress','completed','rejected')",
            name="ck_employees_onboarding_status",
        ),
    )
    op.create_index("ix_employees_email", "employees", ["email"], unique=True)

    op.create_table(
        "invitations",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("token", sa.String(128), nullable=False, unique=True),
        _fk("invited_by_user_id", "users.id", ondelete="CASCADE"),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint("role IN ('employee','admin')", name="ck_invitations_role"),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"])
    op.create_index("ix_invitations_expires_at", "invitations", ["expires_at"])

    op.create_table(
        "onboarding_steps",
        _id(),
        _fk("employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("step_name", sa.String(200), nullable=False),
        sa.Column("step_description", sa.String(500), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_onboarding_steps_employee_id", "onboarding_steps", ["employee_id"])

    op.create_table(
        "documents",
        _id(),
        _fk("employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("document_type", sa.String(100), nullable=False),
        sa.Column("document_name", sa.String(300), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('pending','approved','rejected')", name="ck_documents_status"),
    )
    op.create_index("ix_documents_employee_id", "documents", ["employee_id"])

    # --- tasks ---
    op.create_table(
        "tasks",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        _fk("assigned_to_employee_id", "employees.id", ondelete="CASCADE"),
        _fk("assigned_by_user_id", "users.id", ondelete="RESTRICT"),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("completed_date", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('assigned','in-progress','review','completed','overdue')",
            name="ck_tasks_status",
        ),
        sa.CheckConstraint("priority IN ('low','medium','high','urgent')", name="ck_tasks_priority"),
        sa.CheckConstraint("progress >= 0 AND progress <= 100", name="ck_tasks_progress_range"),
    )
    op.create_index("ix_tasks_assigned_by_user_id", "tasks", ["assigned_by_user_id"])
    op.create_index("ix_tasks_due_date", "tasks", ["due_date"])
    op.create_index("ix_tasks_assignee_status", "tasks", ["assigned_to_employee_id", "status"])

    _attachment_table("task_attachments", "task_id", "tasks")

    op.create_table(
        "task_reviews",
        _id(),
        _fk("task_id", "tasks.id", ondelete="CASCADE"),
        _fk("reviewed_by_user_id", "users.id", ondelete="SET NULL", nullable=True),
        sa.Column("review_date", sa.DateTime(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_task_reviews_rating"),
    )
    op.create_index("ix_task_reviews_task_id", "task_reviews", ["task_id"])

    op.create_table(
        "task_updates",
        _id(),
        _fk("task_id", "tasks.id", ondelete="CASCADE"),
        _fk("updated_by_user_id", "users.id", ondelete="SET NULL", nullable=True),
        sa.Column("update_date", sa.DateTime(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False),
    )
    op.create_index("ix_task_updates_task_id", "task_updates", ["task_id"])

    # --- leaves ---
    op.create_table(
        "leaves",
        _id(),
        _fk("employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("leave_type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        _fk("reviewed_by_user_id", "users.id", ondelete="SET NULL", nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("review_comments", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "leave_type IN ('sick','vacation','personal','emergency','maternity','paternity')",
            name="ck_leaves_type",
        ),
        sa.CheckConstraint("status IN ('pending','approved','rejected')", name="ck_leaves_status"),
        sa.CheckConstraint("end_date > start_date", name="ck_leaves_date_order"),
    )
    op.create_index("ix_leaves_employee_status", "leaves", ["employee_id", "status"])
    op.create_index("ix_leaves_dates", "leaves", ["start_date", "end_date"])

    _attachment_table("leave_attachments", "leave_id", "leaves")

    # --- meetings ---
    op.create_table(
        "meetings",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _fk("organizer_user_id", "users.id", ondelete="RESTRICT"),
        sa.Column("meeting_date", sa.DateTime(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("meeting_type", sa.String(20), nullable=False),
        sa.Column("location", sa.String(300), nullable=True),
        sa.Column("meeting_link", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('scheduled','in-progress','completed','cancelled')",
            name="ck_meetings_status",
        ),
        sa.CheckConstraint(
            "meeting_type IN ('one-on-one','team','department','all-hands')",
            name="ck_meetings_type",
        ),
    )
    op.create_index("ix_meetings_organizer_date", "meetings", ["organizer_user_id", "meeting_date"])
    op.create_index("ix_meetings_date_status", "meetings", ["meeting_date", "status"])

    op.create_table(
        "meeting_attendees",
        _id(),
        _fk("meeting_id", "meetings.id", ondelete="CASCADE"),
        _fk("employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("response_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("meeting_id", "employee_id", name="uq_meeting_attendee"),
        sa.CheckConstraint("status IN ('pending','accepted','declined')", name="ck_meeting_attendees_status"),
    )
    op.create_index("ix_meeting_attendees_employee_id", "meeting_attendees", ["employee_id"])

    op.create_table(
        "meeting_agenda_items",
        _id(),
        _fk("meeting_id", "meetings.id", ondelete="CASCADE"),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("item", sa.String(300), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
    )
    op.create_index("ix_meeting_agenda_items_meeting_id", "meeting_agenda_items", ["meeting_id"])

    # --- mentorships ---
    op.create_table(
        "mentorships",
        _id(),
        _fk("mentor_employee_id", "employees.id", ondelete="CASCADE"),
        _fk("mentee_employee_id", "employees.id", ondelete="CASCADE"),
        _fk("assigned_by_user_id", "users.id", ondelete="RESTRICT"),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active','completed','paused')", name="ck_mentorships_status"),
        sa.CheckConstraint("mentor_employee_id <> mentee_employee_id", name="ck_mentorships_distinct"),
    )
    # one active mentor per mentee
    op.create_index(
        "uq_mentorships_active_mentee",
        "mentorships",
        ["mentee_employee_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )
    op.create_index("ix_mentorships_mentor_status", "mentorships", ["mentor_employee_id", "status"])

    op.create_table(
        "mentorship_goals",
        _id(),
        _fk("mentorship_id", "mentorships.id", ondelete="CASCADE"),
        sa.Column("goal", sa.String(500), nullable=False),
        sa.Column("target_date", sa.DateTime(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_mentorship_goals_mentorship_id", "mentorship_goals", ["mentorship_id"])

    op.create_table(
        "mentorship_notes",
        _id(),
        _fk("mentorship_id", "mentorships.id", ondelete="CASCADE"),
        sa.Column("note", sa.Text(), nullable=False),
        _fk("added_by_user_id", "users.id", ondelete="SET NULL", nullable=True),
        sa.Column("added_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_mentorship_notes_mentorship_id", "mentorship_notes", ["mentorship_id"])

    # --- broadcasts ---
    op.create_table(
        "broadcasts",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        _fk("sender_user_id", "users.id", ondelete="RESTRICT"),
        sa.Column("broadcast_type", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "broadcast_type IN ('announcement','urgent','general','policy')",
            name="ck_broadcasts_type",
        ),
        sa.CheckConstraint("priority IN ('low','medium','high','urgent')", name="ck_broadcasts_priority"),
    )
    op.create_index("ix_broadcasts_sender_created", "broadcasts", ["sender_user_id", "created_at"])
    op.create_index("ix_broadcasts_type_priority", "broadcasts", ["broadcast_type", "priority"])

    op.create_table(
        "broadcast_recipients",
        _id(),
        _fk("broadcast_id", "broadcasts.id", ondelete="CASCADE"),
        _fk("employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("broadcast_id", "employee_id", name="uq_broadcast_recipient"),
    )
    op.create_index("ix_broadcast_recipients_employee_read", "broadcast_recipients", ["employee_id", "is_read"])

    _attachment_table("broadcast_attachments", "broadcast_id", "broadcasts")

    # --- notifications, messages, welcome videos ---
    op.create_table(
        "notifications",
        _id(),
        _fk("recipient_employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("action_url", sa.String(300), nullable=True),
        sa.Column("related_id", sa.Uuid(), nullable=True),
        sa.Column("related_model", sa.String(20), nullable=True),
        *_timestamps(updated=False),
        sa.CheckConstraint(
            "type IN ('leave','meeting','task','broadcast','mentor','document','general')",
            name="ck_notifications_type",
        ),
        sa.CheckConstraint("priority IN ('low','medium','high','urgent')", name="ck_notifications_priority"),
        sa.CheckConstraint(
            "related_model IS NULL OR related_model IN ('Leave','Meeting','Task','Broadcast','Mentor','Document')",
            name="ck_notifications_related_model",
        ),
    )
    op.create_index(
        "ix_notifications_recipient_read_created",
        "notifications",
        ["recipient_employee_id", "is_read", "created_at"],
    )
    op.create_index("ix_notifications_type_priority", "notifications", ["type", "priority"])

    op.create_table(
        "messages",
        _id(),
        _fk("from_user_id", "users.id", ondelete="CASCADE"),
        _fk("to_user_id", "users.id", ondelete="CASCADE"),
        _fk("employee_id", "employees.id", ondelete="CASCADE"),
        sa.Column("subject", sa.String(300), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        _fk("parent_message_id", "messages.id", ondelete="SET NULL", nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_messages_from_user_id", "messages", ["from_user_id"])
    op.create_index("ix_messages_to_user_id", "messages", ["to_user_id"])
    op.create_index("ix_messages_employee_id", "messages", ["employee_id"])

    op.create_table(
        "welcome_videos",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("youtube_url", sa.String(500), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _fk("created_by_user_id", "users.id", ondelete="RESTRICT"),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "welcome_videos",
        "messages",
        "notifications",
        "broadcast_attachments",
        "broadcast_recipients",
        "broadcasts",
        "mentorship_notes",
        "mentorship_goals",
        "mentorships",
        "meeting_agenda_items",
        "meeting_attendees",
        "meetings",
        "leave_attachments",
        "leaves",
        "task_updates",
        "task_reviews",
        "task_attachments",
        "tasks",
        "documents",
        "onboarding_steps",
        "invitations",
        "employees",
        "users",
    ):
        op.drop_table(table)
