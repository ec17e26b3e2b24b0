import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

# Import models so Base.metadata is fully populated for autogenerate
from oms.models.broadcast import Broadcast, BroadcastAttachment, BroadcastRecipient  # noqa: F401
from oms.models.document import Document  # noqa: F401
from oms.models.employee import Employee  # noqa: F401
from oms.models.invitation import Invitation  # noqa: F401
from oms.models.leave import Leave, LeaveAttachment  # noqa: F401
from oms.models.meeting import Meeting, MeetingAgendaItem, MeetingAttendee  # noqa: F401
from oms.models.mentorship import Mentorship, MentorshipGoal, MentorshipNote  # noqa: F401
from oms.models.message import Message  # noqa: F401
from oms.models.notification import Notification  # noqa: F401
from oms.models.onboarding_step import OnboardingStep  # noqa: F401
from oms.models.task import Task, TaskAttachment, TaskReview, TaskUpdate  # noqa: F401
from oms.models.user import User  # noqa: F401
from oms.models.welcome_video import WelcomeVideo  # noqa: F401

from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

from oms.core.config import settings
from oms.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# DATABASE_URL from the environment / .env wins over alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
