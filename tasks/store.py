"""
tasks/store.py -- SQLAlchemy Core persistence layer for tasks.

Pattern: Repository + Data Mapper. TaskStore is the repository; _row_to_task
is the mapper. TaskService never touches SQL directly.

The compound index on (user_id, created_at DESC) serves the owner-scoped,
newest-first listing. id DESC breaks ties between tasks stamped in the same
microsecond so the order stays deterministic.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TaskStore(db)
    task_id = store.create_task(Task(title="Buy milk", description="2%", user_id=1))
    tasks = store.list_for_owner(1)
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Index, Integer, MetaData, String, Table, Text

from core.database import Database
from tasks.models import TITLE_MAX_LENGTH, Task

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_tasks = Table(
    "tasks",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(TITLE_MAX_LENGTH), nullable=False),
    Column("description", Text, nullable=False),
    Column("completed", Boolean, nullable=False, server_default="0"),
    # References users.id. No SQL foreign key: users live in auth/store.py's
    # metadata, and UserService removes a user's tasks before the user.
    Column("user_id", Integer, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

Index("ix_tasks_user_created", _tasks.c.user_id, _tasks.c.created_at.desc())


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TaskStore:
    def __init__(self, db: Database) -> None:
        self.engine = db.engine
        _metadata.create_all(self.engine)

    def create_task(self, task: Task) -> int:
        """Insert a new task and return its assigned database ID."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.insert().values(
                    title=task.title,
                    description=task.description,
                    completed=task.completed,
                    user_id=task.user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_task(self, task_id: int) -> Task | None:
        with self.engine.connect() as conn:
            row = conn.execute(_tasks.select().where(_tasks.c.id == task_id)).fetchone()
        return _row_to_task(row) if row is not None else None

    def list_for_owner(self, user_id: int) -> list[Task]:
        """Return every task owned by user_id, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _tasks.select()
                .where(_tasks.c.user_id == user_id)
                .order_by(_tasks.c.created_at.desc(), _tasks.c.id.desc())
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def update_task(self, task_id: int, **fields) -> bool:
        """Update title / description / completed. Returns False if task_id is unknown."""
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_tasks.update().where(_tasks.c.id == task_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_task(self, task_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_tasks.delete().where(_tasks.c.id == task_id))
            conn.commit()
        return result.rowcount > 0

    def delete_for_owner(self, user_id: int) -> int:
        """Delete all tasks owned by user_id and return how many were removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_tasks.delete().where(_tasks.c.user_id == user_id))
            conn.commit()
        return result.rowcount


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        description=row.description,
        completed=bool(row.completed),
        user_id=row.user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
