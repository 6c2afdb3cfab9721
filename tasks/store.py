"""
tasks/store.py -- SQLAlchemy Core persistence layer for tasks.

Pattern: Repository + Data Mapper (same as auth/store.py).

Every read and write that targets a single task takes both task_id and
owner_id and puts both in the WHERE clause. A caller that knows another
user's task id gets the same empty result as for an id that does not exist.
There is deliberately no unscoped get/update/delete by id.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TaskStore(database.engine)
    task_id = store.create_task(Task(title="buy milk", owner_id=1))
    store.list_tasks(owner_id=1)
    store.update_task(task_id, owner_id=1, completed=True)
    store.delete_task(task_id, owner_id=1)
"""

from typing import Optional

from sqlalchemy.engine import Engine

from core.database import now_iso, tasks
from tasks.models import Task

# Columns a caller may change. owner and timestamps are not in here.
_MUTABLE_FIELDS = frozenset({"title", "completed"})


class TaskStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_task(self, task: Task) -> int:
        """Insert a task and return its ID. created_at and updated_at are set here."""
        stamp = now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                tasks.insert().values(
                    title=task.title,
                    completed=task.completed,
                    user_id=task.owner_id,
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_task(self, task_id: int, owner_id: int) -> Optional[Task]:
        """Return the task only if it exists and belongs to owner_id."""
        with self.engine.connect() as conn:
            row = conn.execute(
                tasks.select().where((tasks.c.id == task_id) & (tasks.c.user_id == owner_id))
            ).fetchone()
        return _row_to_task(row) if row is not None else None

    def list_tasks(self, owner_id: int) -> list[Task]:
        """Return owner_id's tasks, newest first. id breaks created_at ties."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                tasks.select()
                .where(tasks.c.user_id == owner_id)
                .order_by(tasks.c.created_at.desc(), tasks.c.id.desc())
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def update_task(self, task_id: int, owner_id: int, **fields) -> bool:
        """Update title and/or completed on an owned task.

        Returns True if a row was updated, False if the task does not exist
        or belongs to someone else. Raises ValueError for any other field.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                tasks.update()
                .where((tasks.c.id == task_id) & (tasks.c.user_id == owner_id))
                .values(updated_at=now_iso(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_task(self, task_id: int, owner_id: int) -> bool:
        """Delete an owned task. Returns False if not found or not owned."""
        with self.engine.connect() as conn:
            result = conn.execute(tasks.delete().where((tasks.c.id == task_id) & (tasks.c.user_id == owner_id)))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        completed=bool(row.completed),
        owner_id=row.user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
