"""
tasks/models.py -- Domain dataclass for a task.

Pure data container. Ownership rules live in tasks/policy.py; persistence in
tasks/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Task:
    """A to-do item belonging to exactly one user.

    owner_id is fixed at creation; the store exposes no way to change it.
    id is None before the record is written to the database.
    """

    title: str
    owner_id: int
    completed: bool = False
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, refreshed on every update
