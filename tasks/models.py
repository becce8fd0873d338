"""
tasks/models.py -- Domain dataclass for a task.

Pure data container with zero logic. Validation and ownership live in
tasks/service.py; persistence in tasks/store.py.
"""

from __future__ import annotations

from dataclasses import dataclass

TITLE_MAX_LENGTH = 100


@dataclass
class Task:
    """A unit of work owned by exactly one user.

    id is None before the record is written to the database.
    """

    title: str
    description: str
    user_id: int  # owning User.id
    completed: bool = False
    id: int | None = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""
