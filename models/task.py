"""
models/task.py
--------------
Domain model for one-off tasks ("to-dos").
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class Task:
    """A single task with a deadline."""
    user_id: int
    name: str
    difficulty: int
    deadline: date
    note: Optional[str] = None
    completed: bool = False
    id: Optional[int] = None

    def __str__(self) -> str:
        status = "done" if self.completed else "open"
        return f"[{status}] {self.name} (due {self.deadline})"
