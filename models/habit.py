"""
models/habit.py
---------------
Domain model for habits: open-ended behaviours counted as good or bad.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Habit:
    """
    Represents a tracked habit.

    Attributes:
        id: Database primary key (None for new records).
        user_id: Owner's user id.
        text: Short title.
        note: Optional longer description.
        good: Whether the habit can be scored positively.
        bad: Whether the habit can be scored negatively.
        difficulty: 1 (trivial) to 5 (hard), enforced by the database.
        count_reset_after: Days after which the counters reset (0 = never).
        good_count: Times scored positively since the last reset.
        bad_count: Times scored negatively since the last reset.
    """
    user_id: int
    text: str
    difficulty: int
    note: Optional[str] = None
    good: bool = True
    bad: bool = False
    count_reset_after: int = 0
    good_count: int = 0
    bad_count: int = 0
    id: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.text} (+{self.good_count}/-{self.bad_count})"
