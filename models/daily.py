"""
models/daily.py
---------------
Domain model for dailies: tasks that repeat on a schedule.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class Daily:
    """
    Represents a repeating task.

    Attributes:
        id: Database primary key (None for new records).
        user_id: Owner's user id.
        text: Short title.
        note: Optional longer description.
        difficulty: 1 to 5, enforced by the database.
        start_date: First day the daily is active.
        repeat_every: Repeat unit code.
        repeat_every_x: Number of units between repetitions.
        day_weeks: Optional encoded set of weekdays (stored as `dayweeks`).
        streak: Consecutive completions.
    """
    user_id: int
    text: str
    difficulty: int
    repeat_every_x: int
    start_date: date = field(default_factory=date.today)
    note: Optional[str] = None
    repeat_every: int = 0
    day_weeks: Optional[str] = None
    streak: int = 0
    id: Optional[int] = None
