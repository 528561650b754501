"""
repositories/habit_repo.py
---------------------------
Data access layer for habits.
All SQL queries related to the `habits` table live here.
"""

from typing import Optional

import psycopg2

from db.connection import acquire
from db.constraints import default_translator, read_error
from db.errors import WriteError
from models.habit import Habit

_HABIT_COLUMNS = (
    "id, user_id, text, note, good, bad, difficulty, "
    "count_reset_after, good_count, bad_count"
)


class HabitRepository:
    """Repository for CRUD operations on the habits table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, habit: Habit) -> Habit:
        """
        Insert a new habit.

        Args:
            habit: The Habit to persist.

        Returns:
            The same object with its `id` populated.

        Raises:
            WriteError: E.g. difficulty out of range or unknown owner.
        """
        sql = """
            INSERT INTO habits
                (user_id, text, note, good, bad, difficulty,
                 count_reset_after, good_count, bad_count)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        habit.user_id, habit.text, habit.note,
                        habit.good, habit.bad, habit.difficulty,
                        habit.count_reset_after, habit.good_count, habit.bad_count,
                    ))
                    habit.id = cur.fetchone()[0]
                conn.commit()
            return habit
        except psycopg2.Error as e:
            raise default_translator.translate(e, "insert habit") from e

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Fetch a single habit; None if it does not exist."""
        sql = f"SELECT {_HABIT_COLUMNS} FROM habits WHERE id = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (habit_id,))
                    row = cur.fetchone()
                    return self._row_to_habit(row) if row else None
        except psycopg2.Error as e:
            raise read_error(e, "get habit") from e

    def list_by_owner(self, user_id: int) -> list[Habit]:
        """All habits of a user, oldest first. Empty if there are none."""
        sql = f"SELECT {_HABIT_COLUMNS} FROM habits WHERE user_id = %s ORDER BY id;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (user_id,))
                    return [self._row_to_habit(r) for r in cur.fetchall()]
        except psycopg2.Error as e:
            raise read_error(e, "get habits") from e

    # ── UPDATE ────────────────────────────────────────────

    def update(self, habit: Habit) -> None:
        """
        Overwrite every mutable field of an existing habit.
        The owner is not changed.

        Raises:
            WriteError: The habit does not exist or the update was rejected.
        """
        sql = """
            UPDATE habits
            SET text = %s, note = %s, good = %s, bad = %s,
                difficulty = %s, count_reset_after = %s,
                good_count = %s, bad_count = %s
            WHERE id = %s;
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        habit.text, habit.note, habit.good, habit.bad,
                        habit.difficulty, habit.count_reset_after,
                        habit.good_count, habit.bad_count, habit.id,
                    ))
                    updated = cur.rowcount > 0
                conn.commit()
        except psycopg2.Error as e:
            raise default_translator.translate(e, "update habit") from e
        if not updated:
            raise WriteError(f"failed to update habit: habit #{habit.id} does not exist")

    # ── DELETE ────────────────────────────────────────────

    def delete(self, habit_id: int) -> bool:
        """Delete a habit. Returns False (not an error) if it was already gone."""
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM habits WHERE id = %s;", (habit_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
                return deleted
        except psycopg2.Error as e:
            raise default_translator.translate(e, "delete habit") from e

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_habit(row: tuple) -> Habit:
        """Convert a database row tuple to a Habit domain object."""
        return Habit(
            id=row[0],
            user_id=row[1],
            text=row[2],
            note=row[3],
            good=row[4],
            bad=row[5],
            difficulty=row[6],
            count_reset_after=row[7],
            good_count=row[8],
            bad_count=row[9],
        )
