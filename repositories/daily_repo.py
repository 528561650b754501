"""
repositories/daily_repo.py
---------------------------
Data access layer for dailies (repeating tasks).
The weekday set is stored in the `dayweeks` column.
"""

from typing import Optional

import psycopg2

from db.connection import acquire
from db.constraints import default_translator, read_error
from db.errors import WriteError
from models.daily import Daily

_DAILY_COLUMNS = (
    "id, user_id, text, note, difficulty, start_date, "
    "repeat_every, repeat_every_x, dayweeks, streak"
)


class DailyRepository:
    """Repository for CRUD operations on the dailies table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, daily: Daily) -> Daily:
        """Insert a new daily and return it with its `id` populated."""
        sql = """
            INSERT INTO dailies
                (user_id, text, note, difficulty, start_date,
                 repeat_every, repeat_every_x, dayweeks, streak)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        daily.user_id, daily.text, daily.note, daily.difficulty,
                        daily.start_date, daily.repeat_every, daily.repeat_every_x,
                        daily.day_weeks, daily.streak,
                    ))
                    daily.id = cur.fetchone()[0]
                conn.commit()
            return daily
        except psycopg2.Error as e:
            raise default_translator.translate(e, "insert daily") from e

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, daily_id: int) -> Optional[Daily]:
        sql = f"SELECT {_DAILY_COLUMNS} FROM dailies WHERE id = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (daily_id,))
                    row = cur.fetchone()
                    return self._row_to_daily(row) if row else None
        except psycopg2.Error as e:
            raise read_error(e, "get daily") from e

    def list_by_owner(self, user_id: int) -> list[Daily]:
        sql = f"SELECT {_DAILY_COLUMNS} FROM dailies WHERE user_id = %s ORDER BY id;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (user_id,))
                    return [self._row_to_daily(r) for r in cur.fetchall()]
        except psycopg2.Error as e:
            raise read_error(e, "get dailies") from e

    # ── UPDATE ────────────────────────────────────────────

    def update(self, daily: Daily) -> None:
        """
        Overwrite every mutable field of an existing daily.

        Raises:
            WriteError: The daily does not exist or the update was rejected.
        """
        sql = """
            UPDATE dailies
            SET text = %s, note = %s, difficulty = %s,
                start_date = %s, repeat_every = %s,
                repeat_every_x = %s, dayweeks = %s,
                streak = %s
            WHERE id = %s;
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        daily.text, daily.note, daily.difficulty,
                        daily.start_date, daily.repeat_every,
                        daily.repeat_every_x, daily.day_weeks,
                        daily.streak, daily.id,
                    ))
                    updated = cur.rowcount > 0
                conn.commit()
        except psycopg2.Error as e:
            raise default_translator.translate(e, "update daily") from e
        if not updated:
            raise WriteError(f"failed to update daily: daily #{daily.id} does not exist")

    # ── DELETE ────────────────────────────────────────────

    def delete(self, daily_id: int) -> bool:
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM dailies WHERE id = %s;", (daily_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
                return deleted
        except psycopg2.Error as e:
            raise default_translator.translate(e, "delete daily") from e

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_daily(row: tuple) -> Daily:
        """Convert a database row tuple to a Daily domain object."""
        return Daily(
            id=row[0],
            user_id=row[1],
            text=row[2],
            note=row[3],
            difficulty=row[4],
            start_date=row[5],
            repeat_every=row[6],
            repeat_every_x=row[7],
            day_weeks=row[8],
            streak=row[9],
        )
