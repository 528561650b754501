"""
repositories/task_repo.py
--------------------------
Data access layer for one-off tasks.
"""

from typing import Optional

import psycopg2

from db.connection import acquire
from db.constraints import default_translator, read_error
from db.errors import WriteError
from models.task import Task

_TASK_COLUMNS = "id, user_id, name, note, difficulty, deadline, completed"


class TaskRepository:
    """Repository for CRUD operations on the tasks table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, task: Task) -> Task:
        """Insert a new task and return it with its `id` populated."""
        sql = """
            INSERT INTO tasks (user_id, name, note, difficulty, deadline, completed)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        task.user_id, task.name, task.note,
                        task.difficulty, task.deadline, task.completed,
                    ))
                    task.id = cur.fetchone()[0]
                conn.commit()
            return task
        except psycopg2.Error as e:
            raise default_translator.translate(e, "insert task") from e

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, task_id: int) -> Optional[Task]:
        sql = f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (task_id,))
                    row = cur.fetchone()
                    return self._row_to_task(row) if row else None
        except psycopg2.Error as e:
            raise read_error(e, "get task") from e

    def list_by_owner(self, user_id: int) -> list[Task]:
        sql = f"SELECT {_TASK_COLUMNS} FROM tasks WHERE user_id = %s ORDER BY id;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (user_id,))
                    return [self._row_to_task(r) for r in cur.fetchall()]
        except psycopg2.Error as e:
            raise read_error(e, "get tasks") from e

    # ── UPDATE ────────────────────────────────────────────

    def update(self, task: Task) -> None:
        """
        Overwrite every mutable field of an existing task.

        Raises:
            WriteError: The task does not exist or the update was rejected.
        """
        sql = """
            UPDATE tasks
            SET name = %s, note = %s, difficulty = %s,
                deadline = %s, completed = %s
            WHERE id = %s;
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (
                        task.name, task.note, task.difficulty,
                        task.deadline, task.completed, task.id,
                    ))
                    updated = cur.rowcount > 0
                conn.commit()
        except psycopg2.Error as e:
            raise default_translator.translate(e, "update task") from e
        if not updated:
            raise WriteError(f"failed to update task: task #{task.id} does not exist")

    # ── DELETE ────────────────────────────────────────────

    def delete(self, task_id: int) -> bool:
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM tasks WHERE id = %s;", (task_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
                return deleted
        except psycopg2.Error as e:
            raise default_translator.translate(e, "delete task") from e

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_task(row: tuple) -> Task:
        """Convert a database row tuple to a Task domain object."""
        return Task(
            id=row[0],
            user_id=row[1],
            name=row[2],
            note=row[3],
            difficulty=row[4],
            deadline=row[5],
            completed=row[6],
        )
