"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
Registration and username changes also write the `passwords` table, in
the same transaction, so the username copy there never drifts.
"""

from typing import Optional

import psycopg2

from db.connection import acquire
from db.constraints import default_translator, read_error
from db.errors import WriteError
from db.transaction import run_in_transaction
from models.user import User

_USER_COLUMNS = "user_id, username, email, phone, created_at"


class UserRepository:
    """Repository for the users table and its credential mirror."""

    # ── CREATE ────────────────────────────────────────────

    def register(self, user: User, password: str) -> User:
        """
        Create a user together with its credential.

        Args:
            user: The profile to persist (id and created_at are ignored).
            password: Opaque secret stored with the credential.

        Returns:
            The same User with `id` and `created_at` populated.

        Raises:
            UsernameTakenError: The username is in use.
            EmailTakenError: The email is in use.
            WriteError: Any other failure. Nothing is persisted.
        """
        def work(cur):
            cur.execute(
                """
                INSERT INTO users (username, email, phone)
                VALUES (%s, %s, %s)
                RETURNING user_id, created_at;
                """,
                (user.username, user.email, user.phone),
            )
            user_id, created_at = cur.fetchone()
            cur.execute(
                "INSERT INTO passwords (user_id, username, password) VALUES (%s, %s, %s);",
                (user_id, user.username, password),
            )
            return user_id, created_at

        user.id, user.created_at = run_in_transaction(work, "register user")
        return user

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Fetch a user by id; None if there is no such user."""
        return self._fetch_one("user_id", user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        """Fetch a user by username; None if there is no such user."""
        return self._fetch_one("username", username)

    def get_by_email(self, email: str) -> Optional[User]:
        """Fetch a user by email; None if there is no such user."""
        return self._fetch_one("email", email)

    # ── UPDATE ────────────────────────────────────────────

    def change_username(self, user_id: int, new_username: str) -> None:
        """
        Rename a user in both `users` and `passwords`, atomically.

        Raises:
            UsernameTakenError: Another account already uses the name.
            WriteError: The user does not exist, or any other failure.
                Neither table is changed.
        """
        def work(cur):
            cur.execute(
                "UPDATE users SET username = %s WHERE user_id = %s;",
                (new_username, user_id),
            )
            if cur.rowcount == 0:
                raise WriteError(f"user #{user_id} does not exist")
            cur.execute(
                "UPDATE passwords SET username = %s WHERE user_id = %s;",
                (new_username, user_id),
            )

        run_in_transaction(work, "update username")

    def change_email(self, user_id: int, new_email: str) -> None:
        """
        Raises:
            EmailTakenError: Another account already uses the email.
            WriteError: The user does not exist, or any other failure.
        """
        self._update_column("email", new_email, user_id, "update email")

    def change_phone(self, user_id: int, phone: Optional[str]) -> None:
        self._update_column("phone", phone, user_id, "update phone")

    # ── DELETE ────────────────────────────────────────────

    def delete(self, user_id: int) -> bool:
        """
        Delete a user; credentials, habits, dailies and tasks go with it.

        Returns:
            True if a row was removed. Deleting a missing user is not an error.
        """
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM users WHERE user_id = %s;", (user_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
                return deleted
        except psycopg2.Error as e:
            raise default_translator.translate(e, "delete user") from e

    # ── HELPERS ───────────────────────────────────────────

    def _fetch_one(self, column: str, value) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE {column} = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (value,))
                    row = cur.fetchone()
                    return self._row_to_user(row) if row else None
        except psycopg2.Error as e:
            raise read_error(e, "get user") from e

    def _update_column(self, column: str, value, user_id: int, action: str) -> None:
        sql = f"UPDATE users SET {column} = %s WHERE user_id = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (value, user_id))
                    updated = cur.rowcount > 0
                conn.commit()
        except psycopg2.Error as e:
            raise default_translator.translate(e, action) from e
        if not updated:
            raise WriteError(f"failed to {action}: user #{user_id} does not exist")

    @staticmethod
    def _row_to_user(row: tuple) -> User:
        """Convert a database row tuple to a User domain object."""
        return User(
            id=row[0],
            username=row[1],
            email=row[2],
            phone=row[3],
            created_at=row[4],
        )
