"""
repositories/credential_repo.py
--------------------------------
Data access layer for the `passwords` table.
Credentials are created and renamed only through UserRepository; this
repository covers authentication lookups and password changes.
"""

from typing import Optional

import psycopg2

from db.connection import acquire
from db.constraints import default_translator, read_error
from db.errors import WriteError
from models.user import Credential


class CredentialRepository:
    """Repository for credential lookups and password updates."""

    def get_by_user_id(self, user_id: int) -> Optional[Credential]:
        return self._fetch_one("user_id", user_id)

    def get_by_username(self, username: str) -> Optional[Credential]:
        """
        Fetch the credential for a login name without touching `users`.

        Returns:
            The Credential, or None if nobody has this username.
        """
        return self._fetch_one("username", username)

    def change_password(self, user_id: int, password: str) -> None:
        """
        Replace a user's password.

        Raises:
            WriteError: The user has no credential, or the update failed.
        """
        sql = "UPDATE passwords SET password = %s WHERE user_id = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (password, user_id))
                    updated = cur.rowcount > 0
                conn.commit()
        except psycopg2.Error as e:
            raise default_translator.translate(e, "update password") from e
        if not updated:
            raise WriteError(f"failed to update password: user #{user_id} does not exist")

    def _fetch_one(self, column: str, value) -> Optional[Credential]:
        sql = f"SELECT user_id, username, password FROM passwords WHERE {column} = %s;"
        try:
            with acquire() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (value,))
                    row = cur.fetchone()
                    return Credential(*row) if row else None
        except psycopg2.Error as e:
            raise read_error(e, "get credential") from e
