"""
db/constraints.py
-----------------
Translates failed writes into the error taxonomy of db/errors.py.

Detection of a uniqueness conflict is delegated to a classifier function
(driver-specific, swappable in tests); the decision of what a conflict
*means* is a plain table from constraint name to ConflictKind. Adding a
new unique constraint only needs a new entry in UNIQUE_CONSTRAINTS.
"""

from enum import Enum
from typing import Callable, Mapping, Optional

import psycopg2

from db.errors import (
    ConflictError,
    EmailTakenError,
    ReadError,
    StoreConnectionError,
    StoreError,
    UsernameTakenError,
    WriteError,
)

UNIQUE_VIOLATION = "23505"


class ConflictKind(Enum):
    """Store-independent categories of uniqueness conflicts."""
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"


UNIQUE_CONSTRAINTS: dict[str, ConflictKind] = {
    "users_username_key": ConflictKind.USERNAME_TAKEN,
    "users_email_key": ConflictKind.EMAIL_TAKEN,
    "passwords_username_key": ConflictKind.USERNAME_TAKEN,
}

_CONFLICT_ERRORS: dict[ConflictKind, tuple[type[ConflictError], str]] = {
    ConflictKind.USERNAME_TAKEN: (UsernameTakenError, "username already exists"),
    ConflictKind.EMAIL_TAKEN: (EmailTakenError, "email already exists"),
}

Classifier = Callable[[BaseException], Optional[str]]


def default_classifier(exc: BaseException) -> Optional[str]:
    """
    Return the violated constraint name if ``exc`` is a unique violation.

    Reads the SQLSTATE and diagnostics that psycopg2 attaches to server
    errors; anything else (including non-driver exceptions) yields None.
    """
    if getattr(exc, "pgcode", None) != UNIQUE_VIOLATION:
        return None
    diag = getattr(exc, "diag", None)
    return getattr(diag, "constraint_name", None)


class ConstraintTranslator:
    """Maps a raw failure to a typed StoreError."""

    def __init__(
        self,
        classifier: Classifier = default_classifier,
        conflicts: Optional[Mapping[str, ConflictKind]] = None,
    ):
        self.classifier = classifier
        self.conflicts = UNIQUE_CONSTRAINTS if conflicts is None else conflicts

    def conflict_kind(self, exc: BaseException) -> Optional[ConflictKind]:
        """Return the ConflictKind for ``exc``, or None if it is not a known conflict."""
        constraint = self.classifier(exc)
        if constraint is None:
            return None
        return self.conflicts.get(constraint)

    def translate(self, exc: BaseException, action: str) -> StoreError:
        """
        Classify ``exc`` raised while performing ``action``.

        Args:
            exc: The exception raised by the driver (or by the work itself).
            action: Short description used in the error message,
                e.g. "insert habit".

        Returns:
            A StoreError subclass instance with ``cause`` set to ``exc``.
            Errors that are already StoreErrors are returned unchanged.
        """
        if isinstance(exc, StoreError):
            return exc

        kind = self.conflict_kind(exc)
        if kind is not None:
            error_cls, message = _CONFLICT_ERRORS[kind]
            return error_cls(
                message, cause=exc, kind=kind, constraint=self.classifier(exc)
            )

        if isinstance(exc, (psycopg2.OperationalError, psycopg2.InterfaceError)):
            return StoreConnectionError(f"store unavailable during {action}", cause=exc)

        return WriteError(f"failed to {action}", cause=exc)


default_translator = ConstraintTranslator()


def read_error(exc: BaseException, action: str) -> StoreError:
    """Classify a failed read: lost connection or ReadError."""
    if isinstance(exc, StoreError):
        return exc
    if isinstance(exc, (psycopg2.OperationalError, psycopg2.InterfaceError)):
        return StoreConnectionError(f"store unavailable during {action}", cause=exc)
    return ReadError(f"failed to {action}", cause=exc)
