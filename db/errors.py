"""
db/errors.py
------------
Error taxonomy for the persistence layer.

Every failure that leaves a repository is one of these types, with the
original driver exception attached as ``cause`` (and chained as
``__cause__``). Callers map them to responses:

    StoreConnectionError / UnreachableStoreError -> store unavailable
    UsernameTakenError / EmailTakenError         -> client error
    WriteError / ReadError                       -> server error
"""

from typing import Optional


class StoreError(Exception):
    """Base class for all persistence errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StoreConnectionError(StoreError):
    """A connection could not be obtained or was lost mid-operation."""


class UnreachableStoreError(StoreConnectionError):
    """The database server could not be reached or pinged at startup."""


class ConflictError(StoreError):
    """
    A write was rejected because it would break a uniqueness invariant.

    Attributes:
        kind: The db.constraints.ConflictKind that was violated.
        constraint: Name of the violated store constraint.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        kind=None,
        constraint: Optional[str] = None,
    ):
        super().__init__(message, cause)
        self.kind = kind
        self.constraint = constraint


class UsernameTakenError(ConflictError):
    """The requested username belongs to another account."""


class EmailTakenError(ConflictError):
    """The requested email belongs to another account."""


class WriteError(StoreError):
    """A write failed for a reason that is not a recognized conflict."""


class ReadError(StoreError):
    """A read query failed (distinct from a row simply not existing)."""


class SchemaError(StoreError):
    """Schema bootstrap failed; the process cannot proceed."""
