"""
models/user.py
--------------
Domain models for accounts: the public profile and its login credential.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """
    Represents an account profile.

    Attributes:
        id: Database primary key (None for new records).
        username: Unique login name, mirrored in the credential record.
        email: Unique contact address.
        phone: Optional phone number.
        created_at: Set by the database on registration, never updated.
    """
    username: str
    email: str
    phone: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"#{self.id} {self.username} <{self.email}>"


@dataclass
class Credential:
    """
    Login secret for a user, keyed by the user's id.

    The username is a copy of User.username so authentication can look a
    credential up by name without reading the profile.
    """
    user_id: int
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credential(user_id={self.user_id!r}, username={self.username!r}, password='***')"
