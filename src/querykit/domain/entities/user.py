"""
User Entity - Registered account stored in the ``users`` table.
"""

# Standard library imports
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

# Local imports
from querykit.infrastructure.database.model import Model


@dataclass
class User(Model):
    """
    A registered user.

    ``id``, ``is_admin`` and ``created_at`` are filled in by the database and
    are deliberately absent from ``fillable``.
    """

    table: ClassVar[str] = "users"
    fillable: ClassVar[tuple[str, ...]] = ("first_name", "last_name", "email", "password")

    first_name: str
    last_name: str
    email: str
    password: str
    id: int | None = None
    is_admin: bool = False
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        # Keep the password hash out of logs and tracebacks
        return f"User(id={self.id!r}, email={self.email!r}, is_admin={self.is_admin!r})"
