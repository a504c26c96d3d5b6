"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost no logic). Stores and
managers do the work; these own the domain shape.

User is the outward identity: id and email only. UserCredentials adds the
password hash and is only ever handed from the store to the credential
verifier -- nothing else should hold one.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime


@dataclass(frozen=True)
class User:
    """An authenticated identity. Safe to render in responses and logs."""

    id: int
    email: str


@dataclass(frozen=True)
class UserCredentials:
    """A user row together with its stored bcrypt hash."""

    id: int
    email: str
    password_hash: str

    def to_user(self) -> User:
        return User(id=self.id, email=self.email)


@dataclass(frozen=True)
class CookieDirective:
    """One Set-Cookie header value.

    Rendered by header() in the fixed wire shape:
        name=value; HttpOnly; path=/; expires=<RFC 1123 date>[; secure]
    """

    name: str
    value: str
    expires: datetime  # timezone-aware UTC
    secure: bool = False
    path: str = "/"

    def header(self) -> str:
        parts = [
            f"{self.name}={self.value}",
            "HttpOnly",
            f"path={self.path}",
            f"expires={format_datetime(self.expires, usegmt=True)}",
        ]
        if self.secure:
            parts.append("secure")
        return "; ".join(parts)
