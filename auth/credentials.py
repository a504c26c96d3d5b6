"""
auth/credentials.py -- Password hashing and credential verification.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). Cost factor comes
       from Settings.bcrypt_rounds. There is no plaintext fallback anywhere:
       every comparison goes through bcrypt.checkpw, which compares in
       constant time.

  Enumeration safety: CredentialVerifier.verify() raises one BadCredentials
       for both "no such email" and "wrong password", and runs bcrypt against
       _DUMMY_HASH when the email is unknown so response time does not reveal
       whether an account exists.

  The stored hash never leaves this module: verify() returns a User built
       from id and email only.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt

from auth.errors import BadCredentials, ValidationError
from auth.models import User
from core.config import get_settings

if TYPE_CHECKING:
    from auth.store import AuthStore

logger = logging.getLogger("sessiongate.auth")

_settings = get_settings()

# bcrypt only looks at the first 72 bytes and current releases refuse longer
# input outright.
_BCRYPT_MAX_BYTES = 72


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    encoded = plain.encode("utf-8")
    if not encoded:
        raise ValidationError("Password must not be empty.")
    if len(encoded) > _BCRYPT_MAX_BYTES:
        raise ValidationError("Password must be at most 72 bytes.")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=_settings.bcrypt_rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash or an over-long password counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at import so the first unknown-email login is not measurably
# faster than later ones.
_DUMMY_HASH: str = hash_password("sessiongate_timing_dummy")


# ---------------------------------------------------------------------------
# Verifier
# ---------------------------------------------------------------------------


class CredentialVerifier:
    """Checks an email/password pair against the stored hash."""

    def __init__(self, store: AuthStore) -> None:
        self.store = store

    def verify(self, email: str, password: str) -> User:
        """Return the matching User or raise BadCredentials.

        Unknown email and wrong password are indistinguishable to the caller:
        same exception type, same code, same message, same bcrypt cost.
        """
        credentials = self.store.get_credentials(email)
        if credentials is None:
            verify_password(password, _DUMMY_HASH)
            raise BadCredentials()
        if not verify_password(password, credentials.password_hash):
            raise BadCredentials()
        return credentials.to_user()
