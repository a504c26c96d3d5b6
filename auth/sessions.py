"""
auth/sessions.py -- Session lifecycle and session cookies.

A session is a row binding a random token to a user. The client holds two
cookies, sid (the row id) and stok (the token); both must match to resolve
the session, and deleting it additionally requires the owner's id.

Tokens: secrets.randbits(63) gives a positive value that fits a signed
64-bit column and cookie, drawn from the OS CSPRNG.

Lifetime: the server keeps no expiry. A session is live exactly as long as
its row exists; logout hard-deletes the row. The only time bound is the
client-side cookie expiry set at login (Settings.session_cookie_days).
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from auth import audit
from auth.models import CookieDirective, User
from auth.store import AuthStore

logger = logging.getLogger("sessiongate.auth")

SESSION_ID_COOKIE = "sid"
SESSION_TOKEN_COOKIE = "stok"

_TOKEN_BITS = 63
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

# Session ids and tokens are stored as signed 64-bit integers.
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def generate_token() -> int:
    return secrets.randbits(_TOKEN_BITS)


def _storable(*values: int | None) -> bool:
    return all(v is not None and _INT64_MIN <= v <= _INT64_MAX for v in values)


class SessionManager:
    """Creates, resolves and deletes sessions; builds the matching cookies.

    secure_cookies and cookie_days are deployment settings, fixed for the
    lifetime of the manager.
    """

    def __init__(self, store: AuthStore, secure_cookies: bool = False, cookie_days: int = 365) -> None:
        self.store = store
        self.secure_cookies = secure_cookies
        self.cookie_days = cookie_days

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, user: User) -> tuple[int, int]:
        """Open a new session for user. Returns (session_id, token)."""
        token = generate_token()
        session_id = self.store.create_session(token, user.id)
        audit.record(user.email, audit.NEW_SESSION)
        return session_id, token

    def resolve(self, session_id: int | None, token: int | None) -> User | None:
        """Return the session's owner, or None.

        A missing cookie (None), or a value no session row could hold,
        short-circuits without touching the store.
        """
        if not _storable(session_id, token):
            return None
        return self.store.find_session_user(session_id, token)

    def delete(self, session_id: int | None, token: int | None, owner: User) -> int:
        """Delete the session if id, token and owner all match. Returns rows removed.

        Idempotent: deleting a session that is already gone, or one owned by
        someone else, removes nothing and is not an error.
        """
        if not _storable(session_id, token):
            return 0
        deleted = self.store.delete_session(session_id, token, owner.id)
        if deleted:
            audit.record(owner.email, audit.SESSION_DELETED)
        else:
            logger.debug("No session %d to delete for user %d", session_id, owner.id)
        return deleted

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def login_cookies(self, session_id: int, token: int, now: datetime | None = None) -> list[CookieDirective]:
        """Cookies that hand a new session to the client."""
        now = now or datetime.now(timezone.utc)
        expires = (now + timedelta(days=self.cookie_days)).astimezone(timezone.utc)
        return [
            CookieDirective(SESSION_TOKEN_COOKIE, str(token), expires, secure=self.secure_cookies),
            CookieDirective(SESSION_ID_COOKIE, str(session_id), expires, secure=self.secure_cookies),
        ]

    def logout_cookies(self) -> list[CookieDirective]:
        """Cookies that make the client drop its session immediately."""
        return [
            CookieDirective(SESSION_TOKEN_COOKIE, "", _EPOCH, secure=self.secure_cookies),
            CookieDirective(SESSION_ID_COOKIE, "", _EPOCH, secure=self.secure_cookies),
        ]
