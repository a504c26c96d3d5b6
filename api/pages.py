"""
api/pages.py -- Page handlers and the page -> handler table.

Each handler receives an explicit PageContext (the store-backed managers plus
the gate's outcome) and returns a PageResult. Handlers never write to the
transport themselves; api/routes/pages.py renders the result.

  index         200 {"user": ...}
  login         200 {"user": ...} + sid/stok cookies; 400 on missing fields or
                bad credentials (same response for unknown email and wrong
                password)
  logout        200 + expired sid/stok cookies; deletes the caller's session
  usermodemail  200 {"user": ...}; 400 if missing or taken
  usermodpass   200; 400 if missing

Errors are raised as auth.errors exceptions and rendered by api/main.py.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from api.models import MessageResponse, UserBody, UserResponse
from auth.credentials import CredentialVerifier
from auth.errors import AuthFailure, ValidationError
from auth.gate import GateRequest, Page
from auth.models import CookieDirective, User
from auth.profile import ProfileMutator
from auth.sessions import SessionManager

EMAIL_FIELD = "email"
PASSWORD_FIELD = "pass"


@dataclass
class PageContext:
    request: GateRequest
    sessions: SessionManager
    verifier: CredentialVerifier
    profile: ProfileMutator
    user: User | None = None

    def require_user(self) -> User:
        # The gate guarantees a user for every page except login.
        if self.user is None:
            raise AuthFailure()
        return self.user


@dataclass
class PageResult:
    status_code: int = 200
    body: dict | None = None
    cookies: list[CookieDirective] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)


PageHandler = Callable[[PageContext], PageResult]


def _user_body(user: User) -> dict:
    return UserResponse(user=UserBody.from_user(user)).model_dump()


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def index(ctx: PageContext) -> PageResult:
    return PageResult(body=_user_body(ctx.require_user()))


def login(ctx: PageContext) -> PageResult:
    """Check credentials and open a new session.

    Runs whether or not the request already carried a valid session; a
    successful login always issues a fresh one.
    """
    email = ctx.request.fields.get(EMAIL_FIELD)
    password = ctx.request.fields.get(PASSWORD_FIELD)
    if email is None or password is None:
        raise ValidationError("Fields 'email' and 'pass' are required.")

    user = ctx.verifier.verify(email, password)
    session_id, token = ctx.sessions.create(user)
    return PageResult(
        body=_user_body(user),
        cookies=ctx.sessions.login_cookies(session_id, token),
        headers={"Cache-Control": "no-store"},
    )


def logout(ctx: PageContext) -> PageResult:
    """Delete the session named by the request's own cookies."""
    user = ctx.require_user()
    ctx.sessions.delete(ctx.request.session_id, ctx.request.token, user)
    return PageResult(
        body=MessageResponse(message="Logged out.").model_dump(),
        cookies=ctx.sessions.logout_cookies(),
    )


def modify_email(ctx: PageContext) -> PageResult:
    updated = ctx.profile.change_email(ctx.require_user(), ctx.request.fields.get(EMAIL_FIELD))
    return PageResult(body=_user_body(updated))


def modify_password(ctx: PageContext) -> PageResult:
    ctx.profile.change_password(ctx.require_user(), ctx.request.fields.get(PASSWORD_FIELD))
    return PageResult(body=MessageResponse(message="Password changed.").model_dump())


PAGE_HANDLERS: dict[Page, PageHandler] = {
    Page.INDEX: index,
    Page.LOGIN: login,
    Page.LOGOUT: logout,
    Page.USER_MOD_EMAIL: modify_email,
    Page.USER_MOD_PASS: modify_password,
}
