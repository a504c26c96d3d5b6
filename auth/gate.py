"""
auth/gate.py -- Per-request authorization decision.

Every request passes through authorize() before any page handler runs. The
outcome is one of three states:

  Unauthenticated(page)      only reachable for the login page
  Authenticated(page, user)  a session resolved
  Rejected(error)            405 / 404 / 403; no handler runs

Order of checks:
  1. method must be GET or POST                        -> else MethodNotAllowed
  2. page must be known and the format must be json    -> else PageNotFound
  3. resolve the sid/stok cookie pair
  4. login proceeds whatever step 3 produced; it checks credentials itself
  5. any other page needs the user from step 3         -> else AuthFailure

The gate does not distinguish reading pages from mutating ones. Only "is this
the login page" matters.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from auth.errors import AuthFailure, GatewayError, MethodNotAllowed, PageNotFound
from auth.models import User
from auth.sessions import SessionManager

SUPPORTED_METHODS = frozenset({"GET", "POST"})
SUPPORTED_FORMAT = "json"


class Page(str, Enum):
    INDEX = "index"
    LOGIN = "login"
    LOGOUT = "logout"
    USER_MOD_EMAIL = "usermodemail"
    USER_MOD_PASS = "usermodpass"

    @classmethod
    def lookup(cls, page_id: str) -> "Page | None":
        try:
            return cls(page_id)
        except ValueError:
            return None


@dataclass(frozen=True)
class GateRequest:
    """A request as the dispatcher hands it over: already parsed and validated.

    session_id / token are None when the cookie was missing or not an integer.
    fields holds only values that passed validation.
    """

    method: str
    page_id: str
    format: str | None
    session_id: int | None = None
    token: int | None = None
    fields: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Unauthenticated:
    page: Page


@dataclass(frozen=True)
class Authenticated:
    page: Page
    user: User


@dataclass(frozen=True)
class Rejected:
    error: GatewayError


Decision = Union[Unauthenticated, Authenticated, Rejected]


def authorize(request: GateRequest, sessions: SessionManager) -> Decision:
    if request.method.upper() not in SUPPORTED_METHODS:
        return Rejected(MethodNotAllowed())

    page = Page.lookup(request.page_id)
    if page is None or request.format != SUPPORTED_FORMAT:
        return Rejected(PageNotFound())

    user = sessions.resolve(request.session_id, request.token)

    if user is not None:
        return Authenticated(page, user)
    if page is Page.LOGIN:
        return Unauthenticated(page)
    return Rejected(AuthFailure())
