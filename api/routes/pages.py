"""
api/routes/pages.py -- Request dispatcher and response encoder for JSON pages.

Routes:
  ANY /{page}.{format}   -- e.g. GET /index.json, POST /login.json

Every method is routed here (not just GET/POST) so the authorization gate,
not the framework, decides on 405 for unsupported methods.

Dispatcher duties before the gate runs:
  - split "<page>.<format>" from the path
  - integer-parse the sid (signed 64-bit) and stok (0 to 2**63-1) cookies;
    anything else counts as an absent cookie
  - collect fields from the query string and, for POST, the form or JSON
    body; keep only values that validate ("email" must look like an address,
    "pass" must be non-empty). Invalid values count as absent.

Encoder duties after the handler runs:
  - JSON body, status code, extra headers
  - one raw Set-Cookie header per CookieDirective, in the fixed wire shape
"""

from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.pages import PAGE_HANDLERS, PageContext, PageResult
from auth.credentials import CredentialVerifier
from auth.errors import PageNotFound
from auth.gate import Authenticated, GateRequest, Rejected, authorize
from auth.profile import ProfileMutator
from auth.sessions import SESSION_ID_COOKIE, SESSION_TOKEN_COOKIE, SessionManager
from auth.store import AuthStore
from core.config import get_settings

logger = logging.getLogger("sessiongate.api")

router = APIRouter()

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_EMAIL_MAX_LENGTH = 254
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


# ---------------------------------------------------------------------------
# Parsing and validation
# ---------------------------------------------------------------------------


def split_page_path(page_path: str) -> tuple[str, str | None]:
    """Split "index.json" into ("index", "json"). No suffix -> (page, None)."""
    page_id, dot, suffix = page_path.rpartition(".")
    if not dot:
        return page_path, None
    return page_id, suffix.lower()


def parse_int_cookie(raw: str | None, lo: int, hi: int) -> int | None:
    if raw is None:
        return None
    raw = raw.strip()
    if not re.fullmatch(r"[+-]?\d+", raw):
        return None
    value = int(raw)
    if value < lo or value > hi:
        return None
    return value


def clean_email(value) -> str | None:
    """Return the lower-cased address, or None if it does not look like one."""
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    if len(value) > _EMAIL_MAX_LENGTH or not _EMAIL_RE.match(value):
        return None
    return value


def clean_password(value) -> str | None:
    if not isinstance(value, str) or value == "":
        return None
    return value


_FIELD_VALIDATORS = {
    "email": clean_email,
    "pass": clean_password,
}


def validate_fields(raw: dict) -> dict[str, str]:
    """Keep only known fields whose values validate."""
    fields: dict[str, str] = {}
    for name, validator in _FIELD_VALIDATORS.items():
        if name not in raw:
            continue
        cleaned = validator(raw[name])
        if cleaned is not None:
            fields[name] = cleaned
    return fields


async def _read_fields(request: Request) -> dict:
    raw: dict = dict(request.query_params)
    if request.method != "POST":
        return raw
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        # An unparseable body contributes no fields; the handler then
        # reports the missing ones.
        try:
            body = await request.json()
        except ValueError:
            logger.debug("Ignoring malformed JSON body on %s", request.url.path)
            return raw
        if isinstance(body, dict):
            raw.update(body)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        raw.update({k: v for k, v in form.items() if isinstance(v, str)})
    return raw


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render(result: PageResult) -> JSONResponse:
    response = JSONResponse(status_code=result.status_code, content=result.body or {})
    for name, value in result.headers.items():
        response.headers[name] = value
    for cookie in result.cookies:
        response.headers.append("set-cookie", cookie.header())
    return response


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------


@router.api_route("/{page_path}", methods=_ALL_METHODS, include_in_schema=False)
async def dispatch(request: Request, page_path: str) -> JSONResponse:
    """Run one page request through the gate and its handler."""
    settings = get_settings()
    store: AuthStore = request.app.state.store

    page_id, fmt = split_page_path(page_path)
    gate_request = GateRequest(
        method=request.method,
        page_id=page_id,
        format=fmt,
        session_id=parse_int_cookie(request.cookies.get(SESSION_ID_COOKIE), _INT64_MIN, _INT64_MAX),
        token=parse_int_cookie(request.cookies.get(SESSION_TOKEN_COOKIE), 0, _INT64_MAX),
        fields=validate_fields(await _read_fields(request)) if request.method in ("GET", "POST") else {},
    )

    sessions = SessionManager(
        store,
        secure_cookies=settings.secure_cookies,
        cookie_days=settings.session_cookie_days,
    )
    decision = authorize(gate_request, sessions)
    if isinstance(decision, Rejected):
        raise decision.error

    handler = PAGE_HANDLERS.get(decision.page)
    if handler is None:
        raise PageNotFound()

    ctx = PageContext(
        request=gate_request,
        sessions=sessions,
        verifier=CredentialVerifier(store),
        profile=ProfileMutator(store),
        user=decision.user if isinstance(decision, Authenticated) else None,
    )
    return render(handler(ctx))
