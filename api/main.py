"""
api/main.py -- FastAPI application entry point for SessionGate.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost; Starlette wraps the most recently
registered middleware outermost):
  1. log_requests          -- one access-log line per request
  2. security_headers      -- nosniff / frame-deny / XSS headers on every response
  3. TrustedHostMiddleware -- rejects requests with unexpected Host headers

Lifespan opens the AuthStore on startup and disposes of it on shutdown. The
store is the only application-level resource; page handlers receive it
explicitly through PageContext rather than reaching for a global.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse
from api.routes.pages import router as pages_router
from auth.errors import GatewayError, StoreFailure
from auth.store import AuthStore
from core.config import Settings, get_settings

_LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}

logger = logging.getLogger("sessiongate.api")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(settings: Settings) -> None:
    """Log to stderr, and additionally to LOG_FILE when one is configured."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=_LOG_FORMAT,
        datefmt=_LOG_DATEFMT,
    )
    if settings.log_file:
        handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT))
        logging.getLogger("sessiongate").addHandler(handler)


settings = get_settings()
configure_logging(settings)

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store on startup; dispose of its connection pool on shutdown."""
    logger.info("SessionGate starting up")
    app.state.store = AuthStore(settings.database_url)
    logger.info("Store initialized")

    yield

    app.state.store.close()
    logger.info("SessionGate shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SessionGate",
    description="Email/password login and cookie sessions in front of a small JSON API.",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in _SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Captures wall-clock time before and after call_next so every response is
# logged with its latency. Cookies and bodies are never logged.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(pages_router, tags=["Pages"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(exclude_none=True),
    )
    for name, value in _SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render any auth.errors exception with its own status and code.

    StoreFailure ends only the current request. The cause is logged; the
    client sees a generic message.
    """
    if isinstance(exc, StoreFailure):
        logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Paths the page router does not match at all (e.g. "/" or "/a/b")."""
    if exc.status_code == 404:
        return _error_response(404, "not_found", "Page not found.")
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")
