"""
auth/errors.py -- Error taxonomy for the authentication core.

Every error carries the HTTP status it maps to and a stable machine-readable
code, so api/main.py can render them all through one exception handler
without an isinstance ladder.

  ValidationError   400  missing/malformed field; raised before any store access
  AuthFailure       403  bad credentials or unresolved session
  Conflict          400  uniqueness violation; stored state unchanged
  PageNotFound      404  unknown page or unsupported response format
  MethodNotAllowed  405  method other than GET/POST
  StoreFailure      500  query/connection failure; fatal for the request only

Messages are deliberately generic: an AuthFailure never says whether the
email exists, and a Conflict never says which account holds an address.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class. Subclasses set status_code, code and a default message."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(GatewayError):
    status_code = 400
    code = "validation_error"
    message = "A required field is missing or malformed."


class AuthFailure(GatewayError):
    status_code = 403
    code = "forbidden"
    message = "Authentication required."


class BadCredentials(AuthFailure):
    """Login failure. Shared by the unknown-email and wrong-password paths."""

    status_code = 400
    code = "bad_credentials"
    message = "Invalid email or password."


class Conflict(GatewayError):
    status_code = 400
    code = "conflict"
    message = "That value is not available."


class RoutingError(GatewayError):
    status_code = 404
    code = "not_found"
    message = "Page not found."


class PageNotFound(RoutingError):
    pass


class MethodNotAllowed(RoutingError):
    status_code = 405
    code = "method_not_allowed"
    message = "Method not allowed."


class StoreFailure(GatewayError):
    status_code = 500
    code = "internal_error"
    message = "An unexpected error occurred."
