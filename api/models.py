"""
API response models for SessionGate.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Page handlers map between the two.
"""


from pydantic import BaseModel, ConfigDict

from auth.models import User

# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserBody(BaseModel):
    """Public view of a user. There is deliberately no hash field."""

    model_config = ConfigDict(frozen=True)

    email: str
    id: int

    @classmethod
    def from_user(cls, user: User) -> "UserBody":
        return cls(email=user.email, id=user.id)


class UserResponse(BaseModel):
    """Body of index, login, and usermodemail: {"user": {"email", "id"}}."""

    user: UserBody


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Uniform error envelope: {"error": {"code", "message"}}."""

    error: ErrorDetail
