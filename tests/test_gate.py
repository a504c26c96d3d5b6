"""Unit tests for auth/gate.py -- the per-request authorization decision.

The session manager is a MagicMock so each test states exactly what the
cookie pair resolves to, and can assert the store is never consulted for
requests rejected on method or page.
"""

from unittest.mock import MagicMock

import pytest

from auth.errors import AuthFailure, MethodNotAllowed, PageNotFound
from auth.gate import Authenticated, GateRequest, Page, Rejected, Unauthenticated, authorize
from auth.models import User

ALICE = User(id=1, email="alice@example.com")


def _sessions(resolves_to: User | None) -> MagicMock:
    sessions = MagicMock()
    sessions.resolve.return_value = resolves_to
    return sessions


def _request(page_id: str = "index", method: str = "GET", fmt: str | None = "json", **kwargs) -> GateRequest:
    return GateRequest(method=method, page_id=page_id, format=fmt, **kwargs)


class TestAuthorizationMatrix:
    def test_login_without_session_reaches_credential_check(self) -> None:
        decision = authorize(_request("login", "POST"), _sessions(None))
        assert decision == Unauthenticated(Page.LOGIN)

    def test_login_with_session_still_proceeds(self) -> None:
        decision = authorize(_request("login", "POST", session_id=1, token=2), _sessions(ALICE))
        assert decision == Authenticated(Page.LOGIN, ALICE)

    def test_index_without_session_forbidden(self) -> None:
        decision = authorize(_request("index"), _sessions(None))
        assert isinstance(decision, Rejected)
        assert isinstance(decision.error, AuthFailure)
        assert decision.error.status_code == 403

    def test_index_with_session(self) -> None:
        sessions = _sessions(ALICE)
        decision = authorize(_request("index", session_id=5, token=6), sessions)
        assert decision == Authenticated(Page.INDEX, ALICE)
        sessions.resolve.assert_called_once_with(5, 6)

    @pytest.mark.parametrize("page_id", ["logout", "usermodemail", "usermodpass"])
    def test_every_other_page_needs_session(self, page_id: str) -> None:
        decision = authorize(_request(page_id, "POST"), _sessions(None))
        assert isinstance(decision, Rejected)
        assert decision.error.status_code == 403

    @pytest.mark.parametrize("user", [None, ALICE])
    def test_unknown_page_not_found(self, user) -> None:
        sessions = _sessions(user)
        decision = authorize(_request("admin", session_id=1, token=1), sessions)
        assert isinstance(decision, Rejected)
        assert isinstance(decision.error, PageNotFound)
        assert decision.error.status_code == 404
        sessions.resolve.assert_not_called()

    @pytest.mark.parametrize("fmt", [None, "html", "xml"])
    def test_unsupported_format_not_found(self, fmt) -> None:
        decision = authorize(_request("index", fmt=fmt), _sessions(ALICE))
        assert isinstance(decision, Rejected)
        assert isinstance(decision.error, PageNotFound)

    @pytest.mark.parametrize("method", ["DELETE", "PUT", "PATCH", "HEAD", "OPTIONS"])
    def test_unsupported_method(self, method: str) -> None:
        sessions = _sessions(ALICE)
        decision = authorize(_request("index", method), sessions)
        assert isinstance(decision, Rejected)
        assert isinstance(decision.error, MethodNotAllowed)
        assert decision.error.status_code == 405
        sessions.resolve.assert_not_called()

    def test_method_checked_before_page(self) -> None:
        decision = authorize(_request("nosuchpage", "DELETE"), _sessions(None))
        assert isinstance(decision.error, MethodNotAllowed)


def test_page_lookup() -> None:
    assert Page.lookup("usermodpass") is Page.USER_MOD_PASS
    assert Page.lookup("USERMODPASS") is None
    assert Page.lookup("") is None
