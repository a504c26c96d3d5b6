"""Unit tests for auth/credentials.py.

Covers:
- hash_password never stores plaintext and rejects empty / over-long input
- verify_password rejects wrong passwords and malformed hashes
- CredentialVerifier: success returns id + email only
- Enumeration safety: unknown email and wrong password fail identically,
  and both paths pay the bcrypt cost
"""

from unittest.mock import patch

import pytest

from auth import credentials
from auth.credentials import CredentialVerifier, hash_password, verify_password
from auth.errors import AuthFailure, BadCredentials, ValidationError
from auth.models import User


class TestHashing:
    def test_hash_is_not_plaintext(self) -> None:
        hashed = hash_password("hunter2")
        assert hashed != "hunter2"
        assert verify_password("hunter2", hashed)

    def test_wrong_password(self) -> None:
        assert not verify_password("hunter3", hash_password("hunter2"))

    def test_plaintext_stored_value_never_matches(self) -> None:
        """A row holding the raw password (legacy plaintext) must not authenticate."""
        assert not verify_password("hunter2", "hunter2")

    def test_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationError):
            hash_password("")

    def test_over_long_rejected(self) -> None:
        with pytest.raises(ValidationError):
            hash_password("x" * 73)


class TestVerifier:
    def test_success_returns_identity_only(self, store, alice) -> None:
        user = CredentialVerifier(store).verify(alice.email, alice.password)
        assert user == User(id=alice.id, email=alice.email)
        assert not hasattr(user, "password_hash")

    def test_wrong_password(self, store, alice) -> None:
        with pytest.raises(BadCredentials):
            CredentialVerifier(store).verify(alice.email, "not-her-password")

    def test_bad_credentials_is_an_auth_failure(self) -> None:
        assert issubclass(BadCredentials, AuthFailure)

    @pytest.mark.parametrize(
        "email",
        ["nobody@example.com", "ALICE@example.com", "alice@example.org"],
    )
    def test_unknown_email_indistinguishable_from_wrong_password(self, store, alice, email) -> None:
        verifier = CredentialVerifier(store)
        with pytest.raises(AuthFailure) as unknown:
            verifier.verify(email, alice.password)
        with pytest.raises(AuthFailure) as wrong:
            verifier.verify(alice.email, "not-her-password")
        assert type(unknown.value) is type(wrong.value)
        assert unknown.value.to_dict() == wrong.value.to_dict()
        assert unknown.value.status_code == wrong.value.status_code

    def test_unknown_email_still_runs_bcrypt(self, store) -> None:
        with patch.object(credentials, "verify_password", wraps=verify_password) as spy:
            with pytest.raises(BadCredentials):
                CredentialVerifier(store).verify("nobody@example.com", "whatever")
        spy.assert_called_once_with("whatever", credentials._DUMMY_HASH)
