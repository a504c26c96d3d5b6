"""
auth/profile.py -- Email and password changes for an authenticated user.

Callers must already hold a User from the authorization gate; nothing here
re-checks the session. Each change is a single UPDATE and emits one audit
event, actor = the email the user had before the change.

Missing values are rejected with ValidationError before the store is touched.
"""

from __future__ import annotations

from auth import audit
from auth.credentials import hash_password
from auth.errors import Conflict, ValidationError
from auth.models import User
from auth.store import AuthStore


class ProfileMutator:
    def __init__(self, store: AuthStore) -> None:
        self.store = store

    def change_email(self, user: User, new_email: str | None) -> User:
        """Move user to new_email. Raises Conflict if another account holds it.

        On conflict the stored email is unchanged and the error does not say
        which account owns the address.
        """
        if not new_email:
            raise ValidationError("Field 'email' is required.")
        if not self.store.update_email(user.id, new_email):
            raise Conflict("That email address is not available.")
        audit.record(user.email, audit.CHANGED_EMAIL, new_email=new_email)
        return User(id=user.id, email=new_email)

    def change_password(self, user: User, new_password: str | None) -> None:
        if not new_password:
            raise ValidationError("Field 'pass' is required.")
        self.store.update_hash(user.id, hash_password(new_password))
        audit.record(user.email, audit.CHANGED_PASSWORD)
