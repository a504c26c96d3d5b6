"""
auth/store.py -- SQLAlchemy Core persistence layer for users and sessions.

Pattern: Repository + Data Mapper. AuthStore is the repository, one method
per logical query the core needs; _row_to_user / _row_to_credentials are the
mappers. Managers, handlers and the CLI never touch SQL directly.

  find_session_user   (session_id, token)            -> User | None
  create_session      (token, user_id)                -> session id
  delete_session      (session_id, token, owner_id)   -> rows affected (0/1)
  get_user            (user_id)                       -> User | None
  get_credentials     (email)                         -> UserCredentials | None
  update_email        (user_id, email)                -> False on uniqueness conflict
  update_hash         (user_id, password_hash)        -> None
  create_user         (email, password_hash)          -> user id (provisioning)

Security:
  All queries use bound parameters. No f-strings in SQL.
  The password hash only leaves this module inside UserCredentials.

Failure model:
  Each method is exactly one statement in its own connection. Any
  SQLAlchemyError that is not an expected uniqueness conflict is re-raised as
  StoreFailure, which ends the request with a 500. Nothing is retried.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import (
    BigInteger,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    select,
)
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import Conflict, StoreFailure
from auth.models import User, UserCredentials

logger = logging.getLogger("sessiongate.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(254), nullable=False, unique=True),
    Column("hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

_sessions = Table(
    "sessions",
    _metadata,
    # Integer (not BigInteger) so SQLite makes it the rowid alias.
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("token", BigInteger, nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journaling and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _ensure_sqlite_dir(db_url: str) -> None:
    url = make_url(db_url)
    database = url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuthStore:
    """Repository for User and Session rows.

    Usage:
        store = AuthStore("sqlite:///data/sessiongate.db")
        uid = store.create_user("alice@example.com", hash_password("secret"))
        sid = store.create_session(token, uid)
        user = store.find_session_user(sid, token)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        is_sqlite = db_url.startswith("sqlite")
        if is_sqlite:
            connect_args["check_same_thread"] = False
            _ensure_sqlite_dir(db_url)
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if is_sqlite:
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        try:
            _metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreFailure("Could not initialize the database.") from exc

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        """Yield a connection; translate driver/query errors into StoreFailure."""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            logger.error("Store operation failed: %s", exc.__class__.__name__)
            raise StoreFailure() from exc

    # ------------------------------------------------------------------
    # Session queries
    # ------------------------------------------------------------------

    def find_session_user(self, session_id: int, token: int) -> User | None:
        """Return the owner of the session matching both id and token, or None.

        (id, token) is unique by construction (id is the primary key), so at
        most one row can match.
        """
        query = (
            select(_users.c.id, _users.c.email)
            .select_from(_sessions.join(_users, _users.c.id == _sessions.c.user_id))
            .where((_sessions.c.id == session_id) & (_sessions.c.token == token))
        )
        with self._connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_user(row) if row is not None else None

    def create_session(self, token: int, user_id: int) -> int:
        """Insert a session row and return its store-assigned id."""
        with self._connect() as conn:
            result = conn.execute(_sessions.insert().values(token=token, user_id=user_id, created_at=_now_iso()))
            conn.commit()
        return result.inserted_primary_key[0]

    def delete_session(self, session_id: int, token: int, owner_id: int) -> int:
        """Hard-delete the session matching id, token AND owner. Returns rows affected.

        All three must match, so one user cannot end another user's session
        even when holding its id and token.
        """
        with self._connect() as conn:
            result = conn.execute(
                _sessions.delete().where(
                    (_sessions.c.id == session_id) & (_sessions.c.token == token) & (_sessions.c.user_id == owner_id)
                )
            )
            conn.commit()
        return result.rowcount

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        with self._connect() as conn:
            row = conn.execute(
                select(_users.c.id, _users.c.email).where(_users.c.id == user_id)
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_credentials(self, email: str) -> UserCredentials | None:
        """Look up a user and its password hash by exact email."""
        with self._connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_credentials(row) if row is not None else None

    def update_email(self, user_id: int, email: str) -> bool:
        """Set a new email. Returns False (and changes nothing) if the address is taken."""
        with self._connect() as conn:
            try:
                conn.execute(_users.update().where(_users.c.id == user_id).values(email=email))
            except IntegrityError:
                conn.rollback()
                return False
            conn.commit()
        return True

    def update_hash(self, user_id: int, password_hash: str) -> None:
        with self._connect() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(hash=password_hash))
            conn.commit()

    def create_user(self, email: str, password_hash: str) -> int:
        """Insert a new user and return its id. Raises Conflict if the email exists.

        Provisioning only: the HTTP surface never creates users.
        """
        with self._connect() as conn:
            try:
                result = conn.execute(_users.insert().values(email=email, hash=password_hash, created_at=_now_iso()))
            except IntegrityError as exc:
                conn.rollback()
                raise Conflict("A user with that email already exists.") from exc
            conn.commit()
        return result.inserted_primary_key[0]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(id=row.id, email=row.email)


def _row_to_credentials(row) -> UserCredentials:
    return UserCredentials(id=row.id, email=row.email, password_hash=row.hash)
