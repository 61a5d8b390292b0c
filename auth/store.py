"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as posts/store.py).
UserStore is the repository; _row_to_user is the mapper. Services and routes
never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(login) is enforced by the schema. AuthService checks existence
  before inserting, but two concurrent registrations can both pass that
  check; the constraint is what actually guarantees uniqueness. A violation
  surfaces as StoreConflictError.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.database import create_store_engine, ping, translate_errors

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("login", String(50), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///marketplace.db")
        store.create_user(User(login="alice", hashed_password=hasher.hash("S3cret!pw")))
        user = store.get_by_login("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = create_store_engine(db_url)
        with translate_errors("create users schema"):
            _metadata.create_all(self.engine)

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises StoreConflictError if the login already exists, StoreError on
        any other database failure.
        """
        with translate_errors("create user"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        login=user.login,
                        hashed_password=user.hashed_password,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]

    def get_by_login(self, login: str) -> User | None:
        """Look up a user by exact login (case-sensitive). Returns None if not found."""
        with translate_errors("get user by login"):
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.login == login)).fetchone()
        return _row_to_user(row) if row is not None else None

    def exists(self, login: str) -> bool:
        """Return True if a user with this login exists."""
        with translate_errors("check user existence"):
            with self.engine.connect() as conn:
                found = conn.execute(select(_users.c.id).where(_users.c.login == login).limit(1)).first()
        return found is not None

    def ping(self) -> bool:
        return ping(self.engine)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        login=row.login,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
