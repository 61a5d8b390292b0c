"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered marketplace account.

    hashed_password is the bcrypt hash; the plaintext is never stored.
    id and created_at are None until the store writes the record.
    """

    login: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of a request.

    Produced by the access dependencies in auth/dependencies.py once a bearer
    token verifies, then passed explicitly into every service call that needs
    to know who is asking. None in place of an Identity means anonymous.
    """

    login: str
