"""
auth/hashing.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug
detection trips over bcrypt 4.x, and direct usage has no compatibility shim.

bcrypt only looks at the first 72 bytes of its input. Newer releases raise on
longer input, older ones truncate silently. hash() refuses anything over the
limit up front so both behave the same: a PasswordHashingError.
"""

from __future__ import annotations

import bcrypt

from core.errors import PasswordHashingError

BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted, cost-tunable one-way hashing.

    Usage:
        hasher = PasswordHasher(rounds=12)
        stored = hasher.hash("S3cret!pw")
        hasher.verify(stored, "S3cret!pw")   # True
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain. Raises PasswordHashingError on failure."""
        encoded = plain.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise PasswordHashingError(f"password exceeds {BCRYPT_MAX_BYTES} bytes")
        try:
            return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")
        except ValueError as exc:
            raise PasswordHashingError(str(exc)) from exc

    def verify(self, hashed: str, plain: str) -> bool:
        """Return True if plain matches hashed.

        bcrypt.checkpw compares in constant time. A malformed stored hash or an
        over-long candidate is reported as a mismatch, never raised.
        """
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
