"""
auth/tokens.py -- Signed, expiring session tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the login as the subject claim
       plus issued-at and expiry as integer timestamps. Nothing is stored
       server-side; expiry is the only revocation mechanism.

  Verification: the signature and algorithm are checked by jose; the expiry
       is checked here against an injectable clock so tests can move time
       without sleeping. The subject is only returned after both checks pass.

  Secret: passed in by the application wiring (from core.config Settings).
       This module never reads configuration itself.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.errors import ExpiredTokenError, InvalidTokenError

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ("sub", "iat", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenManager:
    """Issue and verify HS256 JWTs binding a login.

    Usage:
        manager = TokenManager(secret_key, duration=timedelta(hours=1))
        token = manager.issue("alice")
        manager.verify(token)   # "alice"
    """

    def __init__(
        self,
        secret_key: str,
        duration: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if duration.total_seconds() <= 0:
            raise ValueError("token duration must be positive")
        self._secret_key = secret_key
        self.duration = duration
        self._clock = clock

    @property
    def expires_in(self) -> int:
        """Token lifetime in whole seconds, for the login response body."""
        return int(self.duration.total_seconds())

    def issue(self, subject: str) -> str:
        """Encode a signed token for subject, valid from now for self.duration."""
        issued_at = self._clock()
        expires_at = issued_at + self.duration
        payload = {
            "sub": subject,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> str:
        """Return the login bound to token.

        Raises InvalidTokenError if the token is malformed, signed with another
        key or algorithm, or lacks a required claim. Raises ExpiredTokenError
        once the clock has passed the embedded expiry.
        """
        if not isinstance(token, str) or not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidTokenError() from exc

        if any(claim not in payload for claim in _REQUIRED_CLAIMS):
            raise InvalidTokenError()
        subject = payload["sub"]
        expires_at = payload["exp"]
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError()
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise InvalidTokenError()

        if self._clock().timestamp() > expires_at:
            raise ExpiredTokenError()
        return subject
