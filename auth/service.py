"""
auth/service.py -- Registration, login and token validation.

AuthService orchestrates the credential store, the password hasher and the
token manager. It owns the login/password policy, the uniqueness rule and
the anti-enumeration rule for logins:

  - Unknown login, store failure during lookup, and wrong password all
    produce the same InvalidCredentialsError.
  - Unknown logins still pay for a bcrypt verify against a dummy hash, so
    response time does not reveal whether the login exists.

Collaborators are typed as Protocols; any object with the right methods
(UserStore, an in-memory fake, a MagicMock) can be injected.

Layer rule: no imports from api/ or posts/.
"""

from __future__ import annotations

import logging
from typing import Protocol

from auth.models import User
from core.errors import (
    FailedToEncryptPasswordError,
    InfrastructureError,
    InvalidCredentialsError,
    InvalidLoginError,
    InvalidPasswordError,
    PasswordHashingError,
    StoreConflictError,
    StoreError,
    UserAlreadyExistsError,
)
from core.validation import is_valid_login, is_valid_password


class CredentialStore(Protocol):
    def create_user(self, user: User) -> int: ...

    def get_by_login(self, login: str) -> User | None: ...

    def exists(self, login: str) -> bool: ...


class Hasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, hashed: str, plain: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, subject: str) -> str: ...

    def verify(self, token: str) -> str: ...


class AuthService:
    """Usage:
    service = AuthService(UserStore(url), PasswordHasher(), TokenManager(secret, timedelta(hours=1)))
    service.register("alice", "S3cret!pw")
    token = service.login("alice", "S3cret!pw")
    service.validate_token(token)   # "alice"
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: Hasher,
        tokens: TokenIssuer,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.logger = logger or logging.getLogger("marketplace.auth")
        # Computed once per service so the first failed login is not
        # measurably faster than later ones.
        self._dummy_hash = hasher.hash("marketplace_timing_Dummy1!")

    def register(self, login: str, password: str) -> None:
        """Create an account.

        Raises InvalidLoginError, InvalidPasswordError, UserAlreadyExistsError,
        FailedToEncryptPasswordError, or InfrastructureError/StoreError when
        the store fails.
        """
        if not is_valid_login(login):
            self.logger.info("register rejected: invalid login %r", login)
            raise InvalidLoginError()
        if not is_valid_password(password):
            self.logger.info("register rejected: invalid password for login %r", login)
            raise InvalidPasswordError()

        try:
            exists = self.store.exists(login)
        except StoreError as exc:
            self.logger.error("register failed: existence check for %r: %s", login, exc)
            raise InfrastructureError("unable to check user existence") from exc
        if exists:
            self.logger.info("register rejected: login %r already exists", login)
            raise UserAlreadyExistsError()

        try:
            hashed = self.hasher.hash(password)
        except PasswordHashingError as exc:
            self.logger.error("register failed: could not hash password for %r: %s", login, exc)
            raise FailedToEncryptPasswordError() from exc

        try:
            self.store.create_user(User(login=login, hashed_password=hashed))
        except StoreConflictError as exc:
            # Lost the race against a concurrent registration of the same login.
            self.logger.info("register rejected: login %r taken concurrently", login)
            raise UserAlreadyExistsError() from exc
        self.logger.info("user registered: %s", login)

    def login(self, login: str, password: str) -> str:
        """Return a session token for valid credentials.

        Raises InvalidLoginError for a malformed login and
        InvalidCredentialsError for everything else that goes wrong.
        """
        if not is_valid_login(login):
            self.logger.info("login rejected: invalid login %r", login)
            raise InvalidLoginError()

        try:
            user = self.store.get_by_login(login)
        except StoreError as exc:
            self.logger.error("login lookup failed for %r: %s", login, exc)
            user = None

        if user is None:
            self.hasher.verify(self._dummy_hash, password)
            self.logger.info("login failed for %r", login)
            raise InvalidCredentialsError()
        if not self.hasher.verify(user.hashed_password, password):
            self.logger.info("login failed for %r", login)
            raise InvalidCredentialsError()

        token = self.tokens.issue(login)
        self.logger.info("user logged in: %s", login)
        return token

    def validate_token(self, token: str) -> str:
        """Return the login bound to token. InvalidTokenError/ExpiredTokenError pass through."""
        return self.tokens.verify(token)
