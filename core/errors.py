"""
core/errors.py -- Error taxonomy shared by the auth and posts services.

Four families, each handled differently by callers:

  ValidationError      bad login/password/post-field format. Surfaced verbatim.
  PolicyError          user exists, not the owner, post missing. Surfaced verbatim.
  CredentialError      bad login attempt or bad token. Login failures are
                       coalesced into InvalidCredentialsError so a caller
                       cannot tell "no such user" from "wrong password".
  InfrastructureError  store or hasher failure. Logged with full detail,
                       surfaced to clients only as an opaque internal error.

Nothing here knows about HTTP. api/errors.py owns the mapping from error class
to status code.

Layer rule: core/ is the kernel. No imports from api/, auth/, or posts/.
"""

from __future__ import annotations


class MarketplaceError(Exception):
    """Base class. `code` is machine-readable, `message` is safe to show a client."""

    code = "error"
    message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(MarketplaceError):
    code = "validation_error"


class InvalidLoginError(ValidationError):
    code = "invalid_login"
    message = (
        "Login must be 3-50 characters, start and end with a letter or digit, "
        "and contain only letters, digits, underscores or hyphens."
    )


class InvalidPasswordError(ValidationError):
    code = "invalid_password"
    message = (
        "Password must be at least 8 characters with a lowercase letter, an uppercase "
        "letter, a digit and a special character, and must not contain whitespace."
    )


class MissingFieldsError(ValidationError):
    code = "missing_fields"
    message = "Title and description are required."


class TooLongError(ValidationError):
    code = "too_long"
    message = "Title must not exceed 100 characters, description must not exceed 2000 characters."


class NegativePriceError(ValidationError):
    code = "negative_price"
    message = "Price must be a non-negative number."


class InvalidImageURLError(ValidationError):
    code = "invalid_image_url"
    message = "Image URL must be an http(s) URL ending in .jpg, .jpeg, .png or .gif."


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class PolicyError(MarketplaceError):
    code = "policy_error"


class UserAlreadyExistsError(PolicyError):
    code = "user_exists"
    message = "User already exists."


class PostNotFoundError(PolicyError):
    code = "post_not_found"
    message = "Post not found."


class UnauthorizedError(PolicyError):
    code = "not_owner"
    message = "Only the owner of a post may modify it."


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class CredentialError(MarketplaceError):
    code = "credential_error"


class InvalidCredentialsError(CredentialError):
    code = "invalid_credentials"
    message = "Invalid login or password."


class InvalidTokenError(CredentialError):
    code = "invalid_token"
    message = "Invalid token."


class ExpiredTokenError(CredentialError):
    code = "expired_token"
    message = "Token has expired."


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


class InfrastructureError(MarketplaceError):
    code = "internal_error"
    message = "An unexpected error occurred."


class StoreError(InfrastructureError):
    """Raised by stores for any database failure."""


class StoreConflictError(StoreError):
    """A uniqueness constraint rejected the write."""


class PasswordHashingError(InfrastructureError):
    """The hasher could not produce a hash (e.g. input over bcrypt's 72-byte limit)."""


class FailedToEncryptPasswordError(InfrastructureError):
    code = "failed_to_encrypt_password"
