"""
core/validation.py -- Format policies for logins, passwords and post content.

Pure functions, no I/O. The auth and posts services call these before
touching a store so malformed input never reaches the database.

Layer rule: core/ is the kernel. No imports from api/, auth/, or posts/.
"""

from __future__ import annotations

import math
import posixpath
import re
from urllib.parse import urlparse

from core.errors import (
    InvalidImageURLError,
    MissingFieldsError,
    NegativePriceError,
    TooLongError,
)

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

LOGIN_MIN_LENGTH = 3
LOGIN_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 2000

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})
IMAGE_SCHEMES = frozenset({"http", "https"})

# First and last characters alphanumeric, interior may add '_' and '-'.
# The {1,48} interior plus the two anchors gives the 3-50 length window.
LOGIN_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{1,48}[A-Za-z0-9]$"

_LOGIN_RE = re.compile(LOGIN_PATTERN)
_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
# Punctuation or symbol. Letters in any script count as letters, not symbols;
# "_" is a word character to re but counts as a symbol here.
_SPECIAL_RE = re.compile(r"[^\w\s]|_")
_SPACE_RE = re.compile(r"\s")


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


def is_valid_login(login: str) -> bool:
    """Return True if login satisfies the length and character policy."""
    if not isinstance(login, str):
        return False
    return _LOGIN_RE.fullmatch(login) is not None


def is_valid_password(password: str) -> bool:
    """Return True if password satisfies the strength policy.

    At least 8 characters, at least one lowercase letter, one uppercase
    letter, one digit and one special character, and no whitespace anywhere.
    """
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        return False
    if _SPACE_RE.search(password):
        return False
    return all(
        pattern.search(password)
        for pattern in (_LOWER_RE, _UPPER_RE, _DIGIT_RE, _SPECIAL_RE)
    )


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


def is_valid_image_url(url: str) -> bool:
    """Return True for an absolute http(s) URL whose path ends in an image extension."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme.lower() not in IMAGE_SCHEMES or not parsed.netloc:
        return False
    _, ext = posixpath.splitext(parsed.path)
    return ext.lower() in IMAGE_EXTENSIONS


def validate_post_fields(title: str, description: str, price: float, image_url: str) -> None:
    """Raise the first ValidationError the post content violates.

    Checks run in a fixed order: required fields, lengths, price, image URL.
    """
    if not title or not title.strip() or not description or not description.strip():
        raise MissingFieldsError()
    if len(title) > TITLE_MAX_LENGTH or len(description) > DESCRIPTION_MAX_LENGTH:
        raise TooLongError()
    if price is None or math.isnan(price) or price < 0:
        raise NegativePriceError()
    if not is_valid_image_url(image_url):
        raise InvalidImageURLError()
