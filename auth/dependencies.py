"""
auth/dependencies.py -- FastAPI Depends() helpers that resolve the caller.

The bearer token is read from the `Authorization: Bearer <token>` header and
verified by the AuthService stored on app.state. The result is a typed
Identity value that route handlers pass explicitly into service calls.

try_get_identity() is the soft variant (returns None for anonymous callers).
get_current_identity() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or posts/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.models import Identity
from core.errors import CredentialError

logger = logging.getLogger("marketplace.auth")

_BEARER_PREFIX = "Bearer "


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(_BEARER_PREFIX):
        return None
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def try_get_identity(request: Request) -> Identity | None:
    """Return the caller's Identity, or None for anonymous requests.

    A missing, malformed or expired token is treated as anonymous. Never raises
    -- routes that need a hard 401 should use get_current_identity().
    """
    token = _bearer_token(request)
    if token is None:
        return None
    try:
        login = request.app.state.auth_service.validate_token(token)
    except CredentialError as exc:
        logger.debug("ignoring unverifiable bearer token: %s", exc.code)
        return None
    return Identity(login=login)


def get_current_identity(request: Request) -> Identity:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.post("/posts")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        login = request.app.state.auth_service.validate_token(token)
    except CredentialError as exc:
        # exc.code distinguishes invalid_token from expired_token for clients.
        raise HTTPException(
            status_code=401,
            detail={"code": exc.code, "message": exc.message},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return Identity(login=login)
