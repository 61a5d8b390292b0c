"""
api/errors.py -- Map the core error taxonomy onto HTTP responses.

Services raise MarketplaceError subclasses and know nothing about status
codes. This module is the single place that decides which status each error
class gets. Lookup walks the exception's MRO, so a new subclass inherits its
family's status unless it is listed explicitly.

Infrastructure errors never leak detail: the client gets a generic
internal_error and the full exception goes to the log.
"""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse
from core.errors import (
    CredentialError,
    InfrastructureError,
    MarketplaceError,
    PolicyError,
    PostNotFoundError,
    UnauthorizedError,
    UserAlreadyExistsError,
    ValidationError,
)

logger = logging.getLogger("marketplace.api")

_STATUS_BY_ERROR: dict[type, int] = {
    UserAlreadyExistsError: 409,
    PostNotFoundError: 404,
    UnauthorizedError: 403,
    ValidationError: 400,
    PolicyError: 400,
    CredentialError: 401,
    InfrastructureError: 500,
}


def status_for(exc: MarketplaceError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return 500


def error_response(exc: MarketplaceError) -> JSONResponse:
    """Build the standard error envelope for exc."""
    status = status_for(exc)
    if isinstance(exc, InfrastructureError) or status >= 500:
        logger.error("Internal failure: %s", exc, exc_info=exc)
        detail = ErrorDetail(code="internal_error", message="An unexpected error occurred.")
    else:
        detail = ErrorDetail(code=exc.code, message=exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=detail).model_dump(exclude_none=True),
        headers=headers,
    )
