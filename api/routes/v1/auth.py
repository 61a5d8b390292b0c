"""
api/routes/v1/auth.py -- Registration, login and identity endpoints.

Routes:
  POST /api/v1/auth/register   -- create an account; 201 {"login"}
  POST /api/v1/auth/login      -- exchange credentials for a bearer token
  GET  /api/v1/auth/me         -- identity of the bearer (requires auth)

Security:
  POST /register and POST /login are rate-limited per client IP.
  Unknown login and wrong password return the same invalid_credentials error.
  Login responses (success and failure) carry Cache-Control: no-store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.errors import error_response
from api.limiter import limiter
from api.models import CredentialsRequest, LoginResponse, MeResponse, RegisterResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.service import AuthService
from core.errors import MarketplaceError

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
# - GET  /api/v1/auth/me:       requires auth (get_current_identity)
router = APIRouter()


@limiter.limit("5/minute")  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: CredentialsRequest) -> RegisterResponse:
    """Create an account. Login and password policy errors return 400, a taken login 409."""
    auth_service: AuthService = request.app.state.auth_service
    auth_service.register(body.login, body.password)
    return RegisterResponse(login=body.login)


@limiter.limit("10/minute")  # brute-force mitigation
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Authenticate with login and password and return a bearer token."""
    auth_service: AuthService = request.app.state.auth_service
    try:
        token = auth_service.login(body.login, body.password)
    except MarketplaceError as exc:
        resp = error_response(exc)
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=request.app.state.token_manager.expires_in,
            login=body.login,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=MeResponse)
async def me(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    """Return the login bound to the bearer token."""
    return MeResponse(login=identity.login)
