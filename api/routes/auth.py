"""
api/routes/auth.py -- Signup, login and current-account endpoints.

Routes:
  POST /api/auth/signup   -- create an account (public)
  POST /api/auth/login    -- exchange email + password for a session token (public)
  GET  /api/auth/me       -- account details for the bearer token (requires auth)

Security:
  Signup returns only {"success": true}; no user data or hash leaves the server.
  Login failures are one error (invalid_credentials) whether the email is
  unknown or the password is wrong. authenticate() also equalizes timing.
  Cache-Control: no-store on login responses so tokens are not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, SignupRequest, SuccessResponse, UserPublic
from auth.credentials import authenticate, register
from auth.dependencies import get_current_user
from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService

# Auth policy:
# - POST /api/auth/signup: public -- nobody has a token before signing up
# - POST /api/auth/login:  public -- this is where tokens come from
# - GET  /api/auth/me:     requires auth (get_current_user)
router = APIRouter()


@router.post("/auth/signup", response_model=SuccessResponse)
def signup(request: Request, body: SignupRequest) -> SuccessResponse:
    """Register a new account. Fails with duplicate_email (400) if the email is taken."""
    user_store: UserStore = request.app.state.user_store
    rounds: int = request.app.state.settings.bcrypt_rounds
    register(user_store, body.name, body.email, body.password, rounds=rounds)
    return SuccessResponse()


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token and the account.

    Fails with invalid_credentials (400). The error is raised by authenticate()
    and rendered by the AppError handler in api/main.py.
    """
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.tokens
    rounds: int = request.app.state.settings.bcrypt_rounds
    result = authenticate(user_store, tokens, body.email, body.password, rounds=rounds)

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=result.token, user=UserPublic.from_user(result.user)).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=UserPublic)
def me(current_user: User = Depends(get_current_user)) -> UserPublic:
    """Return the public fields of the account the token was issued for."""
    return UserPublic.from_user(current_user)
