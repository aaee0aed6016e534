"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The access guard accepts exactly one credential: an
"Authorization: Bearer <token>" header carrying a JWT issued at login.

get_current_user_id() is the guard for every protected route. It verifies the
token, records the user id on request.state.user_id and returns it. Routes
must take the owner id from this dependency and never from the request body
or path -- that is what keeps one user's token from touching another user's
records.

get_current_user() wraps it and also loads the User record, raising 401 if
the account behind a still-valid token no longer exists.

Layer rule: no imports from api/ or profiles/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService
from core.errors import InvalidToken


def _unauthorized(exc: InvalidToken | None = None) -> HTTPException:
    """Build the 401 response. Without a token error, ask for credentials."""
    error = exc or InvalidToken("Authentication required.")
    return HTTPException(
        status_code=error.status_code,
        detail={"code": error.code, "message": error.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> str | None:
    """Return the token from a well-formed "Bearer <token>" header, else None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        return None
    return token


def get_current_user_id(request: Request) -> int:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user_id: int = Depends(get_current_user_id)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise _unauthorized()
    tokens: TokenService = request.app.state.tokens
    try:
        user_id = tokens.verify(token)
    except InvalidToken as exc:
        raise _unauthorized(exc) from exc
    request.state.user_id = user_id
    return user_id


def get_current_user(request: Request) -> User:
    """Require a valid bearer token for an account that still exists."""
    user_id = get_current_user_id(request)
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise _unauthorized()
    return user
