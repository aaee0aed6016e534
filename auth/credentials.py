"""
auth/credentials.py -- Signup and login on top of UserStore and TokenService.

register() and authenticate() are the only two entry points that handle raw
passwords. Both are plain functions taking their collaborators as arguments,
so routes pass in the instances built by the lifespan and tests can hand in
throwaway stores.

Security:
  authenticate() always runs bcrypt, whether or not the email exists. Unknown
  email and wrong password raise the same InvalidCredentials and take the
  same time, so neither the response nor its latency leaks which emails are
  registered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

from auth.models import User
from auth.store import UserStore
from auth.tokens import DEFAULT_BCRYPT_ROUNDS, TokenService, dummy_hash, hash_password, verify_password
from core.errors import InvalidCredentials

logger = logging.getLogger("skillfolio.auth")

_AVATAR_URL = "https://api.dicebear.com/7.x/identicon/svg?seed={seed}"


@dataclass
class LoginResult:
    """A successful login: the session token plus the account it belongs to."""

    token: str
    user: User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def avatar_url_for(name: str) -> str:
    """Deterministic placeholder avatar: the same name always gets the same image."""
    return _AVATAR_URL.format(seed=quote(name, safe=""))


def register(
    store: UserStore,
    name: str,
    email: str,
    password: str,
    rounds: int = DEFAULT_BCRYPT_ROUNDS,
) -> int:
    """Create an account and return its id.

    Raises DuplicateEmail if the email is already registered. Only the bcrypt
    hash of password is stored.
    """
    user = User(
        name=name,
        email=normalize_email(email),
        hashed_password=hash_password(password, rounds),
        avatar=avatar_url_for(name),
    )
    user_id = store.create_user(user)
    logger.info("Registered user id=%d", user_id)
    return user_id


def authenticate(
    store: UserStore,
    tokens: TokenService,
    email: str,
    password: str,
    rounds: int = DEFAULT_BCRYPT_ROUNDS,
) -> LoginResult:
    """Check email + password and issue a session token.

    Raises InvalidCredentials for an unknown email or a wrong password.
    """
    user = store.get_by_email(normalize_email(email))
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt.
        verify_password(password, dummy_hash(rounds))
        logger.info("Login failed: unknown email")
        raise InvalidCredentials()
    if not verify_password(password, user.hashed_password):
        logger.info("Login failed: bad password for user id=%d", user.id)
        raise InvalidCredentials()
    return LoginResult(token=tokens.issue(user.id), user=user)
