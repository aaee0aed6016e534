"""
auth/tokens.py -- JWT session tokens and bcrypt password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry only the user id (as the "sub"
       claim) and an expiry. They are stateless: nothing is stored server-side,
       so a token cannot be revoked and simply expires (default 7 days).
       TokenService.verify() raises InvalidToken on any failure -- the access
       guard turns that into a 401.

  Passwords: bcrypt, used directly (no passlib wrapper). The cost factor comes
       from Settings.bcrypt_rounds. bcrypt.checkpw does the constant-time
       comparison. dummy_hash() gives authenticate() something to compare
       against when the email is unknown, so response time does not reveal
       whether an account exists.

  Secret: TokenService receives the signing key from the lifespan, which
       reads it from Settings exactly once. Nothing here reads the environment.

Layer rule: no imports from api/ or profiles/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
from jose import JWTError, jwt

from core.config import SEVEN_DAYS
from core.database import MAX_RECORD_ID
from core.errors import InvalidToken

logger = logging.getLogger("skillfolio.auth")

_ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes of its input. The API layer rejects
# longer passwords instead of letting them be silently truncated.
MAX_PASSWORD_BYTES = 72

DEFAULT_BCRYPT_ROUNDS = 12

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash or an over-long password counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=None)
def dummy_hash(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash used for timing equalization when a login email does not exist.

    Cached per cost factor so the work is done once, and the dummy comparison
    costs the same as a real one at the configured rounds.
    """
    return hash_password("skillfolio_timing_dummy", rounds)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class TokenService:
    """Issue and verify signed, time-limited session tokens.

    Usage:
        tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
        token = tokens.issue(user_id)
        user_id = tokens.verify(token)   # raises InvalidToken
    """

    def __init__(self, secret_key: str, expire_seconds: int = SEVEN_DAYS) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    def issue(self, user_id: int) -> str:
        """Encode a signed JWT whose subject is user_id, expiring after expire_seconds."""
        expire = datetime.now(timezone.utc) + timedelta(seconds=self.expire_seconds)
        payload = {
            "sub": str(user_id),
            "exp": expire,
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> int:
        """Decode and verify a JWT and return the user id it was issued for.

        Raises InvalidToken on a bad signature, a malformed token, an expired
        token, or a subject that is not a valid user id. jose rejects tokens
        without "exp" only if asked, so its presence is checked explicitly.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except JWTError as exc:
            raise InvalidToken() from exc
        subject = payload.get("sub")
        if "exp" not in payload or not isinstance(subject, str) or not subject.isdigit():
            raise InvalidToken()
        user_id = int(subject)
        if not 1 <= user_id <= MAX_RECORD_ID:
            raise InvalidToken()
        return user_id
