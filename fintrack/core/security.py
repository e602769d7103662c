"""Password hashing and bearer token helpers."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

import jwt
from pwdlib import PasswordHash
from pydantic import BaseModel

from .settings import get_fintrack_config


class TokenData(BaseModel):
    """Decoded JWT payload."""

    sub: str
    email: Optional[str] = None
    iat: int
    exp: int

    @property
    def user_id(self) -> str:
        return self.sub


class TokenFailure(str, Enum):
    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"


@dataclass(frozen=True)
class InvalidToken:
    """Typed verification failure returned by decode_token."""

    reason: TokenFailure

    def __bool__(self) -> bool:
        return False


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


def _get_password_hasher() -> PasswordHash:
    """Get or create the password hasher instance (Argon2, pwdlib recommended settings)."""
    if not hasattr(_get_password_hasher, "cached_instance"):
        _get_password_hasher.cached_instance = PasswordHash.recommended()
    return _get_password_hasher.cached_instance


def hash_password(password: str) -> str:
    """Hash a plain-text password with a fresh random salt.

    Two calls with the same password return different digests, so digests
    cannot be compared for equality; use verify_password instead.
    """
    return _get_password_hasher().hash(password)


def verify_password(plain_password: str, stored_hash: str) -> bool:
    """Verify a plain password against a stored digest.

    Returns False for malformed or unrecognised digests instead of raising.
    """
    try:
        return _get_password_hasher().verify(plain_password, stored_hash)
    except Exception:
        return False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def _jwt_settings():
    config = get_fintrack_config()
    fintrack = config.FINTRACK
    secret = config.get_secret("FINTRACK", "JWT_SECRET") or "dev-secret-key"
    return secret, fintrack.JWT_ALGORITHM, int(fintrack.JWT_EXPIRES_IN)


def create_access_token(subject: str, email: Optional[str] = None, expires_in: Optional[int] = None) -> str:
    """Create a signed JWT whose ``sub`` claim is the user id."""
    secret, algorithm, default_expires_in = _jwt_settings()
    if expires_in is None:
        expires_in = default_expires_in

    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    if email is not None:
        payload["email"] = email

    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str) -> Union[TokenData, InvalidToken]:
    """Verify signature and expiry of a JWT.

    Never raises; failures come back as an InvalidToken carrying the reason.
    """
    secret, algorithm, _ = _jwt_settings()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["sub", "iat", "exp"]},
        )
        return TokenData(**payload)
    except jwt.ExpiredSignatureError:
        return InvalidToken(TokenFailure.EXPIRED)
    except jwt.InvalidSignatureError:
        return InvalidToken(TokenFailure.BAD_SIGNATURE)
    except (jwt.InvalidTokenError, ValueError):
        return InvalidToken(TokenFailure.MALFORMED)
