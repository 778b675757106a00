"""Password hashing and JWT creation/verification for authentication."""

import base64
import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from bugtracker.core.config import settings
from bugtracker.core.errors import TokenExpired, TokenInvalid

# 16 random bytes, hex-encoded (128 bits of entropy).
SALT_BYTES = 16
# 256-bit derived key.
DERIVED_KEY_BYTES = 32

PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 1024
EMAIL_MAX_LEN = 320
NAME_MAX_LEN = 255


def generate_salt() -> str:
    """Return a fresh random salt for a new credential."""
    return secrets.token_hex(SALT_BYTES)


def hash_password(plain_password: str, salt: str, iterations: int | None = None) -> str:
    """Derive the stored hash for a password: PBKDF2-HMAC-SHA256, base64-encoded."""
    derived = hashlib.pbkdf2_hmac(
        "sha256",
        plain_password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations or settings.PASSWORD_HASH_ITERATIONS,
        dklen=DERIVED_KEY_BYTES,
    )
    return base64.b64encode(derived).decode("ascii")


def verify_password(plain_password: str, salt: str | None, hashed: str | None) -> bool:
    """Verify a plain password against a stored (salt, hash) pair in constant time."""
    if not salt or not hashed:
        return False
    candidate = hash_password(plain_password, salt)
    return hmac.compare_digest(candidate.encode("ascii"), hashed.encode("ascii"))


def create_access_token(
    account_id: int,
    email: str,
    now: datetime | None = None,
) -> str:
    """Create a signed access token with sub (account id), email, iat and exp."""
    issued_at = now or datetime.now(UTC)
    expire = issued_at + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(account_id),
        "email": email,
        "exp": expire,
        "iat": issued_at,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a token; return its claims (sub, email, exp, iat).

    The signature is checked before expiry. Raises TokenExpired once the exp
    instant is reached and TokenInvalid for any other verification failure.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired(cause=e) from e
    except jwt.PyJWTError as e:
        raise TokenInvalid(cause=e) from e
