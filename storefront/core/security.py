"""Password hashing and bearer token issuing.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
Bearer tokens are HS256 JWTs whose subject is the user id.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from storefront.core.config import settings
from storefront.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16


def hash_password(plaintext: str, *, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Derive a salted PBKDF2-SHA256 hash suitable for storage."""
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", plaintext.encode("utf-8"), salt, iterations)
    return f"{PBKDF2_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password_hash: str, plaintext: str) -> bool:
    """Check ``plaintext`` against a stored hash in constant time.

    Malformed hashes never match.
    """
    try:
        algorithm, iterations, salt_hex, digest_hex = password_hash.split("$")
        if algorithm != PBKDF2_ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
        rounds = int(iterations)
    except ValueError:
        logger.warning("security.malformed_password_hash")
        return False

    candidate = hashlib.pbkdf2_hmac("sha256", plaintext.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(candidate, expected)


def create_access_token(user_id: str, *, expires_delta: timedelta | None = None) -> str:
    """Issue a signed bearer token for ``user_id``.

    Args:
        user_id: Subject of the token.
        expires_delta: Lifetime; defaults to ``settings.auth.token_ttl_days``.

    Returns:
        Encoded JWT.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.auth.token_ttl_days))
    claims = {"sub": user_id, "iat": now, "exp": expire}
    return jwt.encode(claims, settings.auth.jwt_secret, algorithm=settings.auth.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Validate a bearer token and return its subject (user id).

    Raises:
        AuthenticationAppError: If the token is expired, tampered or has no subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.auth.jwt_secret,
            algorithms=[settings.auth.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("security.token_rejected", extra={"reason": type(exc).__name__})
        raise AuthenticationAppError(
            code="invalid_token",
            message="Not authorized, token failed",
        ) from exc

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationAppError(
            code="invalid_token",
            message="Not authorized, token failed",
        )
    return subject
