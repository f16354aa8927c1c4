# recipehub/core/security.py
"""
Security module for authentication.
Handles password hashing, JWT token creation/decoding, and token lifetime math.
"""
import math
import uuid
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext

from recipehub.config import settings

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

# JWT configuration
ACCESS_TOKEN_SECRET = settings.access_token_secret
REFRESH_TOKEN_SECRET = settings.refresh_token_secret
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

ACCESS = "access"
REFRESH = "refresh"


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain text password against a stored Argon2 hash."""
    return pwd_context.verify(plain, hashed)


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _encode(user_id, token_type: str, lifetime: dt.timedelta, secret: str) -> str:
    now = _now()
    payload = {
        "sub": str(user_id),        # Subject (user ID); PyJWT requires a string
        "typ": token_type,          # "access" or "refresh"
        "jti": uuid.uuid4().hex,    # Unique per token so each device's token can be revoked alone
        "iat": now.timestamp(),     # Sub-second, compared against per-user revocation cutoffs
        "exp": now + lifetime,
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALG)


def create_access_token(user_id) -> str:
    """
    Create a short-lived JWT access token.

    Token payload includes:
        - sub: Subject (user ID as string)
        - typ: "access"
        - jti: Random token identifier
        - iat / exp: Issued-at and expiration timestamps
    """
    return _encode(user_id, ACCESS, dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES), ACCESS_TOKEN_SECRET)


def create_refresh_token(user_id) -> str:
    """Create a long-lived JWT refresh token, signed with its own secret."""
    return _encode(user_id, REFRESH, dt.timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS), REFRESH_TOKEN_SECRET)


def refresh_token_expiry() -> dt.datetime:
    """Expiration datetime for a session opened now."""
    return _now() + dt.timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)


def _decode(token: str, secret: str, token_type: str) -> dict:
    payload = jwt.decode(token, secret, algorithms=[JWT_ALG], options={"require": ["exp"]})
    if payload.get("typ") != token_type:
        raise jwt.InvalidTokenError(f"expected {token_type} token")
    return payload


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, malformed or not an access token
    """
    return _decode(token, ACCESS_TOKEN_SECRET, ACCESS)


def decode_refresh_token(token: str) -> dict:
    """Decode and validate a JWT refresh token (same errors as decode_access_token)."""
    return _decode(token, REFRESH_TOKEN_SECRET, REFRESH)


def remaining_lifetime_seconds(exp) -> int:
    """
    Whole seconds left before an "exp" claim passes, rounded up.
    Returns 0 (or less) for tokens that are already expired.
    """
    return math.ceil(float(exp) - _now().timestamp())
