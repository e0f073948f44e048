"""JWT token generation and validation

The document pipeline does not manage users. Identity is resolved from a
bearer token issued by the surrounding platform; this module only signs and
verifies those tokens.

JWT Token Claims Structure:
===========================

Standard JWT Claims:
- sub (Subject): User ID as UUID string
  Example: "550e8400-e29b-41d4-a716-446655440000"
  Purpose: Identifies the actor; owner_id of every document they upload

- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp when token expires (iat + JWT_EXPIRY_MINUTES)

Custom Claims:
- role: "ADMIN" | "USER"
  Purpose: ADMIN may delete and review any user's documents

- email: User's email address (optional, logging only)

Example Token Payload:
{
  "sub": "550e8400-e29b-41d4-a716-446655440000",
  "role": "USER",
  "email": "ana@example.co",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import jwt

from config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def create_access_token(
    user_id: UUID,
    role: str,
    email: Optional[str] = None,
    expires_in_minutes: Optional[int] = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        user_id: Actor UUID
        role: ADMIN or USER
        email: Optional email claim
        expires_in_minutes: Token lifetime (default: JWT_EXPIRY_MINUTES)

    Returns:
        str: Signed JWT token

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    settings = get_settings()
    secret = _get_jwt_secret()
    if expires_in_minutes is None:
        expires_in_minutes = settings.JWT_EXPIRY_MINUTES

    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=expires_in_minutes)

    payload = {
        'sub': str(user_id),
        'role': role,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp())
    }
    if email:
        payload['email'] = email

    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
        ValueError: If JWT_SECRET is not set
    """
    secret = _get_jwt_secret()

    try:
        return jwt.decode(token, secret, algorithms=[get_settings().JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
