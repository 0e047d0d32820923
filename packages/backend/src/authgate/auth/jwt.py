"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
The token carries the user id in the "sub" claim; nothing is stored
server-side. The JwtConfig (secret, algorithm, lifetime) is passed in
explicitly so tests and the CLI can sign with their own key.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from authgate.config import JwtConfig


class TokenError(Exception):
    """Raised when token creation/verification fails."""


def create_access_token(
    user_id: str,
    config: JwtConfig,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for a user."""
    now = datetime.now(timezone.utc)
    if expires_minutes is None:
        expires_minutes = config.expire_minutes
    expires = now + timedelta(minutes=expires_minutes)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, config.secret, algorithm=config.algorithm)


def decode_token(token: str, config: JwtConfig) -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    try:
        return jwt.decode(token, config.secret, algorithms=[config.algorithm])
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")


def token_from_header(value: Optional[str], scheme: str = "") -> Optional[str]:
    """Pull the token out of an authorization header value.

    With no scheme the whole header is the token (the frontend sends it
    raw). With a scheme such as "Bearer" the header must start with it.
    """
    if not value:
        return None
    value = value.strip()
    if not scheme:
        return value or None
    prefix, _, token = value.partition(" ")
    if prefix.lower() != scheme.lower():
        return None
    return token.strip() or None
