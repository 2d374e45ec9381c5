"""
Identity provider token verification.

Access tokens are issued by the external identity provider. The API only
verifies them: HS* algorithms with the shared secret, RS*/ES* with the
provider's public key. ``create_access_token`` signs tokens with the shared
secret for local development and tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt

from cogdash.config import get_settings

_verification_key: str | None = None


def _load_verification_key() -> str:
    """Load the verification key (cached after first call)."""
    global _verification_key  # noqa: PLW0603
    if _verification_key is None:
        settings = get_settings()
        if settings.jwt_algorithm.startswith("HS"):
            if not settings.jwt_secret:
                msg = "COGDASH_JWT_SECRET is not configured"
                raise jwt.InvalidTokenError(msg)
            _verification_key = settings.jwt_secret
        else:
            _verification_key = Path(settings.jwt_public_key_path).read_text()
    return _verification_key


def reset_keys() -> None:
    """Reset cached keys (useful for testing)."""
    global _verification_key  # noqa: PLW0603
    _verification_key = None


def create_access_token(
    user_id: str,
    email: str | None = None,
    *,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """
    Sign an access token with the shared secret.

    Args:
        user_id: The identity provider subject (UUID string).
        email: Optional email claim.
        expires_in: Token lifetime.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
    }
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Args:
        token: The encoded JWT string.

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or has no subject.
    """
    key = _load_verification_key()
    settings = get_settings()
    options: dict[str, Any] = {"require": ["exp", "sub"]}
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience or None,
            issuer=settings.jwt_issuer or None,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if not payload.get("sub"):
        msg = "Token has no subject"
        raise jwt.InvalidTokenError(msg)

    return payload
