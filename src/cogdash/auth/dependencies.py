"""FastAPI authentication dependencies."""

from __future__ import annotations

from dataclasses import dataclass

import jwt
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cogdash.auth.jwt import verify_token
from cogdash.errors import Forbidden, Unauthenticated

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity taken from a verified identity provider token."""

    id: str
    email: str | None = None


def user_from_token(token: str) -> CurrentUser:
    """Verify a raw token and build the caller identity."""
    try:
        payload = verify_token(token)
    except jwt.InvalidTokenError as e:
        raise Unauthenticated("Unauthorized", details=str(e)) from e
    return CurrentUser(id=str(payload["sub"]), email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> CurrentUser:
    """
    Extract and verify the bearer token, return the caller identity.

    Raises 401 when the header is missing or the token does not verify.
    """
    if credentials is None:
        raise Unauthenticated("Unauthorized", details="Missing bearer token")
    return user_from_token(credentials.credentials)


def ensure_same_user(user: CurrentUser, user_id: str, action: str = "view") -> None:
    """Reject access to another user's data with 403."""
    if user_id != user.id:
        raise Forbidden(f"Forbidden: can only {action} own metrics")
