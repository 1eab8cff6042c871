"""
Caller identity from bearer JWTs.

Tokens are issued by the account service; here we only verify them and pull
out a stable user id. Quiz submission works with or without an identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request, status

from app.core.security import decode_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_bearer_token(request: Request) -> Optional[str]:
    """
    Extract 'Bearer <token>' from the Authorization header.

    Returns None when the header is absent; raises 401 when it is malformed.
    """
    auth = request.headers.get("Authorization")
    if not auth:
        return None

    parts = auth.split()
    if len(parts) != 2:
        raise _unauthorized("Invalid Authorization header format. Expected 'Bearer <token>'")

    scheme, token = parts
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme. Expected 'Bearer'")

    if not token.strip():
        raise _unauthorized("Empty bearer token")

    return token


def _identity_from_token(token: str) -> CallerIdentity:
    payload = decode_access_token(token)
    if payload is None:
        logger.warning("JWT validation failed")
        raise _unauthorized("Token validation failed")

    # Account service tokens carry userId; standard tokens carry sub
    user_id = payload.get("sub") or payload.get("userId")
    if not user_id:
        raise _unauthorized("Token missing subject (sub)")

    return CallerIdentity(
        user_id=str(user_id),
        email=payload.get("email"),
        role=payload.get("role"),
    )


def get_optional_identity(request: Request) -> Optional[CallerIdentity]:
    """
    FastAPI dependency: the verified caller, or None for anonymous requests.

    A malformed, invalid or expired token is treated as anonymous (with a
    warning) rather than rejected, so the request itself still goes through.
    """
    try:
        token = _extract_bearer_token(request)
        if token is None:
            return None
        return _identity_from_token(token)
    except HTTPException as e:
        logger.warning(
            "Ignoring unusable bearer token on %s, continuing anonymously: %s",
            request.url.path,
            e.detail,
        )
        return None


def get_current_identity(request: Request) -> CallerIdentity:
    """FastAPI dependency: the verified caller; 401 when missing."""
    token = _extract_bearer_token(request)
    if token is None:
        raise _unauthorized("Missing Authorization header")
    return _identity_from_token(token)
