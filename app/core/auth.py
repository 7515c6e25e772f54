"""
Caller identity for GigFlow.

Registration, credential storage and token issuance belong to the identity
provider. This module only verifies the signed session token it hands out and
exposes the caller's user id:

- HTTP: ``Authorization: Bearer <jwt>`` header or ``gf_session`` cookie
- WebSocket: ``?token=<jwt>`` query parameter or ``gf_session`` cookie
"""

from __future__ import annotations

import uuid
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Request, WebSocket
from fastapi.security import APIKeyHeader

from app.core.config import get_settings
from app.core.errors import Unauthorized

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "gf_session"

auth_header = APIKeyHeader(name="Authorization", auto_error=False)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def user_id_from_token(token: str) -> uuid.UUID:
    """Resolve the ``sub`` claim of a session token to a user id."""
    try:
        payload = decode_jwt(token)
        return uuid.UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired. Please login again.")
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        log.warning("auth.invalid_token", reason=type(exc).__name__)
        raise Unauthorized("Invalid token. Please login again.")


def _bearer(value: Optional[str]) -> Optional[str]:
    if value and value.startswith("Bearer "):
        return value[7:].strip() or None
    return None


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Depends(auth_header),
) -> uuid.UUID:
    """Main authentication dependency. Tries the bearer header, then the session cookie."""
    token = _bearer(authorization) or request.cookies.get(SESSION_COOKIE)
    if not token:
        raise Unauthorized("Not authorized. Please login to access this resource.")
    user_id = user_id_from_token(token)
    request.state.user_id = user_id
    return user_id


def get_current_user_id_ws(websocket: WebSocket, token: Optional[str] = None) -> uuid.UUID:
    """WebSocket variant: query-parameter token first, then the session cookie."""
    token = token or websocket.cookies.get(SESSION_COOKIE)
    if not token:
        raise Unauthorized()
    return user_id_from_token(token)
