"""Dependency injection for FastAPI endpoints"""

from typing import Optional

import jwt
from fastapi import Header, Request

from stonebridge_gateway.config import settings
from stonebridge_gateway.domain.exceptions import UnauthenticatedError


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(request: Request, authorization: Optional[str] = Header(None)) -> int:
    """
    Resolve the verified caller from the session cookie or a Bearer header.

    Raises:
        UnauthenticatedError: token missing, expired, tampered or without userId
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer "):].strip()
    if not token:
        raise UnauthenticatedError("Not authenticated")

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise UnauthenticatedError("Session expired") from e
    except jwt.InvalidTokenError as e:
        raise UnauthenticatedError("Not authenticated") from e

    user_id = payload.get("userId")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise UnauthenticatedError("Not authenticated")
    return user_id
