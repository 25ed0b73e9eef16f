# storefront/services/session_service.py
"""
Weryfikacja sesji uzytkownika.

Sesja to podpisany JWT (HS256) w ciasteczku `user-token`
albo w naglowku `Authorization: Bearer <token>`.
Claim `sub` to id uzytkownika.
"""
import time

import jwt
from fastapi import Request

from storefront.domain.errors import Unauthenticated
from storefront.utils.settings import (
    JWT_SECRET,
    JWT_ALGORITHM,
    SESSION_COOKIE_NAME,
    SESSION_TTL_SECONDS,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def issue_session_token(user_id: str, ttl_seconds: int | None = None) -> str:
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + (ttl_seconds if ttl_seconds is not None else SESSION_TTL_SECONDS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_session_token(token: str | None) -> str:
    if not token:
        raise Unauthenticated("Unauthorized")

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Session expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"Odrzucono token sesji: {e}")
        raise Unauthenticated("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid token")
    return user_id


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value:
        return None
    return value.strip()


def current_user_id(request: Request) -> str:
    """FastAPI dependency: id zalogowanego uzytkownika albo Unauthenticated."""
    token = request.cookies.get(SESSION_COOKIE_NAME) or _bearer_token(request)
    return verify_session_token(token)
