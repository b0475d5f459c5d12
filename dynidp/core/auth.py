"""Admin API token helpers (JWT).

Administrators call /api/providers/* with `Authorization: Bearer <jwt>`.
Tokens are minted out of band with `dynidp token` and must carry role=admin.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException, status

from dynidp.core.config import get_settings

TOKEN_ISSUER = "dynidp"


def create_access_token(subject: str, role: str = "admin", expire_minutes: int | None = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    minutes = expire_minutes or settings.jwt_access_token_expire_minutes
    payload = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
        "iss": TOKEN_ISSUER,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp", "iss"]},
            issuer=TOKEN_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
