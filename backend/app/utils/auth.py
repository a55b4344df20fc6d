from __future__ import annotations
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.core.config import settings

# Tokens are only minted for operators of the recompute admin surface.
TOKEN_SCOPE = "recompute:admin"


def token_lifetime_seconds() -> int:
    return settings.jwt_expire_minutes * 60


def create_access_token(subject: str) -> str:
    issued = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "scope": TOKEN_SCOPE,
        "iat": issued,
        "exp": issued + timedelta(seconds=token_lifetime_seconds()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> str | None:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("scope") != TOKEN_SCOPE:
        return None
    return payload.get("sub")
