"""Session resolution.

Callers present ``Authorization: Bearer <token>`` where the token is a JWT
whose ``sub`` claim is the user id. The resolved id is handed explicitly to
every store function; nothing below the route layer looks up the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header
from jose import JWTError, jwt

from errors import ConfigError, UnauthenticatedError
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MINUTES = 12 * 60


@dataclass(frozen=True)
class Caller:
    user_id: str


def issue_token(user_id: str, settings: Settings, *, expires_in: Optional[timedelta] = None) -> str:
    """Mint a session token for ``user_id`` (local development and tests)."""
    if not settings.session_secret:
        raise ConfigError("SESSION_SECRET is not set")
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else timedelta(minutes=TOKEN_EXPIRY_MINUTES)),
    }
    if settings.session_issuer:
        claims["iss"] = settings.session_issuer
    return jwt.encode(claims, settings.session_secret, algorithm=settings.session_algorithm)


def resolve_caller(authorization: Optional[str], settings: Settings) -> Caller:
    if not authorization:
        raise UnauthenticatedError("Unauthorized")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Unauthorized")
    if not settings.session_secret:
        logger.error("SESSION_SECRET is not set; refusing session token")
        raise UnauthenticatedError("Unauthorized")
    options = {"verify_iss": bool(settings.session_issuer)}
    try:
        claims = jwt.decode(
            token.strip(),
            settings.session_secret,
            algorithms=[settings.session_algorithm],
            issuer=settings.session_issuer,
            options=options,
        )
    except JWTError as exc:
        logger.info("Rejected session token: %s", exc)
        raise UnauthenticatedError("Unauthorized") from exc
    user_id = claims.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthenticatedError("Unauthorized")
    return Caller(user_id=user_id)


def current_caller(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> Caller:
    return resolve_caller(authorization, settings)
