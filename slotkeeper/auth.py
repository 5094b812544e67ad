"""
Bearer-token actor resolution.

Tokens are issued by an external identity provider sharing SECRET_KEY.
The booking API only verifies them and reads two claims: ``sub`` (actor
id) and ``role``.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Callable, Dict, Optional, cast

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.exceptions import ForbiddenException, UnauthorizedException
from .principal import ANONYMOUS, ROLE_USER, ROLE_RIGHTS, MANAGE_BOOKINGS, Actor

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token (signature and expiry)."""
    payload_raw = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.algorithm],
        options={"verify_aud": False},
    )
    return cast(Dict[str, Any], payload_raw)


def create_access_token(
    subject: str,
    role: str = ROLE_USER,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token for ``subject`` with ``role``.

    Args:
        subject: Actor identifier stored in ``sub``
        role: Actor role stored in ``role``
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": subject, "role": role, "exp": expire}

    encoded_jwt = cast(
        str,
        jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm),
    )
    logger.debug(f"Created access token for actor: {subject}")
    return encoded_jwt


def actor_from_token(token: Optional[str]) -> Actor:
    """
    Resolve a bearer token to an Actor.

    Missing, malformed, expired or unsigned tokens resolve to ANONYMOUS;
    this never raises.
    """
    if not token:
        return ANONYMOUS

    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.debug(f"JWT validation error in optional auth: {str(e)}")
        return ANONYMOUS

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        logger.warning("Token payload missing 'sub' field")
        return ANONYMOUS

    role = payload.get("role")
    if not isinstance(role, str) or role not in ROLE_RIGHTS:
        role = ROLE_USER

    return Actor(actor_id=subject, role=role)


async def get_current_actor(token: Optional[str] = Depends(oauth2_scheme_optional)) -> Actor:
    """
    Dependency resolving the caller, anonymous when no valid token is present.

    Used by endpoints that serve both anonymous and authenticated callers.
    """
    return actor_from_token(token)


def require_right(right: str) -> Callable[..., Any]:
    """Dependency factory: the caller must be authenticated and hold ``right``."""

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.is_authenticated:
            raise UnauthorizedException("Please authenticate", code="NOT_AUTHENTICATED").to_http_exception()
        if not actor.has_right(right):
            logger.info(f"Actor {actor.actor_id} ({actor.role}) lacks right {right}")
            raise ForbiddenException("Forbidden", code="FORBIDDEN").to_http_exception()
        return actor

    dependency.__name__ = f"require_{right}"
    return dependency


require_admin = require_right(MANAGE_BOOKINGS)
