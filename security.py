"""
Bearer-token authentication and resource-ownership checks.

Three layers, each used as a FastAPI dependency or called from a handler:

- :func:`issue_token` / :func:`verify_token` sign and check the short-lived
  email claim.
- :func:`get_current_claims` is the access guard for protected routes. It
  returns the verified claims to the handler instead of stashing them on the
  request.
- :func:`ensure_owner` compares the verified email with the identity the
  request targets.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Header
from jose import JWTError, jwt

from config import settings
from errors import Forbidden, InvalidOrExpiredToken, Unauthorized

logger = logging.getLogger(__name__)


def issue_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None,
                now: Optional[datetime] = None) -> str:
    if not claims.get("email"):
        raise ValueError("claims must include an email")
    issued = now or datetime.now(timezone.utc)
    expire = issued + (expires_delta or settings.access_token_expires)
    to_encode = dict(claims)
    to_encode.update({"iat": int(issued.timestamp()), "exp": int(expire.timestamp())})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        # Expired and tampered tokens are reported the same way.
        logger.debug("Token rejected: %s", e)
        raise InvalidOrExpiredToken() from e
    if not isinstance(payload.get("email"), str):
        raise InvalidOrExpiredToken()
    return payload


def parse_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthorized()
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthorized()
    return parts[1]


async def get_current_claims(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    token = parse_bearer(authorization)
    try:
        return verify_token(token)
    except InvalidOrExpiredToken:
        logger.info("Rejected request with an invalid bearer token")
        raise Unauthorized()


def ensure_owner(claims: Dict[str, Any], email: Optional[str]) -> None:
    """Raise :class:`Forbidden` unless the verified email is ``email``."""
    if claims.get("email") != email:
        logger.info("Ownership check failed for %s", claims.get("email"))
        raise Forbidden()
