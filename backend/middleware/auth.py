"""
Bearer-token authentication.

Login and session management live outside this service; it only trusts
short-lived HS256 JWTs whose `sub` claim is the user id. Routes depend on
require_user_id() to get the caller's identity.
"""
import logging
from datetime import datetime, timezone, timedelta
from fastapi import Header, HTTPException
from typing import Optional

import jwt

from config import settings

logger = logging.getLogger(__name__)

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def decode_access_token(token: str) -> dict:
    if not settings.jwt_secret:
        raise HTTPException(
            status_code=500,
            detail="Server auth misconfigured (JWT secret missing).",
        )
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token is expired.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Token is invalid.")


def issue_access_token(*, user_id: str, email: str = "", account_type: str = "Student") -> str:
    now = _now_utc()
    exp = now.replace(microsecond=0) + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": user_id,
        "email": email,
        "accountType": account_type,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if not settings.jwt_secret:
        raise HTTPException(
            status_code=500,
            detail="Server auth misconfigured (JWT secret missing).",
        )
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


async def require_user_id(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """Dependency: the authenticated caller's user id, or 401."""
    token = _parse_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Token is missing.")
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Access token without subject rejected")
        raise HTTPException(status_code=401, detail="Token is invalid.")
    return user_id
