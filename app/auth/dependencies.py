"""
Authentication Dependencies
JWT token handling and the identity gate used by every protected route
"""

import logging
from datetime import timedelta
from typing import Iterable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.database import database, utcnow

logger = logging.getLogger(__name__)

# auto_error is off so a missing header answers 401 rather than 403
security = HTTPBearer(auto_error=False)

ROLE_STUDENT = "student"
ROLE_CLUB_LEAD = "club_lead"
ROLE_ADMIN = "admin"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Claims to encode (``sub``, ``email``, ``role``)
        expires_delta: Token lifetime, defaults to JWT_EXPIRATION_HOURS

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def create_user_token(user: dict) -> str:
    """Token for a users row"""
    return create_access_token({
        "sub": str(user["id"]),
        "email": user["email"],
        "role": user["role"],
    })


def decode_access_token(token: str) -> dict:
    """
    Decode JWT access token

    Raises:
        HTTPException: 401 if the token is expired or invalid
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired. Please login again.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token.",
            headers={"WWW-Authenticate": "Bearer"},
        )


def has_role(principal: Optional[dict], roles: Iterable[str]) -> bool:
    """Capability check: does the principal hold one of the given global roles"""
    if not principal:
        return False
    return principal.get("role") in set(roles)


async def _resolve_principal(credentials: Optional[HTTPAuthorizationCredentials]) -> dict:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided. Please login.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token."
        )

    user = await database.fetch_one(
        "SELECT * FROM users WHERE id = :id",
        {"id": str(user_id)}
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token. User not found."
        )

    principal = dict(user)
    principal["id"] = str(principal["id"])
    return principal


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    Require an authenticated user

    Returns:
        The users row for the token subject (includes ``id`` and ``role``)
    """
    return await _resolve_principal(credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """Resolve the caller if a valid token is present, else None; never raises"""
    if credentials is None:
        return None
    try:
        return await _resolve_principal(credentials)
    except Exception as e:
        logger.debug("Optional auth fell back to anonymous: %s", e)
        return None


def require_roles(*roles: str):
    """Dependency factory: authenticated user holding one of ``roles``"""
    allowed = frozenset(roles)

    async def dependency(current_user: dict = Depends(get_current_user)) -> dict:
        if not has_role(current_user, allowed):
            logger.info("Denied user %s (role %s), needs one of %s",
                        current_user["id"], current_user.get("role"), sorted(allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=_forbidden_message(allowed)
            )
        return current_user

    return dependency


def _forbidden_message(allowed: frozenset) -> str:
    if allowed == {ROLE_ADMIN}:
        return "Admin access required."
    if allowed == {ROLE_ADMIN, ROLE_CLUB_LEAD}:
        return "Club lead or admin access required."
    return "Not authorized."


get_admin = require_roles(ROLE_ADMIN)
get_club_lead_or_admin = require_roles(ROLE_ADMIN, ROLE_CLUB_LEAD)
