#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Security utilities
==================
Passwords are hashed with bcrypt (called directly; passlib does not support
bcrypt>=4).  A bearer token is a signed JWT naming the user in ``sub``;
routes receive that user id through ``get_current_user_id`` and resolve it to
a stored user in ``routes.deps``.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt

from .config import get_settings

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"

bearer_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Passwords
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """False for a wrong password and for a malformed stored hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Tokens
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# -----------------------------------------------------------------------------

def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "exp": datetime.now(tz=timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


# -----------------------------------------------------------------------------

def user_id_from_token(token: str) -> str:
    """Return the user id a token was issued for, or raise a 401."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        logger.debug("Rejected expired token")
        raise credentials_error("Token expired")
    except JWTError as e:
        logger.debug("Rejected token: %s", e)
        raise credentials_error()

    user_id = claims.get("sub")
    if not user_id or claims.get("type") != TOKEN_TYPE:
        logger.debug("Rejected token with claims %s", sorted(claims))
        raise credentials_error()
    return user_id


# -----------------------------------------------------------------------------

async def get_current_user_id(token: str = Depends(bearer_scheme)) -> str:
    return user_id_from_token(token)


# -----------------------------------------------------------------------------
