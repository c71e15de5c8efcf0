#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Auth router
===========
POST /api/v1/auth/login   — exchange e-mail + password for a bearer token
GET  /api/v1/auth/me      — the authenticated user
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from knowledge_base.core.security import create_access_token, credentials_error
from knowledge_base.models import User
from knowledge_base.schemas import LoginRequest, TokenResponse, UserOut
from knowledge_base.services.users import UserService
from .deps import get_current_user, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# -----------------------------------------------------------------------------

@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, users: UserService = Depends(get_user_service)):
    user = await users.authenticate(data.email, data.password)
    if user is None:
        logger.info("Failed login for %s", data.email)
        raise credentials_error("Invalid credentials")
    logger.info("User %s logged in", user.id)
    return TokenResponse(
        access_token=create_access_token(user.id),
        user=UserOut.model_validate(user),
    )


# -----------------------------------------------------------------------------

@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


# -----------------------------------------------------------------------------
