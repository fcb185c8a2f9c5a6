from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from recipe_social.app.deps import (
    CurrentUser,
    bearer_token,
    get_current_user,
    get_token_service,
    get_user_service,
)
from recipe_social.app.schemas.auth import LoginRequest, LoginResponse, LoginUser, MessageResponse
from recipe_social.app.schemas.users import UserEnvelope, user_to_response
from recipe_social.app.services.token_service import TokenService
from recipe_social.app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    users: UserService = Depends(get_user_service),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    user = users.authenticate(payload.email, payload.password)
    token = tokens.issue(user.id)
    logger.info("User logged in: id=%s", user.id)
    return LoginResponse(
        message="Login successful",
        user=LoginUser(id=user.id, email=user.email, fullName=user.full_name),
        token=token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Optional[str] = Depends(bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> MessageResponse:
    tokens.revoke(token)
    return MessageResponse(message="Logged out successfully")


@router.get("/auth/me", response_model=UserEnvelope)
async def me(
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserEnvelope:
    return UserEnvelope(data=user_to_response(users.get_user(current.id)))
