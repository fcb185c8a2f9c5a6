from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from recipe_social.app.deps import (
    CurrentUser,
    get_current_user,
    get_post_service,
    get_user_service,
)
from recipe_social.app.domain.errors import BadRequestError, StorageError
from recipe_social.app.schemas.common import SuccessResponse
from recipe_social.app.schemas.posts import FeedEnvelope, post_to_response
from recipe_social.app.schemas.users import (
    UserCreate,
    UserEnvelope,
    UserResponse,
    user_to_response,
)
from recipe_social.app.services.post_service import PostService
from recipe_social.app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(users: UserService = Depends(get_user_service)) -> list[UserResponse]:
    try:
        return [user_to_response(u) for u in users.list_users()]
    except StorageError as exc:
        raise BadRequestError(str(exc), detail=exc.detail) from exc


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    users: UserService = Depends(get_user_service),
) -> UserEnvelope:
    user = users.create_user(payload.model_dump(exclude_none=True))
    return UserEnvelope(message="User created successfully", data=user_to_response(user))


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(user_id: str, users: UserService = Depends(get_user_service)) -> UserEnvelope:
    return UserEnvelope(data=user_to_response(users.get_user(user_id)))


@router.api_route("/{user_id}", methods=["PUT", "PATCH"], response_model=UserEnvelope)
async def update_user(
    user_id: str,
    changes: Optional[dict[str, Any]] = Body(default=None),
    users: UserService = Depends(get_user_service),
) -> UserEnvelope:
    user = users.update_user(user_id, changes or {})
    return UserEnvelope(message="User updated successfully", data=user_to_response(user))


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(user_id: str, users: UserService = Depends(get_user_service)) -> SuccessResponse:
    users.delete_user(user_id)
    return SuccessResponse(message="User deleted successfully")


@router.get("/{user_id}/followed-posts", response_model=FeedEnvelope)
async def followed_posts(
    user_id: str,
    limit: Optional[int] = Query(default=None),
    skip: Optional[int] = Query(default=None),
    posts: PostService = Depends(get_post_service),
) -> FeedEnvelope:
    page = posts.followed_users_feed(user_id, limit=limit, skip=skip)
    if not page.follows_anyone:
        return FeedEnvelope(message="User follows no one", data=[])
    return FeedEnvelope(
        data=[post_to_response(p) for p in page.posts],
        limit=page.limit,
        skip=page.skip,
    )


@router.post("/me/following/{target_id}", response_model=UserEnvelope)
async def follow_user(
    target_id: str,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserEnvelope:
    user = users.follow(current.id, target_id)
    return UserEnvelope(message="User followed", data=user_to_response(user))


@router.delete("/me/following/{target_id}", response_model=UserEnvelope)
async def unfollow_user(
    target_id: str,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserEnvelope:
    user = users.unfollow(current.id, target_id)
    return UserEnvelope(message="User unfollowed", data=user_to_response(user))
