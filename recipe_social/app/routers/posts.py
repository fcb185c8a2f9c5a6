from __future__ import annotations

from fastapi import APIRouter, Depends, status

from recipe_social.app.deps import (
    CurrentUser,
    get_comment_service,
    get_current_user,
    get_post_service,
)
from recipe_social.app.schemas.comments import (
    CommentCreate,
    CommentEnvelope,
    CommentListEnvelope,
    comment_to_response,
)
from recipe_social.app.schemas.posts import (
    DeletedPost,
    DeletedPostEnvelope,
    RecipePostCreate,
    RecipePostEnvelope,
    RecipePostListEnvelope,
    post_to_response,
)
from recipe_social.app.services.comment_service import CommentService
from recipe_social.app.services.post_service import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=RecipePostListEnvelope)
async def get_feed(
    current: CurrentUser = Depends(get_current_user),
    posts: PostService = Depends(get_post_service),
) -> RecipePostListEnvelope:
    feed = posts.compose_feed(current.id)
    return RecipePostListEnvelope(data=[post_to_response(p) for p in feed])


@router.post("", response_model=RecipePostEnvelope, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: RecipePostCreate,
    posts: PostService = Depends(get_post_service),
) -> RecipePostEnvelope:
    post = posts.create_post(payload.model_dump(exclude_none=True))
    return RecipePostEnvelope(
        message="Recipe post created successfully",
        data=post_to_response(post),
    )


@router.get("/{post_id}", response_model=RecipePostEnvelope)
async def get_post(post_id: str, posts: PostService = Depends(get_post_service)) -> RecipePostEnvelope:
    return RecipePostEnvelope(data=post_to_response(posts.get_post(post_id)))


@router.delete("/{post_id}", response_model=DeletedPostEnvelope)
async def delete_post(
    post_id: str,
    posts: PostService = Depends(get_post_service),
) -> DeletedPostEnvelope:
    deleted = posts.delete_post(post_id)
    return DeletedPostEnvelope(
        message="Recipe post deleted successfully",
        data=DeletedPost(postId=deleted.id, title=deleted.title),
    )


@router.post(
    "/{post_id}/comments",
    response_model=CommentEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: str,
    payload: CommentCreate,
    current: CurrentUser = Depends(get_current_user),
    comments: CommentService = Depends(get_comment_service),
) -> CommentEnvelope:
    comment = comments.create_comment(post_id, current.id, payload.text)
    return CommentEnvelope(
        message="Comment created successfully",
        data=comment_to_response(comment),
    )


@router.get("/{post_id}/comments", response_model=CommentListEnvelope)
async def list_comments(
    post_id: str,
    comments: CommentService = Depends(get_comment_service),
) -> CommentListEnvelope:
    items = comments.list_post_comments(post_id)
    return CommentListEnvelope(data=[comment_to_response(c) for c in items])
