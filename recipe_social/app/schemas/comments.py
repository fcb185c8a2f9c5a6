# recipe_social/app/schemas/comments.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from recipe_social.app.domain.models import Comment
from recipe_social.app.schemas.common import SuccessResponse


class CommentCreate(BaseModel):
    text: Optional[str] = None


class CommentUpdate(BaseModel):
    text: Optional[str] = None


class CommentAuthor(BaseModel):
    id: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None


class CommentResponse(BaseModel):
    id: str
    user: str
    post: str
    text: str
    author: Optional[CommentAuthor] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CommentEnvelope(SuccessResponse):
    data: CommentResponse


class CommentListEnvelope(SuccessResponse):
    data: list[CommentResponse]


def comment_to_response(comment: Comment) -> CommentResponse:
    author = None
    if comment.author is not None:
        author = CommentAuthor(
            id=comment.author.id,
            firstName=comment.author.first_name,
            lastName=comment.author.last_name,
            email=comment.author.email,
        )
    return CommentResponse(
        id=comment.id,
        user=comment.user_id,
        post=comment.post_id,
        text=comment.text,
        author=author,
        createdAt=comment.created_at,
        updatedAt=comment.updated_at,
    )
