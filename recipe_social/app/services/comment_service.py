from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from recipe_social.app.domain.errors import (
    BadRequestError,
    EntityNotFoundError,
    InvalidIdError,
)
from recipe_social.app.domain.ids import is_valid_object_id, new_object_id
from recipe_social.app.domain.models import AuthorSummary, Comment
from recipe_social.app.infra.db.base import Repositories

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(text: Optional[str]) -> str:
    value = (text or "").strip()
    if not value:
        raise BadRequestError("Comment text is required")
    return value


class CommentService:
    def __init__(self, repos: Repositories):
        self._users = repos.users
        self._posts = repos.posts
        self._comments = repos.comments

    def create_comment(self, post_id: str, user_id: str, text: Optional[str]) -> Comment:
        """
        Comment on a post. Both the post and the author must exist.
        The checks and the write are not atomic.
        """
        body = _require_text(text)
        post = self._posts.get_by_id(post_id) if is_valid_object_id(post_id) else None
        if post is None:
            raise EntityNotFoundError("Post", post_id)
        user = self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)

        now = _now_utc()
        comment = self._comments.create(
            Comment(
                id=new_object_id(),
                user_id=user_id,
                post_id=post_id,
                text=body,
                created_at=now,
                updated_at=now,
            )
        )
        post.comments.append(comment.id)
        self._posts.update(post)
        logger.info("Created comment: id=%s, post=%s, user=%s", comment.id, post_id, user_id)
        comment.author = AuthorSummary.from_user(user)
        return comment

    def list_post_comments(self, post_id: str) -> list[Comment]:
        comments = self._comments.list_by_post(post_id)
        authors = {
            user.id: AuthorSummary.from_user(user)
            for user in self._users.get_many({c.user_id for c in comments})
        }
        for comment in comments:
            comment.author = authors.get(comment.user_id)
        return comments

    def get_comment(self, comment_id: str) -> Comment:
        if not is_valid_object_id(comment_id):
            raise InvalidIdError("comment", comment_id)
        comment = self._comments.get_by_id(comment_id)
        if comment is None:
            raise EntityNotFoundError("Comment", comment_id)
        return comment

    def edit_comment(self, comment_id: str, text: Optional[str]) -> Comment:
        body = _require_text(text)
        comment = self._comments.get_by_id(comment_id) if is_valid_object_id(comment_id) else None
        if comment is None:
            raise EntityNotFoundError("Comment", comment_id)
        comment.text = body
        comment.updated_at = _now_utc()
        updated = self._comments.update(comment)
        logger.info("Edited comment: id=%s", comment_id)
        return updated

    def delete_comment(self, comment_id: str) -> Comment:
        comment = self.get_comment(comment_id)
        self._comments.delete(comment_id)

        post = self._posts.get_by_id(comment.post_id)
        if post is not None and comment_id in post.comments:
            post.comments = [c for c in post.comments if c != comment_id]
            self._posts.update(post)
        logger.info("Deleted comment: id=%s", comment_id)
        return comment
