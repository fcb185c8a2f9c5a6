# recipe_social/app/infra/db/memory_repo.py
"""
In-process repositories.

Used by STORAGE_BACKEND=memory (local runs) and by the test suite. Every read
returns a copy, so callers must go through update() to persist changes, as
with the Supabase backend.
"""
from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Iterable, Optional, TypeVar

from recipe_social.app.domain.errors import DuplicateEmailError, EntityNotFoundError
from recipe_social.app.domain.models import Comment, RecipePost, User
from recipe_social.app.infra.db.base import (
    CommentRepository,
    RecipePostRepository,
    Repositories,
    RevokedTokenRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _copy(item: T) -> T:
    return copy.deepcopy(item)


def _created_key(item: RecipePost | Comment) -> datetime:
    return item.created_at or _EPOCH


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}

    def create(self, user: User) -> User:
        with self._lock:
            self._check_email_free(user)
            self._users[user.id] = _copy(user)
        return _copy(user)

    def get_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return _copy(user) if user else None

    def get_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return _copy(user)
        return None

    def get_many(self, user_ids: Iterable[str]) -> list[User]:
        wanted = set(user_ids)
        with self._lock:
            return [_copy(u) for uid, u in self._users.items() if uid in wanted]

    def list_all(self) -> list[User]:
        with self._lock:
            return [_copy(u) for u in self._users.values()]

    def list_public_ids(self) -> list[str]:
        with self._lock:
            return [u.id for u in self._users.values() if u.is_public]

    def update(self, user: User) -> User:
        with self._lock:
            if user.id not in self._users:
                raise EntityNotFoundError("User", user.id)
            self._check_email_free(user)
            self._users[user.id] = _copy(user)
        return _copy(user)

    def delete(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.pop(user_id, None)

    def remove_from_following(self, user_id: str) -> int:
        changed = 0
        with self._lock:
            for user in self._users.values():
                if user_id in user.following:
                    user.following = [f for f in user.following if f != user_id]
                    changed += 1
        return changed

    def _check_email_free(self, user: User) -> None:
        # caller holds self._lock
        for other in self._users.values():
            if other.email == user.email and other.id != user.id:
                raise DuplicateEmailError(user.email)


class InMemoryRecipePostRepository(RecipePostRepository):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._posts: dict[str, RecipePost] = {}

    def create(self, post: RecipePost) -> RecipePost:
        with self._lock:
            self._posts[post.id] = _copy(post)
        return _copy(post)

    def get_by_id(self, post_id: str) -> Optional[RecipePost]:
        with self._lock:
            post = self._posts.get(post_id)
            return _copy(post) if post else None

    def list_by_authors(
        self,
        author_ids: Iterable[str],
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[RecipePost]:
        authors = set(author_ids)
        with self._lock:
            matched = [p for p in self._posts.values() if p.user_id in authors]
        matched.sort(key=_created_key, reverse=True)
        end = None if limit is None else skip + limit
        return [_copy(p) for p in matched[skip:end]]

    def update(self, post: RecipePost) -> RecipePost:
        with self._lock:
            if post.id not in self._posts:
                raise EntityNotFoundError("Recipe post", post.id)
            stored = _copy(post)
            stored.author = None
            self._posts[post.id] = stored
        return _copy(post)

    def delete(self, post_id: str) -> Optional[RecipePost]:
        with self._lock:
            return self._posts.pop(post_id, None)

    def delete_by_author(self, user_id: str) -> list[str]:
        with self._lock:
            doomed = [pid for pid, p in self._posts.items() if p.user_id == user_id]
            for pid in doomed:
                del self._posts[pid]
        return doomed


class InMemoryCommentRepository(CommentRepository):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._comments: dict[str, Comment] = {}

    def create(self, comment: Comment) -> Comment:
        with self._lock:
            self._comments[comment.id] = _copy(comment)
        return _copy(comment)

    def get_by_id(self, comment_id: str) -> Optional[Comment]:
        with self._lock:
            comment = self._comments.get(comment_id)
            return _copy(comment) if comment else None

    def list_by_post(self, post_id: str) -> list[Comment]:
        with self._lock:
            matched = [c for c in self._comments.values() if c.post_id == post_id]
        matched.sort(key=_created_key)
        return [_copy(c) for c in matched]

    def update(self, comment: Comment) -> Comment:
        with self._lock:
            if comment.id not in self._comments:
                raise EntityNotFoundError("Comment", comment.id)
            stored = _copy(comment)
            stored.author = None
            self._comments[comment.id] = stored
        return _copy(comment)

    def delete(self, comment_id: str) -> Optional[Comment]:
        with self._lock:
            return self._comments.pop(comment_id, None)

    def delete_by_posts(self, post_ids: Iterable[str]) -> int:
        posts = set(post_ids)
        with self._lock:
            doomed = [cid for cid, c in self._comments.items() if c.post_id in posts]
            for cid in doomed:
                del self._comments[cid]
        return len(doomed)

    def delete_by_user(self, user_id: str) -> int:
        with self._lock:
            doomed = [cid for cid, c in self._comments.items() if c.user_id == user_id]
            for cid in doomed:
                del self._comments[cid]
        return len(doomed)


class InMemoryRevokedTokenRepository(RevokedTokenRepository):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._revoked: dict[str, datetime] = {}

    def add(self, token_hash: str, expires_at: datetime) -> None:
        with self._lock:
            self._revoked.setdefault(token_hash, expires_at)

    def contains(self, token_hash: str) -> bool:
        with self._lock:
            return token_hash in self._revoked

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        with self._lock:
            expired = [h for h, exp in self._revoked.items() if exp <= now]
            for token_hash in expired:
                del self._revoked[token_hash]
        if expired:
            logger.info("Purged %d expired revocations", len(expired))
        return len(expired)


def build_memory_repositories() -> Repositories:
    logger.info("Using in-memory storage backend")
    return Repositories(
        users=InMemoryUserRepository(),
        posts=InMemoryRecipePostRepository(),
        comments=InMemoryCommentRepository(),
        revoked_tokens=InMemoryRevokedTokenRepository(),
    )
