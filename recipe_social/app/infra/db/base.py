# recipe_social/app/infra/db/base.py
"""
Abstract repositories over the document store.
This interface allows easy swapping between different storage backends.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from recipe_social.app.domain.models import Comment, RecipePost, User


class UserRepository(ABC):
    """
    Abstract interface for user storage.

    Implementations:
    - SupabaseUserRepository: `users` table in Supabase
    - InMemoryUserRepository: process-local, used for local runs and tests
    """

    @abstractmethod
    def create(self, user: User) -> User:
        """
        Persist a new user.

        Args:
            user: The user to store, with id and timestamps already set

        Returns:
            The stored user

        Raises:
            DuplicateEmailError: If another user already has this email
        """
        pass

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """
        Find a user by email. `email` must already be lowercased.
        """
        pass

    @abstractmethod
    def get_many(self, user_ids: Iterable[str]) -> list[User]:
        """
        Fetch every user whose id is in `user_ids`. Unknown ids are skipped.
        """
        pass

    @abstractmethod
    def list_all(self) -> list[User]:
        pass

    @abstractmethod
    def list_public_ids(self) -> list[str]:
        """
        Return the ids of all users whose profile type is Public.
        """
        pass

    @abstractmethod
    def update(self, user: User) -> User:
        """
        Replace the stored user with `user`.

        Raises:
            EntityNotFoundError: If the user no longer exists
            DuplicateEmailError: If another user already has the new email
        """
        pass

    @abstractmethod
    def delete(self, user_id: str) -> Optional[User]:
        """
        Delete a user.

        Returns:
            The deleted user, or None if it did not exist
        """
        pass

    @abstractmethod
    def remove_from_following(self, user_id: str) -> int:
        """
        Remove `user_id` from every user's following list.

        Returns:
            Number of users changed
        """
        pass


class RecipePostRepository(ABC):
    """
    Abstract interface for recipe post storage.
    """

    @abstractmethod
    def create(self, post: RecipePost) -> RecipePost:
        pass

    @abstractmethod
    def get_by_id(self, post_id: str) -> Optional[RecipePost]:
        pass

    @abstractmethod
    def list_by_authors(
        self,
        author_ids: Iterable[str],
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[RecipePost]:
        """
        Query posts whose author is in `author_ids`, newest first.

        Args:
            author_ids: Set-membership filter; duplicates are harmless
            limit: Max number of posts, or None for all
            skip: Number of posts to skip before collecting

        Returns:
            Posts sorted by created_at descending
        """
        pass

    @abstractmethod
    def update(self, post: RecipePost) -> RecipePost:
        pass

    @abstractmethod
    def delete(self, post_id: str) -> Optional[RecipePost]:
        """
        Delete a post.

        Returns:
            The deleted post, or None if it did not exist
        """
        pass

    @abstractmethod
    def delete_by_author(self, user_id: str) -> list[str]:
        """
        Delete every post written by `user_id`.

        Returns:
            Ids of the deleted posts
        """
        pass


class CommentRepository(ABC):
    """
    Abstract interface for comment storage.
    """

    @abstractmethod
    def create(self, comment: Comment) -> Comment:
        pass

    @abstractmethod
    def get_by_id(self, comment_id: str) -> Optional[Comment]:
        pass

    @abstractmethod
    def list_by_post(self, post_id: str) -> list[Comment]:
        """
        Comments of a post, oldest first.
        """
        pass

    @abstractmethod
    def update(self, comment: Comment) -> Comment:
        pass

    @abstractmethod
    def delete(self, comment_id: str) -> Optional[Comment]:
        pass

    @abstractmethod
    def delete_by_posts(self, post_ids: Iterable[str]) -> int:
        """
        Delete every comment attached to one of `post_ids`.

        Returns:
            Number of comments deleted
        """
        pass

    @abstractmethod
    def delete_by_user(self, user_id: str) -> int:
        pass


class RevokedTokenRepository(ABC):
    """
    Abstract interface for the token revocation set.

    Must be safe for concurrent add/contains across requests. Backends shared
    between processes (Supabase) keep revocations visible to every worker.
    """

    @abstractmethod
    def add(self, token_hash: str, expires_at: datetime) -> None:
        """
        Record a revoked token. Adding the same hash twice is a no-op.

        Args:
            token_hash: SHA-256 hex digest of the raw token
            expires_at: When the token would have expired anyway
        """
        pass

    @abstractmethod
    def contains(self, token_hash: str) -> bool:
        pass

    @abstractmethod
    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """
        Drop revocations whose token has expired naturally.

        Returns:
            Number of entries removed
        """
        pass


@dataclass
class Repositories:
    """Bundle of repositories handed to the services."""
    users: UserRepository
    posts: RecipePostRepository
    comments: CommentRepository
    revoked_tokens: RevokedTokenRepository
