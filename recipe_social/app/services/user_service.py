"""
User accounts and the follow graph.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from recipe_social.app.domain.errors import (
    BadRequestError,
    DuplicateEmailError,
    EntityNotFoundError,
    MissingFieldsError,
    UnauthorizedError,
)
from recipe_social.app.domain.ids import new_object_id
from recipe_social.app.domain.models import ProfileType, Role, User
from recipe_social.app.infra.db.base import Repositories
from recipe_social.app.services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_USER_FIELDS = ("firstName", "lastName", "email", "password")
ALLOWED_UPDATE_FIELDS = ("firstName", "lastName", "email", "password", "profileType")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def _parse_profile_type(value: Any) -> ProfileType:
    try:
        return ProfileType(value)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in ProfileType)
        raise BadRequestError(f"Invalid profileType. Allowed values: {allowed}") from exc


class UserService:
    """
    Service for user accounts.

    Responsibilities:
    - Register users (required fields, email shape, unique lowercase email)
    - Whitelisted profile updates
    - Credential checks for login
    - Follow / unfollow
    - Account deletion, cascading to the user's posts and comments
    """

    def __init__(self, repos: Repositories):
        self._users = repos.users
        self._posts = repos.posts
        self._comments = repos.comments

    def list_users(self) -> list[User]:
        return self._users.list_all()

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    def create_user(self, data: Mapping[str, Any]) -> User:
        missing = [f for f in REQUIRED_USER_FIELDS if not data.get(f)]
        if missing:
            logger.warning("User registration missing fields: %s", missing)
            raise MissingFieldsError(missing)

        email = normalize_email(str(data["email"]))
        if not is_valid_email(email):
            raise BadRequestError("Invalid email format")
        if self._users.get_by_email(email) is not None:
            raise DuplicateEmailError(email)

        profile_type = _parse_profile_type(data.get("profileType") or ProfileType.PUBLIC.value)
        now = _now_utc()
        user = User(
            id=new_object_id(),
            first_name=str(data["firstName"]).strip(),
            last_name=str(data["lastName"]).strip(),
            email=email,
            password=hash_password(str(data["password"])),
            profile_type=profile_type,
            role=Role.USER,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        created = self._users.create(user)
        logger.info("Created user: id=%s", created.id)
        return created

    def update_user(self, user_id: str, changes: Mapping[str, Any]) -> User:
        if not changes:
            raise BadRequestError("Request body cannot be empty")

        invalid = [key for key in changes if key not in ALLOWED_UPDATE_FIELDS]
        if invalid:
            logger.warning("Rejected user update fields: %s", invalid)
            raise BadRequestError(
                f"Invalid updates. Allowed fields: {', '.join(ALLOWED_UPDATE_FIELDS)}",
                detail=f"Rejected: {', '.join(invalid)}",
            )

        user = self.get_user(user_id)

        if "email" in changes:
            email = normalize_email(str(changes["email"] or ""))
            if not is_valid_email(email):
                raise BadRequestError("Invalid email format")
            existing = self._users.get_by_email(email)
            if existing is not None and existing.id != user.id:
                raise BadRequestError("Email already in use")
            user.email = email
        if "firstName" in changes:
            user.first_name = self._non_empty(changes, "firstName")
        if "lastName" in changes:
            user.last_name = self._non_empty(changes, "lastName")
        if "password" in changes:
            if not changes["password"]:
                raise BadRequestError("password cannot be empty")
            user.password = hash_password(str(changes["password"]))
        if "profileType" in changes:
            user.profile_type = _parse_profile_type(changes["profileType"])

        user.updated_at = _now_utc()
        try:
            updated = self._users.update(user)
        except DuplicateEmailError as exc:
            raise BadRequestError("Email already in use") from exc
        logger.info("Updated user: id=%s fields=%s", user_id, sorted(changes))
        return updated

    def delete_user(self, user_id: str) -> User:
        deleted = self._users.delete(user_id)
        if deleted is None:
            raise EntityNotFoundError("User", user_id)

        post_ids = self._posts.delete_by_author(user_id)
        removed_comments = self._comments.delete_by_posts(post_ids)
        removed_comments += self._comments.delete_by_user(user_id)
        unfollowed = self._users.remove_from_following(user_id)
        logger.info(
            "Deleted user: id=%s posts=%d comments=%d followers=%d",
            user_id,
            len(post_ids),
            removed_comments,
            unfollowed,
        )
        return deleted

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        """
        Check login credentials.

        Raises:
            UnauthorizedError: Unknown email, wrong password or inactive account
        """
        if not email or not password:
            raise UnauthorizedError("Invalid credentials")
        user = self._users.get_by_email(normalize_email(email))
        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login attempt")
            raise UnauthorizedError("Invalid credentials")
        if not user.is_active:
            raise UnauthorizedError("Account is disabled")
        return user

    def follow(self, user_id: str, target_id: str) -> User:
        if user_id == target_id:
            raise BadRequestError("Users cannot follow themselves")
        user = self.get_user(user_id)
        self.get_user(target_id)
        if target_id in user.following:
            return user
        user.following.append(target_id)
        user.updated_at = _now_utc()
        logger.info("User %s now follows %s", user_id, target_id)
        return self._users.update(user)

    def unfollow(self, user_id: str, target_id: str) -> User:
        user = self.get_user(user_id)
        if target_id not in user.following:
            return user
        user.following = [f for f in user.following if f != target_id]
        user.updated_at = _now_utc()
        logger.info("User %s unfollowed %s", user_id, target_id)
        return self._users.update(user)

    @staticmethod
    def _non_empty(changes: Mapping[str, Any], key: str) -> str:
        value = str(changes.get(key) or "").strip()
        if not value:
            raise BadRequestError(f"{key} cannot be empty")
        return value
