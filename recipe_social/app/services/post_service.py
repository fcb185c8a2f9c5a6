"""
Recipe posts and feed composition.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from recipe_social.app.domain.errors import (
    BadRequestError,
    EntityNotFoundError,
    InvalidIdError,
    MissingFieldsError,
)
from recipe_social.app.domain.ids import is_valid_object_id, new_object_id
from recipe_social.app.domain.models import (
    AuthorSummary,
    Difficulty,
    FeedPage,
    Ingredient,
    MealType,
    RecipePost,
    Step,
)
from recipe_social.app.infra.db.base import Repositories

logger = logging.getLogger(__name__)

REQUIRED_POST_FIELDS = ("user", "title", "recipe", "prepTime", "cookTime", "totalTime")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _is_missing(value: Any) -> bool:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return value is None or (isinstance(value, str) and not value.strip())


def _minutes(data: Mapping[str, Any], key: str) -> float:
    value = data[key]
    if isinstance(value, bool):
        raise BadRequestError(f"{key} must be a number of minutes")
    try:
        minutes = float(value)
    except (TypeError, ValueError) as exc:
        raise BadRequestError(f"{key} must be a number of minutes") from exc
    if minutes < 0:
        raise BadRequestError(f"{key} cannot be negative")
    return minutes


def _enum_value(enum_cls, value: Any, field_name: str):
    if _is_missing(value):
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise BadRequestError(f"Invalid {field_name}. Allowed values: {allowed}") from exc


def _ingredients(items: Optional[Iterable[Mapping[str, Any]]]) -> list[Ingredient]:
    return [
        Ingredient(name=str(item.get("name") or ""), quantity=item.get("quantity"))
        for item in items or []
    ]


def _steps(items: Optional[Iterable[Mapping[str, Any]]]) -> list[Step]:
    steps = []
    for index, item in enumerate(items or [], start=1):
        number = item.get("stepNumber")
        steps.append(
            Step(
                step_number=int(number) if number is not None else index,
                instruction=str(item.get("instruction") or ""),
            )
        )
    return steps


class PostService:
    """
    Service for recipe posts.

    Responsibilities:
    - Create posts (required fields, enumerations)
    - Delete posts by id, cascading to their comments
    - Compose the home feed (followed users + public profiles)
    - Paginated feed of followed users only
    """

    def __init__(
        self,
        repos: Repositories,
        default_limit: int = 10,
        max_limit: int = 50,
    ):
        self._users = repos.users
        self._posts = repos.posts
        self._comments = repos.comments
        self.default_limit = default_limit
        self.max_limit = max_limit

    def create_post(self, data: Mapping[str, Any]) -> RecipePost:
        missing = [f for f in REQUIRED_POST_FIELDS if _is_missing(data.get(f))]
        if missing:
            logger.warning("Recipe post missing fields: %s", missing)
            raise MissingFieldsError(missing)

        user_id = str(data["user"])
        if not is_valid_object_id(user_id):
            raise InvalidIdError("user", user_id)

        servings = data.get("servings")
        if servings is not None:
            try:
                servings = int(servings)
            except (TypeError, ValueError) as exc:
                raise BadRequestError("servings must be an integer") from exc
            if servings < 0:
                raise BadRequestError("servings cannot be negative")

        post = RecipePost(
            id=new_object_id(),
            user_id=user_id,
            title=str(data["title"]).strip(),
            recipe=str(data["recipe"]),
            prep_time=_minutes(data, "prepTime"),
            cook_time=_minutes(data, "cookTime"),
            total_time=_minutes(data, "totalTime"),
            image_url=data.get("imageUrl"),
            ingredients=_ingredients(data.get("ingredients")),
            steps=_steps(data.get("steps")),
            servings=servings,
            difficulty=_enum_value(Difficulty, data.get("difficulty"), "difficulty"),
            meal_type=_enum_value(MealType, data.get("mealType"), "mealType"),
            created_at=_now_utc(),
        )
        created = self._posts.create(post)
        logger.info("Created recipe post: id=%s, user=%s", created.id, user_id)
        return created

    def get_post(self, post_id: str) -> RecipePost:
        if not is_valid_object_id(post_id):
            raise InvalidIdError("post", post_id)
        post = self._posts.get_by_id(post_id)
        if post is None:
            raise EntityNotFoundError("Recipe post", post_id)
        return self._populate([post])[0]

    def delete_post(self, post_id: str) -> RecipePost:
        # shape check happens before any storage round-trip
        if not is_valid_object_id(post_id):
            raise InvalidIdError("post", post_id)

        deleted = self._posts.delete(post_id)
        if deleted is None:
            raise EntityNotFoundError("Recipe post", post_id)

        removed = self._comments.delete_by_posts([post_id])
        logger.info("Deleted recipe post: id=%s comments=%d", post_id, removed)
        return deleted

    def compose_feed(self, requesting_user_id: str) -> list[RecipePost]:
        """
        Posts from followed users and from every public profile, newest first.

        Raises:
            EntityNotFoundError: If the requesting user does not exist
        """
        user = self._users.get_by_id(requesting_user_id)
        if user is None:
            raise EntityNotFoundError("User", requesting_user_id)

        public_ids = self._users.list_public_ids()
        author_ids = [*user.following, *public_ids]
        posts = self._posts.list_by_authors(author_ids)
        logger.debug(
            "Feed for %s: %d authors, %d posts", requesting_user_id, len(set(author_ids)), len(posts)
        )
        return self._populate(posts)

    def followed_users_feed(
        self,
        user_id: str,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> FeedPage:
        """
        Posts of the users `user_id` follows, newest first, paginated.

        `limit` is clamped to [1, max_limit] and `skip` to >= 0. A user who
        follows nobody gets an empty page, not an error.
        """
        limit = self._clamp_limit(limit)
        skip = max(0, skip or 0)

        user = self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        if not user.following:
            return FeedPage(posts=[], limit=limit, skip=skip, follows_anyone=False)

        posts = self._posts.list_by_authors(user.following, limit=limit, skip=skip)
        return FeedPage(posts=self._populate(posts), limit=limit, skip=skip)

    def _clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        return max(1, min(limit, self.max_limit))

    def _populate(self, posts: list[RecipePost]) -> list[RecipePost]:
        authors = {
            user.id: AuthorSummary.from_user(user)
            for user in self._users.get_many({p.user_id for p in posts})
        }
        for post in posts:
            post.author = authors.get(post.user_id)
        return posts
