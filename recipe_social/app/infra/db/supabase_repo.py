from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from recipe_social.app.domain.errors import (
    ConflictError,
    DuplicateEmailError,
    EntityNotFoundError,
    RepositoryError,
    SocialError,
)
from recipe_social.app.domain.models import (
    Comment,
    Difficulty,
    Ingredient,
    MealType,
    ProfileType,
    RecipePost,
    Role,
    Step,
    User,
)
from recipe_social.app.infra.db.base import (
    CommentRepository,
    RecipePostRepository,
    Repositories,
    RevokedTokenRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

Row = dict[str, Any]

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

USER_COLUMNS = (
    "id,first_name,last_name,email,password,profile_type,role,is_active,"
    "following,refresh_token,created_at,updated_at"
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _safe_int(value: object, default: int = 0) -> int:
    return int(value) if value else default


def _row_to_user(row: Row) -> User:
    return User(
        id=str(row["id"]),
        first_name=str(row.get("first_name") or ""),
        last_name=str(row.get("last_name") or ""),
        email=str(row["email"]),
        password=str(row.get("password") or ""),
        profile_type=ProfileType(row.get("profile_type") or ProfileType.PUBLIC.value),
        role=Role(row.get("role") or Role.USER.value),
        is_active=bool(row.get("is_active", True)),
        following=[str(f) for f in row.get("following") or []],
        refresh_token=row.get("refresh_token"),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _user_to_row(user: User) -> Row:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "password": user.password,
        "profile_type": user.profile_type.value,
        "role": user.role.value,
        "is_active": user.is_active,
        "following": list(user.following),
        "refresh_token": user.refresh_token,
        "created_at": _iso(user.created_at),
        "updated_at": _iso(user.updated_at),
    }


def _row_to_post(row: Row) -> RecipePost:
    return RecipePost(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        title=str(row["title"]),
        recipe=str(row["recipe"]),
        prep_time=float(row["prep_time"]),
        cook_time=float(row["cook_time"]),
        total_time=float(row["total_time"]),
        image_url=row.get("image_url"),
        likes=_safe_int(row.get("likes")),
        rating=float(row.get("rating") or 0),
        comments=[str(c) for c in row.get("comments") or []],
        ingredients=[
            Ingredient(name=i.get("name", ""), quantity=i.get("quantity"))
            for i in row.get("ingredients") or []
        ],
        steps=[
            Step(step_number=_safe_int(s.get("step_number")), instruction=s.get("instruction", ""))
            for s in row.get("steps") or []
        ],
        servings=_safe_int(row.get("servings")) if row.get("servings") is not None else None,
        difficulty=Difficulty(row["difficulty"]) if row.get("difficulty") else None,
        meal_type=MealType(row["meal_type"]) if row.get("meal_type") else None,
        views=_safe_int(row.get("views")),
        is_published=bool(row.get("is_published", True)),
        last_edited_at=_parse_datetime(row.get("last_edited_at")),
        created_at=_parse_datetime(row.get("created_at")),
    )


def _post_to_row(post: RecipePost) -> Row:
    return {
        "id": post.id,
        "user_id": post.user_id,
        "title": post.title,
        "recipe": post.recipe,
        "prep_time": post.prep_time,
        "cook_time": post.cook_time,
        "total_time": post.total_time,
        "image_url": post.image_url,
        "likes": post.likes,
        "rating": post.rating,
        "comments": list(post.comments),
        "ingredients": [{"name": i.name, "quantity": i.quantity} for i in post.ingredients],
        "steps": [{"step_number": s.step_number, "instruction": s.instruction} for s in post.steps],
        "servings": post.servings,
        "difficulty": post.difficulty.value if post.difficulty else None,
        "meal_type": post.meal_type.value if post.meal_type else None,
        "views": post.views,
        "is_published": post.is_published,
        "last_edited_at": _iso(post.last_edited_at),
        "created_at": _iso(post.created_at),
    }


def _row_to_comment(row: Row) -> Comment:
    return Comment(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        post_id=str(row["post_id"]),
        text=str(row.get("text") or ""),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _comment_to_row(comment: Comment) -> Row:
    return {
        "id": comment.id,
        "user_id": comment.user_id,
        "post_id": comment.post_id,
        "text": comment.text,
        "created_at": _iso(comment.created_at),
        "updated_at": _iso(comment.updated_at),
    }


def _create_supabase_client() -> Client:
    from recipe_social.app.config import settings

    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)


class _SupabaseTable:
    TABLE_NAME = ""

    def __init__(self, client: Client):
        self._client = client

    def _table(self):
        return self._client.table(self.TABLE_NAME)

    def _execute(self, query, operation: str) -> list[Row]:
        try:
            result = query.execute()
        except APIError as error:
            if error.code == UNIQUE_VIOLATION:
                logger.warning("Unique violation on %s.%s: %s", self.TABLE_NAME, operation, error.message)
                raise self._unique_violation(error) from error
            logger.error("Supabase error on %s.%s: %s", self.TABLE_NAME, operation, error)
            raise RepositoryError(f"{self.TABLE_NAME}.{operation}", str(error)) from error
        except (httpx.HTTPError, ConnectionError, TimeoutError) as error:
            logger.error("Supabase error on %s.%s: %s", self.TABLE_NAME, operation, error)
            raise RepositoryError(f"{self.TABLE_NAME}.{operation}", str(error)) from error
        return result.data or []

    def _unique_violation(self, error: APIError) -> SocialError:
        return ConflictError("Duplicate record", detail=error.details or error.message)


class SupabaseUserRepository(_SupabaseTable, UserRepository):
    TABLE_NAME = "users"

    def _unique_violation(self, error: APIError) -> SocialError:
        return DuplicateEmailError(detail=error.details or error.message)

    def create(self, user: User) -> User:
        rows = self._execute(self._table().insert(_user_to_row(user)), "create")
        if not rows:
            raise RepositoryError("users.create", "insert returned no rows")
        return _row_to_user(rows[0])

    def get_by_id(self, user_id: str) -> Optional[User]:
        rows = self._execute(
            self._table().select(USER_COLUMNS).eq("id", user_id).limit(1), "get_by_id"
        )
        return _row_to_user(rows[0]) if rows else None

    def get_by_email(self, email: str) -> Optional[User]:
        rows = self._execute(
            self._table().select(USER_COLUMNS).eq("email", email).limit(1), "get_by_email"
        )
        return _row_to_user(rows[0]) if rows else None

    def get_many(self, user_ids: Iterable[str]) -> list[User]:
        ids = sorted(set(user_ids))
        if not ids:
            return []
        rows = self._execute(self._table().select(USER_COLUMNS).in_("id", ids), "get_many")
        return [_row_to_user(row) for row in rows]

    def list_all(self) -> list[User]:
        rows = self._execute(
            self._table().select(USER_COLUMNS).order("created_at", desc=False), "list_all"
        )
        return [_row_to_user(row) for row in rows]

    def list_public_ids(self) -> list[str]:
        rows = self._execute(
            self._table().select("id").eq("profile_type", ProfileType.PUBLIC.value),
            "list_public_ids",
        )
        return [str(row["id"]) for row in rows]

    def update(self, user: User) -> User:
        data = _user_to_row(user)
        data.pop("id")
        rows = self._execute(self._table().update(data).eq("id", user.id), "update")
        if not rows:
            raise EntityNotFoundError("User", user.id)
        return _row_to_user(rows[0])

    def delete(self, user_id: str) -> Optional[User]:
        rows = self._execute(self._table().delete().eq("id", user_id), "delete")
        return _row_to_user(rows[0]) if rows else None

    def remove_from_following(self, user_id: str) -> int:
        rows = self._execute(
            self._table().select("id,following").contains("following", [user_id]),
            "remove_from_following",
        )
        for row in rows:
            remaining = [f for f in row.get("following") or [] if f != user_id]
            self._execute(
                self._table().update({"following": remaining}).eq("id", row["id"]),
                "remove_from_following",
            )
        return len(rows)


class SupabaseRecipePostRepository(_SupabaseTable, RecipePostRepository):
    TABLE_NAME = "recipe_posts"

    def create(self, post: RecipePost) -> RecipePost:
        rows = self._execute(self._table().insert(_post_to_row(post)), "create")
        if not rows:
            raise RepositoryError("recipe_posts.create", "insert returned no rows")
        return _row_to_post(rows[0])

    def get_by_id(self, post_id: str) -> Optional[RecipePost]:
        rows = self._execute(self._table().select("*").eq("id", post_id).limit(1), "get_by_id")
        return _row_to_post(rows[0]) if rows else None

    def list_by_authors(
        self,
        author_ids: Iterable[str],
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[RecipePost]:
        ids = sorted(set(author_ids))
        if not ids:
            return []
        query = (
            self._table()
            .select("*")
            .in_("user_id", ids)
            .order("created_at", desc=True)
        )
        if limit is not None:
            query = query.range(skip, skip + limit - 1)
        rows = self._execute(query, "list_by_authors")
        if limit is None and skip:
            rows = rows[skip:]
        return [_row_to_post(row) for row in rows]

    def update(self, post: RecipePost) -> RecipePost:
        data = _post_to_row(post)
        data.pop("id")
        rows = self._execute(self._table().update(data).eq("id", post.id), "update")
        if not rows:
            raise EntityNotFoundError("Recipe post", post.id)
        return _row_to_post(rows[0])

    def delete(self, post_id: str) -> Optional[RecipePost]:
        rows = self._execute(self._table().delete().eq("id", post_id), "delete")
        return _row_to_post(rows[0]) if rows else None

    def delete_by_author(self, user_id: str) -> list[str]:
        rows = self._execute(self._table().delete().eq("user_id", user_id), "delete_by_author")
        return [str(row["id"]) for row in rows]


class SupabaseCommentRepository(_SupabaseTable, CommentRepository):
    TABLE_NAME = "comments"

    def create(self, comment: Comment) -> Comment:
        rows = self._execute(self._table().insert(_comment_to_row(comment)), "create")
        if not rows:
            raise RepositoryError("comments.create", "insert returned no rows")
        return _row_to_comment(rows[0])

    def get_by_id(self, comment_id: str) -> Optional[Comment]:
        rows = self._execute(
            self._table().select("*").eq("id", comment_id).limit(1), "get_by_id"
        )
        return _row_to_comment(rows[0]) if rows else None

    def list_by_post(self, post_id: str) -> list[Comment]:
        rows = self._execute(
            self._table().select("*").eq("post_id", post_id).order("created_at", desc=False),
            "list_by_post",
        )
        return [_row_to_comment(row) for row in rows]

    def update(self, comment: Comment) -> Comment:
        data = _comment_to_row(comment)
        data.pop("id")
        rows = self._execute(self._table().update(data).eq("id", comment.id), "update")
        if not rows:
            raise EntityNotFoundError("Comment", comment.id)
        return _row_to_comment(rows[0])

    def delete(self, comment_id: str) -> Optional[Comment]:
        rows = self._execute(self._table().delete().eq("id", comment_id), "delete")
        return _row_to_comment(rows[0]) if rows else None

    def delete_by_posts(self, post_ids: Iterable[str]) -> int:
        ids = sorted(set(post_ids))
        if not ids:
            return 0
        rows = self._execute(self._table().delete().in_("post_id", ids), "delete_by_posts")
        return len(rows)

    def delete_by_user(self, user_id: str) -> int:
        rows = self._execute(self._table().delete().eq("user_id", user_id), "delete_by_user")
        return len(rows)


class SupabaseRevokedTokenRepository(_SupabaseTable, RevokedTokenRepository):
    TABLE_NAME = "revoked_tokens"

    def add(self, token_hash: str, expires_at: datetime) -> None:
        data = {
            "token_hash": token_hash,
            "expires_at": expires_at.isoformat(),
            "revoked_at": _now_utc().isoformat(),
        }
        self._execute(
            self._table().upsert(data, on_conflict="token_hash", ignore_duplicates=True),
            "add",
        )

    def contains(self, token_hash: str) -> bool:
        rows = self._execute(
            self._table().select("token_hash").eq("token_hash", token_hash).limit(1),
            "contains",
        )
        return bool(rows)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or _now_utc()
        rows = self._execute(
            self._table().delete().lte("expires_at", now.isoformat()), "purge_expired"
        )
        if rows:
            logger.info("Purged %d expired revocations", len(rows))
        return len(rows)


def build_supabase_repositories(client: Client | None = None) -> Repositories:
    client = client or _create_supabase_client()
    logger.info("Using Supabase storage backend")
    return Repositories(
        users=SupabaseUserRepository(client),
        posts=SupabaseRecipePostRepository(client),
        comments=SupabaseCommentRepository(client),
        revoked_tokens=SupabaseRevokedTokenRepository(client),
    )
