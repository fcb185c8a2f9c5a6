from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from recipe_social.app.domain.ids import new_object_id
from recipe_social.app.domain.models import ProfileType, RecipePost, User
from recipe_social.app.infra.db.base import Repositories
from recipe_social.app.infra.db.memory_repo import build_memory_repositories
from recipe_social.app.services.passwords import hash_password

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def repos() -> Repositories:
    return build_memory_repositories()


@pytest.fixture
def add_user(repos: Repositories) -> Callable[..., User]:
    def _add(
        first_name: str = "John",
        profile_type: ProfileType = ProfileType.PUBLIC,
        following: list[str] | None = None,
        password: str = "password123",
        is_active: bool = True,
    ) -> User:
        user_id = new_object_id()
        return repos.users.create(
            User(
                id=user_id,
                first_name=first_name,
                last_name="Doe",
                email=f"{first_name.lower()}.{user_id[:6]}@example.com",
                password=hash_password(password),
                profile_type=profile_type,
                is_active=is_active,
                following=list(following or []),
                created_at=BASE_TIME,
            )
        )

    return _add


@pytest.fixture
def add_post(repos: Repositories) -> Callable[..., RecipePost]:
    counter = {"n": 0}

    def _add(user: User, title: str = "Spaghetti Bolognese", minutes_after: int | None = None) -> RecipePost:
        counter["n"] += 1
        offset = counter["n"] if minutes_after is None else minutes_after
        return repos.posts.create(
            RecipePost(
                id=new_object_id(),
                user_id=user.id,
                title=title,
                recipe="Cook pasta and sauce.",
                prep_time=10,
                cook_time=20,
                total_time=30,
                created_at=BASE_TIME + timedelta(minutes=offset),
            )
        )

    return _add
