from __future__ import annotations

import threading

import pytest

from recipe_social.app.domain.errors import (
    BadRequestError,
    ConflictError,
    DuplicateEmailError,
    EntityNotFoundError,
    MissingFieldsError,
    UnauthorizedError,
)
from recipe_social.app.domain.models import ProfileType, Role
from recipe_social.app.services.passwords import verify_password
from recipe_social.app.services.user_service import ALLOWED_UPDATE_FIELDS, UserService


def registration(**overrides) -> dict:
    data = {
        "firstName": "John",
        "lastName": "Doe",
        "email": "John.Doe@Example.com",
        "password": "password123",
    }
    data.update(overrides)
    return data


@pytest.fixture
def service(repos) -> UserService:
    return UserService(repos)


class TestCreateUser:
    def test_creates_with_defaults(self, service: UserService) -> None:
        user = service.create_user(registration())

        assert len(user.id) == 24
        assert user.email == "john.doe@example.com"
        assert user.role == Role.USER
        assert user.is_active is True
        assert user.profile_type == ProfileType.PUBLIC
        assert user.created_at is not None

    def test_password_is_hashed(self, service: UserService) -> None:
        user = service.create_user(registration())
        assert user.password != "password123"
        assert verify_password("password123", user.password)

    @pytest.mark.parametrize("missing", ["firstName", "lastName", "email", "password"])
    def test_missing_required_field(self, service: UserService, missing: str) -> None:
        data = registration()
        del data[missing]
        with pytest.raises(MissingFieldsError) as exc_info:
            service.create_user(data)
        assert exc_info.value.fields == [missing]

    @pytest.mark.parametrize("email", ["not-an-email", "a@b", "john doe@example.com"])
    def test_invalid_email(self, service: UserService, email: str) -> None:
        with pytest.raises(BadRequestError, match="Invalid email format"):
            service.create_user(registration(email=email))

    def test_duplicate_email_is_case_insensitive(self, service: UserService, repos) -> None:
        first = service.create_user(registration(email="john@example.com"))
        with pytest.raises(ConflictError, match="Email already registered"):
            service.create_user(registration(email="JOHN@example.COM"))

        assert repos.users.get_by_email("john@example.com").id == first.id
        assert len(repos.users.list_all()) == 1

    def test_concurrent_registrations_store_one_user(self, service: UserService, repos) -> None:
        barrier = threading.Barrier(4)
        results: list[str] = []

        def register() -> None:
            barrier.wait()
            try:
                service.create_user(registration(email="Dup@Example.com"))
                results.append("ok")
            except ConflictError:
                results.append("conflict")

        threads = [threading.Thread(target=register) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == ["conflict", "conflict", "conflict", "ok"]
        assert len(repos.users.list_all()) == 1

    def test_conflict_detected_at_write(self, service: UserService, repos, monkeypatch) -> None:
        service.create_user(registration(email="john@example.com"))
        monkeypatch.setattr(repos.users, "get_by_email", lambda email: None)

        with pytest.raises(DuplicateEmailError, match="Email already registered"):
            service.create_user(registration(email="john@example.com"))
        assert len(repos.users.list_all()) == 1

    def test_invalid_profile_type(self, service: UserService) -> None:
        with pytest.raises(BadRequestError):
            service.create_user(registration(profileType="Friends"))


class TestGetAndList:
    def test_get_user(self, service: UserService, add_user) -> None:
        user = add_user()
        assert service.get_user(user.id).id == user.id

    def test_get_unknown_user(self, service: UserService) -> None:
        with pytest.raises(EntityNotFoundError, match="User not found"):
            service.get_user("64aefb123456449abcdef123")

    def test_list_users(self, service: UserService, add_user) -> None:
        add_user("John")
        add_user("Jane")
        assert {u.first_name for u in service.list_users()} == {"John", "Jane"}


class TestUpdateUser:
    def test_update_email(self, service: UserService, add_user) -> None:
        user = add_user()
        updated = service.update_user(user.id, {"email": "NewEmail@example.com"})
        assert updated.email == "newemail@example.com"

    def test_rejects_unknown_field(self, service: UserService, add_user) -> None:
        user = add_user()
        with pytest.raises(BadRequestError) as exc_info:
            service.update_user(user.id, {"something": "bling"})

        message = str(exc_info.value)
        assert message.startswith("Invalid updates. Allowed fields:")
        for field_name in ALLOWED_UPDATE_FIELDS:
            assert field_name in message

    def test_following_is_not_updatable(self, service: UserService, add_user) -> None:
        user = add_user()
        with pytest.raises(BadRequestError):
            service.update_user(user.id, {"following": ["64aefb123456789abcdef124"]})

    def test_rejects_empty_body(self, service: UserService, add_user) -> None:
        user = add_user()
        with pytest.raises(BadRequestError, match="empty"):
            service.update_user(user.id, {})

    def test_email_collision(self, service: UserService, add_user) -> None:
        user = add_user("John")
        other = add_user("Jane")
        with pytest.raises(BadRequestError, match="Email already in use"):
            service.update_user(user.id, {"email": other.email.upper()})

    def test_email_collision_detected_at_write(self, service: UserService, repos, add_user, monkeypatch) -> None:
        user = add_user("John")
        other = add_user("Jane")
        monkeypatch.setattr(repos.users, "get_by_email", lambda email: None)

        with pytest.raises(BadRequestError, match="Email already in use"):
            service.update_user(user.id, {"email": other.email})
        assert repos.users.get_by_id(user.id).email == user.email

    def test_same_email_for_same_user(self, service: UserService, add_user) -> None:
        user = add_user()
        assert service.update_user(user.id, {"email": user.email}).email == user.email

    def test_update_names_password_and_profile(self, service: UserService, add_user) -> None:
        user = add_user()
        updated = service.update_user(
            user.id,
            {
                "firstName": "Johnny",
                "lastName": "Dough",
                "password": "n3w-pass",
                "profileType": "Private",
            },
        )
        assert updated.full_name == "Johnny Dough"
        assert updated.profile_type == ProfileType.PRIVATE
        assert verify_password("n3w-pass", updated.password)

    def test_unknown_user(self, service: UserService) -> None:
        with pytest.raises(EntityNotFoundError):
            service.update_user("64aefb123456449abcdef123", {"firstName": "X"})


class TestDeleteUser:
    def test_delete_cascades(self, service: UserService, repos, add_user, add_post) -> None:
        user = add_user("John")
        fan = add_user("Fan", following=[user.id])
        post = add_post(user)

        service.delete_user(user.id)

        assert repos.users.get_by_id(user.id) is None
        assert repos.posts.get_by_id(post.id) is None
        assert repos.users.get_by_id(fan.id).following == []

    def test_delete_unknown_user(self, service: UserService) -> None:
        with pytest.raises(EntityNotFoundError, match="User not found"):
            service.delete_user("64aefb123456449abcdef123")


class TestAuthenticate:
    def test_valid_credentials(self, service: UserService) -> None:
        created = service.create_user(registration())
        user = service.authenticate("JOHN.DOE@example.com", "password123")
        assert user.id == created.id

    @pytest.mark.parametrize(
        "email, password",
        [
            ("john.doe@example.com", "wrong"),
            ("nobody@example.com", "password123"),
            (None, "password123"),
            ("john.doe@example.com", ""),
        ],
    )
    def test_invalid_credentials(self, service: UserService, email, password) -> None:
        service.create_user(registration())
        with pytest.raises(UnauthorizedError, match="Invalid credentials"):
            service.authenticate(email, password)

    def test_inactive_account(self, service: UserService, add_user) -> None:
        user = add_user(is_active=False)
        with pytest.raises(UnauthorizedError, match="disabled"):
            service.authenticate(user.email, "password123")


class TestFollow:
    def test_follow_and_unfollow(self, service: UserService, add_user) -> None:
        user = add_user("John")
        target = add_user("Jane")

        assert service.follow(user.id, target.id).following == [target.id]
        assert service.follow(user.id, target.id).following == [target.id]
        assert service.unfollow(user.id, target.id).following == []
        assert service.unfollow(user.id, target.id).following == []

    def test_cannot_follow_self(self, service: UserService, add_user) -> None:
        user = add_user()
        with pytest.raises(BadRequestError):
            service.follow(user.id, user.id)

    def test_follow_unknown_user(self, service: UserService, add_user) -> None:
        user = add_user()
        with pytest.raises(EntityNotFoundError):
            service.follow(user.id, "64aefb123456449abcdef123")
