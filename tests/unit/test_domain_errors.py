from __future__ import annotations

import pytest

from recipe_social.app.domain.errors import (
    BadRequestError,
    ConflictError,
    DuplicateEmailError,
    EntityNotFoundError,
    InvalidIdError,
    MissingFieldsError,
    NotFoundError,
    RepositoryError,
    SocialError,
    StorageError,
    UnauthorizedError,
)


class TestSocialError:
    def test_base_exception(self) -> None:
        error = SocialError("Base error")
        assert str(error) == "Base error"
        assert error.detail is None
        assert isinstance(error, Exception)

    @pytest.mark.parametrize(
        "error_cls, status_code",
        [
            (BadRequestError, 400),
            (UnauthorizedError, 401),
            (NotFoundError, 404),
            (ConflictError, 409),
            (StorageError, 500),
        ],
    )
    def test_status_codes(self, error_cls, status_code) -> None:
        assert error_cls("x").status_code == status_code


class TestMissingFieldsError:
    def test_lists_fields(self) -> None:
        error = MissingFieldsError(["title", "recipe"])
        assert str(error) == "Missing required fields"
        assert error.fields == ["title", "recipe"]
        assert "title, recipe" in error.detail
        assert isinstance(error, BadRequestError)


class TestInvalidIdError:
    def test_includes_entity_and_value(self) -> None:
        error = InvalidIdError("post", "invalid-id")
        assert str(error) == "Invalid post ID format"
        assert error.value == "invalid-id"
        assert error.status_code == 400


class TestEntityNotFoundError:
    def test_message_and_id(self) -> None:
        error = EntityNotFoundError("User", "64aefb123456789abcdef123")
        assert str(error) == "User not found"
        assert error.entity_id == "64aefb123456789abcdef123"
        assert "64aefb123456789abcdef123" in error.detail
        assert isinstance(error, NotFoundError)

    def test_without_id(self) -> None:
        assert EntityNotFoundError("Comment").detail is None


class TestRepositoryError:
    def test_operation_and_reason(self) -> None:
        error = RepositoryError("users.create", "connection refused")
        assert "users.create" in str(error)
        assert error.reason == "connection refused"
        assert error.detail == "connection refused"
        assert isinstance(error, StorageError)


class TestDuplicateEmailError:
    def test_is_conflict(self) -> None:
        error = DuplicateEmailError("john@example.com")
        assert str(error) == "Email already registered"
        assert error.email == "john@example.com"
        assert error.status_code == 409
        assert isinstance(error, ConflictError)
