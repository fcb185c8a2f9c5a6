from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from recipe_social.app.domain.errors import BadRequestError, UnauthorizedError
from recipe_social.app.infra.db.memory_repo import InMemoryRevokedTokenRepository
from recipe_social.app.services.token_service import (
    TokenService,
    hash_token,
)

SECRET = "test-secret-with-enough-bytes-for-hs256"
USER_ID = "64aefb123456789abcdef123"


@pytest.fixture
def revoked() -> InMemoryRevokedTokenRepository:
    return InMemoryRevokedTokenRepository()


@pytest.fixture
def tokens(revoked) -> TokenService:
    return TokenService(revoked, secret=SECRET, expires_minutes=60)


class TestIssueAndVerify:
    def test_round_trip_subject(self, tokens: TokenService) -> None:
        token = tokens.issue(USER_ID)
        assert tokens.verify(token) == USER_ID
        assert tokens.authenticate(token) == USER_ID

    def test_tokens_are_unique(self, tokens: TokenService) -> None:
        assert tokens.issue(USER_ID) != tokens.issue(USER_ID)

    def test_expired_token_fails_without_revocation(self, tokens: TokenService) -> None:
        token = tokens.issue(USER_ID, expires_in=timedelta(seconds=-5))
        assert tokens.is_revoked(token) is False
        with pytest.raises(UnauthorizedError) as exc_info:
            tokens.authenticate(token)
        assert str(exc_info.value) == "Invalid or expired token"

    def test_wrong_signature(self, revoked, tokens: TokenService) -> None:
        forged = TokenService(revoked, secret="another-secret-with-enough-bytes!!").issue(USER_ID)
        with pytest.raises(UnauthorizedError):
            tokens.verify(forged)

    def test_garbage_token(self, tokens: TokenService) -> None:
        with pytest.raises(UnauthorizedError):
            tokens.verify("not-a-jwt")

    def test_token_without_subject(self, tokens: TokenService) -> None:
        token = jwt.encode({"foo": "bar"}, SECRET, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            tokens.verify(token)


class TestAuthenticate:
    def test_missing_token(self, tokens: TokenService) -> None:
        with pytest.raises(UnauthorizedError) as exc_info:
            tokens.authenticate(None)
        assert str(exc_info.value) == "Authentication token missing"


class TestRevoke:
    def test_revoked_token_fails_even_if_unexpired(self, tokens: TokenService) -> None:
        token = tokens.issue(USER_ID)
        tokens.revoke(token)

        with pytest.raises(UnauthorizedError) as exc_info:
            tokens.authenticate(token)
        assert str(exc_info.value) == "Token has been invalidated"

    def test_other_tokens_stay_valid(self, tokens: TokenService) -> None:
        revoked_token = tokens.issue(USER_ID)
        other = tokens.issue(USER_ID)
        tokens.revoke(revoked_token)
        assert tokens.authenticate(other) == USER_ID

    def test_revocation_stored_by_hash(self, revoked, tokens: TokenService) -> None:
        token = tokens.issue(USER_ID)
        tokens.revoke(token)
        assert revoked.contains(hash_token(token))
        assert not revoked.contains(token)

    def test_invalid_token_can_still_be_revoked(self, tokens: TokenService) -> None:
        tokens.revoke("garbage")
        assert tokens.is_revoked("garbage") is True

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, tokens: TokenService, token) -> None:
        with pytest.raises(BadRequestError):
            tokens.revoke(token)

    def test_revocation_shared_between_service_instances(self, revoked, tokens: TokenService) -> None:
        token = tokens.issue(USER_ID)
        TokenService(revoked, secret=SECRET).revoke(token)
        assert tokens.is_revoked(token) is True

    def test_purge_keeps_unexpired_revocations(self, tokens: TokenService) -> None:
        expired = tokens.issue(USER_ID, expires_in=timedelta(seconds=-5))
        live = tokens.issue(USER_ID)
        tokens.revoke(expired)
        tokens.revoke(live)

        assert tokens.purge_expired() == 1
        assert tokens.is_revoked(live) is True
