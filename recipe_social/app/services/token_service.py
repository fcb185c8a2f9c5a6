"""
Session tokens.

A token is Issued at login, Verified on each authenticated request and either
Revoked by logout or Expired by time. Revocation is stored through the
RevokedTokenRepository by SHA-256 hash, so it holds across processes when the
backend is shared.
"""
from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

import jwt

from recipe_social.app.domain.errors import BadRequestError, UnauthorizedError
from recipe_social.app.infra.db.base import RevokedTokenRepository

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenService:
    """
    Issues, verifies and revokes signed identity tokens.

    Responsibilities:
    - Sign tokens with subject=user id and a fixed lifetime
    - Reject missing, revoked, tampered and expired tokens
    - Keep the revocation set until each token's natural expiry
    """

    def __init__(
        self,
        revoked_tokens: RevokedTokenRepository,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 60,
    ):
        self._revoked = revoked_tokens
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime = timedelta(minutes=expires_minutes)

    def issue(self, user_id: str, expires_in: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "userId": str(user_id),
            "iat": now,
            "exp": now + (expires_in if expires_in is not None else self.lifetime),
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """
        Check signature and expiry and return the subject (user id).
        Does not consult the revocation set; use authenticate() for that.

        Raises:
            UnauthorizedError: If the token is invalid or expired
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("Invalid or expired token", detail="expired") from exc
        except jwt.InvalidTokenError as exc:
            raise UnauthorizedError("Invalid or expired token", detail=str(exc)) from exc

        subject = payload.get("sub") or payload.get("userId")
        if not subject:
            raise UnauthorizedError("Invalid or expired token", detail="missing subject")
        return str(subject)

    def is_revoked(self, token: str) -> bool:
        return self._revoked.contains(hash_token(token))

    def authenticate(self, token: Optional[str]) -> str:
        """
        Full middleware check: missing, then revoked, then signature/expiry.

        Returns:
            The user id carried by the token
        """
        if not token:
            raise UnauthorizedError("Authentication token missing")
        if self.is_revoked(token):
            raise UnauthorizedError("Token has been invalidated")
        return self.verify(token)

    def revoke(self, token: Optional[str]) -> None:
        """
        Put a token in the revocation set. The token does not need to be
        currently valid.

        Raises:
            BadRequestError: If no token is given
        """
        if not token:
            raise BadRequestError("Token is required")
        self._revoked.add(hash_token(token), self._expiry_of(token))
        logger.info("Token revoked")

    def purge_expired(self) -> int:
        return self._revoked.purge_expired(datetime.now(timezone.utc))

    def _expiry_of(self, token: str) -> datetime:
        fallback = datetime.now(timezone.utc) + self.lifetime
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
            exp = claims.get("exp")
            return datetime.fromtimestamp(int(exp), tz=timezone.utc) if exp is not None else fallback
        except (jwt.InvalidTokenError, TypeError, ValueError, OverflowError):
            # token malformado: guarda pelo tempo de vida padrão
            return fallback
