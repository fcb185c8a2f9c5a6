# recipe_social/app/deps.py (singleton dos repositórios, exposto como dependência)

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from recipe_social.app.config import settings
from recipe_social.app.infra.db.base import Repositories
from recipe_social.app.services.comment_service import CommentService
from recipe_social.app.services.post_service import PostService
from recipe_social.app.services.token_service import TokenService
from recipe_social.app.services.user_service import UserService

_repositories: Repositories | None = None


def get_repositories() -> Repositories:
    global _repositories
    if _repositories is None:
        if settings.STORAGE_BACKEND == "supabase":
            from recipe_social.app.infra.db.supabase_repo import build_supabase_repositories

            _repositories = build_supabase_repositories()
        else:
            from recipe_social.app.infra.db.memory_repo import build_memory_repositories

            _repositories = build_memory_repositories()
    return _repositories


def get_token_service(repos: Repositories = Depends(get_repositories)) -> TokenService:
    return TokenService(
        repos.revoked_tokens,
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_minutes=settings.JWT_EXPIRATION_MINUTES,
    )


def get_user_service(repos: Repositories = Depends(get_repositories)) -> UserService:
    return UserService(repos)


def get_post_service(repos: Repositories = Depends(get_repositories)) -> PostService:
    return PostService(
        repos,
        default_limit=settings.FEED_DEFAULT_LIMIT,
        max_limit=settings.FEED_MAX_LIMIT,
    )


def get_comment_service(repos: Repositories = Depends(get_repositories)) -> CommentService:
    return CommentService(repos)


auth_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    token: str


def bearer_token(
    cred: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme),
) -> Optional[str]:
    if cred is None or cred.scheme.lower() != "bearer":
        return None
    return cred.credentials


async def get_current_user(
    token: Optional[str] = Depends(bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """
    Recebe Authorization: Bearer <token>, rejeita tokens ausentes,
    revogados, inválidos ou expirados e devolve o id do usuário.
    """
    user_id = tokens.authenticate(token)
    return CurrentUser(id=user_id, token=token)
