# recipe_social/app/schemas/users.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from recipe_social.app.domain.models import User
from recipe_social.app.schemas.common import SuccessResponse


class UserCreate(BaseModel):
    # obrigatoriedade é validada no serviço para devolver 400, não 422
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    profileType: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    firstName: str
    lastName: str
    email: str
    profileType: str
    role: str
    isActive: bool
    following: list[str] = Field(default_factory=list)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class UserEnvelope(SuccessResponse):
    data: UserResponse


def user_to_response(user: User) -> UserResponse:
    """Public representation of a user; password and refresh token never leave."""
    return UserResponse(
        id=user.id,
        firstName=user.first_name,
        lastName=user.last_name,
        email=user.email,
        profileType=user.profile_type.value,
        role=user.role.value,
        isActive=user.is_active,
        following=list(user.following),
        createdAt=user.created_at,
        updatedAt=user.updated_at,
    )
