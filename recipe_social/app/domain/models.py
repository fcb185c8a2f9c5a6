# recipe_social/app/domain/models.py
"""
Domain models for the recipe social platform.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ProfileType(str, Enum):
    """Profile visibility. Public profiles show up in everyone's feed."""
    PUBLIC = "Public"
    PRIVATE = "Private"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class MealType(str, Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"
    DESSERT = "Dessert"
    BRUNCH = "Brunch"
    OTHER = "Other"


@dataclass
class Ingredient:
    name: str
    quantity: Optional[str] = None


@dataclass
class Step:
    step_number: int
    instruction: str


@dataclass
class User:
    """
    A registered account.
    `password` always holds the hash, never the plain text.
    """
    id: str
    first_name: str
    last_name: str
    email: str
    password: str

    profile_type: ProfileType = ProfileType.PUBLIC
    role: Role = Role.USER
    is_active: bool = True
    following: list[str] = field(default_factory=list)
    refresh_token: Optional[str] = None

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_public(self) -> bool:
        return self.profile_type == ProfileType.PUBLIC


@dataclass
class AuthorSummary:
    """Projection of a user embedded into posts and comments."""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    profile_type: Optional[ProfileType] = None

    @classmethod
    def from_user(cls, user: User) -> "AuthorSummary":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            profile_type=user.profile_type,
        )


@dataclass
class RecipePost:
    id: str
    user_id: str
    title: str
    recipe: str
    prep_time: float  # minutes
    cook_time: float  # minutes
    total_time: float  # minutes

    image_url: Optional[str] = None
    likes: int = 0
    rating: float = 0.0
    comments: list[str] = field(default_factory=list)
    ingredients: list[Ingredient] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    servings: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    meal_type: Optional[MealType] = None
    views: int = 0
    is_published: bool = True

    # Timestamps
    last_edited_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    # Populated on read, never persisted
    author: Optional[AuthorSummary] = None


@dataclass
class Comment:
    id: str
    user_id: str
    post_id: str
    text: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Populated on read, never persisted
    author: Optional[AuthorSummary] = None


@dataclass
class FeedPage:
    """Result of a paginated feed query."""
    posts: list[RecipePost]
    limit: int
    skip: int
    follows_anyone: bool = True
