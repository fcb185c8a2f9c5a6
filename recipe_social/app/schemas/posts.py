# recipe_social/app/schemas/posts.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from recipe_social.app.domain.models import AuthorSummary, RecipePost
from recipe_social.app.schemas.common import SuccessResponse


class IngredientIn(BaseModel):
    name: str
    quantity: Optional[str] = None


class StepIn(BaseModel):
    stepNumber: Optional[int] = None
    instruction: str


class RecipePostCreate(BaseModel):
    # campos obrigatórios são checados no serviço ("Missing required fields")
    user: Optional[str] = None
    title: Optional[str] = None
    recipe: Optional[str] = None
    imageUrl: Optional[str] = None
    ingredients: list[IngredientIn] = Field(default_factory=list)
    steps: list[StepIn] = Field(default_factory=list)
    prepTime: Optional[float] = None
    cookTime: Optional[float] = None
    totalTime: Optional[float] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    mealType: Optional[str] = None


class AuthorResponse(BaseModel):
    id: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    profileType: Optional[str] = None


class IngredientResponse(BaseModel):
    name: str
    quantity: Optional[str] = None


class StepResponse(BaseModel):
    stepNumber: int
    instruction: str


class RecipePostResponse(BaseModel):
    id: str
    user: str
    author: Optional[AuthorResponse] = None
    title: str
    recipe: str
    imageUrl: Optional[str] = None
    likes: int = 0
    rating: float = 0.0
    comments: list[str] = Field(default_factory=list)
    ingredients: list[IngredientResponse] = Field(default_factory=list)
    steps: list[StepResponse] = Field(default_factory=list)
    prepTime: float
    cookTime: float
    totalTime: float
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    mealType: Optional[str] = None
    views: int = 0
    isPublished: bool = True
    lastEditedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class DeletedPost(BaseModel):
    postId: str
    title: str


class RecipePostEnvelope(SuccessResponse):
    data: RecipePostResponse


class RecipePostListEnvelope(SuccessResponse):
    data: list[RecipePostResponse]


class FeedEnvelope(RecipePostListEnvelope):
    limit: Optional[int] = None
    skip: Optional[int] = None


class DeletedPostEnvelope(SuccessResponse):
    data: DeletedPost


def _author_to_response(author: Optional[AuthorSummary]) -> Optional[AuthorResponse]:
    if author is None:
        return None
    return AuthorResponse(
        id=author.id,
        firstName=author.first_name,
        lastName=author.last_name,
        profileType=author.profile_type.value if author.profile_type else None,
    )


def post_to_response(post: RecipePost) -> RecipePostResponse:
    return RecipePostResponse(
        id=post.id,
        user=post.user_id,
        author=_author_to_response(post.author),
        title=post.title,
        recipe=post.recipe,
        imageUrl=post.image_url,
        likes=post.likes,
        rating=post.rating,
        comments=list(post.comments),
        ingredients=[IngredientResponse(name=i.name, quantity=i.quantity) for i in post.ingredients],
        steps=[StepResponse(stepNumber=s.step_number, instruction=s.instruction) for s in post.steps],
        prepTime=post.prep_time,
        cookTime=post.cook_time,
        totalTime=post.total_time,
        servings=post.servings,
        difficulty=post.difficulty.value if post.difficulty else None,
        mealType=post.meal_type.value if post.meal_type else None,
        views=post.views,
        isPublished=post.is_published,
        lastEditedAt=post.last_edited_at,
        createdAt=post.created_at,
    )
