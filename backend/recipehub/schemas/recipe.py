# recipehub/schemas/recipe.py
"""
Pydantic schemas for recipe and review endpoints.
"""
from pydantic import BaseModel, Field


class RecipeCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    ingredients: list[str] = []
    instructions: str | None = None
    isPublic: bool = True


class RecipeUpdateIn(BaseModel):
    """Partial update; omitted fields keep their current value."""
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    ingredients: list[str] | None = None
    instructions: str | None = None
    isPublic: bool | None = None


class ReviewIn(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class RecipeOut(BaseModel):
    id: int
    authorId: int
    title: str
    description: str | None = None
    ingredients: list[str] = []
    instructions: str | None = None
    isPublic: bool = True
    averageRating: float | None = None
    reviewCount: int = 0
