from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Community Recipe"


class RecipeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = DEFAULT_TITLE
    description: str = ""
    ingredients: str = ""
    steps: List[str] = []
    macros: str = ""
    allergies: List[str] = []
    calories: int = 0
    measurements: str = ""
    image_name: Optional[str] = None


class IngredientEntry(BaseModel):
    name: str = ""
    amount: str = ""
    unit: str = ""


class GenerateRequest(BaseModel):
    ingredients: List[IngredientEntry]


class GenerateResponse(BaseModel):
    valid: bool
    recipe: str
    record: Optional[RecipeRecord] = None
    saved_id: Optional[str] = None


class ShareRequest(BaseModel):
    recipe: str = Field(min_length=1)


class DeleteRequest(BaseModel):
    ids: List[str]


class StoredRecipe(BaseModel):
    id: str
    recipe: str
    timestamp: float = 0.0


class FavoriteRecipe(BaseModel):
    id: str
    record: RecipeRecord
    timestamp: float = 0.0


class CommunityPost(BaseModel):
    id: str
    recipe: str
    user_id: str = ""
    timestamp: float = 0.0
    record: RecipeRecord


class CommunityFeed(BaseModel):
    total: int
    posts: List[CommunityPost]


class UserProfile(BaseModel):
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    email: str = ""
