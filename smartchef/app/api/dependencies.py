from typing import Awaitable, Callable, Optional

from fastapi import Header, HTTPException

from ..services.firebase_init import get_root_reference
from ..services.openai_client import generate_recipe
from ..services.recipe_store import RecipeStore, is_valid_key

Generator = Callable[[str], Awaitable[str]]


def get_current_user(x_user_id: Optional[str] = Header(None)) -> str:
    """User id forwarded by the authenticating gateway."""
    uid = (x_user_id or "").strip()
    if not uid:
        raise HTTPException(status_code=401, detail="You must be logged in.")
    if not is_valid_key(uid):
        raise HTTPException(status_code=400, detail="Invalid user id.")
    return uid


def get_store() -> RecipeStore:
    return RecipeStore(get_root_reference())


def get_generator() -> Generator:
    return generate_recipe
