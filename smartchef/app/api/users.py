from fastapi import APIRouter, Depends, HTTPException

from ..models.recipe import UserProfile
from ..services.recipe_store import RecipeStore
from .dependencies import get_current_user, get_store

router = APIRouter(prefix="/api/v1/users")


@router.get("/me", response_model=UserProfile)
def read_profile(uid: str = Depends(get_current_user), store: RecipeStore = Depends(get_store)):
    profile = store.get_profile(uid)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/me", response_model=UserProfile)
def write_profile(
    profile: UserProfile,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    """Create the profile on first write, afterwards merge non-empty fields."""
    if store.get_profile(uid) is None:
        store.save_profile(uid, profile)
    else:
        store.update_profile(uid, profile)
    return store.get_profile(uid)
