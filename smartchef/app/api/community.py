from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import get_settings
from ..models.recipe import CommunityFeed, CommunityPost, DeleteRequest, ShareRequest
from ..services.recipe_parser import RecipeParser
from ..services.recipe_store import RecipeStore
from .dependencies import get_current_user, get_store

router = APIRouter(prefix="/api/v1/community")


@router.get("", response_model=CommunityFeed)
def feed(store: RecipeStore = Depends(get_store)):
    posts = store.list_community(get_settings().default_recipe_title)
    return CommunityFeed(total=len(posts), posts=posts)


@router.post("/posts")
def share(
    body: ShareRequest,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    return {"id": store.post_to_community(uid, body.recipe)}


@router.post("/posts/from-past/{recipe_id}")
def share_past_recipe(
    recipe_id: str,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    past = store.get_past_recipe(uid, recipe_id)
    if past is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"id": store.post_to_community(uid, past.recipe)}


@router.post("/posts/from-favorite/{favorite_id}")
def share_favorite(
    favorite_id: str,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    favorite = store.get_favorite(uid, favorite_id)
    if favorite is None:
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"id": store.post_to_community(uid, RecipeParser.format(favorite.record))}


@router.get("/mine", response_model=List[CommunityPost])
def my_posts(uid: str = Depends(get_current_user), store: RecipeStore = Depends(get_store)):
    return store.list_my_posts(uid, get_settings().default_recipe_title)


@router.delete("/mine")
def delete_my_posts(
    body: DeleteRequest,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    return {"deleted": store.delete_posts(uid, body.ids)}
