import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from ..core.config import get_settings
from ..models.recipe import (
    DeleteRequest,
    FavoriteRecipe,
    GenerateRequest,
    GenerateResponse,
    RecipeRecord,
    ShareRequest,
    StoredRecipe,
)
from ..services.prompt_builder import build_recipe_prompt, is_invalid_ingredient_reply
from ..services.recipe_parser import RecipeParser
from ..services.recipe_store import RecipeStore
from .dependencies import Generator, get_current_user, get_generator, get_store

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


@router.post("/recipes/parse", response_model=RecipeRecord)
def parse_recipe(body: ShareRequest):
    return RecipeParser.parse(body.recipe, default_title=get_settings().default_recipe_title)


@router.post("/recipes/generate", response_model=GenerateResponse)
async def generate(
    body: GenerateRequest,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
    generator: Generator = Depends(get_generator),
):
    prompt = build_recipe_prompt(body.ingredients)
    log.info(f"🍳 Generating recipe for user {uid} from {len(body.ingredients)} ingredients")
    text = await generator(prompt)

    if is_invalid_ingredient_reply(text):
        log.info(f"⚠️ Model rejected ingredients for user {uid}")
        return GenerateResponse(valid=False, recipe=text)

    saved_id = await run_in_threadpool(store.save_past_recipe, uid, text)
    record = RecipeParser.parse(text, default_title=get_settings().default_recipe_title)
    return GenerateResponse(valid=True, recipe=text, record=record, saved_id=saved_id)


@router.get("/recipes/past", response_model=List[StoredRecipe])
def past_recipes(uid: str = Depends(get_current_user), store: RecipeStore = Depends(get_store)):
    return store.list_past_recipes(uid)


@router.post("/recipes/past/{recipe_id}/favorite")
def favorite_past_recipe(
    recipe_id: str,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    past = store.get_past_recipe(uid, recipe_id)
    if past is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"id": store.add_raw_favorite(uid, past.recipe)}


@router.get("/favorites", response_model=List[FavoriteRecipe])
def favorites(uid: str = Depends(get_current_user), store: RecipeStore = Depends(get_store)):
    return store.list_favorites(uid)


@router.post("/favorites")
def add_favorite(
    record: RecipeRecord,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    return {"id": store.add_favorite(uid, record)}


@router.delete("/favorites")
def delete_favorites(
    body: DeleteRequest,
    uid: str = Depends(get_current_user),
    store: RecipeStore = Depends(get_store),
):
    return {"deleted": store.delete_favorites(uid, body.ids)}
