"""
Realtime Database persistence for profiles, generated recipes, favorites and
community posts.

Paths and camelCase keys match what the mobile client writes, so records
created by either side stay readable by the other.
"""

import functools
import logging
import time
from typing import Any, Iterable, List, Optional

from firebase_admin.exceptions import FirebaseError

from ..core.exceptions import RecipeStoreError
from ..models.recipe import (
    DEFAULT_TITLE,
    CommunityPost,
    FavoriteRecipe,
    RecipeRecord,
    StoredRecipe,
    UserProfile,
)
from .recipe_parser import RecipeParser

log = logging.getLogger(__name__)

USERS = "users"
PAST_RECIPES = "past_recipes"
FAVORED_RECIPES = "favored_recipes"
COMMUNITY_RECIPES = "community_recipes"
FAVORITES = "favorites"
MY_POSTS = "myPosts"

PROFILE_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "username": "username",
    "email": "email",
}


def _store_errors(method):
    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except FirebaseError as e:
            log.error(f"❌ Realtime Database call {method.__name__} failed: {e}")
            raise RecipeStoreError(str(e)) from e

    return wrapper


ILLEGAL_KEY_CHARS = set(".$#[]/")


def is_valid_key(key: str) -> bool:
    """Whether key can name a single Realtime Database child."""
    return bool(key) and not any(ch in ILLEGAL_KEY_CHARS or ord(ch) < 32 or ord(ch) == 127 for ch in key)


def _children(snapshot: Any):
    """Return (key, value) pairs of a snapshot in database key order."""
    if isinstance(snapshot, dict):
        return list(snapshot.items())
    # Sequential integer keys come back as a list
    if isinstance(snapshot, list):
        return [(str(i), value) for i, value in enumerate(snapshot) if value is not None]
    return []


class RecipeStore:
    def __init__(self, root, parser: type = RecipeParser):
        self.root = root
        self.parser = parser

    def _user(self, uid: str):
        return self.root.child(USERS).child(uid)

    # Profiles

    @_store_errors
    def save_profile(self, uid: str, profile: UserProfile) -> None:
        data = {key: getattr(profile, attr) for attr, key in PROFILE_FIELDS.items()}
        self._user(uid).set(data)
        log.info(f"Saved profile for user {uid}")

    @_store_errors
    def update_profile(self, uid: str, profile: UserProfile) -> None:
        """Merge the non-empty profile fields into the stored profile."""
        data = {
            key: getattr(profile, attr)
            for attr, key in PROFILE_FIELDS.items()
            if getattr(profile, attr)
        }
        if data:
            self._user(uid).update(data)
            log.info(f"Updated profile fields {sorted(data)} for user {uid}")

    @_store_errors
    def get_profile(self, uid: str) -> Optional[UserProfile]:
        data = self._user(uid).get()
        # users/{uid} also holds favorites and posts
        if not isinstance(data, dict) or not any(key in data for key in PROFILE_FIELDS.values()):
            return None
        return UserProfile(**{
            attr: data.get(key) or "" for attr, key in PROFILE_FIELDS.items()
        })

    # Generated recipes

    @_store_errors
    def save_past_recipe(self, uid: str, text: str) -> str:
        ref = self.root.child(PAST_RECIPES).child(uid).push({
            "recipe": text,
            "timestamp": time.time(),
        })
        log.info(f"Saved generated recipe {ref.key} for user {uid}")
        return ref.key

    @_store_errors
    def list_past_recipes(self, uid: str) -> List[StoredRecipe]:
        snapshot = self.root.child(PAST_RECIPES).child(uid).get()
        recipes = [
            self._stored_recipe(key, value)
            for key, value in _children(snapshot)
            if self._has_text(value)
        ]
        return list(reversed(recipes))

    @_store_errors
    def get_past_recipe(self, uid: str, recipe_id: str) -> Optional[StoredRecipe]:
        if not is_valid_key(recipe_id):
            return None
        value = self.root.child(PAST_RECIPES).child(uid).child(recipe_id).get()
        if not self._has_text(value):
            return None
        return self._stored_recipe(recipe_id, value)

    @staticmethod
    def _has_text(value: Any) -> bool:
        return isinstance(value, dict) and isinstance(value.get("recipe"), str)

    @staticmethod
    def _stored_recipe(key: str, value: dict) -> StoredRecipe:
        return StoredRecipe(id=key, recipe=value["recipe"], timestamp=value.get("timestamp") or 0)

    # Favorites

    @_store_errors
    def add_favorite(self, uid: str, record: RecipeRecord) -> str:
        data = {
            "title": record.title,
            "imageName": record.image_name or "",
            "calories": record.calories,
            "description": record.description,
            "ingredients": record.ingredients,
            "allergies": list(record.allergies),
            "measurements": record.measurements,
            "steps": list(record.steps),
            "macros": record.macros,
            "timestamp": time.time(),
        }
        ref = self._user(uid).child(FAVORITES).push(data)
        log.info(f"Added favorite {ref.key} for user {uid}")
        return ref.key

    @_store_errors
    def add_raw_favorite(self, uid: str, text: str) -> str:
        ref = self.root.child(FAVORED_RECIPES).child(uid).push({"recipe": text})
        log.info(f"Added raw favorite {ref.key} for user {uid}")
        return ref.key

    @_store_errors
    def list_favorites(self, uid: str) -> List[FavoriteRecipe]:
        snapshot = self._user(uid).child(FAVORITES).get()
        favorites = []
        for key, value in _children(snapshot):
            favorite = self._favorite(key, value)
            if favorite is None:
                log.warning(f"Skipping malformed favorite {key} for user {uid}")
                continue
            favorites.append(favorite)
        return list(reversed(favorites))

    @_store_errors
    def get_favorite(self, uid: str, favorite_id: str) -> Optional[FavoriteRecipe]:
        if not is_valid_key(favorite_id):
            return None
        value = self._user(uid).child(FAVORITES).child(favorite_id).get()
        return self._favorite(favorite_id, value)

    @_store_errors
    def delete_favorites(self, uid: str, ids: Iterable[str]) -> int:
        ref = self._user(uid).child(FAVORITES)
        deleted = 0
        for favorite_id in ids:
            if not is_valid_key(favorite_id):
                log.warning(f"Ignoring invalid favorite id {favorite_id!r}")
                continue
            if ref.child(favorite_id).get() is None:
                continue
            ref.child(favorite_id).delete()
            deleted += 1
        log.info(f"Deleted {deleted} favorites for user {uid}")
        return deleted

    @staticmethod
    def _favorite(key: str, value: Any) -> Optional[FavoriteRecipe]:
        if not isinstance(value, dict):
            return None
        text_fields = ("title", "description", "ingredients", "measurements", "macros")
        if not all(isinstance(value.get(name), str) for name in text_fields):
            return None
        calories = value.get("calories")
        if not isinstance(calories, int) or isinstance(calories, bool):
            return None

        # Empty lists are not stored by the Realtime Database
        record = RecipeRecord(
            title=value["title"],
            image_name=value.get("imageName") or None,
            calories=calories,
            description=value["description"],
            ingredients=value["ingredients"],
            allergies=list(value.get("allergies") or []),
            measurements=value["measurements"],
            steps=list(value.get("steps") or []),
            macros=value["macros"],
        )
        return FavoriteRecipe(id=key, record=record, timestamp=value.get("timestamp") or 0)

    # Community

    @_store_errors
    def post_to_community(self, uid: str, text: str) -> str:
        data = {"recipe": text, "userId": uid, "timestamp": time.time()}
        ref = self.root.child(COMMUNITY_RECIPES).push(data)
        self._user(uid).child(MY_POSTS).child(ref.key).set(data)
        log.info(f"User {uid} shared post {ref.key} to the community")
        return ref.key

    @_store_errors
    def list_community(self, default_title: Optional[str] = None) -> List[CommunityPost]:
        snapshot = self.root.child(COMMUNITY_RECIPES).get()
        posts = [
            self._post(key, value, default_title)
            for key, value in _children(snapshot)
            if self._has_text(value)
        ]
        return list(reversed(posts))

    @_store_errors
    def list_my_posts(self, uid: str, default_title: Optional[str] = None) -> List[CommunityPost]:
        snapshot = self._user(uid).child(MY_POSTS).get()
        posts = [
            self._post(key, value, default_title)
            for key, value in _children(snapshot)
            if self._has_text(value)
        ]
        return list(reversed(posts))

    @_store_errors
    def delete_posts(self, uid: str, ids: Iterable[str]) -> int:
        """Remove posts from the user's list and from the community feed.

        Community copies are matched by post id and also by identical text
        from the same user.
        """
        mine = self._user(uid).child(MY_POSTS)
        community = self.root.child(COMMUNITY_RECIPES)
        deleted = 0
        for post_id in ids:
            if not is_valid_key(post_id):
                log.warning(f"Ignoring invalid post id {post_id!r}")
                continue
            post = mine.child(post_id).get()
            if not self._has_text(post):
                continue
            mine.child(post_id).delete()
            community.child(post_id).delete()
            for key, value in _children(community.get()):
                if (
                    self._has_text(value)
                    and value["recipe"] == post["recipe"]
                    and value.get("userId") == uid
                ):
                    community.child(key).delete()
            deleted += 1
        log.info(f"Deleted {deleted} posts for user {uid}")
        return deleted

    def _post(self, key: str, value: dict, default_title: Optional[str]) -> CommunityPost:
        record = self.parser.parse(value["recipe"], default_title=default_title or DEFAULT_TITLE)
        return CommunityPost(
            id=key,
            recipe=value["recipe"],
            user_id=value.get("userId") or "",
            timestamp=value.get("timestamp") or 0,
            record=record,
        )
