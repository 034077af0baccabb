"""Tests for the HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from smartchef.app.api.dependencies import get_generator, get_store
from smartchef.app.core.config import Settings
from smartchef.app.core.exceptions import RecipeGenerationError, RecipeStoreError
from smartchef.app.main import app
from smartchef.app.services import firebase_init

USER = {"X-User-Id": "u1"}

GENERATED = (
    "Here is your recipe!\n"
    "Recipe: Garlic Rice\n"
    "Ingredients:\n"
    "1 cup rice\n"
    "2 cloves garlic\n"
    "Instructions:\n"
    "1. Rinse the rice.\n"
    "2. Fry garlic and add rice.\n"
    "Macros:\n"
    "Calories: 420\n"
    "Carbs: 80g"
)


def test_health_check(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_parse_endpoint(client: TestClient):
    response = client.post("/api/v1/recipes/parse", json={"recipe": GENERATED})
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Garlic Rice"
    assert data["calories"] == 420
    assert data["steps"] == ["1. Rinse the rice.", "2. Fry garlic and add rice."]
    assert data["description"] == "Here is your recipe!"


def test_user_routes_require_login(client: TestClient):
    assert client.get("/api/v1/recipes/past").status_code == 401
    assert client.get("/api/v1/favorites", headers={"X-User-Id": " "}).status_code == 401


def test_generate_saves_valid_recipe(client: TestClient, replies, prompts, store):
    replies.append(GENERATED)
    response = client.post(
        "/api/v1/recipes/generate",
        json={"ingredients": [{"name": "rice", "amount": "1", "unit": "cup"}, {"name": ""}]},
        headers=USER,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert data["record"]["title"] == "Garlic Rice"
    assert "1 cup rice" in prompts[0]

    [past] = store.list_past_recipes("u1")
    assert past.id == data["saved_id"]
    assert past.recipe == GENERATED


def test_generate_invalid_ingredients_not_saved(client: TestClient, replies, store):
    replies.append("❌ Invalid ingredient detected: gravel")
    response = client.post(
        "/api/v1/recipes/generate",
        json={"ingredients": [{"name": "gravel"}]},
        headers=USER,
    )
    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["record"] is None
    assert store.list_past_recipes("u1") == []


def test_generate_without_ingredients(client: TestClient):
    response = client.post("/api/v1/recipes/generate", json={"ingredients": []}, headers=USER)
    assert response.status_code == 422


def test_generate_failure_maps_to_bad_gateway(client: TestClient):
    async def failing(prompt):
        raise RecipeGenerationError("socket closed")

    app.dependency_overrides[get_generator] = lambda: failing
    response = client.post(
        "/api/v1/recipes/generate", json={"ingredients": [{"name": "egg"}]}, headers=USER
    )
    assert response.status_code == 502


def test_favorites_flow(client: TestClient):
    record = client.post("/api/v1/recipes/parse", json={"recipe": GENERATED}).json()
    favorite_id = client.post("/api/v1/favorites", json=record, headers=USER).json()["id"]

    favorites = client.get("/api/v1/favorites", headers=USER).json()
    assert favorites[0]["id"] == favorite_id
    assert favorites[0]["record"]["calories"] == 420

    deleted = client.request("DELETE", "/api/v1/favorites", json={"ids": [favorite_id]}, headers=USER)
    assert deleted.json() == {"deleted": 1}
    assert client.get("/api/v1/favorites", headers=USER).json() == []


def test_favorite_past_recipe(client: TestClient, store, fake_db):
    past_id = store.save_past_recipe("u1", GENERATED)
    response = client.post(f"/api/v1/recipes/past/{past_id}/favorite", headers=USER)
    assert response.status_code == 200
    assert fake_db.child(f"favored_recipes/u1/{response.json()['id']}").get() == {"recipe": GENERATED}
    assert client.post("/api/v1/recipes/past/nope/favorite", headers=USER).status_code == 404


def test_share_and_delete_posts(client: TestClient, store):
    past_id = store.save_past_recipe("u1", GENERATED)
    shared = client.post(f"/api/v1/community/posts/from-past/{past_id}", headers=USER)
    assert shared.status_code == 200
    client.post("/api/v1/community/posts", json={"recipe": "Recipe: Toast"}, headers={"X-User-Id": "u2"})

    feed = client.get("/api/v1/community").json()
    assert feed["total"] == 2
    assert [p["record"]["title"] for p in feed["posts"]] == ["Toast", "Garlic Rice"]

    mine = client.get("/api/v1/community/mine", headers=USER).json()
    assert [p["id"] for p in mine] == [shared.json()["id"]]

    client.request("DELETE", "/api/v1/community/mine", json={"ids": [shared.json()["id"]]}, headers=USER)
    assert client.get("/api/v1/community").json()["total"] == 1


def test_share_favorite_posts_formatted_text(client: TestClient, store):
    record = client.post("/api/v1/recipes/parse", json={"recipe": GENERATED}).json()
    favorite_id = client.post("/api/v1/favorites", json=record, headers=USER).json()["id"]

    assert client.post(f"/api/v1/community/posts/from-favorite/{favorite_id}", headers=USER).status_code == 200
    [post] = store.list_community()
    assert post.recipe.startswith("Recipe: Garlic Rice")
    assert post.record.steps == record["steps"]
    assert post.record.calories == 420
    assert client.post("/api/v1/community/posts/from-favorite/nope", headers=USER).status_code == 404


def test_profile_endpoints(client: TestClient):
    assert client.get("/api/v1/users/me", headers=USER).status_code == 404

    created = client.put(
        "/api/v1/users/me",
        json={"first_name": "Sam", "last_name": "Lee", "username": "sam1", "email": "sam@gmail.com"},
        headers=USER,
    )
    assert created.json()["username"] == "sam1"

    updated = client.put("/api/v1/users/me", json={"username": "sam2"}, headers=USER)
    assert updated.json() == {
        "first_name": "Sam",
        "last_name": "Lee",
        "username": "sam2",
        "email": "sam@gmail.com",
    }


def test_invalid_ids_are_not_deleted(client: TestClient, store):
    favorite_id = store.add_favorite("u1", store.parser.parse(GENERATED))
    response = client.request(
        "DELETE",
        "/api/v1/favorites",
        json={"ids": ["", "bad.id", f"{favorite_id}/title"]},
        headers=USER,
    )
    assert response.status_code == 200
    assert response.json() == {"deleted": 0}
    assert client.get("/api/v1/favorites", headers=USER).json()[0]["record"]["title"] == "Garlic Rice"
    assert client.post("/api/v1/community/posts/from-favorite/bad.id", headers=USER).status_code == 404


def test_invalid_user_id_rejected(client: TestClient):
    assert client.get("/api/v1/favorites", headers={"X-User-Id": "a.b"}).status_code == 400


def unconfigured_firebase(monkeypatch):
    monkeypatch.setattr(firebase_init, "_app", None)
    monkeypatch.setattr(firebase_init, "get_settings", lambda: Settings(firebase_database_url=""))


def test_missing_database_url_raises_store_error(monkeypatch):
    unconfigured_firebase(monkeypatch)
    with pytest.raises(RecipeStoreError, match="FIREBASE_DATABASE_URL"):
        firebase_init.get_root_reference()


def test_missing_database_url_is_service_unavailable(client: TestClient, monkeypatch):
    unconfigured_firebase(monkeypatch)
    app.dependency_overrides.pop(get_store)

    response = client.get("/api/v1/community")
    assert response.status_code == 503
    assert response.json() == {"detail": "Recipe storage is unavailable."}
