import json

from fastapi.testclient import TestClient

from recipe_assistant.config import Settings
from recipe_assistant.main import create_app
from recipe_assistant.services.llm import OpenAIGenerationClient


def _recipes_payload():
    return json.dumps({"recipes": [
        {"id": "r1", "title": "Egg Fried Rice", "description": "d", "ingredients": ["egg", "rice"],
         "instructions": ["Fry egg", "Add rice"], "cookingTime": 15, "servings": 2, "calories": 520},
        {"id": "r2", "title": "Rice Pudding", "description": "d", "ingredients": ["rice", "milk"],
         "instructions": ["Simmer"], "cookingTime": 40, "servings": 4},
    ]})


def _make_client(tmp_path, monkeypatch, sdk):
    # isolate data dir for this test run
    d = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(d))
    monkeypatch.setenv("OPENAI_API_KEY", "test")  # the SDK is faked
    settings = Settings()
    app = create_app(settings=settings, client=OpenAIGenerationClient(settings, client=sdk))
    return TestClient(app), d


def test_pantry_round_trip_and_persistence(tmp_path, monkeypatch, fake_openai):
    client, d = _make_client(tmp_path, monkeypatch, fake_openai())

    resp = client.post("/api/v1/pantry", json={"name": "  Tomato ", "amount": "2"})
    assert resp.status_code == 200
    body = resp.json()
    assert body[0]["name"] == "Tomato"
    assert body[0]["amount"] == "2"

    # Blank input leaves the pantry alone
    assert len(client.post("/api/v1/pantry", json={"name": "   "}).json()) == 1

    with open(d / "pantry.json", encoding="utf-8") as f:
        assert json.load(f) == body

    resp = client.delete(f"/api/v1/pantry/{body[0]['id']}")
    assert resp.json() == []


def test_discover_requires_pantry(tmp_path, monkeypatch, fake_openai):
    sdk = fake_openai()
    client, _ = _make_client(tmp_path, monkeypatch, sdk)

    resp = client.post("/api/v1/recipes/discover")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Add some ingredients to your pantry first!"
    assert sdk.requests == []
    assert client.get("/api/v1/state").json()["status"]["recipes"]["error"] is not None


def test_discover_review_and_shopping_flow(tmp_path, monkeypatch, fake_openai):
    shopping = json.dumps({"items": [
        {"id": "1", "name": "Eggs", "category": "Dairy"},
        {"id": "2", "name": "Rice", "category": "Pantry"},
    ]})
    client, _ = _make_client(tmp_path, monkeypatch, fake_openai(_recipes_payload(), shopping))
    client.post("/api/v1/pantry", json={"name": "egg"})
    client.post("/api/v1/preferences/glutenFree/toggle")

    resp = client.post("/api/v1/recipes/discover")
    assert resp.status_code == 200
    recipes = resp.json()
    assert [r["imageUrl"] for r in recipes] == [
        "https://picsum.photos/seed/EggFriedRice/800/600",
        "https://picsum.photos/seed/RicePudding/800/600",
    ]
    assert client.get("/api/v1/state").json()["activeView"] == "recipes"

    resp = client.post("/api/v1/recipes/r2/reviews", json={"rating": 5})
    assert resp.status_code == 201
    assert resp.json()["comment"] == "Loved this AI creation!"

    detail = client.get("/api/v1/recipes/r2").json()
    assert detail["displayCalories"] == 450
    assert [r["recipeId"] for r in detail["reviews"]] == ["r2"]
    assert client.get("/api/v1/recipes/r1").json()["reviews"] == []
    assert client.get("/api/v1/recipes/nope").status_code == 404

    resp = client.post("/api/v1/shopping/generate")
    assert [i["checked"] for i in resp.json()] == [False, False]
    assert client.post("/api/v1/shopping/1/toggle").json()["checked"] is True
    grouped = client.get("/api/v1/shopping/by-category").json()
    assert list(grouped) == ["Dairy", "Pantry"]
    assert client.get("/api/v1/state").json()["activeView"] == "shopping"


def test_meal_plan_failure_is_reported_per_operation(tmp_path, monkeypatch, fake_openai):
    client, _ = _make_client(tmp_path, monkeypatch, fake_openai("oops, not json"))

    resp = client.post("/api/v1/mealplan/generate")
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Failed to generate meal plan."
    assert client.get("/api/v1/mealplan").json() == []

    status = client.get("/api/v1/state").json()["status"]
    assert status["mealplan"] == {"loading": False, "error": "Failed to generate meal plan."}
    assert status["recipes"]["error"] is None

    cleared = client.delete("/api/v1/errors", params={"operation": "mealplan"}).json()
    assert cleared["status"]["mealplan"]["error"] is None


def test_shopping_generate_without_recipes_is_noop(tmp_path, monkeypatch, fake_openai):
    sdk = fake_openai()
    client, _ = _make_client(tmp_path, monkeypatch, sdk)
    resp = client.post("/api/v1/shopping/generate")
    assert resp.status_code == 200
    assert resp.json() == []
    assert sdk.requests == []


def test_state_survives_app_restart(tmp_path, monkeypatch, fake_openai):
    client, _ = _make_client(tmp_path, monkeypatch, fake_openai())
    client.post("/api/v1/pantry", json={"name": "egg"})
    client.put("/api/v1/preferences/allergies", json=["peanuts"])
    client.post("/api/v1/recipes/r1/reviews", json={"rating": 4, "comment": "Nice"})
    before = client.get("/api/v1/state").json()

    restarted, _ = _make_client(tmp_path, monkeypatch, fake_openai())
    after = restarted.get("/api/v1/state").json()
    for key in ("pantry", "preferences", "mealPlan", "shoppingList", "reviews"):
        assert after[key] == before[key]
    assert after["preferences"]["allergies"] == ["peanuts"]


def test_view_selection_and_health(tmp_path, monkeypatch, fake_openai):
    client, _ = _make_client(tmp_path, monkeypatch, fake_openai())
    assert client.put("/api/v1/view", json={"view": "mealplan"}).json()["activeView"] == "mealplan"
    assert client.put("/api/v1/view", json={"view": "kitchen"}).status_code == 422
    assert client.get("/healthz").json() == {"status": "ok"}
