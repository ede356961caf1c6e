from types import SimpleNamespace
from typing import List, Optional

import pytest

from recipe_assistant.config import Settings
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import (
    DietaryPreferences,
    MealPlanDay,
    Recipe,
    ShoppingItem,
    Snapshot,
)
from recipe_assistant.services.exceptions import LLMError, RepoError
from recipe_assistant.services.llm import GenerationClient
from recipe_assistant.services.repo.base import SnapshotRepo


class InMemorySnapshotRepo(SnapshotRepo):
    def __init__(self, snapshot: Optional[Snapshot] = None):
        self.snapshot = snapshot or Snapshot()
        self.saves = 0
        self.fail_saves = False

    def load(self) -> Snapshot:
        return self.snapshot

    def save(self, snapshot: Snapshot) -> None:
        if self.fail_saves:
            raise RepoError("disk full")
        self.snapshot = snapshot
        self.saves += 1


class FakeGenerationClient(GenerationClient):
    """Returns canned records; operations named in ``failing`` raise LLMError."""

    def __init__(self):
        self.recipes: List[Recipe] = []
        self.meal_plan: List[MealPlanDay] = []
        self.shopping: List[ShoppingItem] = []
        self.failing: set = set()
        self.calls: list = []

    def generate_recipes(self, ingredients, preferences, review_context):
        self.calls.append(("recipes", ingredients, preferences, review_context))
        if "recipes" in self.failing:
            raise LLMError("boom")
        return list(self.recipes)

    def generate_meal_plan(self, preferences: DietaryPreferences):
        self.calls.append(("mealplan", preferences))
        if "mealplan" in self.failing:
            raise LLMError("boom")
        return list(self.meal_plan)

    def generate_shopping_list(self, recipe_titles):
        self.calls.append(("shopping", recipe_titles))
        if "shopping" in self.failing:
            raise LLMError("boom")
        return list(self.shopping)


class FakeCompletions:
    def __init__(self, contents):
        self.contents = list(contents)
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        content = self.contents.pop(0)
        if isinstance(content, Exception):
            raise content
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeOpenAI:
    """Stands in for the OpenAI SDK client: ``chat.completions.create``."""

    def __init__(self, *contents):
        self.chat = SimpleNamespace(completions=FakeCompletions(contents))

    @property
    def requests(self):
        return self.chat.completions.requests


def make_recipe(idx: int, title: Optional[str] = None) -> Recipe:
    title = title or f"Recipe {idx}"
    return Recipe(
        id=f"r{idx}",
        title=title,
        description="Tasty",
        ingredients=["egg"],
        instructions=["Crack", "Cook"],
        cooking_time=10,
        servings=2,
        image_url=f"https://example.test/{idx}",
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(openai_api_key="test", data_dir=str(tmp_path / "data"))


@pytest.fixture
def repo():
    return InMemorySnapshotRepo()


@pytest.fixture
def fake_client():
    return FakeGenerationClient()


@pytest.fixture
def controller(repo, fake_client, settings):
    return AssistantController(repo=repo, client=fake_client, settings=settings)


@pytest.fixture
def recipe_factory():
    return make_recipe


@pytest.fixture
def fake_openai():
    return FakeOpenAI
