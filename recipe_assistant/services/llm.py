from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from recipe_assistant.config import Settings
from recipe_assistant.core.models import DietaryPreferences, MealPlanDay, Recipe, ShoppingItem
from recipe_assistant.services.exceptions import LLMError
from recipe_assistant.services.metrics import MetricsLogger

# OpenAI SDK v1+
try:
    from openai import OpenAI
except ImportError as e:  # pragma: no cover
    raise LLMError("Failed to import OpenAI SDK. Install with `pip install openai`") from e

logger = logging.getLogger(__name__)


# ---- Output schemas ----------------------------------------------------------

STRING = {"type": "string"}
NUMBER = {"type": "number"}
STRING_LIST = {"type": "array", "items": STRING}


def array_schema(key: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    """Array-of-records schema wrapped in an object root under ``key``."""
    return {
        "type": "object",
        "properties": {
            key: {
                "type": "array",
                "items": {"type": "object", "properties": properties, "required": required},
            }
        },
        "required": [key],
    }


RECIPE_SCHEMA = array_schema(
    "recipes",
    {
        "id": STRING,
        "title": STRING,
        "description": STRING,
        "ingredients": STRING_LIST,
        "instructions": STRING_LIST,
        "cookingTime": NUMBER,
        "servings": NUMBER,
        "calories": NUMBER,
        "tags": STRING_LIST,
    },
    ["id", "title", "description", "ingredients", "instructions", "cookingTime", "servings"],
)

MEAL_PLAN_SCHEMA = array_schema(
    "days",
    {
        "day": STRING,
        "breakfast": STRING,
        "lunch": STRING,
        "dinner": STRING,
        "snacks": STRING_LIST,
    },
    ["day", "breakfast", "lunch", "dinner"],
)

SHOPPING_LIST_SCHEMA = array_schema(
    "items",
    {"id": STRING, "name": STRING, "category": STRING},
    ["id", "name", "category"],
)


# ---- Prompts -----------------------------------------------------------------

def build_recipe_prompt(
    ingredients: List[str],
    preferences: DietaryPreferences,
    review_context: List[str],
    count: int = 3,
) -> str:
    return (
        f"Generate {count} high-quality recipes based strictly on these ingredients: "
        f"{', '.join(ingredients)}.\n"
        f"Dietary Restrictions: {', '.join(preferences.active_flags())}.\n"
        f"Allergies: {', '.join(preferences.allergies)}.\n"
        f"Context from user reviews: {'; '.join(review_context)}.\n"
        "Make sure recipes are creative and professional."
    )


def build_meal_plan_prompt(preferences: DietaryPreferences) -> str:
    return (
        "Generate a 7-day meal plan based on these dietary preferences: "
        f"{preferences.model_dump_json(by_alias=True)}.\n"
        "Return exactly 7 days (Monday through Sunday). "
        "Each day should have a breakfast, lunch, and dinner title."
    )


def build_shopping_list_prompt(recipe_titles: List[str]) -> str:
    return (
        f"Based on these recipes: {', '.join(recipe_titles)}, "
        "create a consolidated grocery shopping list. "
        "Categorize items (e.g., Produce, Dairy, Pantry)."
    )


def image_url_for(title: str, template: str) -> str:
    """Deterministic placeholder image seeded by the title with whitespace removed."""
    return template.format(seed=re.sub(r"\s", "", title))


# ---- Response parsing --------------------------------------------------------

def _rows(content: Optional[str], key: str) -> List[Dict[str, Any]]:
    if not content:
        raise ValueError("empty response")
    data = json.loads(content)
    rows = data[key] if isinstance(data, dict) else data
    if not isinstance(rows, list):
        raise ValueError(f"expected an array under '{key}', got {type(rows).__name__}")
    return rows


def parse_recipes(content: Optional[str], image_url_template: str) -> List[Recipe]:
    return [
        Recipe.model_validate({**row, "imageUrl": image_url_for(row["title"], image_url_template)})
        for row in _rows(content, "recipes")
    ]


def parse_meal_plan(content: Optional[str]) -> List[MealPlanDay]:
    return [MealPlanDay.model_validate(row) for row in _rows(content, "days")]


def parse_shopping_list(content: Optional[str]) -> List[ShoppingItem]:
    return [ShoppingItem.model_validate({**row, "checked": False}) for row in _rows(content, "items")]


# ---- Clients -----------------------------------------------------------------

class GenerationClient(ABC):
    """The three structured-generation calls the assistant relies on."""

    @abstractmethod
    def generate_recipes(
        self,
        ingredients: List[str],
        preferences: DietaryPreferences,
        review_context: List[str],
    ) -> List[Recipe]: ...

    @abstractmethod
    def generate_meal_plan(self, preferences: DietaryPreferences) -> List[MealPlanDay]: ...

    @abstractmethod
    def generate_shopping_list(self, recipe_titles: List[str]) -> List[ShoppingItem]: ...


class OpenAIGenerationClient(GenerationClient):
    """
    One chat completion per operation, constrained by a JSON schema.
    No retry and no fallback: every failure surfaces as LLMError.
    """

    def __init__(self, settings: Settings, client: Any = None, metrics: Optional[MetricsLogger] = None):
        if client is None:
            try:
                client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
            except Exception as e:
                raise LLMError("Could not initialize OpenAI client") from e
        self._client = client
        self._model = settings.openai_model
        self._recipe_count = settings.recipe_count
        self._image_url_template = settings.image_url_template
        self._metrics = metrics or MetricsLogger(settings)

    def _complete(self, name: str, prompt: str, schema: Dict[str, Any]) -> Optional[str]:
        t0 = time.perf_counter()
        ok = False
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": "You are a precise culinary assistant returning strict JSON."},
                    {"role": "user", "content": prompt},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": name, "schema": schema, "strict": False},
                },
            )
            ok = True
            return resp.choices[0].message.content
        finally:
            dt_ms = (time.perf_counter() - t0) * 1000.0
            self._metrics.log_latency(name, dt_ms, extra={"model": self._model, "ok": ok})

    def generate_recipes(
        self,
        ingredients: List[str],
        preferences: DietaryPreferences,
        review_context: List[str],
    ) -> List[Recipe]:
        try:
            prompt = build_recipe_prompt(ingredients, preferences, review_context, self._recipe_count)
            content = self._complete("generate_recipes", prompt, RECIPE_SCHEMA)
            recipes = parse_recipes(content, self._image_url_template)
        except Exception as e:
            raise LLMError(f"OpenAI recipe generation failed: {e}") from e
        logger.info("Generated %d recipes from %d ingredients", len(recipes), len(ingredients))
        return recipes

    def generate_meal_plan(self, preferences: DietaryPreferences) -> List[MealPlanDay]:
        try:
            content = self._complete("generate_meal_plan", build_meal_plan_prompt(preferences), MEAL_PLAN_SCHEMA)
            days = parse_meal_plan(content)
        except Exception as e:
            raise LLMError(f"OpenAI meal plan generation failed: {e}") from e
        if len(days) != 7:
            logger.warning("Meal plan came back with %d days instead of 7", len(days))
        return days

    def generate_shopping_list(self, recipe_titles: List[str]) -> List[ShoppingItem]:
        try:
            prompt = build_shopping_list_prompt(recipe_titles)
            content = self._complete("generate_shopping_list", prompt, SHOPPING_LIST_SCHEMA)
            items = parse_shopping_list(content)
        except Exception as e:
            raise LLMError(f"OpenAI shopping list generation failed: {e}") from e
        logger.info("Generated %d shopping items for %d recipes", len(items), len(recipe_titles))
        return items
