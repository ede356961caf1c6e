# recipe_assistant/core/models.py
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_snake


# Render-time stand-in when the model leaves calories out.
DEFAULT_DISPLAY_CALORIES = 450


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and on disk."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------- Pantry & preferences ----------

class Ingredient(CamelModel):
    """A single pantry entry."""
    id: str
    name: str = Field(..., min_length=1, description="Display name of the ingredient")
    amount: Optional[str] = Field(None, description="Free-form amount, e.g. '2 cups'")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Ingredient.name cannot be blank")
        return v


class DietaryFlag(str, Enum):
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "glutenFree"
    KETO = "keto"
    PALEO = "paleo"

    @property
    def field(self) -> str:
        """Attribute name on DietaryPreferences."""
        return to_snake(self.value)


class DietaryPreferences(CamelModel):
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    keto: bool = False
    paleo: bool = False
    allergies: List[str] = Field(default_factory=list)

    def active_flags(self) -> List[str]:
        """Wire names of the flags currently switched on, in declaration order."""
        return [flag.value for flag in DietaryFlag if getattr(self, flag.field)]


# ---------- Generated content ----------

class Recipe(CamelModel):
    id: str
    title: str
    description: str
    ingredients: List[str]
    instructions: List[str]  # ordered steps
    cooking_time: float = Field(..., description="Minutes")
    servings: float
    calories: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    image_url: str
    rating: Optional[float] = None

    def display_calories(self) -> float:
        return self.calories or DEFAULT_DISPLAY_CALORIES


class MealPlanDay(CamelModel):
    day: str
    breakfast: str
    lunch: str
    dinner: str
    snacks: List[str] = Field(default_factory=list)


class ShoppingItem(CamelModel):
    id: str
    name: str
    category: str
    checked: bool = False


class Review(CamelModel):
    id: str
    recipe_id: str
    user: str
    rating: int  # UI offers 1..5; not enforced here
    comment: str
    date: str


# ---------- Persistence ----------

class Snapshot(CamelModel):
    """Everything that survives a restart."""
    pantry: List[Ingredient] = Field(default_factory=list)
    preferences: DietaryPreferences = Field(default_factory=DietaryPreferences)
    meal_plan: List[MealPlanDay] = Field(default_factory=list)
    shopping_list: List[ShoppingItem] = Field(default_factory=list)
    reviews: List[Review] = Field(default_factory=list)


# ---------- Controller status ----------

class View(str, Enum):
    PANTRY = "pantry"
    RECIPES = "recipes"
    MEAL_PLAN = "mealplan"
    SHOPPING = "shopping"


class Operation(str, Enum):
    RECIPES = "recipes"
    MEAL_PLAN = "mealplan"
    SHOPPING = "shopping"


class Outcome(str, Enum):
    APPLIED = "applied"
    REJECTED = "rejected"   # precondition failed, no call made
    FAILED = "failed"       # generation call failed
    SKIPPED = "skipped"     # silent no-op


class OperationStatus(CamelModel):
    loading: bool = False
    error: Optional[str] = None


class AssistantState(CamelModel):
    pantry: List[Ingredient]
    preferences: DietaryPreferences
    recipes: List[Recipe]
    meal_plan: List[MealPlanDay]
    shopping_list: List[ShoppingItem]
    reviews: List[Review]
    active_view: View
    selected_recipe_id: Optional[str] = None
    status: Dict[Operation, OperationStatus]
