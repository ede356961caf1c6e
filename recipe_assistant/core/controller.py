# recipe_assistant/core/controller.py
from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from datetime import date
from typing import Any, Callable, Dict, List, Optional, TypeVar

from recipe_assistant.config import Settings
from recipe_assistant.core.models import (
    AssistantState,
    DietaryFlag,
    DietaryPreferences,
    Ingredient,
    MealPlanDay,
    Operation,
    OperationStatus,
    Outcome,
    Recipe,
    Review,
    ShoppingItem,
    Snapshot,
    View,
)
from recipe_assistant.services.exceptions import LLMError
from recipe_assistant.services.llm import GenerationClient
from recipe_assistant.services.repo.base import SnapshotRepo

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_PANTRY_MESSAGE = "Add some ingredients to your pantry first!"

FAILURE_MESSAGES: Dict[Operation, str] = {
    Operation.RECIPES: "Failed to generate recipes. Please check your API key.",
    Operation.MEAL_PLAN: "Failed to generate meal plan.",
    Operation.SHOPPING: "Failed to generate shopping list.",
}


def _new_id() -> str:
    return uuid.uuid4().hex


class AssistantController:
    """
    Owns the in-memory state and mediates between user actions, the
    generation client and the snapshot store.

    Every change to a persisted collection rewrites the whole snapshot, and
    is applied in memory only once that write succeeded. Changes are
    serialized by a lock, since sync routes run on a thread pool; the lock is
    never held across a generation call. Each generation operation keeps its
    own loading/error status, so overlapping operations never overwrite each
    other's outcome. Triggering
    the same operation twice is not blocked; the last one to finish wins.
    """

    def __init__(self, repo: SnapshotRepo, client: GenerationClient, settings: Settings):
        self._repo = repo
        self._client = client
        self._settings = settings
        self._lock = threading.RLock()

        snapshot = repo.load()
        self.pantry: List[Ingredient] = snapshot.pantry
        self.preferences: DietaryPreferences = snapshot.preferences
        self.meal_plan: List[MealPlanDay] = snapshot.meal_plan
        self.shopping_list: List[ShoppingItem] = snapshot.shopping_list
        self.reviews: List[Review] = snapshot.reviews
        self.recipes: List[Recipe] = []  # session only

        self.active_view: View = View.PANTRY
        self.selected_recipe_id: Optional[str] = None
        self.status: Dict[Operation, OperationStatus] = {op: OperationStatus() for op in Operation}

    # ---- Snapshot -----------------------------------------------------------

    def snapshot(self) -> Snapshot:
        return Snapshot(
            pantry=self.pantry,
            preferences=self.preferences,
            meal_plan=self.meal_plan,
            shopping_list=self.shopping_list,
            reviews=self.reviews,
        )

    def _commit(self, **changes: Any) -> None:
        """Save the snapshot with ``changes`` applied, then adopt them. Caller holds the lock."""
        self._repo.save(self.snapshot().model_copy(update=changes))
        for name, value in changes.items():
            setattr(self, name, value)

    def state(self) -> AssistantState:
        return AssistantState(
            pantry=self.pantry,
            preferences=self.preferences,
            recipes=self.recipes,
            meal_plan=self.meal_plan,
            shopping_list=self.shopping_list,
            reviews=self.reviews,
            active_view=self.active_view,
            selected_recipe_id=self.selected_recipe_id,
            status=dict(self.status),
        )

    # ---- Pantry -------------------------------------------------------------

    def add_ingredient(self, name: str, amount: Optional[str] = None) -> Optional[Ingredient]:
        """Append an ingredient; blank names are ignored."""
        if not name or not name.strip():
            return None
        amount = amount.strip() if amount else None
        item = Ingredient(id=_new_id(), name=name.strip(), amount=amount or None)
        with self._lock:
            self._commit(pantry=[*self.pantry, item])
        return item

    def remove_ingredient(self, ingredient_id: str) -> bool:
        with self._lock:
            remaining = [i for i in self.pantry if i.id != ingredient_id]
            if len(remaining) == len(self.pantry):
                return False
            self._commit(pantry=remaining)
        return True

    # ---- Preferences --------------------------------------------------------

    def set_preferences(self, preferences: DietaryPreferences) -> DietaryPreferences:
        with self._lock:
            self._commit(preferences=preferences)
        return preferences

    def set_preference(self, flag: DietaryFlag, value: bool) -> DietaryPreferences:
        with self._lock:
            return self.set_preferences(self.preferences.model_copy(update={flag.field: value}))

    def toggle_preference(self, flag: DietaryFlag) -> DietaryPreferences:
        with self._lock:
            return self.set_preference(flag, not getattr(self.preferences, flag.field))

    def set_allergies(self, allergies: List[str]) -> DietaryPreferences:
        cleaned = [a.strip() for a in allergies if a and a.strip()]
        with self._lock:
            return self.set_preferences(self.preferences.model_copy(update={"allergies": cleaned}))

    # ---- Generation ---------------------------------------------------------

    async def _generate(self, op: Operation, call: Callable[..., T], *args: Any) -> Optional[T]:
        """pending -> call -> idle; returns None when the call failed."""
        self.status[op] = OperationStatus(loading=True)
        try:
            return await asyncio.to_thread(call, *args)
        except LLMError as e:
            logger.warning("%s generation failed: %s", op.value, e)
            self.status[op] = OperationStatus(error=FAILURE_MESSAGES[op])
            return None
        finally:
            self.status[op] = self.status[op].model_copy(update={"loading": False})

    def review_context(self) -> List[str]:
        """Most recent review excerpts to feed back into recipe prompts."""
        recent = self.reviews[: self._settings.review_context_limit]
        return [f"{r.rating} stars: {r.comment}" for r in recent]

    async def discover_recipes(self) -> Outcome:
        if not self.pantry:
            self.status[Operation.RECIPES] = OperationStatus(error=EMPTY_PANTRY_MESSAGE)
            return Outcome.REJECTED

        names = [i.name for i in self.pantry]
        recipes = await self._generate(
            Operation.RECIPES, self._client.generate_recipes, names, self.preferences, self.review_context()
        )
        if recipes is None:
            return Outcome.FAILED
        with self._lock:
            self.recipes = recipes
            self.selected_recipe_id = None
            self.active_view = View.RECIPES
        return Outcome.APPLIED

    async def generate_meal_plan(self) -> Outcome:
        plan = await self._generate(Operation.MEAL_PLAN, self._client.generate_meal_plan, self.preferences)
        if plan is None:
            return Outcome.FAILED
        with self._lock:
            self._commit(meal_plan=plan)
        return Outcome.APPLIED

    async def generate_shopping_list(self) -> Outcome:
        if not self.recipes:
            return Outcome.SKIPPED

        titles = [r.title for r in self.recipes]
        items = await self._generate(Operation.SHOPPING, self._client.generate_shopping_list, titles)
        if items is None:
            return Outcome.FAILED
        with self._lock:
            self._commit(shopping_list=items)
            self.active_view = View.SHOPPING
        return Outcome.APPLIED

    def dismiss_error(self, op: Optional[Operation] = None) -> None:
        for key in [op] if op else list(Operation):
            self.status[key] = self.status[key].model_copy(update={"error": None})

    # ---- Shopping -----------------------------------------------------------

    def toggle_shopping_item(self, item_id: str) -> Optional[ShoppingItem]:
        toggled: Optional[ShoppingItem] = None
        updated: List[ShoppingItem] = []
        with self._lock:
            for item in self.shopping_list:
                if item.id == item_id:
                    item = item.model_copy(update={"checked": not item.checked})
                    toggled = item
                updated.append(item)
            if toggled is None:
                return None
            self._commit(shopping_list=updated)
        return toggled

    def shopping_by_category(self) -> Dict[str, List[ShoppingItem]]:
        grouped: Dict[str, List[ShoppingItem]] = {}
        for item in self.shopping_list:
            grouped.setdefault(item.category, []).append(item)
        return grouped

    # ---- Recipes & reviews --------------------------------------------------

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return next((r for r in self.recipes if r.id == recipe_id), None)

    def select_recipe(self, recipe_id: Optional[str]) -> Optional[Recipe]:
        recipe = self.get_recipe(recipe_id) if recipe_id else None
        self.selected_recipe_id = recipe.id if recipe else None
        return recipe

    def add_review(self, recipe_id: str, rating: int, comment: str, user: Optional[str] = None) -> Review:
        """Prepend a review; the recipe id is not checked against the current recipes."""
        review = Review(
            id=_new_id(),
            recipe_id=recipe_id,
            user=user or self._settings.reviewer_name,
            rating=rating,
            comment=comment,
            date=date.today().isoformat(),
        )
        with self._lock:
            self._commit(reviews=[review, *self.reviews])
        return review

    def reviews_for(self, recipe_id: str) -> List[Review]:
        return [r for r in self.reviews if r.recipe_id == recipe_id]

    # ---- Navigation ---------------------------------------------------------

    def select_view(self, view: View) -> View:
        self.active_view = view
        return view
