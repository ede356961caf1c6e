from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from recipe_assistant.api.deps import get_controller
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import CamelModel, Operation, Outcome, Recipe, Review
from recipe_assistant.services.exceptions import RepoError

router = APIRouter(tags=["recipes"])

# ---- Models ------------------------------------------------------------------

class RecipeDetail(CamelModel):
    recipe: Recipe
    reviews: List[Review]
    display_calories: float


class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Star rating offered by the UI")
    comment: str = "Loved this AI creation!"
    user: Optional[str] = None

# ---- Routes ------------------------------------------------------------------

@router.post("/api/v1/recipes/discover", response_model=List[Recipe])
async def discover_recipes(controller: AssistantController = Depends(get_controller)):
    try:
        outcome = await controller.discover_recipes()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    error = controller.status[Operation.RECIPES].error
    if outcome is Outcome.REJECTED:
        raise HTTPException(status_code=400, detail=error)
    if outcome is Outcome.FAILED:
        raise HTTPException(status_code=502, detail=error)
    return controller.recipes


@router.get("/api/v1/recipes", response_model=List[Recipe])
def list_recipes(controller: AssistantController = Depends(get_controller)):
    return controller.recipes


@router.get("/api/v1/recipes/{recipe_id}", response_model=RecipeDetail)
def get_recipe(recipe_id: str, controller: AssistantController = Depends(get_controller)):
    recipe = controller.select_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return RecipeDetail(
        recipe=recipe,
        reviews=controller.reviews_for(recipe.id),
        display_calories=recipe.display_calories(),
    )


@router.get("/api/v1/recipes/{recipe_id}/reviews", response_model=List[Review])
def list_reviews(recipe_id: str, controller: AssistantController = Depends(get_controller)):
    return controller.reviews_for(recipe_id)


@router.post("/api/v1/recipes/{recipe_id}/reviews", response_model=Review, status_code=201)
def add_review(recipe_id: str, payload: ReviewIn, controller: AssistantController = Depends(get_controller)):
    try:
        return controller.add_review(recipe_id, payload.rating, payload.comment, user=payload.user)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
