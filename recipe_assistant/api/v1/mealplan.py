from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from recipe_assistant.api.deps import get_controller
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import MealPlanDay, Operation, Outcome
from recipe_assistant.services.exceptions import RepoError

router = APIRouter(tags=["mealplan"])


@router.post("/api/v1/mealplan/generate", response_model=List[MealPlanDay])
async def generate_meal_plan(controller: AssistantController = Depends(get_controller)):
    try:
        outcome = await controller.generate_meal_plan()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if outcome is Outcome.FAILED:
        raise HTTPException(status_code=502, detail=controller.status[Operation.MEAL_PLAN].error)
    return controller.meal_plan


@router.get("/api/v1/mealplan", response_model=List[MealPlanDay])
def get_meal_plan(controller: AssistantController = Depends(get_controller)):
    return controller.meal_plan
