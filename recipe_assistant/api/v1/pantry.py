from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from recipe_assistant.api.deps import get_controller
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import Ingredient
from recipe_assistant.services.exceptions import RepoError

router = APIRouter(tags=["pantry"])

# ---- Models ------------------------------------------------------------------

class IngredientIn(BaseModel):
    name: str
    amount: Optional[str] = None

# ---- Routes ------------------------------------------------------------------

@router.get("/api/v1/pantry", response_model=List[Ingredient])
def get_pantry(controller: AssistantController = Depends(get_controller)):
    return controller.pantry


@router.post("/api/v1/pantry", response_model=List[Ingredient], status_code=status.HTTP_200_OK)
def add_ingredient(payload: IngredientIn, controller: AssistantController = Depends(get_controller)):
    # Blank names are a no-op; the unchanged pantry is returned.
    try:
        controller.add_ingredient(payload.name, payload.amount)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return controller.pantry


@router.delete("/api/v1/pantry/{ingredient_id}", response_model=List[Ingredient])
def remove_ingredient(ingredient_id: str, controller: AssistantController = Depends(get_controller)):
    try:
        controller.remove_ingredient(ingredient_id)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return controller.pantry
