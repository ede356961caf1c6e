from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException

from recipe_assistant.api.deps import get_controller
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import Operation, Outcome, ShoppingItem
from recipe_assistant.services.exceptions import RepoError

router = APIRouter(tags=["shopping"])


@router.post("/api/v1/shopping/generate", response_model=List[ShoppingItem])
async def generate_shopping_list(controller: AssistantController = Depends(get_controller)):
    # With no recipes this is a silent no-op and the current list comes back.
    try:
        outcome = await controller.generate_shopping_list()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if outcome is Outcome.FAILED:
        raise HTTPException(status_code=502, detail=controller.status[Operation.SHOPPING].error)
    return controller.shopping_list


@router.get("/api/v1/shopping", response_model=List[ShoppingItem])
def get_shopping_list(controller: AssistantController = Depends(get_controller)):
    return controller.shopping_list


@router.get("/api/v1/shopping/by-category", response_model=Dict[str, List[ShoppingItem]])
def get_shopping_by_category(controller: AssistantController = Depends(get_controller)):
    return controller.shopping_by_category()


@router.post("/api/v1/shopping/{item_id}/toggle", response_model=ShoppingItem)
def toggle_shopping_item(item_id: str, controller: AssistantController = Depends(get_controller)):
    try:
        item = controller.toggle_shopping_item(item_id)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if item is None:
        raise HTTPException(status_code=404, detail="Shopping item not found")
    return item
