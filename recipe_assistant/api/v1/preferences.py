from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from recipe_assistant.api.deps import get_controller
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import DietaryFlag, DietaryPreferences
from recipe_assistant.services.exceptions import RepoError

router = APIRouter(tags=["preferences"])


@router.get("/api/v1/preferences", response_model=DietaryPreferences)
def get_preferences(controller: AssistantController = Depends(get_controller)):
    return controller.preferences


@router.put("/api/v1/preferences", response_model=DietaryPreferences)
def replace_preferences(preferences: DietaryPreferences, controller: AssistantController = Depends(get_controller)):
    try:
        return controller.set_preferences(preferences)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/v1/preferences/{flag}/toggle", response_model=DietaryPreferences)
def toggle_preference(flag: DietaryFlag, controller: AssistantController = Depends(get_controller)):
    try:
        return controller.toggle_preference(flag)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/api/v1/preferences/allergies", response_model=DietaryPreferences)
def replace_allergies(allergies: List[str], controller: AssistantController = Depends(get_controller)):
    try:
        return controller.set_allergies(allergies)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
