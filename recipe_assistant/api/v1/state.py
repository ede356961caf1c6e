from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from recipe_assistant.api.deps import get_controller
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.core.models import AssistantState, Operation, View

router = APIRouter(tags=["state"])


class ViewIn(BaseModel):
    view: View


@router.get("/api/v1/state", response_model=AssistantState)
def get_state(controller: AssistantController = Depends(get_controller)):
    return controller.state()


@router.put("/api/v1/view", response_model=AssistantState)
def select_view(payload: ViewIn, controller: AssistantController = Depends(get_controller)):
    controller.select_view(payload.view)
    return controller.state()


@router.delete("/api/v1/errors", response_model=AssistantState)
def dismiss_error(operation: Optional[Operation] = None, controller: AssistantController = Depends(get_controller)):
    """Clear the error of one operation, or of all of them when none is given."""
    controller.dismiss_error(operation)
    return controller.state()
