from __future__ import annotations

from fastapi import Request

from recipe_assistant.core.controller import AssistantController


def get_controller(request: Request) -> AssistantController:
    return request.app.state.controller
