from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipe_assistant.config import Settings
from recipe_assistant.core.controller import AssistantController
from recipe_assistant.services.llm import GenerationClient, OpenAIGenerationClient
from recipe_assistant.services.repo.base import SnapshotRepo
from recipe_assistant.services.repo.json_repo import JSONSnapshotRepo

from recipe_assistant.api.v1.pantry import router as pantry_router
from recipe_assistant.api.v1.preferences import router as preferences_router
from recipe_assistant.api.v1.recipes import router as recipes_router
from recipe_assistant.api.v1.mealplan import router as mealplan_router
from recipe_assistant.api.v1.shopping import router as shopping_router
from recipe_assistant.api.v1.state import router as state_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Recipe assistant ready (pantry=%d, reviews=%d)",
                len(app.state.controller.pantry), len(app.state.controller.reviews))
    yield


def create_app(
    settings: Optional[Settings] = None,
    repo: Optional[SnapshotRepo] = None,
    client: Optional[GenerationClient] = None,
) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Ensure data dir exists so repos can write
    os.makedirs(settings.data_dir, exist_ok=True)

    app = FastAPI(title="Recipe Assistant API", version="1.0", lifespan=lifespan)
    app.state.controller = AssistantController(
        repo=repo or JSONSnapshotRepo(settings),
        client=client or OpenAIGenerationClient(settings),
        settings=settings,
    )

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS if you want)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(state_router)
    app.include_router(pantry_router)
    app.include_router(preferences_router)
    app.include_router(recipes_router)
    app.include_router(mealplan_router)
    app.include_router(shopping_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready"}

    return app
