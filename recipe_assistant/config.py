from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # LLM
    openai_api_key: str = Field(...)
    openai_model: str = Field("gpt-4o-mini")
    openai_base_url: Optional[str] = Field(None)

    # Prompting
    recipe_count: int = Field(3, ge=1)
    review_context_limit: int = Field(5, ge=0)
    image_url_template: str = Field("https://picsum.photos/seed/{seed}/800/600")
    reviewer_name: str = Field("FoodieUser")

    # Storage
    data_dir: str = Field("data")
    metrics_file: str = Field("latency_log.jsonl")

    # Serving
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:8001"])
    log_level: str = Field("INFO")
