"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Provider
    rerank_api_key: str = Field(default="", description="API key for the reranking provider")
    rerank_base_url: str = Field(
        default="https://api.openai.com",
        description=(
            "Base URL of an OpenAI-compatible API exposing ``/v1/rerank``, "
            "e.g. 'https://api.siliconflow.cn'. A trailing slash is ignored."
        ),
    )
    rerank_model: str = Field(default="rerank-1", description="Reranking model identifier")
    rerank_timeout: float = Field(default=30.0, description="Request timeout in seconds")
    rerank_max_retries: int = Field(
        default=0,
        ge=0,
        description="Extra attempts on transport errors / 429 / 5xx. 0 means a single attempt.",
    )

    # Reconciliation
    rerank_top_n: int = Field(default=3, ge=1, description="Default number of documents returned")
    rerank_prefer_similarity_score: bool = Field(
        default=False,
        description="Order fallback results by a prior ``similarity_score`` when every document has one",
    )

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
