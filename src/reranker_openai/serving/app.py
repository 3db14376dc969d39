"""FastAPI application exposing the reranker as a REST API."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from reranker_openai import __version__
from reranker_openai.config import settings
from reranker_openai.integrations.pipeline import build_reconciler, rerank_items
from reranker_openai.reranking.models import RerankOutput
from reranker_openai.reranking.reconciler import RerankReconciler

logging.basicConfig(level=settings.log_level)

app = FastAPI(
    title="Reranker OpenAI API",
    version=__version__,
    description="Rerank candidate documents through an OpenAI-compatible /v1/rerank endpoint.",
)


# ── Request / Response schemas ────────────────────────────────────────
class RerankRequestBody(BaseModel):
    """Query plus raw candidate documents of any supported shape."""

    query: str
    documents: list[Any]
    top_n: int | None = Field(default=None, ge=1)
    text_field: str = "text"


# ── Dependencies ──────────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_reconciler() -> RerankReconciler:
    """Reconciler built once from the global settings (overridable in tests)."""
    return build_reconciler()


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/rerank", response_model=RerankOutput)
def rerank(
    request: RerankRequestBody,
    reconciler: RerankReconciler = Depends(get_reconciler),
) -> Any:
    """Rerank ``documents`` for ``query`` and return the top-N."""
    output = rerank_items(
        request.query,
        request.documents,
        reconciler,
        text_field=request.text_field,
        top_n=request.top_n,
    )
    if output.error:
        return JSONResponse(status_code=422, content=output.model_dump(mode="json"))
    return output
