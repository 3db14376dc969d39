"""Shared host pipeline: validate input → normalise → reconcile.

Every host integration (platform node, code node, agent tool, HTTP API)
goes through :func:`rerank_items` so the reranking behaviour is identical
whichever way the reranker is invoked.
"""

from __future__ import annotations

import logging
from typing import Any

from reranker_openai.config import Settings
from reranker_openai.config import settings as default_settings
from reranker_openai.reranking.models import Document, ProviderCredentials, RerankOutput
from reranker_openai.reranking.normalizer import normalize_documents
from reranker_openai.reranking.reconciler import RerankReconciler

logger = logging.getLogger(__name__)


class RerankInputError(ValueError):
    """The host supplied unusable input (query, documents or ``top_n``)."""


def build_reconciler(
    config: Settings | None = None,
    *,
    model: str | None = None,
    top_n: int | None = None,
    credentials: ProviderCredentials | None = None,
) -> RerankReconciler:
    """Wire settings into an HTTP provider and a :class:`RerankReconciler`.

    Explicit arguments win over *config*, which defaults to the global
    ``settings`` singleton.
    """
    from reranker_openai.reranking.http_provider import OpenAICompatibleReranker

    config = config or default_settings
    credentials = credentials or ProviderCredentials(
        api_key=config.rerank_api_key,
        base_url=config.rerank_base_url,
    )
    provider = OpenAICompatibleReranker(
        credentials,
        model or config.rerank_model,
        timeout=config.rerank_timeout,
        max_retries=config.rerank_max_retries,
    )
    return RerankReconciler(
        provider,
        top_n=top_n or config.rerank_top_n,
        prefer_similarity_score=config.rerank_prefer_similarity_score,
    )


def rerank_items(
    query: Any,
    items: Any,
    reconciler: RerankReconciler,
    *,
    text_field: str = "text",
    top_n: int | None = None,
    model: str | None = None,
    continue_on_fail: bool = True,
) -> RerankOutput:
    """Rerank raw host *items* for *query*.

    Parameters
    ----------
    query:
        Query string from the host.  Blank or non-string is an input error.
    items:
        Raw items of any supported shape (see :mod:`~reranker_openai.reranking.normalizer`).
    reconciler:
        Configured reconciler.
    text_field:
        Text field name for ``{text, metadata}``-style items.
    top_n:
        Per-call override of the reconciler's ``top_n``; at least 1 when given.
    model:
        Per-call override of the provider model.
    continue_on_fail:
        When ``True`` input errors come back as an error result; when
        ``False`` they are logged and re-raised as :class:`RerankInputError`.

    Returns
    -------
    RerankOutput
        Provider failures are never raised; they surface as ``warning``.
    """
    query_text = query if isinstance(query, str) else ""
    try:
        documents = _validated_documents(query_text, items, text_field, top_n)
    except RerankInputError as exc:
        logger.error("Rerank input rejected: %s", exc)
        if not continue_on_fail:
            raise
        return RerankOutput.failure(query_text, str(exc))

    return reconciler.reconcile(query_text, documents, top_n=top_n, model=model)


def _validated_documents(
    query: str, items: Any, text_field: str, top_n: int | None = None
) -> list[Document]:
    if not query.strip():
        raise RerankInputError("Missing or invalid query (must be a non-empty string)")
    if top_n is not None and top_n < 1:
        raise RerankInputError(f"Invalid top_n (must be >= 1, got {top_n})")
    if not isinstance(items, (list, tuple)) or not items:
        raise RerankInputError("Missing or invalid documents (must be a non-empty array)")

    documents = normalize_documents(items, text_field=text_field)
    if not documents:
        raise RerankInputError("No valid document content found")
    logger.debug("Extracted %d of %d documents for reranking", len(documents), len(items))
    return documents
