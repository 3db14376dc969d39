"""
Reranking — input normalisation, provider client, and result reconciliation.

Public surface
--------------
- :class:`RerankReconciler` — main entry point: query + documents → ranked top-N.
- :func:`normalize_item` / :func:`normalize_documents` — raw host items → :class:`Document`.
- :class:`RerankProviderBase` — abstract provider (subclass for new services).
- :class:`OpenAICompatibleReranker` — default HTTP provider for ``/v1/rerank``.
- :class:`Document`, :class:`RankedDocument`, :class:`RerankOutput`, … — data models.
"""

from reranker_openai.reranking.base import (
    ProviderFormatError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTransportError,
    RerankProviderBase,
    RerankProviderError,
)
from reranker_openai.reranking.models import (
    Document,
    ProviderCredentials,
    RankedDocument,
    RankRequest,
    RankResult,
    RankStatus,
    RerankOutput,
)
from reranker_openai.reranking.normalizer import (
    DocumentFormat,
    detect_format,
    normalize_documents,
    normalize_item,
)
from reranker_openai.reranking.reconciler import RerankReconciler

__all__ = [
    "Document",
    "DocumentFormat",
    "OpenAICompatibleReranker",
    "ProviderCredentials",
    "ProviderFormatError",
    "ProviderHTTPError",
    "ProviderResponseError",
    "ProviderTransportError",
    "RankRequest",
    "RankResult",
    "RankStatus",
    "RankedDocument",
    "RerankOutput",
    "RerankProviderBase",
    "RerankProviderError",
    "RerankReconciler",
    "detect_format",
    "normalize_documents",
    "normalize_item",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import OpenAICompatibleReranker to avoid pulling in httpx at import time."""
    if name == "OpenAICompatibleReranker":
        from reranker_openai.reranking.http_provider import OpenAICompatibleReranker

        return OpenAICompatibleReranker
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
