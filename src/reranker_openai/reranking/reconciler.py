"""Result reconciliation — provider scores back onto the original documents.

Usage::

    from reranker_openai.reranking import RerankReconciler, normalize_documents

    reconciler = RerankReconciler(provider, top_n=3)
    output = reconciler.reconcile("What is machine learning?", normalize_documents(items))
    for doc in output.ranked_documents:
        print(doc.original_index, doc.relevance_score, doc.content[:80])

A call ends in exactly one of three ways: an empty result (no documents),
the provider ranking, or a synthetic ranking that keeps the retrieval
order when the provider fails or answers with an unusable body.
Provider errors never escape :meth:`RerankReconciler.reconcile`.  Invalid
arguments (a blank query, ``top_n < 1``) are rejected with ``ValueError``
before the provider is called.
"""

from __future__ import annotations

import logging
from typing import Any

from reranker_openai.reranking.base import (
    ProviderFormatError,
    RerankProviderBase,
    RerankProviderError,
)
from reranker_openai.reranking.models import (
    Document,
    RankedDocument,
    RankResult,
    RankStatus,
    RerankOutput,
)

logger = logging.getLogger(__name__)

FORMAT_ERROR_WARNING = "Unexpected API response format. Using original order."
API_FAILED_WARNING = "Rerank API failed: {error}. Using original order."

SIMILARITY_SCORE_KEY = "similarity_score"


def synthetic_score(position: int) -> float:
    """Score assigned to the document at *position* in a fallback ranking."""
    return 1.0 - 0.1 * position


class RerankReconciler:
    """Turns a provider response (or its absence) into a ranked top-N.

    Parameters
    ----------
    provider:
        Any :class:`RerankProviderBase` implementation.
    top_n:
        Default number of documents returned; clamped per call to the
        number of documents available.
    prefer_similarity_score:
        When every document carries a numeric ``similarity_score`` in its
        metadata, order fallback results by it instead of input order.
    """

    def __init__(
        self,
        provider: RerankProviderBase,
        *,
        top_n: int = 3,
        prefer_similarity_score: bool = False,
    ) -> None:
        if top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {top_n}")
        self._provider = provider
        self.top_n = top_n
        self.prefer_similarity_score = prefer_similarity_score

    # -- public API -----------------------------------------------------------

    def reconcile(
        self,
        query: str,
        documents: list[Document],
        *,
        top_n: int | None = None,
        model: str | None = None,
    ) -> RerankOutput:
        """Rerank already-normalised *documents* for *query*.

        Parameters
        ----------
        query:
            Natural-language query string.
        documents:
            Normalised documents, blank ones already removed.  Their order
            is the index space of the provider response.
        top_n:
            Per-call override of the configured ``top_n``.
        model:
            Per-call override of the provider's model.

        Returns
        -------
        RerankOutput
            ``warning`` is set when a fallback ranking was used.

        Raises
        ------
        ValueError
            *query* is blank or *top_n* is below 1.
        """
        if not isinstance(query, str) or not query.strip():
            raise ValueError("query must be a non-empty string")
        if top_n is not None and top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {top_n}")
        if not documents:
            return RerankOutput.empty(query)

        limit = min(top_n if top_n is not None else self.top_n, len(documents))
        texts = [doc.content for doc in documents]

        try:
            raw_results = self._provider.rank(query, texts, limit, model=model)
        except ProviderFormatError as exc:
            logger.warning("Rerank response unusable (%s); falling back to original order", exc)
            ranked = self._fallback(documents, limit, RankStatus.FORMAT_ERROR_FALLBACK)
            return RerankOutput.from_documents(query, ranked, warning=FORMAT_ERROR_WARNING)
        except RerankProviderError as exc:
            logger.warning("Rerank API call failed (%s); falling back to original order", exc)
            ranked = self._fallback(documents, limit, RankStatus.API_FAILED_FALLBACK)
            return RerankOutput.from_documents(
                query, ranked, warning=API_FAILED_WARNING.format(error=exc)
            )

        ranked = self._from_results(documents, raw_results, limit)
        logger.info(
            "Reranked %d documents, returning %d (requested top_n=%d)",
            len(documents),
            len(ranked),
            limit,
        )
        return RerankOutput.from_documents(query, ranked)

    # -- internals ------------------------------------------------------------

    def _from_results(
        self, documents: list[Document], raw_results: list[Any], limit: int
    ) -> list[RankedDocument]:
        valid: list[RankResult] = []
        for entry in raw_results:
            result = RankResult.parse(entry, len(documents))
            if result is None:
                logger.debug("Dropping invalid rerank entry: %r", entry)
                continue
            valid.append(result)

        # sorted() is stable with reverse=True: equal scores keep response order.
        valid = sorted(valid, key=lambda r: r.relevance_score, reverse=True)[:limit]
        return [
            _ranked(documents[r.index], r.relevance_score, r.index, RankStatus.SUCCESS)
            for r in valid
        ]

    def _fallback(
        self, documents: list[Document], limit: int, status: RankStatus
    ) -> list[RankedDocument]:
        order = list(range(len(documents)))
        use_similarity = self.prefer_similarity_score and all(
            _similarity_score(doc) is not None for doc in documents
        )
        if use_similarity:
            order.sort(key=lambda i: _similarity_score(documents[i]), reverse=True)

        ranked: list[RankedDocument] = []
        for position, index in enumerate(order[:limit]):
            score = _similarity_score(documents[index]) if use_similarity else synthetic_score(position)
            ranked.append(_ranked(documents[index], score, index, status))
        return ranked


def _similarity_score(document: Document) -> float | None:
    value = document.metadata.get(SIMILARITY_SCORE_KEY)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _ranked(document: Document, score: float, index: int, status: RankStatus) -> RankedDocument:
    return RankedDocument(
        content=document.content,
        metadata=dict(document.metadata),
        relevance_score=score,
        original_index=index,
        status=status,
    )
