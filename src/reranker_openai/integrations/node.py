"""Per-item platform node: reranks a documents array found on each input item."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from reranker_openai.integrations.pipeline import RerankInputError, rerank_items
from reranker_openai.reranking.models import RerankOutput
from reranker_openai.reranking.reconciler import RerankReconciler

logger = logging.getLogger(__name__)


class RerankNodeOptions(BaseModel):
    """User-facing options of the node.

    Attributes
    ----------
    query:
        The search query to rank documents against.
    documents_field:
        Name of the item field holding the documents array.
    text_field:
        Name of the field holding the text within each document object.
    top_n:
        Maximum number of documents returned per item (1–100).
    model:
        Reranking model for this node; the provider default when unset.
    continue_on_fail:
        Emit an error item instead of raising when an item fails.
    """

    query: str = ""
    documents_field: str = "documents"
    text_field: str = "text"
    top_n: int = Field(default=10, ge=1, le=100)
    model: str | None = None
    continue_on_fail: bool = False


class RerankNode:
    """Runs the reranker once per input item.

    Parameters
    ----------
    reconciler:
        Shared reconciler (provider + defaults).
    options:
        Node options; defaults match the node's UI defaults.
    """

    def __init__(self, reconciler: RerankReconciler, options: RerankNodeOptions | None = None) -> None:
        self._reconciler = reconciler
        self.options = options or RerankNodeOptions()

    def execute(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Process every item and return one output record per item.

        Each record is the host form of a :class:`RerankOutput` plus a
        ``paired_item`` index pointing back at the input item.
        """
        records: list[dict[str, Any]] = []
        for item_index, item in enumerate(items):
            try:
                output = self._execute_item(item)
            except RerankInputError as exc:
                if not self.options.continue_on_fail:
                    raise
                output = RerankOutput.failure(self.options.query, str(exc))
            records.append({**output.to_host(), "paired_item": item_index})
        return records

    def _execute_item(self, item: dict[str, Any]) -> RerankOutput:
        field = self.options.documents_field
        documents = item.get(field) if isinstance(item, dict) else None
        if not isinstance(documents, list):
            logger.error("Item has no %r array", field)
            raise RerankInputError(f'Field "{field}" not found or is not an array')
        if not documents:
            return RerankOutput.empty(self.options.query)

        return rerank_items(
            self.options.query,
            documents,
            self._reconciler,
            text_field=self.options.text_field,
            top_n=self.options.top_n,
            model=self.options.model,
            continue_on_fail=False,
        )
