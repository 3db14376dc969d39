"""Run-once-for-all-items variant.

The whole input batch (typically vector-store hits) is the document set
and the query comes from the upstream chat trigger.  The query is echoed
back as ``chat_input`` so a downstream agent step can consume it.
"""

from __future__ import annotations

from typing import Any

from reranker_openai.integrations.pipeline import rerank_items
from reranker_openai.reranking.reconciler import RerankReconciler


def chat_input_from(context: Any, key: str = "chatInput") -> str:
    """Pull the user query out of an upstream chat-trigger payload."""
    if isinstance(context, dict):
        value = context.get(key)
        return value if isinstance(value, str) else ""
    return context if isinstance(context, str) else ""


def run_code_node(
    items: list[Any],
    query: str,
    reconciler: RerankReconciler,
    *,
    top_n: int | None = None,
) -> list[dict[str, Any]]:
    """Rerank the full batch of *items* and return a single output record.

    Items may be wrapped host records (``{"json": {...}}``); the payload is
    unwrapped before normalisation.
    """
    payloads = [item["json"] if isinstance(item, dict) and "json" in item else item for item in items]
    output = rerank_items(query, payloads, reconciler, top_n=top_n)
    return [{**output.to_host(), "chat_input": output.query}]
