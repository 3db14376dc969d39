"""LangChain tool exposing the reranker to an agent.

The agent passes a JSON string and receives a JSON string, so the tool
works with any agent runtime that only speaks text.  The tool never
raises; every failure is reported inside the returned JSON.

Dependency-injection note
-------------------------
:func:`build_rerank_tool` takes the reconciler to use.  In production it
comes from :func:`~reranker_openai.integrations.pipeline.build_reconciler`;
in tests a reconciler over a fake provider is injected instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from langchain_core.tools import StructuredTool

from reranker_openai.integrations.pipeline import build_reconciler, rerank_items
from reranker_openai.reranking.models import RerankOutput
from reranker_openai.reranking.reconciler import RerankReconciler

logger = logging.getLogger(__name__)

TOOL_NAME = "rerank_documents"
TOOL_DESCRIPTION = """Rerank and filter documents by relevance to a query.
Input format: {"query": "user question", "documents": [{"pageContent": "text", "metadata": {...}}, ...]}
Returns: {"ranked_documents": [...], "total_results": number}
Use this tool AFTER getting documents from vector store to improve relevance."""


def _dumps(output: RerankOutput) -> str:
    return json.dumps(output.to_host(), ensure_ascii=False, default=str)


def run_rerank_tool(tool_input: str, reconciler: RerankReconciler) -> str:
    """Parse *tool_input*, rerank, and return the result as a JSON string."""
    logger.info("Reranker tool called")
    try:
        parsed: Any = json.loads(tool_input)
    except (TypeError, ValueError) as exc:
        logger.error("Reranker tool received invalid JSON: %s", exc)
        return _dumps(RerankOutput.failure("", f"Invalid JSON format: {exc}"))

    if not isinstance(parsed, dict):
        return _dumps(RerankOutput.failure("", "Input must be a JSON object"))

    output = rerank_items(parsed.get("query"), parsed.get("documents"), reconciler)
    return _dumps(output)


def build_rerank_tool(reconciler: RerankReconciler | None = None) -> StructuredTool:
    """Return a ``rerank_documents`` tool bound to *reconciler*.

    When *reconciler* is ``None`` one is built from the global settings.
    """
    bound = reconciler or build_reconciler()

    def rerank_documents(payload: str) -> str:
        """Rerank documents given a JSON string with "query" and "documents"."""
        return run_rerank_tool(payload, bound)

    return StructuredTool.from_function(
        func=rerank_documents,
        name=TOOL_NAME,
        description=TOOL_DESCRIPTION,
    )
