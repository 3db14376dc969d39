"""
Integrations — thin host adapters around :class:`~reranker_openai.reranking.RerankReconciler`.

Each adapter only normalises its host's input, calls the shared
pipeline, and maps the result back to the host's expected shape.
"""

from reranker_openai.integrations.code_node import chat_input_from, run_code_node
from reranker_openai.integrations.node import RerankNode, RerankNodeOptions
from reranker_openai.integrations.pipeline import RerankInputError, build_reconciler, rerank_items

__all__ = [
    "RerankInputError",
    "RerankNode",
    "RerankNodeOptions",
    "build_reconciler",
    "chat_input_from",
    "rerank_items",
    "run_code_node",
]
