"""Input normalisation — turn raw host items of unknown shape into :class:`Document`.

Items reach the reranker in several shapes depending on the upstream
step (vector-store hit, LangChain document, bare text, …).  Each shape is
handled by one strategy; strategies are tried in a fixed order and the
first one that matches wins.  The last strategy always matches, so
:func:`normalize_item` is total and never raises.

Supported shapes, in precedence order::

    {"document": {"pageContent": ..., "metadata": {...}}, "score": 0.8}
    {"pageContent": "...", "metadata": {...}}   / langchain_core Document
    {"text": "...", "metadata": {...}}
    "plain string"
    anything else (serialised)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from reranker_openai.reranking.models import Document

logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    """Tag identifying which strategy normalised an item."""

    NESTED_VECTOR_STORE = "nested_vector_store"
    STANDARD = "standard"
    PLAIN_TEXT = "plain_text"
    RAW_STRING = "raw_string"
    UNKNOWN = "unknown"


# Sub-fields tried, in order, when a vector-store page content is itself an object.
_NESTED_TEXT_PATHS: tuple[tuple[str, ...], ...] = (
    ("main_text",),
    ("embedding_text",),
    ("content", "main_text"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _serialize(value: Any) -> str:
    """Best-effort string representation for content of unknown shape."""
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _dig(value: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _first_nested_text(value: Mapping[str, Any]) -> Any:
    for path in _NESTED_TEXT_PATHS:
        found = _dig(value, path)
        if found:
            return found
    return None


def _metadata_of(value: Any) -> dict[str, Any]:
    meta = value.get("metadata") if isinstance(value, Mapping) else None
    return dict(meta) if isinstance(meta, Mapping) else {}


# ---------------------------------------------------------------------------
# Strategies: each returns a Document, or None when the shape does not match
# ---------------------------------------------------------------------------


def _nested_vector_store(item: Any, text_field: str) -> Document | None:
    inner = item.get("document") if isinstance(item, Mapping) else None
    if not isinstance(inner, Mapping) or not inner.get("pageContent"):
        return None

    page_content = inner["pageContent"]
    if isinstance(page_content, Mapping):
        page_content = _first_nested_text(page_content) or _serialize(page_content)

    metadata = _metadata_of(inner)
    metadata["similarity_score"] = item.get("score") or 0
    return Document(content=_as_text(page_content), metadata=metadata)


def _standard(item: Any, text_field: str) -> Document | None:
    if isinstance(item, Mapping):
        if not item.get("pageContent"):
            return None
        return Document(content=_as_text(item["pageContent"]), metadata=_metadata_of(item))

    # LangChain documents (and look-alikes) expose ``page_content`` / ``metadata``.
    page_content = getattr(item, "page_content", None)
    if not page_content:
        return None
    meta = getattr(item, "metadata", None)
    return Document(
        content=_as_text(page_content),
        metadata=dict(meta) if isinstance(meta, Mapping) else {},
    )


def _plain_text(item: Any, text_field: str) -> Document | None:
    if not isinstance(item, Mapping) or not item.get(text_field):
        return None
    return Document(content=_as_text(item[text_field]), metadata=_metadata_of(item))


def _raw_string(item: Any, text_field: str) -> Document | None:
    if not isinstance(item, str):
        return None
    return Document(content=item)


def _unknown(item: Any, text_field: str) -> Document:
    content = _first_nested_text(item) if isinstance(item, Mapping) else None
    if not content:
        content = _serialize(item) if item is None or isinstance(item, (Mapping, list, tuple)) else str(item)
    return Document(content=_as_text(content), metadata=_metadata_of(item))


_STRATEGIES: tuple[tuple[DocumentFormat, Callable[[Any, str], Document | None]], ...] = (
    (DocumentFormat.NESTED_VECTOR_STORE, _nested_vector_store),
    (DocumentFormat.STANDARD, _standard),
    (DocumentFormat.PLAIN_TEXT, _plain_text),
    (DocumentFormat.RAW_STRING, _raw_string),
    (DocumentFormat.UNKNOWN, _unknown),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_with_format(item: Any, *, text_field: str = "text") -> tuple[DocumentFormat, Document]:
    """Normalise *item* and report which strategy matched."""
    for fmt, strategy in _STRATEGIES:
        document = strategy(item, text_field)
        if document is not None:
            return fmt, document
    raise AssertionError("unreachable: the UNKNOWN strategy always matches")


def normalize_item(item: Any, *, text_field: str = "text") -> Document:
    """Convert one raw item of unknown shape into a :class:`Document`.

    Parameters
    ----------
    item:
        Raw host item (mapping, string, LangChain document, …).
    text_field:
        Field holding the text for plain ``{text, metadata}`` items.

    Returns
    -------
    Document
        Possibly with empty content; callers decide whether to keep it.
    """
    return normalize_with_format(item, text_field=text_field)[1]


def detect_format(item: Any, *, text_field: str = "text") -> DocumentFormat:
    """Return the :class:`DocumentFormat` that *item* would be normalised as."""
    return normalize_with_format(item, text_field=text_field)[0]


def normalize_documents(items: Iterable[Any], *, text_field: str = "text") -> list[Document]:
    """Normalise a batch, dropping documents whose content is blank."""
    documents: list[Document] = []
    for position, item in enumerate(items):
        document = normalize_item(item, text_field=text_field)
        if not document.content.strip():
            logger.debug("Dropping item %d: empty content after normalisation", position)
            continue
        documents.append(document)
    return documents
