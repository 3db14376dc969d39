"""Domain models for rerank requests, provider results and ranked output."""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

if TYPE_CHECKING:
    from langchain_core.documents import Document as LCDocument


class Document(BaseModel):
    """A unit of content to be ranked.

    Attributes
    ----------
    content:
        The text sent to the provider and returned in the final result.
    metadata:
        Opaque metadata carried through unmodified.
    """

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class RankRequest(BaseModel):
    """A single call to a reranking provider.

    ``documents`` order is the index space referenced by :class:`RankResult`.
    """

    query: str = Field(min_length=1)
    documents: list[str] = Field(min_length=1)
    top_n: int = Field(ge=1)

    @classmethod
    def build(cls, query: str, documents: list[str], configured_top_n: int) -> RankRequest:
        """Create a request with ``top_n`` clamped to the document count."""
        return cls(query=query, documents=documents, top_n=min(configured_top_n, len(documents)))


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_score(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    score = float(value)
    return score if math.isfinite(score) else None


class RankResult(BaseModel):
    """One ``{index, relevance_score}`` entry returned by the provider."""

    model_config = ConfigDict(frozen=True)

    index: int
    relevance_score: float

    @classmethod
    def parse(cls, entry: Any, document_count: int) -> RankResult | None:
        """Validate a raw provider entry.

        Returns ``None`` when the index is not an integer in
        ``[0, document_count)`` or the score is not a finite number.
        """
        if not isinstance(entry, dict):
            return None
        index = _as_index(entry.get("index"))
        score = _as_score(entry.get("relevance_score"))
        if index is None or score is None or not 0 <= index < document_count:
            return None
        return cls(index=index, relevance_score=score)


class RankStatus(str, Enum):
    """How a :class:`RankedDocument` obtained its score."""

    SUCCESS = "success"
    FORMAT_ERROR_FALLBACK = "format_error_fallback"
    API_FAILED_FALLBACK = "api_failed_fallback"


class RankedDocument(BaseModel):
    """An input document with its rank attached; the terminal output entity."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    relevance_score: float
    original_index: int
    status: RankStatus

    def to_langchain(self) -> LCDocument:
        """Return a LangChain ``Document`` with the rank folded into metadata."""
        from langchain_core.documents import Document as LCDocument

        return LCDocument(
            page_content=self.content,
            metadata={
                **self.metadata,
                "relevance_score": self.relevance_score,
                "original_index": self.original_index,
                "rerank_status": self.status,
            },
        )


class RerankOutput(BaseModel):
    """Result object handed back to a host.

    ``warning`` is set on the two fallback paths, ``error`` on input errors.
    """

    ranked_documents: list[RankedDocument] = Field(default_factory=list)
    total_results: int = 0
    query: str = ""
    warning: str | None = None
    error: str | None = None

    @classmethod
    def from_documents(
        cls, query: str, documents: list[RankedDocument], warning: str | None = None
    ) -> RerankOutput:
        return cls(
            ranked_documents=documents,
            total_results=len(documents),
            query=query,
            warning=warning,
        )

    @classmethod
    def empty(cls, query: str) -> RerankOutput:
        return cls(query=query)

    @classmethod
    def failure(cls, query: str, error: str) -> RerankOutput:
        return cls(query=query, error=error)

    def to_host(self) -> dict[str, Any]:
        """Serialise for a host, omitting unset ``warning`` / ``error``."""
        data = self.model_dump()
        for key in ("warning", "error"):
            if data[key] is None:
                del data[key]
        return data


class ProviderCredentials(BaseModel):
    """API key and base URL for an OpenAI-compatible provider."""

    api_key: SecretStr
    base_url: str = "https://api.openai.com"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
