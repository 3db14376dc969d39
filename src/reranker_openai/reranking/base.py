"""Abstract base class for reranking providers and the provider error taxonomy.

Adding a new provider only requires subclassing :class:`RerankProviderBase`
and implementing :meth:`~RerankProviderBase.rank`.  The reconciler only
ever talks to this interface, and only distinguishes the error classes
defined here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class RerankProviderError(RuntimeError):
    """Base class for every failure surfaced by a provider call."""


class ProviderTransportError(RerankProviderError):
    """Connection failure or timeout before a response was received."""


class ProviderHTTPError(RerankProviderError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        detail = f": {body}" if body else ""
        super().__init__(f"HTTP {status_code}{detail}")


class ProviderResponseError(RerankProviderError):
    """The response body could not be parsed."""


class ProviderFormatError(RerankProviderError):
    """The body parsed, but carries no usable ``results`` array.

    Kept distinct from hard failures: callers degrade to a format fallback.
    """


class RerankProviderBase(ABC):
    """Provider-agnostic reranking interface.

    Parameters
    ----------
    model:
        Identifier of the provider-side reranking model.
    """

    def __init__(self, model: str) -> None:
        self.model = model

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def rank(
        self, query: str, documents: list[str], top_n: int, *, model: str | None = None
    ) -> list[Any]:
        """Score *documents* against *query*.

        *model* overrides the provider's default model for this call only.

        Returns the provider's ``results`` entries verbatim; each is
        expected to look like ``{"index": int, "relevance_score": float}``
        but is **not** validated here.

        Raises
        ------
        ProviderFormatError
            The response has no usable ``results`` array.
        RerankProviderError
            Any other transport, HTTP or parse failure.
        """
        ...

    # -- optional overrides ---------------------------------------------------

    def health_check(self) -> bool:
        """Return ``True`` when the provider is reachable and ready."""
        return True

    def close(self) -> None:
        """Release any held resources.  No-op by default."""
