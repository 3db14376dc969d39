"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from reranker_openai.reranking.base import RerankProviderBase


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class FakeProvider(RerankProviderBase):
    """Provider that returns canned results or raises a canned error."""

    def __init__(self, results: list[Any] | None = None, error: Exception | None = None) -> None:
        super().__init__("fake-rerank")
        self._results = results if results is not None else []
        self._error = error
        self.calls: list[tuple[str, list[str], int]] = []
        self.models: list[str | None] = []

    def rank(
        self, query: str, documents: list[str], top_n: int, *, model: str | None = None
    ) -> list[Any]:
        self.calls.append((query, list(documents), top_n))
        self.models.append(model)
        if self._error is not None:
            raise self._error
        return self._results


@pytest.fixture()
def fake_provider_factory():
    """Build a :class:`FakeProvider` with the given results / error."""
    return FakeProvider
