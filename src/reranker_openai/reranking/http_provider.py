"""OpenAI-compatible ``/v1/rerank`` provider over HTTP."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

import httpx

from reranker_openai.reranking.base import (
    ProviderFormatError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTransportError,
    RerankProviderBase,
)
from reranker_openai.reranking.models import ProviderCredentials, RankRequest

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
_BODY_EXCERPT_CHARS = 200


class OpenAICompatibleReranker(RerankProviderBase):
    """Reranker backed by any service speaking the ``/v1/rerank`` protocol.

    Request::

        POST {base_url}/v1/rerank
        {"model": ..., "query": ..., "documents": [...], "top_n": ...}

    Response::

        {"results": [{"index": 0, "relevance_score": 0.93}, ...]}

    Parameters
    ----------
    credentials:
        API key and base URL.
    model:
        Provider model identifier.
    timeout:
        Per-request timeout in seconds.  A timeout is a transport error.
    max_retries:
        Extra attempts on transport errors and 429/5xx.  Defaults to 0,
        i.e. a single attempt per call.
    backoff_base:
        Base delay in seconds for exponential backoff between retries.
    client:
        Pre-built ``httpx.Client`` (tests inject one with a mock transport).
        A client passed in is not closed by :meth:`close`.
    """

    def __init__(
        self,
        credentials: ProviderCredentials,
        model: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 0,
        backoff_base: float = 0.5,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(model)
        self._base_url = credentials.base_url
        self._max_retries = max(0, max_retries)
        self._backoff_base = backoff_base
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credentials.api_key.get_secret_value()}",
        }
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1/rerank"

    # -- RerankProviderBase overrides -----------------------------------------

    def rank(
        self, query: str, documents: list[str], top_n: int, *, model: str | None = None
    ) -> list[Any]:
        if not query.strip():
            raise ValueError("query must be a non-empty string")
        if not documents:
            raise ValueError("documents must not be empty")
        for position, text in enumerate(documents):
            if not text.strip():
                raise ValueError(f"document {position} is empty")
        if top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {top_n}")

        request = RankRequest.build(query, documents, top_n)
        body = {
            "model": model or self.model,
            "query": request.query,
            "documents": request.documents,
            "top_n": request.top_n,
        }

        payload = self._post_with_retries(body)

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list) or not results:
            raise ProviderFormatError("response has no usable 'results' array")
        logger.debug("Provider returned %d results for %d documents", len(results), len(documents))
        return results

    def health_check(self) -> bool:
        try:
            response = self._client.get(f"{self._base_url}/v1/models", headers=self._headers)
        except (httpx.HTTPError, httpx.InvalidURL):
            logger.warning("Rerank provider health-check failed", exc_info=True)
            return False
        if response.is_success:
            return True
        logger.warning("Rerank provider health-check returned HTTP %d", response.status_code)
        return False

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OpenAICompatibleReranker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- internals ------------------------------------------------------------

    def _post_with_retries(self, body: dict[str, Any]) -> Any:
        attempt = 0
        while True:
            try:
                return self._post_once(body)
            except (ProviderTransportError, ProviderHTTPError) as exc:
                retryable = isinstance(exc, ProviderTransportError) or exc.status_code in _RETRYABLE_STATUS
                if not retryable or attempt >= self._max_retries:
                    raise
                delay = self._backoff_base * (2**attempt) + random.uniform(0, self._backoff_base)
                attempt += 1
                logger.warning(
                    "Rerank request failed (%s), retrying in %.2fs (attempt %d/%d)",
                    exc,
                    delay,
                    attempt,
                    self._max_retries,
                )
                time.sleep(delay)

    def _post_once(self, body: dict[str, Any]) -> Any:
        try:
            response = self._client.post(self.endpoint, json=body, headers=self._headers)
        except httpx.TimeoutException as exc:
            raise ProviderTransportError(f"request timed out: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise ProviderTransportError(f"invalid provider URL: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ProviderTransportError(f"connection failed: {exc}") from exc

        if not response.is_success:
            raise ProviderHTTPError(response.status_code, response.text[:_BODY_EXCERPT_CHARS])

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderResponseError(f"invalid JSON in response body: {exc}") from exc
