"""Unit tests for the OpenAI-compatible HTTP provider (no network: ``httpx.MockTransport``)."""

from __future__ import annotations

import json
from collections.abc import Callable
from unittest.mock import patch

import httpx
import pytest

from reranker_openai.reranking.base import (
    ProviderFormatError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTransportError,
)
from reranker_openai.reranking.http_provider import OpenAICompatibleReranker
from reranker_openai.reranking.models import ProviderCredentials

CREDENTIALS = ProviderCredentials(api_key="sk-test", base_url="https://rerank.example.com/")


def _provider(
    handler: Callable[[httpx.Request], httpx.Response], **kwargs
) -> OpenAICompatibleReranker:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenAICompatibleReranker(CREDENTIALS, "rerank-1", client=client, **kwargs)


def _json_response(payload: object, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    return handler


class TestRequestContract:
    def test_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [{"index": 0, "relevance_score": 0.5}]})

        _provider(handler).rank("What is ML?", ["a", "b", "c"], top_n=10)

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://rerank.example.com/v1/rerank"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "model": "rerank-1",
            "query": "What is ML?",
            "documents": ["a", "b", "c"],
            "top_n": 3,
        }

    def test_results_returned_verbatim(self) -> None:
        results = [{"index": 5, "relevance_score": "odd"}, {"index": 0, "relevance_score": 0.2}]
        assert _provider(_json_response({"results": results})).rank("q", ["a"], 1) == results

    @pytest.mark.parametrize(
        ("query", "documents", "top_n"),
        [("", ["a"], 1), ("   ", ["a"], 1), ("q", [], 1), ("q", ["a", " "], 1), ("q", ["a"], 0)],
    )
    def test_invalid_arguments_rejected_before_request(self, query, documents, top_n) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(ValueError):
            _provider(handler).rank(query, documents, top_n)

    def test_per_call_model_override(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [{"index": 0, "relevance_score": 0.5}]})

        provider = _provider(handler)
        provider.rank("q", ["a"], 1, model="bge-reranker-v2")
        provider.rank("q", ["a"], 1)
        assert [json.loads(r.content)["model"] for r in seen] == ["bge-reranker-v2", "rerank-1"]


class TestFailures:
    def test_http_error_status(self) -> None:
        with pytest.raises(ProviderHTTPError) as info:
            _provider(_json_response({"error": "bad key"}, status=401)).rank("q", ["a"], 1)
        assert info.value.status_code == 401
        assert "401" in str(info.value)

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderTransportError):
            _provider(handler).rank("q", ["a"], 1)

    def test_timeout_is_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ProviderTransportError, match="timed out"):
            _provider(handler).rank("q", ["a"], 1)

    def test_unparseable_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(ProviderResponseError):
            _provider(handler).rank("q", ["a"], 1)

    def test_invalid_base_url_is_transport_error(self) -> None:
        credentials = ProviderCredentials(api_key="sk-test", base_url="https://rerank\x00.example.com")
        client = httpx.Client(transport=httpx.MockTransport(_json_response({"results": []})))
        provider = OpenAICompatibleReranker(credentials, "rerank-1", client=client)
        with pytest.raises(ProviderTransportError, match="invalid provider URL"):
            provider.rank("q", ["a"], 1)
        assert provider.health_check() is False

    @pytest.mark.parametrize(
        "payload",
        [{}, {"results": None}, {"results": {"index": 0}}, {"results": []}, [1, 2, 3], {"data": []}],
    )
    def test_missing_results_is_format_error(self, payload: object) -> None:
        with pytest.raises(ProviderFormatError):
            _provider(_json_response(payload)).rank("q", ["a"], 1)


class TestRetries:
    def test_single_attempt_by_default(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503)

        with pytest.raises(ProviderHTTPError):
            _provider(handler).rank("q", ["a"], 1)
        assert len(calls) == 1

    @patch("reranker_openai.reranking.http_provider.time.sleep")
    def test_retries_then_succeeds(self, mock_sleep) -> None:
        responses = [httpx.Response(503), httpx.Response(429)]

        def handler(request: httpx.Request) -> httpx.Response:
            if responses:
                return responses.pop(0)
            return httpx.Response(200, json={"results": [{"index": 0, "relevance_score": 1.0}]})

        results = _provider(handler, max_retries=2).rank("q", ["a"], 1)
        assert results == [{"index": 0, "relevance_score": 1.0}]
        assert mock_sleep.call_count == 2

    @patch("reranker_openai.reranking.http_provider.time.sleep")
    def test_client_errors_not_retried(self, mock_sleep) -> None:
        with pytest.raises(ProviderHTTPError):
            _provider(_json_response({}, status=400), max_retries=3).rank("q", ["a"], 1)
        mock_sleep.assert_not_called()

    @patch("reranker_openai.reranking.http_provider.time.sleep")
    def test_format_errors_not_retried(self, mock_sleep) -> None:
        with pytest.raises(ProviderFormatError):
            _provider(_json_response({}), max_retries=3).rank("q", ["a"], 1)
        mock_sleep.assert_not_called()


class TestHealthCheck:
    def test_healthy(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"data": []})

        assert _provider(handler).health_check() is True
        assert seen == ["https://rerank.example.com/v1/models"]

    def test_unhealthy_status(self) -> None:
        assert _provider(_json_response({}, status=401)).health_check() is False

    def test_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        assert _provider(handler).health_check() is False


class TestLifecycle:
    def test_injected_client_not_closed(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_json_response({})))
        with OpenAICompatibleReranker(CREDENTIALS, "m", client=client):
            pass
        assert client.is_closed is False

    def test_owned_client_closed(self) -> None:
        provider = OpenAICompatibleReranker(CREDENTIALS, "m")
        provider.close()
        assert provider._client.is_closed is True
