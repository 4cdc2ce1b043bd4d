"""Unit tests for the OpenAI completion client.

Upstream HTTP is faked with httpx.MockTransport.

Tests:
  - Responses variant request shape and bearer auth
  - Chat variant request shape
  - Success → extracted text
  - Non-2xx → http outcome with parsed error message
  - Success with nothing extractable → empty outcome
  - Transport timeout / asyncio timeout → timeout outcome
  - Other transport errors → network outcome
  - Missing key → config outcome, no request sent
  - Probe reports status and error hint, never the key
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from app.services.llm.base import FailureReason
from app.services.llm.openai_client import OpenAICompletionClient
from tests.conftest import json_transport, request_json

_KEY = "sk-test-0123456789"
_INSTRUCTIONS = "Translate to Thai. Output translation only."


def _client(handler, calls, **kwargs) -> OpenAICompletionClient:
    return OpenAICompletionClient(
        api_key=kwargs.pop("api_key", _KEY),
        transport=json_transport(handler, calls),
        **kwargs,
    )


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={"output": [{"content": [{"type": "output_text", "text": "สวัสดีครับ"}]}]},
    )


@pytest.mark.asyncio
class TestRequestShape:
    async def test_responses_variant_body(self) -> None:
        calls: list[httpx.Request] = []
        client = _client(_ok, calls, model="gpt-5-mini", max_output_tokens=600)

        await client.complete("こんにちは", _INSTRUCTIONS, timeout_seconds=5)

        assert len(calls) == 1
        request = calls[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.openai.com/v1/responses"
        assert request.headers["Authorization"] == f"Bearer {_KEY}"
        body = request_json(request)
        assert body == {
            "model": "gpt-5-mini",
            "instructions": _INSTRUCTIONS,
            "input": "こんにちは",
            "max_output_tokens": 600,
            "text": {"format": {"type": "text"}},
            "store": False,
        }

    async def test_chat_variant_body(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

        client = _client(handler, calls, api_style="chat", base_url="https://llm.local/v1/")
        outcome = await client.complete("hello", _INSTRUCTIONS, timeout_seconds=5)

        assert outcome.ok
        assert str(calls[0].url) == "https://llm.local/v1/chat/completions"
        body = request_json(calls[0])
        assert body["messages"] == [
            {"role": "system", "content": _INSTRUCTIONS},
            {"role": "user", "content": "hello"},
        ]
        assert "temperature" not in body

    async def test_unknown_api_style_rejected(self) -> None:
        with pytest.raises(ValueError):
            OpenAICompletionClient(api_key=_KEY, api_style="completions")


@pytest.mark.asyncio
class TestOutcomes:
    async def test_success(self) -> None:
        outcome = await _client(_ok, []).complete("x", _INSTRUCTIONS, 5)
        assert outcome.ok
        assert outcome.text == "สวัสดีครับ"
        assert outcome.reason is None

    async def test_http_error_with_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert not outcome.ok
        assert outcome.reason == FailureReason.HTTP
        assert outcome.text == "OpenAI 401"
        assert outcome.error_detail == "status=401 / Incorrect API key provided"

    async def test_http_error_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad gateway</html>")

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert outcome.reason == FailureReason.HTTP
        assert outcome.error_detail == "status=502"

    async def test_empty_output(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"output": [{"type": "reasoning"}]})

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert outcome.reason == FailureReason.EMPTY
        assert "output_text not found" in outcome.error_detail

    async def test_success_body_not_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json")

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert outcome.reason == FailureReason.EMPTY

    async def test_success_body_not_utf8(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"\xff\xfe\xfa garbage")

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert not outcome.ok
        assert outcome.reason == FailureReason.EMPTY
        assert outcome.error_detail == "parse: response body is not JSON"

    async def test_transport_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert outcome.reason == FailureReason.TIMEOUT
        assert outcome.text == "timeout"

    async def test_wait_for_timeout(self) -> None:
        client = OpenAICompletionClient(api_key=_KEY)

        async def slow_post(body, timeout_seconds):
            raise asyncio.TimeoutError()

        client._post = slow_post  # type: ignore[method-assign]
        outcome = await client.complete("x", _INSTRUCTIONS, 0.01)
        assert outcome.reason == FailureReason.TIMEOUT

    async def test_slow_upstream_cancelled_at_budget(self) -> None:
        cancelled: list[bool] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise
            return httpx.Response(200, json={"output_text": "too late"})

        client = OpenAICompletionClient(api_key=_KEY, transport=httpx.MockTransport(handler))
        loop = asyncio.get_running_loop()
        started = loop.time()
        outcome = await client.complete("x", _INSTRUCTIONS, timeout_seconds=0.05)
        elapsed = loop.time() - started

        assert outcome.reason == FailureReason.TIMEOUT
        assert cancelled == [True]
        assert elapsed < 2

    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        outcome = await _client(handler, []).complete("x", _INSTRUCTIONS, 5)
        assert outcome.reason == FailureReason.NETWORK
        assert outcome.error_detail == "ConnectError"

    async def test_missing_key_sends_nothing(self) -> None:
        calls: list[httpx.Request] = []
        outcome = await _client(_ok, calls, api_key="").complete("x", _INSTRUCTIONS, 5)
        assert outcome.reason == FailureReason.CONFIG
        assert calls == []


@pytest.mark.asyncio
class TestProbe:
    async def test_probe_reports_status_and_hint(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

        client = _client(handler, calls)
        result = await client.probe(timeout_seconds=5)

        assert result.status_code == 429
        assert result.error_hint == "Rate limit reached"
        body = request_json(calls[0])
        assert body["instructions"] == "Return OK."
        assert body["input"] == "OK"
        assert body["max_output_tokens"] == 32

    async def test_probe_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("dns", request=request)

        result = await _client(handler, []).probe(timeout_seconds=5)
        assert result.status_code is None
        assert result.transport_error == "ConnectError"

    async def test_key_length_only(self) -> None:
        client = OpenAICompletionClient(api_key=_KEY)
        assert client.api_key_length == len(_KEY)
