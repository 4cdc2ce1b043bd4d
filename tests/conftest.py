"""Shared pytest fixtures for the translation bot test suite.

Provides:
  - MockCompletionClient: CompletionClient returning scripted outcomes
  - RecordingMessenger: LineMessagingClient stand-in that records sends
  - make_event: builds raw LINE webhook event dicts
  - json_transport: httpx.MockTransport factory recording requests

All external service calls are faked in every test; no real HTTP is sent.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from app.schemas.webhook import InboundEvent
from app.services.llm.base import (
    CompletionClient,
    FailureReason,
    ProbeResult,
    TranslationOutcome,
)


# ---------------------------------------------------------------------------
# Mock completion client
# ---------------------------------------------------------------------------


class MockCompletionClient(CompletionClient):
    """Completion client returning scripted outcomes in call order.

    When the script runs out, every further call echoes ``[<language>] text``.
    """

    def __init__(
        self,
        outcomes: list[TranslationOutcome] | None = None,
        api_key: str = "sk-test-secret-key",
        probe_result: ProbeResult | None = None,
    ) -> None:
        self._outcomes = list(outcomes or [])
        self._api_key = api_key
        self._probe_result = probe_result or ProbeResult(status_code=200)
        self.complete_calls: list[dict[str, Any]] = []
        self.probe_calls: list[float] = []

    @property
    def api_key_length(self) -> int:
        return len(self._api_key)

    async def complete(
        self,
        user_text: str,
        instructions: str,
        timeout_seconds: float,
    ) -> TranslationOutcome:
        self.complete_calls.append(
            {
                "user_text": user_text,
                "instructions": instructions,
                "timeout_seconds": timeout_seconds,
            }
        )
        if self._outcomes:
            return self._outcomes.pop(0)
        language = instructions.removeprefix("Translate to ").split(".")[0]
        return TranslationOutcome.success(f"[{language}] {user_text}")

    async def probe(self, timeout_seconds: float) -> ProbeResult:
        self.probe_calls.append(timeout_seconds)
        return self._probe_result


# ---------------------------------------------------------------------------
# Recording messenger
# ---------------------------------------------------------------------------


class RecordingMessenger:
    """Duck-typed LineMessagingClient that keeps every sent text."""

    def __init__(self) -> None:
        self.sent: list[tuple[InboundEvent, str]] = []

    async def send(self, event: InboundEvent, text: str) -> bool:
        self.sent.append((event, text))
        return True

    @property
    def texts(self) -> list[str]:
        return [text for _, text in self.sent]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_event(
    text: str | None = "こんにちは",
    *,
    event_type: str = "message",
    message_type: str = "text",
    reply_token: str | None = "reply-token-1",
    source: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Build a raw LINE webhook event dict."""
    message: dict[str, Any] = {"type": message_type, "id": "m-1"}
    if text is not None:
        message["text"] = text
    event: dict[str, Any] = {
        "type": event_type,
        "message": message,
        "source": source if source is not None else {"type": "user", "userId": "U123"},
    }
    if reply_token is not None:
        event["replyToken"] = reply_token
    return event


def json_transport(
    handler: Callable[[httpx.Request], httpx.Response],
    calls: list[httpx.Request],
) -> httpx.MockTransport:
    """MockTransport that records each request before delegating."""

    def _record(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(_record)


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_completion() -> MockCompletionClient:
    """Completion client fixture that echoes input."""
    return MockCompletionClient()


@pytest.fixture
def messenger() -> RecordingMessenger:
    """Recording messenger fixture."""
    return RecordingMessenger()


@pytest.fixture
def timeout_outcome() -> TranslationOutcome:
    return TranslationOutcome.failure(FailureReason.TIMEOUT, "timeout")
