"""OpenAI completion client over plain HTTP.

Two request variants share the same extraction path:
  - "responses": POST /responses with instructions + input
  - "chat":      POST /chat/completions with a role-tagged message list

Every call opens its own short-lived httpx client and is bounded by
asyncio.wait_for on top of the httpx timeout. Temperature is never sent;
reasoning models reject it.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from app.services.llm.base import (
    CompletionClient,
    FailureReason,
    ProbeResult,
    TranslationOutcome,
)
from app.services.llm.extraction import extract_error_message, extract_output_text

logger = structlog.get_logger(__name__)

_DEFAULT_BASE_URL = "https://api.openai.com/v1"
_PROBE_INSTRUCTIONS = "Return OK."
_PROBE_INPUT = "OK"
_PROBE_MAX_TOKENS = 32


class OpenAICompletionClient(CompletionClient):
    """OpenAI Responses / Chat Completions client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5-mini",
        api_style: str = "responses",
        base_url: str = _DEFAULT_BASE_URL,
        max_output_tokens: int = 600,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if api_style not in ("responses", "chat"):
            raise ValueError(f"Unknown api_style: {api_style}")
        self._api_key = api_key
        self._model = model
        self._api_style = api_style
        self._base_url = base_url.rstrip("/")
        self._max_output_tokens = max_output_tokens
        self._transport = transport
        logger.info(
            "openai_client_initialized",
            model=model,
            api_style=api_style,
            key_configured=bool(api_key),
        )

    @property
    def api_key_length(self) -> int:
        return len(self._api_key or "")

    def _endpoint(self) -> str:
        if self._api_style == "chat":
            return f"{self._base_url}/chat/completions"
        return f"{self._base_url}/responses"

    def _build_body(
        self,
        user_text: str,
        instructions: str,
        max_output_tokens: int,
    ) -> dict[str, Any]:
        if self._api_style == "chat":
            return {
                "model": self._model,
                "messages": [
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": user_text},
                ],
                "max_completion_tokens": max_output_tokens,
            }
        return {
            "model": self._model,
            "instructions": instructions,
            "input": user_text,
            "max_output_tokens": max_output_tokens,
            "text": {"format": {"type": "text"}},
            "store": False,
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _post(
        self,
        body: dict[str, Any],
        timeout_seconds: float,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=self._transport,
        ) as client:
            return await asyncio.wait_for(
                client.post(self._endpoint(), json=body, headers=self._headers()),
                timeout=timeout_seconds,
            )

    async def complete(
        self,
        user_text: str,
        instructions: str,
        timeout_seconds: float,
    ) -> TranslationOutcome:
        """Translate one chunk. Upstream failures come back as outcomes."""
        if not self._api_key:
            logger.warning("openai_complete_missing_key")
            return TranslationOutcome.failure(
                FailureReason.CONFIG,
                "API key not configured",
                error_detail="OPENAI_API_KEY is empty",
            )

        body = self._build_body(user_text, instructions, self._max_output_tokens)
        try:
            response = await self._post(body, timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error(
                "openai_complete_timeout",
                timeout_seconds=timeout_seconds,
                input_len=len(user_text),
            )
            return TranslationOutcome.failure(FailureReason.TIMEOUT, "timeout")
        except httpx.HTTPError as e:
            logger.error(
                "openai_complete_network_error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return TranslationOutcome.failure(
                FailureReason.NETWORK,
                "fetch error",
                error_detail=type(e).__name__,
            )

        if not response.is_success:
            message = ""
            try:
                message = extract_error_message(response.json())
            except ValueError:
                pass
            detail = (
                f"status={response.status_code} / {message}"
                if message
                else f"status={response.status_code}"
            )
            logger.error(
                "openai_complete_http_error",
                status_code=response.status_code,
                error=message,
            )
            return TranslationOutcome.failure(
                FailureReason.HTTP,
                f"OpenAI {response.status_code}",
                error_detail=detail,
            )

        try:
            payload = response.json()
        except ValueError:
            logger.error("openai_complete_invalid_json", body_len=len(response.text))
            return TranslationOutcome.failure(
                FailureReason.EMPTY,
                "no output_text",
                error_detail="parse: response body is not JSON",
            )

        text = extract_output_text(payload)
        if not text:
            logger.warning(
                "openai_complete_empty_output",
                top_level_keys=sorted(payload) if isinstance(payload, dict) else None,
            )
            return TranslationOutcome.failure(
                FailureReason.EMPTY,
                "no output_text",
                error_detail="parse: output_text not found in output[].content[]",
            )

        logger.debug(
            "openai_complete_ok",
            input_len=len(user_text),
            output_len=len(text),
        )
        return TranslationOutcome.success(text)

    async def probe(self, timeout_seconds: float) -> ProbeResult:
        """Minimal request to check key validity and reachability."""
        body = self._build_body(_PROBE_INPUT, _PROBE_INSTRUCTIONS, _PROBE_MAX_TOKENS)
        try:
            response = await self._post(body, timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("openai_probe_timeout")
            return ProbeResult(status_code=None, transport_error="TimeoutError")
        except httpx.HTTPError as e:
            logger.warning("openai_probe_failed", error_type=type(e).__name__)
            return ProbeResult(status_code=None, transport_error=type(e).__name__)

        hint = ""
        try:
            hint = extract_error_message(response.json())
        except ValueError:
            pass
        logger.info("openai_probe_done", status_code=response.status_code)
        return ProbeResult(status_code=response.status_code, error_hint=hint)
