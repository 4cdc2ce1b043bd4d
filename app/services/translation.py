"""Message translation: direction → segmentation → per-chunk calls → reassembly.

Chunks are translated strictly in order, one at a time. The first chunk that
fails aborts the message: partial translations are never returned.

A chunk that times out may be retried with a longer budget; no other
failure is retried.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from app.core.exceptions import TranslationFailedError
from app.services.language.direction import Direction, detect_direction
from app.services.language.segmenter import split_text
from app.services.llm.base import CompletionClient, FailureReason, TranslationOutcome

logger = structlog.get_logger(__name__)


def build_instructions(target_language: str) -> str:
    return f"Translate to {target_language}. Output translation only."


@dataclass(frozen=True)
class TranslationResult:
    direction: Direction
    text: str

    def render(self) -> str:
        """Reply body: direction label on the first line, translation below."""
        return f"【{self.direction.value}】\n{self.text}"


class TranslationService:
    """Translates whole chat messages through a CompletionClient."""

    def __init__(
        self,
        client: CompletionClient,
        chunk_max_length: int = 1400,
        timeout_seconds: float = 25.0,
        timeout_retries: int = 0,
        retry_timeout_seconds: float = 40.0,
    ) -> None:
        self._client = client
        self._chunk_max_length = chunk_max_length
        self._timeout_seconds = timeout_seconds
        self._timeout_retries = timeout_retries
        self._retry_timeout_seconds = retry_timeout_seconds

    async def translate_chunk(
        self,
        chunk: str,
        target_language: str,
    ) -> TranslationOutcome:
        """Translate one chunk, retrying only after a timeout."""
        instructions = build_instructions(target_language)
        outcome = await self._client.complete(chunk, instructions, self._timeout_seconds)

        attempt = 0
        while (
            not outcome.ok
            and outcome.reason == FailureReason.TIMEOUT
            and attempt < self._timeout_retries
        ):
            attempt += 1
            logger.warning(
                "translate_chunk_timeout_retry",
                attempt=attempt,
                timeout_seconds=self._retry_timeout_seconds,
            )
            outcome = await self._client.complete(
                chunk, instructions, self._retry_timeout_seconds
            )
        return outcome

    async def translate(self, text: str) -> TranslationResult:
        """Translate a full message.

        Raises:
            TranslationFailedError: If any chunk fails. Carries the failed outcome.
        """
        direction = detect_direction(text)
        chunks = split_text(text, self._chunk_max_length)
        logger.info(
            "translate_started",
            direction=direction.value,
            text_len=len(text),
            chunks=len(chunks),
        )

        parts: list[str] = []
        for index, chunk in enumerate(chunks):
            outcome = await self.translate_chunk(chunk, direction.target_language)
            if not outcome.ok:
                logger.error(
                    "translate_chunk_failed",
                    chunk_index=index,
                    reason=outcome.reason.value if outcome.reason else None,
                    detail=outcome.error_detail,
                )
                raise TranslationFailedError(outcome, chunk_index=index)
            parts.append(outcome.text)

        return TranslationResult(direction=direction, text="\n".join(parts))
