"""Custom exception classes for structured error handling."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.services.llm.base import TranslationOutcome


class TranslatorBotError(Exception):
    """Base exception for all translator bot errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class TranslationFailedError(TranslatorBotError):
    """A chunk could not be translated; the whole message is discarded.

    Carries the failed outcome so operator tooling can inspect the reason.
    End users only ever see the generic failure notice.
    """

    def __init__(self, outcome: TranslationOutcome, chunk_index: int = 0) -> None:
        self.outcome = outcome
        self.chunk_index = chunk_index
        reason = outcome.reason.value if outcome.reason else "unknown"
        super().__init__(
            code="TRANSLATION_FAILED",
            message=f"Chunk {chunk_index} failed: {reason}",
        )
