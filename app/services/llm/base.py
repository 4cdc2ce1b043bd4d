"""Abstract completion client interface.

All completion API implementations must inherit from this class.
Business logic never imports a concrete client directly.
The concrete client is instantiated once in the FastAPI lifespan
and injected everywhere via constructor arguments.

Expected upstream failures are returned as a ``TranslationOutcome`` rather
than raised, so callers can tell http / empty / timeout / network apart
without catching provider-specific exceptions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class FailureReason(str, Enum):
    HTTP = "http"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    NETWORK = "network"
    CONFIG = "config"


@dataclass(frozen=True)
class TranslationOutcome:
    """Result of one completion call."""

    ok: bool
    text: str
    reason: FailureReason | None = None
    error_detail: str | None = None

    @classmethod
    def success(cls, text: str) -> "TranslationOutcome":
        return cls(ok=True, text=text)

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        text: str,
        error_detail: str | None = None,
    ) -> "TranslationOutcome":
        return cls(ok=False, text=text, reason=reason, error_detail=error_detail)


@dataclass(frozen=True)
class ProbeResult:
    """Raw connectivity check against the completion API."""

    status_code: int | None
    error_hint: str = ""
    transport_error: str | None = None


class CompletionClient(ABC):
    """Abstract base class for completion API clients."""

    @property
    @abstractmethod
    def api_key_length(self) -> int:
        """Length of the configured API key. The key itself is never exposed."""
        ...

    @abstractmethod
    async def complete(
        self,
        user_text: str,
        instructions: str,
        timeout_seconds: float,
    ) -> TranslationOutcome:
        """Send one instruction + user text pair and extract the answer.

        Args:
            user_text: Content to process (one chunk of the message).
            instructions: System-level instruction for the model.
            timeout_seconds: Budget for the whole call, including reading the body.

        Returns:
            TranslationOutcome. Never raises for upstream failures.
        """
        ...

    @abstractmethod
    async def probe(self, timeout_seconds: float) -> ProbeResult:
        """Issue a minimal request and report the raw status code."""
        ...
