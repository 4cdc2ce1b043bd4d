"""Inbound event orchestration.

Each event in a webhook delivery runs through exactly one branch:

1. not a text message          → ignored
2. blank after trim            → ignored
3. //debug                     → connectivity report
4. //why <text>                → single-call failure report
5. starts with //              → ignored (no-translate marker)
6. two characters or fewer     → ignored (reactions, stray emoji)
7. anything else               → translate and reply once

Events are processed one after another. Any exception while handling an
event is turned into the generic failure notice for that event only;
sibling events still run.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

import structlog
from pydantic import ValidationError

from app.core.exceptions import TranslationFailedError
from app.schemas.webhook import InboundEvent
from app.services.bot import commands
from app.services.llm.base import CompletionClient
from app.services.messaging.line import LineMessagingClient
from app.services.translation import TranslationService

logger = structlog.get_logger(__name__)

FAILURE_NOTICE = (
    "（翻訳に失敗しました）もう一度送ってください。"
    "長文は分けると安定します。※翻訳不要なら先頭に //"
)
NO_TRANSLATE_PREFIX = "//"
MIN_TRANSLATABLE_LENGTH = 3


class EventAction(str, Enum):
    IGNORED = "ignored"
    DEBUG = "debug"
    WHY = "why"
    TRANSLATED = "translated"
    FAILED = "failed"


class EventHandler:
    """Routes LINE events to diagnostics or translation and sends one reply."""

    def __init__(
        self,
        messenger: LineMessagingClient,
        translator: TranslationService,
        completion_client: CompletionClient,
        diagnostic_timeout_seconds: float = 20.0,
    ) -> None:
        self._messenger = messenger
        self._translator = translator
        self._completion_client = completion_client
        self._diagnostic_timeout_seconds = diagnostic_timeout_seconds

    async def handle_events(self, raw_events: Iterable[Any]) -> list[EventAction]:
        """Process a webhook batch sequentially. Never raises."""
        actions: list[EventAction] = []
        for raw in raw_events:
            if not isinstance(raw, dict):
                logger.warning("event_skipped_not_object", kind=type(raw).__name__)
                actions.append(EventAction.IGNORED)
                continue
            try:
                event = InboundEvent.model_validate(raw)
            except ValidationError as e:
                logger.warning("event_skipped_invalid", errors=e.error_count())
                actions.append(EventAction.IGNORED)
                continue
            actions.append(await self.handle_event(event))
        return actions

    async def handle_event(self, event: InboundEvent) -> EventAction:
        """Handle one event; failures become the generic notice."""
        try:
            return await self._dispatch(event)
        except TranslationFailedError as e:
            logger.warning(
                "event_translation_failed",
                code=e.code,
                chunk_index=e.chunk_index,
            )
        except Exception:
            logger.exception("event_handling_failed", event_type=event.type)

        await self._messenger.send(event, FAILURE_NOTICE)
        return EventAction.FAILED

    async def _dispatch(self, event: InboundEvent) -> EventAction:
        if not event.is_text_message:
            return EventAction.IGNORED

        text = (event.message.text or "").strip()
        if not text:
            return EventAction.IGNORED

        if commands.is_debug_command(text):
            report = await commands.debug_report(
                self._completion_client, self._diagnostic_timeout_seconds
            )
            await self._messenger.send(event, report)
            return EventAction.DEBUG

        if commands.is_why_command(text):
            report = await commands.why_report(
                self._completion_client, text, self._diagnostic_timeout_seconds
            )
            await self._messenger.send(event, report)
            return EventAction.WHY

        if text.startswith(NO_TRANSLATE_PREFIX):
            return EventAction.IGNORED

        if len(text) < MIN_TRANSLATABLE_LENGTH:
            return EventAction.IGNORED

        result = await self._translator.translate(text)
        await self._messenger.send(event, result.render())
        logger.info(
            "event_translated",
            direction=result.direction.value,
            output_len=len(result.text),
        )
        return EventAction.TRANSLATED
