"""LINE Messaging API delivery: reply first, push as fallback.

A reply token reaches the originating conversation (including groups and
rooms) fastest, so it is always tried first. When there is no token, or
the reply call fails at transport level or with a non-2xx status, the
text is pushed to the event source (userId → groupId → roomId).

Delivery problems are logged and swallowed. Nothing here raises to the
event handler.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from app.schemas.webhook import InboundEvent

logger = structlog.get_logger(__name__)

_DEFAULT_BASE_URL = "https://api.line.me/v2/bot"


def _text_messages(text: str) -> list[dict[str, str]]:
    return [{"type": "text", "text": text}]


class LineMessagingClient:
    """Sends text replies for inbound LINE events."""

    def __init__(
        self,
        access_token: str,
        base_url: str = _DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._timeout_seconds,
            transport=self._transport,
        ) as client:
            return await client.post(
                f"{self._base_url}{path}",
                json=payload,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                },
            )

    async def reply(self, reply_token: str, text: str) -> bool:
        """Answer via reply token. Returns True only on a 2xx response."""
        try:
            response = await self._post(
                "/message/reply",
                {"replyToken": reply_token, "messages": _text_messages(text)},
            )
        except httpx.HTTPError as e:
            logger.warning(
                "line_reply_transport_error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        if not response.is_success:
            logger.warning("line_reply_rejected", status_code=response.status_code)
            return False
        return True

    async def push(self, to: str, text: str) -> bool:
        """Push to a user, group or room id. Returns True only on a 2xx response."""
        try:
            response = await self._post(
                "/message/push",
                {"to": to, "messages": _text_messages(text)},
            )
        except httpx.HTTPError as e:
            logger.error(
                "line_push_transport_error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        if not response.is_success:
            logger.error("line_push_rejected", status_code=response.status_code)
            return False
        return True

    async def send(self, event: InboundEvent, text: str) -> bool:
        """Deliver text for an event. Returns whether any delivery succeeded."""
        if not self._access_token:
            logger.warning("line_send_skipped_missing_token")
            return False

        if event.reply_token:
            if await self.reply(event.reply_token, text):
                logger.debug("line_reply_sent", text_len=len(text))
                return True

        to = event.push_target
        if not to:
            logger.info("line_send_dropped_no_target")
            return False

        sent = await self.push(to, text)
        if sent:
            logger.debug("line_push_sent", text_len=len(text))
        return sent
