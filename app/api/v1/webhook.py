"""LINE webhook endpoint.

Always answers 200 "OK" straight away. LINE retries or flags the channel
when the webhook is slow, so event processing is scheduled as a background
task that runs after the response is sent. Results reach the chat through
the reply/push API, never through this response.
"""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse

from app.api.deps import get_event_handler
from app.services.bot.handler import EventHandler

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["webhook"])


async def _run_events_background(handler: EventHandler, events: list) -> None:
    """Process events in background. Must never raise into the server."""
    try:
        actions = await handler.handle_events(events)
        logger.info(
            "webhook_events_processed",
            count=len(events),
            actions=[a.value for a in actions],
        )
    except Exception as e:
        logger.error("webhook_background_failed", error=str(e))


@router.post("/webhook", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    handler: EventHandler = Depends(get_event_handler),
) -> PlainTextResponse:
    """Accept a LINE webhook delivery."""
    raw = await request.body()
    try:
        body = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        # LINE's "Verify" button and connectivity probes may send anything
        logger.info("webhook_non_json_body", body_len=len(raw))
        return PlainTextResponse("OK")

    events = body.get("events") if isinstance(body, dict) else None
    if not isinstance(events, list) or not events:
        logger.debug("webhook_no_events")
        return PlainTextResponse("OK")

    background_tasks.add_task(_run_events_background, handler, events)
    return PlainTextResponse("OK")
