"""FastAPI application entrypoint.

All routes prefixed /v1. Auto-generated OpenAPI docs at /docs.

The EventHandler (LineMessagingClient + OpenAICompletionClient behind a
TranslationService) is created once during the lifespan and stored on
app.state for injection via Depends(). Settings are read here and passed
down explicitly; services never touch the environment.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from app.api.v1.health import router as health_router
from app.api.v1.webhook import router as webhook_router
from app.core.config import Settings, settings
from app.services.bot.handler import EventHandler
from app.services.llm.openai_client import OpenAICompletionClient
from app.services.messaging.line import LineMessagingClient
from app.services.translation import TranslationService


def _configure_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


_configure_logging()

logger = structlog.get_logger(__name__)


def build_event_handler(config: Settings) -> EventHandler:
    """Wire the service graph from settings."""
    completion_client = OpenAICompletionClient(
        api_key=config.openai_api_key,
        model=config.openai_model,
        api_style=config.openai_api_style,
        base_url=config.openai_base_url,
        max_output_tokens=config.translation_max_output_tokens,
    )
    translator = TranslationService(
        client=completion_client,
        chunk_max_length=config.chunk_max_length,
        timeout_seconds=config.translation_timeout_seconds,
        timeout_retries=config.translation_timeout_retries,
        retry_timeout_seconds=config.translation_retry_timeout_seconds,
    )
    messenger = LineMessagingClient(
        access_token=config.line_channel_access_token,
        base_url=config.line_api_base_url,
        timeout_seconds=config.line_timeout_seconds,
    )
    return EventHandler(
        messenger=messenger,
        translator=translator,
        completion_client=completion_client,
        diagnostic_timeout_seconds=config.diagnostic_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle.

    Creates the singleton EventHandler and attaches it to app.state.
    Retrieved in request handlers via Depends() in app/api/deps.py.
    Missing secrets are logged, not fatal: sends are skipped and
    translations fail with a typed outcome.
    """
    # --- Startup ---
    logger.info(
        "app_startup",
        env=settings.app_env,
        line_token_configured=bool(settings.line_channel_access_token),
        openai_key_configured=bool(settings.openai_api_key),
        chunk_max_length=settings.chunk_max_length,
    )
    if not settings.line_channel_access_token:
        logger.warning("line_channel_access_token_missing")
    if not settings.openai_api_key:
        logger.warning("openai_api_key_missing")

    app.state.event_handler = build_event_handler(settings)

    logger.info("app_services_ready")
    yield

    # --- Shutdown ---
    logger.info("app_shutdown")


app = FastAPI(
    title="LINE Translation Bot",
    description="Japanese ⇄ Thai (and English → Japanese) translation relay for LINE chats.",
    version="1.0.0",
    lifespan=lifespan,
)

# Mount all v1 routers
app.include_router(health_router, prefix="/v1")
app.include_router(webhook_router, prefix="/v1")
