"""Shared FastAPI dependencies: settings and service injection.

The EventHandler (LINE messaging + OpenAI translation) is created once during
the FastAPI lifespan and stored on app.state. Routes retrieve it via
Depends(), never by direct import.
"""

from fastapi import Request

from app.core.config import Settings, settings
from app.services.bot.handler import EventHandler


def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return settings


def get_event_handler(request: Request) -> EventHandler:
    """Return the singleton EventHandler from app state."""
    return request.app.state.event_handler
