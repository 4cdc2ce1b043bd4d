"""Liveness endpoint. Reports secret presence as booleans only."""

from fastapi import APIRouter, Depends

from app.api.deps import get_settings
from app.core.config import Settings
from app.schemas.health import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        line_token_configured=bool(settings.line_channel_access_token),
        openai_key_configured=bool(settings.openai_api_key),
    )
