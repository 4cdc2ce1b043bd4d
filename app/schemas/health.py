"""Health check response schema."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """GET /v1/health response body."""

    status: str
    line_token_configured: bool
    openai_key_configured: bool
