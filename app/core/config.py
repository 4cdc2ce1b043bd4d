"""Application configuration via pydantic-settings.

All values loaded from .env file at the project root.
The .env file takes precedence over OS-level environment variables
so stale system env vars never shadow the project config.
No hardcoded secrets anywhere.

Settings are read here once and handed to each service constructor in the
FastAPI lifespan. Services never read the environment themselves.
"""

from pathlib import Path
from typing import Literal, Tuple, Type

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# Resolve .env from project root (two levels up from this file: app/core/config.py → project root)
_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Central application settings. .env file wins over OS env vars."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Override source priority: .env file > OS env vars > defaults."""
        return (init_settings, dotenv_settings, env_settings, file_secret_settings)

    # --- LINE Messaging API ---
    line_channel_access_token: str = ""
    line_api_base_url: str = "https://api.line.me/v2/bot"
    line_timeout_seconds: float = 10.0

    # --- Completion API ---
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-5-mini"
    openai_api_style: Literal["responses", "chat"] = "responses"
    translation_max_output_tokens: int = 600

    # --- Translation tuning ---
    # Larger chunks mean fewer round trips but a bigger blast radius when
    # one call fails, since the whole message is then reported as failed.
    chunk_max_length: int = 1400
    translation_timeout_seconds: float = 25.0
    translation_timeout_retries: int = 0
    translation_retry_timeout_seconds: float = 40.0
    diagnostic_timeout_seconds: float = 20.0

    # --- App ---
    app_env: str = "development"
    log_level: str = "INFO"


settings = Settings()
