from functools import lru_cache

from typing import Literal, Optional

from pydantic import Field, HttpUrl, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_KEYS = frozenset({"tu_api_key_aqui", "your_api_key_here", "changeme"})


class Settings(BaseSettings):
    """Strongly typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Psychocalc API")
    environment: Literal["dev", "test", "staging", "prod"] = Field(default="dev")
    locale: Literal["es", "en"] = Field(default="es", description="Language for exported labels and help content")

    gemini_api_key: Optional[str] = Field(default=None, description="Enables model-backed answers in the help assistant")
    gemini_model: str = Field(default="gemini-pro")
    gemini_base_url: HttpUrl = Field(default="https://generativelanguage.googleapis.com/v1beta")
    help_timeout_ms: int = Field(default=8000, ge=100)

    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Largest spreadsheet accepted by import endpoints")
    workspace_capacity: int = Field(default=256, ge=1, description="Live tool workspaces kept in memory before the oldest is evicted")
    preview_row_limit: int = Field(default=50, ge=1)

    debug_instrumentation_enabled: bool = Field(default=True)

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def _normalize_api_key(cls, value: object) -> Optional[str]:
        if value in (None, "", b""):
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or stripped.lower() in _PLACEHOLDER_KEYS:
                return None
            return stripped
        raise TypeError("GEMINI_API_KEY must be a string")

    @computed_field(return_type=bool)
    def help_ai_enabled(self) -> bool:
        return self.gemini_api_key is not None


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
