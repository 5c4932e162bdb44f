from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Translation sync configuration loaded from environment or .env."""

    app_name: str = Field(default="locsync")
    log_level: str = Field(default="WARNING", alias="LOCSYNC_LOG_LEVEL")
    cache_dir: Path = Field(default=Path("translate-cache"), alias="LOCSYNC_CACHE_DIR")
    http_timeout: float = Field(default=30.0, alias="LOCSYNC_HTTP_TIMEOUT")

    google_translate_api_key: Optional[SecretStr] = Field(
        default=None, alias="GOOGLE_TRANSLATE_API_KEY"
    )
    google_translate_endpoint: str = Field(
        default="https://translation.googleapis.com/language/translate/v2",
        alias="GOOGLE_TRANSLATE_ENDPOINT",
    )
    deepl_api_key: Optional[SecretStr] = Field(default=None, alias="DEEPL_API_KEY")
    deepl_api_url: Optional[str] = Field(default=None, alias="DEEPL_API_URL")
    azure_translator_key: Optional[SecretStr] = Field(default=None, alias="AZURE_TRANSLATOR_KEY")
    azure_translator_region: Optional[str] = Field(default=None, alias="AZURE_TRANSLATOR_REGION")
    azure_translator_endpoint: str = Field(
        default="https://api.cognitive.microsofttranslator.com",
        alias="AZURE_TRANSLATOR_ENDPOINT",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings."""
    return AppSettings()  # type: ignore[call-arg]
