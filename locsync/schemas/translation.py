from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StringEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Stable identifier, unique within one resource file.")
    value: str | None = Field(
        "",
        description="String value; None marks a target translation that was cleared on purpose.",
    )


class TranslationRequest(BaseModel):
    key: str = Field(..., description="Key of the string sent to the provider.")
    value: str = Field(..., description="Source text with placeholders replaced by markers.")


class TranslationResult(BaseModel):
    key: str = Field(..., description="Key of the translated string.")
    translated: str = Field("", description="Provider output for the key.")


class CacheEntry(BaseModel):
    source_value: str = Field(..., description="Source value at the last sync.")
    target_value: str = Field("", description="Target value produced for that source value.")


class CacheDocument(BaseModel):
    """On-disk representation of one (source file, target file) cache."""

    version: int = Field(default=1)
    source_file: str | None = Field(default=None)
    target_file: str | None = Field(default=None)
    entries: dict[str, CacheEntry] = Field(default_factory=dict)
