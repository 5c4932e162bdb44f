from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from locsync.schemas.translation import TranslationRequest, TranslationResult
from locsync.services.interpolation import InterpolationMatcher


@dataclass(frozen=True, slots=True)
class TranslateArgs:
    """Everything a provider needs for one batched translation call."""

    strings: Sequence[TranslationRequest]
    src_lng: str
    target_lng: str
    service_config: str | None = None
    interpolation_matcher: InterpolationMatcher | None = None


class TranslationService(Protocol):
    """Interface implemented by every translation provider."""

    async def translate_strings(self, args: TranslateArgs) -> list[TranslationResult]:
        """Return one result per requested key; raise on provider failure."""


def chunked(items: Sequence[TranslationRequest], size: int) -> list[Sequence[TranslationRequest]]:
    return [items[index : index + size] for index in range(0, len(items), size)]
