from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from locsync.core.config import AppSettings
from locsync.core.errors import ServiceError
from locsync.integrations.translators.base import TranslateArgs
from locsync.schemas.translation import TranslationResult


async def _console_prompt(message: str) -> str:
    return await asyncio.to_thread(input, message)


class ManualTranslation:
    """Ask the operator to type each translation; an empty answer keeps the source text."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        prompt: Callable[[str], Awaitable[str]] | None = None,
    ):
        self._settings = settings
        self._prompt = prompt or _console_prompt

    async def translate_strings(self, args: TranslateArgs) -> list[TranslationResult]:
        results: list[TranslationResult] = []
        for item in args.strings:
            message = f"[{args.src_lng} -> {args.target_lng}] {item.key}: {item.value}\n> "
            try:
                answer = await self._prompt(message)
            except EOFError as exc:
                raise ServiceError("Manual translation aborted: no more input.") from exc
            results.append(TranslationResult(key=item.key, translated=answer.strip() or item.value))
        return results
