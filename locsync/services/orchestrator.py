from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Callable

from locsync.core.errors import LocsyncError, ServiceError
from locsync.integrations.translators.base import TranslateArgs, TranslationService
from locsync.schemas.translation import StringEntry, TranslationRequest
from locsync.services.cache import TranslationCache
from locsync.services.diff import SyncAction, SyncPlan
from locsync.services.interpolation import ExtractedValue, InterpolationMatcher


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OrchestrationResult:
    target: dict[str, str | None] = field(default_factory=dict)
    cache: TranslationCache = field(default_factory=TranslationCache)
    invoked: bool = False
    translated: int = 0
    bypassed: int = 0
    added: int = 0
    updated: int = 0
    removed: int = 0


class TranslationOrchestrator:
    """Run one batched translation pass for a single target language."""

    def __init__(
        self,
        service: TranslationService,
        matcher: InterpolationMatcher | None = None,
        *,
        service_name: str = "",
    ) -> None:
        self._service = service
        self._matcher = matcher or InterpolationMatcher()
        self._service_name = service_name or type(service).__name__

    async def run(
        self,
        plan: SyncPlan,
        *,
        source: Sequence[StringEntry],
        target: Mapping[str, str | None] | None,
        cache: TranslationCache,
        src_lng: str,
        target_lng: str,
        service_config: str | None = None,
        emit: Callable[[str], None] | None = None,
    ) -> OrchestrationResult:
        """Translate every ``TRANSLATE`` key in one call and merge all actions.

        Works on copies of ``target`` and ``cache``; when the service fails or
        omits a requested key a :class:`ServiceError` is raised and nothing
        produced so far is returned.
        """
        if plan.cache_missing:
            raise ValueError("Cannot translate without a cache baseline; seed the cache first.")

        notify = emit or (lambda _message: None)
        prior_target: Mapping[str, str | None] = target or {}
        source_values: dict[str, str] = {}
        for entry in source:
            source_values.setdefault(entry.key, entry.value or "")
        actions = {item.key: item.action for item in plan.actions}

        translate_keys = plan.keys_for(SyncAction.TRANSLATE)
        translations: dict[str, str] = {}
        if translate_keys:
            notify(
                f"Invoke '{self._service_name}' from '{src_lng}' to '{target_lng}' "
                f"with {len(translate_keys)} inputs..."
            )
            translations = await self._translate(
                translate_keys,
                source_values,
                src_lng=src_lng,
                target_lng=target_lng,
                service_config=service_config,
            )

        result = OrchestrationResult(cache=cache.copy(), invoked=bool(translate_keys))
        for key, source_value in source_values.items():
            action = actions.get(key, SyncAction.SKIP)
            if action is SyncAction.SKIP:
                result.target[key] = prior_target.get(key)
                continue

            if action is SyncAction.TRANSLATE:
                new_value = translations[key]
                result.translated += 1
            else:
                new_value = ""
                result.bypassed += 1
            if key in prior_target:
                result.updated += 1
            else:
                result.added += 1
            result.target[key] = new_value
            result.cache.set(key, source_value=source_value, target_value=new_value)

        for key in list(result.cache):
            if key not in source_values:
                result.cache.remove(key)
        result.removed = plan.count(SyncAction.REMOVE)

        if result.bypassed:
            notify(f"Bypass {result.bypassed} strings because they are empty...")
        if result.added:
            notify(f"Add {result.added} new translations")
        if result.updated:
            notify(f"Update {result.updated} existing translations")
        if result.removed:
            notify(f"Remove {result.removed} stale translations")
        return result

    async def _translate(
        self,
        keys: Sequence[str],
        source_values: Mapping[str, str],
        *,
        src_lng: str,
        target_lng: str,
        service_config: str | None,
    ) -> dict[str, str]:
        extracted: dict[str, ExtractedValue] = {
            key: self._matcher.extract(source_values[key]) for key in keys
        }
        args = TranslateArgs(
            strings=[TranslationRequest(key=key, value=extracted[key].text) for key in keys],
            src_lng=src_lng,
            target_lng=target_lng,
            service_config=service_config,
            interpolation_matcher=self._matcher,
        )

        try:
            results = await self._service.translate_strings(args)
        except LocsyncError:
            raise
        except Exception as exc:
            raise ServiceError(f"Translation service '{self._service_name}' failed: {exc}") from exc

        received = {item.key: item.translated for item in results}
        missing = [key for key in keys if key not in received]
        if missing:
            raise ServiceError(
                f"Translation service '{self._service_name}' returned no result for "
                f"{len(missing)} of {len(keys)} keys: {', '.join(missing[:5])}"
            )

        logger.info("Received %s translations from %s", len(keys), self._service_name)
        return {
            key: self._matcher.reinsert(received[key], extracted[key].placeholders)
            for key in keys
        }
