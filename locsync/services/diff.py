from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from locsync.schemas.translation import StringEntry
from locsync.services.cache import TranslationCache


class SyncAction(str, Enum):
    SKIP = "skip"
    TRANSLATE = "translate"
    BYPASS_EMPTY = "bypass-empty"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class KeyAction:
    key: str
    action: SyncAction


@dataclass(slots=True)
class SyncPlan:
    """Per-key actions for one source/target pair, in source order then target-only keys."""

    actions: list[KeyAction] = field(default_factory=list)
    cache_missing: bool = False

    def keys_for(self, action: SyncAction) -> list[str]:
        return [item.key for item in self.actions if item.action is action]

    def count(self, action: SyncAction) -> int:
        return sum(1 for item in self.actions if item.action is action)

    def action_for(self, key: str) -> SyncAction | None:
        for item in self.actions:
            if item.key == key:
                return item.action
        return None

    @property
    def is_noop(self) -> bool:
        return not self.cache_missing and all(
            item.action is SyncAction.SKIP for item in self.actions
        )


def classify_key(
    source_value: str,
    *,
    cached_source: str | None,
    has_cache_entry: bool,
    target_present: bool,
    target_value: str | None,
) -> SyncAction:
    """Classify one key that exists in the source file against a loaded cache."""
    outdated = not has_cache_entry or cached_source != source_value
    target_lost = not target_present or target_value is None
    if not outdated and not target_lost:
        return SyncAction.SKIP
    if source_value == "":
        return SyncAction.BYPASS_EMPTY
    return SyncAction.TRANSLATE


def diff_strings(
    source: Sequence[StringEntry],
    target: Mapping[str, str | None] | None,
    cache: TranslationCache | None,
) -> SyncPlan:
    """Classify every key of the source and the prior target into a :class:`SyncAction`.

    ``target`` is ``None`` when no target file exists yet; a key mapped to
    ``None`` is a translation that was cleared on purpose and is re-requested.
    When ``cache`` is ``None`` every source key is classified ``TRANSLATE`` and
    the plan is flagged ``cache_missing`` so the caller can seed a cache first.
    """
    target_values: Mapping[str, str | None] = target or {}
    plan = SyncPlan(cache_missing=cache is None)
    source_keys: set[str] = set()

    for entry in source:
        if entry.key in source_keys:
            continue
        source_keys.add(entry.key)
        source_value = entry.value or ""

        if cache is None:
            plan.actions.append(KeyAction(entry.key, SyncAction.TRANSLATE))
            continue

        cached = cache.get(entry.key)
        action = classify_key(
            source_value,
            cached_source=cached.source_value if cached else None,
            has_cache_entry=cached is not None,
            target_present=entry.key in target_values,
            target_value=target_values.get(entry.key),
        )
        plan.actions.append(KeyAction(entry.key, action))

    for key in target_values:
        if key not in source_keys:
            plan.actions.append(KeyAction(key, SyncAction.REMOVE))

    return plan
