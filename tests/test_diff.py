from __future__ import annotations

import random

from locsync.schemas.translation import CacheEntry, StringEntry
from locsync.services.cache import TranslationCache
from locsync.services.diff import SyncAction, diff_strings


def _cache(**pairs: tuple[str, str]) -> TranslationCache:
    return TranslationCache(
        {key: CacheEntry(source_value=src, target_value=tgt) for key, (src, tgt) in pairs.items()}
    )


def test_missing_cache_classifies_everything_translate_and_flags_plan() -> None:
    source = [StringEntry(key="fruit", value="Apple"), StringEntry(key="empty", value="")]

    plan = diff_strings(source, None, None)

    assert plan.cache_missing is True
    assert plan.keys_for(SyncAction.TRANSLATE) == ["fruit", "empty"]
    assert plan.is_noop is False


def test_unchanged_source_with_target_is_skip() -> None:
    source = [StringEntry(key="fruit", value="Apple")]

    plan = diff_strings(source, {"fruit": "Apfel"}, _cache(fruit=("Apple", "Apfel")))

    assert plan.action_for("fruit") is SyncAction.SKIP
    assert plan.is_noop is True


def test_changed_source_is_translate() -> None:
    source = [StringEntry(key="fruit", value="Green apple")]

    plan = diff_strings(source, {"fruit": "Apfel"}, _cache(fruit=("Apple", "Apfel")))

    assert plan.action_for("fruit") is SyncAction.TRANSLATE


def test_key_absent_from_cache_is_translate() -> None:
    source = [StringEntry(key="fruit", value="Apple"), StringEntry(key="veg", value="Carrot")]

    plan = diff_strings(source, {"fruit": "Apfel"}, _cache(fruit=("Apple", "Apfel")))

    assert plan.action_for("veg") is SyncAction.TRANSLATE
    assert plan.action_for("fruit") is SyncAction.SKIP


def test_null_or_missing_target_is_retranslated() -> None:
    source = [StringEntry(key="fruit", value="Apple"), StringEntry(key="veg", value="Carrot")]
    cache = _cache(fruit=("Apple", "Apfel"), veg=("Carrot", "Karotte"))

    plan = diff_strings(source, {"fruit": None}, cache)

    assert plan.action_for("fruit") is SyncAction.TRANSLATE
    assert plan.action_for("veg") is SyncAction.TRANSLATE


def test_missing_target_file_retranslates_cached_keys() -> None:
    source = [StringEntry(key="fruit", value="Apple")]

    plan = diff_strings(source, None, _cache(fruit=("Apple", "")))

    assert plan.action_for("fruit") is SyncAction.TRANSLATE


def test_empty_source_that_changed_is_bypassed() -> None:
    source = [StringEntry(key="fruit", value="")]

    plan = diff_strings(source, {"fruit": "Apfel"}, _cache(fruit=("Apple", "Apfel")))

    assert plan.action_for("fruit") is SyncAction.BYPASS_EMPTY


def test_empty_source_already_synced_is_skip() -> None:
    source = [StringEntry(key="fruit", value="")]

    plan = diff_strings(source, {"fruit": ""}, _cache(fruit=("", "")))

    assert plan.action_for("fruit") is SyncAction.SKIP
    assert plan.is_noop is True


def test_target_only_keys_are_removed() -> None:
    source = [StringEntry(key="fruit", value="Apple")]

    plan = diff_strings(
        source,
        {"fruit": "Apfel", "gone": "Weg"},
        _cache(fruit=("Apple", "Apfel"), gone=("Gone", "Weg")),
    )

    assert plan.action_for("gone") is SyncAction.REMOVE
    assert plan.is_noop is False


def test_one_action_per_key_in_union() -> None:
    source = [StringEntry(key=k, value=k.upper()) for k in ("a", "b", "c")]
    target = {"b": "B!", "c": None, "d": "D!"}

    plan = diff_strings(source, target, _cache(a=("A", "a!"), b=("B", "B!")))

    assert sorted(item.key for item in plan.actions) == ["a", "b", "c", "d"]


def test_classification_is_idempotent_and_order_independent() -> None:
    source = [StringEntry(key=f"k{i}", value=f"value {i}" if i % 3 else "") for i in range(12)]
    target = {f"k{i}": (None if i % 4 == 0 else f"t{i}") for i in range(0, 14, 2)}
    cache = _cache(**{f"k{i}": (f"value {i}" if i % 5 else "old", f"t{i}") for i in range(8)})

    first = diff_strings(source, target, cache)
    second = diff_strings(source, target, cache)
    shuffled_source = list(source)
    random.Random(7).shuffle(shuffled_source)
    shuffled = diff_strings(shuffled_source, dict(reversed(list(target.items()))), cache)

    assert first.actions == second.actions
    assert {item.key: item.action for item in first.actions} == {
        item.key: item.action for item in shuffled.actions
    }
