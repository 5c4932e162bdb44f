from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from locsync.core.errors import LocsyncError, TargetSyncError
from locsync.integrations.resources import ResourceStore, get_resource_store
from locsync.integrations.translators.base import TranslationService
from locsync.schemas.translation import StringEntry
from locsync.services.cache import CacheStore, TranslationCache
from locsync.services.diff import SyncPlan, diff_strings
from locsync.services.interpolation import InterpolationMatcher
from locsync.services.orchestrator import TranslationOrchestrator


logger = logging.getLogger(__name__)

CACHE_SEED_GUIDANCE: tuple[str, ...] = (
    "Cache not found -> Generate a new cache to enable selective translations.",
    "To make selective translations, do one of the following:",
    "Option 1: Change your source-file and then re-run this tool.",
    "Option 2: Delete parts of your target-file and then re-run this tool.",
    "Skipped translations because we had to generate a new cache.",
)


class SyncOutcome(str, Enum):
    NOOP = "noop"
    CACHE_SEED = "cache-seed"
    TRANSLATE = "translate"


@dataclass(frozen=True, slots=True)
class SyncJob:
    """One source file synchronized into one target file with its own cache."""

    source_path: Path
    target_path: Path
    src_lng: str
    target_lng: str
    cache_path: Path
    source_format: str = "flat-json"
    target_format: str = "flat-json"


@dataclass(slots=True)
class SyncReport:
    job: SyncJob
    outcome: SyncOutcome
    plan: SyncPlan
    lines: list[str] = field(default_factory=list)
    target_written: bool = False
    cache_written: bool = False


class SyncDriver:
    """Per-target control loop: load, diff, then no-op, seed the cache or translate."""

    def __init__(
        self,
        service: TranslationService,
        *,
        service_name: str,
        matcher: InterpolationMatcher | None = None,
        service_config: str | None = None,
        cache_store: CacheStore | None = None,
        store_factory: Callable[[str], ResourceStore] = get_resource_store,
        emit: Callable[[str], None] | None = None,
    ) -> None:
        self._service = service
        self._service_name = service_name
        self._matcher = matcher or InterpolationMatcher()
        self._service_config = service_config
        self._cache_store = cache_store or CacheStore()
        self._store_factory = store_factory
        self._emit = emit

    async def sync(self, job: SyncJob) -> SyncReport:
        source_store = self._store_factory(job.source_format)
        target_store = self._store_factory(job.target_format)

        source = await source_store.read_source(job.source_path)
        target_entries = await target_store.read_target(job.target_path)
        target = (
            {entry.key: entry.value for entry in target_entries}
            if target_entries is not None
            else None
        )
        cache = await self._cache_store.read_cache(job.cache_path)

        plan = diff_strings(source, target, cache)

        if plan.cache_missing or cache is None:
            report = SyncReport(job=job, outcome=SyncOutcome.CACHE_SEED, plan=plan)
            for line in CACHE_SEED_GUIDANCE:
                self._report(report, line)
            seeded = self._seed_cache(job, source, target)
            await self._cache_store.write_cache(job.cache_path, seeded)
            report.cache_written = True
            self._report(report, f"Write cache {job.cache_path}")
            return report

        if plan.is_noop:
            report = SyncReport(job=job, outcome=SyncOutcome.NOOP, plan=plan)
            self._report(report, f"Target is up-to-date: '{job.target_path}'")
            return report

        report = SyncReport(job=job, outcome=SyncOutcome.TRANSLATE, plan=plan)
        orchestrator = TranslationOrchestrator(
            self._service,
            self._matcher,
            service_name=self._service_name,
        )
        result = await orchestrator.run(
            plan,
            source=source,
            target=target,
            cache=cache,
            src_lng=job.src_lng,
            target_lng=job.target_lng,
            service_config=self._service_config,
            emit=lambda line: self._report(report, line),
        )

        await target_store.write_target(
            job.target_path,
            [StringEntry(key=key, value=value) for key, value in result.target.items()],
            language=job.target_lng,
        )
        report.target_written = True
        self._report(report, f"Write target {job.target_path}")

        result.cache.source_file = str(job.source_path)
        result.cache.target_file = str(job.target_path)
        await self._cache_store.write_cache(job.cache_path, result.cache)
        report.cache_written = True
        self._report(report, f"Write cache {job.cache_path}")
        return report

    async def sync_all(self, jobs: Sequence[SyncJob]) -> list[SyncReport]:
        """Run jobs one after another; the first fatal error stops the run.

        Jobs completed before the failure keep their written files.
        """
        reports: list[SyncReport] = []
        for job in jobs:
            try:
                reports.append(await self.sync(job))
            except LocsyncError as exc:
                logger.error("Sync of %s (%s) failed: %s", job.target_path, job.target_lng, exc)
                raise TargetSyncError(
                    target_lng=job.target_lng,
                    target_path=str(job.target_path),
                    cause=exc,
                ) from exc
        return reports

    def _seed_cache(
        self,
        job: SyncJob,
        source: Sequence[StringEntry],
        target: dict[str, str | None] | None,
    ) -> TranslationCache:
        current = target or {}
        cache = TranslationCache(source_file=str(job.source_path), target_file=str(job.target_path))
        for entry in source:
            if entry.key in cache:
                continue
            cache.set(
                entry.key,
                source_value=entry.value or "",
                target_value=current.get(entry.key) or "",
            )
        return cache

    def _report(self, report: SyncReport, line: str) -> None:
        report.lines.append(line)
        logger.info(line)
        if self._emit:
            self._emit(line)
