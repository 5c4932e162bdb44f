from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path, PurePath

from pydantic import ValidationError

from locsync.core.errors import StoreError
from locsync.schemas.translation import CacheDocument, CacheEntry


logger = logging.getLogger(__name__)

CACHE_FILE_PREFIX = "locsync-cache"


class TranslationCache:
    """Last synchronized source/target pair per key for one source and target file."""

    def __init__(
        self,
        entries: Mapping[str, CacheEntry] | None = None,
        *,
        source_file: str | None = None,
        target_file: str | None = None,
    ) -> None:
        self.source_file = source_file
        self.target_file = target_file
        self._entries: dict[str, CacheEntry] = dict(entries or {})

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TranslationCache):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"TranslationCache({len(self._entries)} entries, source={self.source_file!r})"

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def items(self) -> list[tuple[str, CacheEntry]]:
        return list(self._entries.items())

    def set(self, key: str, *, source_value: str, target_value: str) -> None:
        self._entries[key] = CacheEntry(source_value=source_value, target_value=target_value)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def copy(self) -> TranslationCache:
        return TranslationCache(
            self._entries,
            source_file=self.source_file,
            target_file=self.target_file,
        )

    def to_document(self) -> CacheDocument:
        return CacheDocument(
            source_file=self.source_file,
            target_file=self.target_file,
            entries=dict(self._entries),
        )

    @classmethod
    def from_document(cls, document: CacheDocument) -> TranslationCache:
        return cls(
            document.entries,
            source_file=document.source_file,
            target_file=document.target_file,
        )


def _flatten_path(path: str | PurePath) -> str:
    parts = [part for part in PurePath(path).parts if part not in {".", "/", "\\"}]
    return "_".join(part.replace(":", "") for part in parts)


def cache_path_for(cache_dir: str | Path, source_path: str | Path, target_path: str | Path) -> Path:
    """Return the cache file that belongs to one (source file, target file) pair."""
    name = f"{CACHE_FILE_PREFIX}-{_flatten_path(source_path)}--{_flatten_path(target_path)}.json"
    return Path(cache_dir) / name


class CacheStore:
    """Read and write translation caches as JSON documents."""

    async def read_cache(self, path: Path) -> TranslationCache | None:
        if not path.exists():
            logger.debug("No cache at %s", path)
            return None
        try:
            raw = path.read_text(encoding="utf-8")
            document = CacheDocument.model_validate(json.loads(raw))
        except UnicodeDecodeError as exc:
            raise StoreError(f"Unable to decode {path}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Unable to read cache {path}: {exc}") from exc
        except (json.JSONDecodeError, ValidationError) as exc:
            raise StoreError(f"Malformed cache file {path}: {exc}") from exc
        return TranslationCache.from_document(document)

    async def write_cache(self, path: Path, cache: TranslationCache) -> None:
        payload = cache.to_document().model_dump(mode="json")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
        except OSError as exc:
            raise StoreError(f"Unable to write cache {path}: {exc}") from exc
        logger.debug("Wrote %s cache entries to %s", len(cache), path)
