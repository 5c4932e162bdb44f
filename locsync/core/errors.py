"""Error taxonomy shared by the sync engine and its collaborators."""

from __future__ import annotations


class LocsyncError(Exception):
    """Base class for every fatal error raised by locsync."""


class ConfigurationError(LocsyncError, ValueError):
    """Invalid provider, matcher, resource format or CLI combination.

    Raised before any file or network I/O takes place.
    """


class ServiceError(LocsyncError, RuntimeError):
    """A translation provider call failed or returned an incomplete result."""


class StoreError(LocsyncError, RuntimeError):
    """A resource or cache file could not be read, parsed or written."""


class TargetSyncError(LocsyncError):
    """Wraps a fatal error with the target language and path it aborted."""

    def __init__(self, *, target_lng: str, target_path: str, cause: LocsyncError):
        self.target_lng = target_lng
        self.target_path = target_path
        self.cause = cause
        super().__init__(f"Failed to sync '{target_path}' ({target_lng}): {cause}")
