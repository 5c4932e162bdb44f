from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from locsync.core.errors import ConfigurationError


logger = logging.getLogger(__name__)


MATCHER_PRESETS: dict[str, tuple[str, ...]] = {
    "none": (),
    "icu": (r"\{[^{}]*\}",),
    "i18next": (r"\{\{[^{}]*\}\}",),
    "sprintf": (r"%(?:\d+\$)?[-+0 #]*\d*(?:\.\d+)?[sdifuxXeEgGc@]",),
}

_MARKER_TEMPLATE = '<x id="{index}"/>'
_MARKER_RE = re.compile(r"""<x\s+id\s*=\s*["'](\d+)["']\s*/?>(?:\s*</x>)?""")


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A protected token and its offset in the original string."""

    token: str
    position: int


@dataclass(frozen=True, slots=True)
class ExtractedValue:
    text: str
    placeholders: tuple[Placeholder, ...] = ()


class InterpolationMatcher:
    """Swap interpolation tokens for inert markers around a translation call."""

    def __init__(self, patterns: Sequence[str] = (), *, name: str = "custom") -> None:
        self.name = name
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._regex: re.Pattern[str] | None = None
        if self.patterns:
            combined = "|".join(f"(?:{pattern})" for pattern in self.patterns)
            try:
                self._regex = re.compile(combined)
            except re.error as exc:
                raise ConfigurationError(
                    f"Invalid interpolation pattern for matcher '{name}': {exc}"
                ) from exc

    @classmethod
    def from_config(
        cls,
        preset: str | None = None,
        patterns: Iterable[str] | None = None,
    ) -> InterpolationMatcher:
        """Build a matcher from a preset name and/or explicit regular expressions."""
        custom = [pattern for pattern in patterns or () if pattern]
        if custom:
            return cls(custom, name="custom")
        preset_name = (preset or "none").strip().lower()
        if preset_name not in MATCHER_PRESETS:
            available = ", ".join(sorted(MATCHER_PRESETS))
            raise ConfigurationError(
                f"Unknown matcher '{preset}'. Available matchers: {available}."
            )
        return cls(MATCHER_PRESETS[preset_name], name=preset_name)

    def extract(self, value: str) -> ExtractedValue:
        if not self._regex or not value:
            return ExtractedValue(text=value)

        placeholders: list[Placeholder] = []
        parts: list[str] = []
        cursor = 0
        for match in self._regex.finditer(value):
            if match.start() == match.end():
                continue
            parts.append(value[cursor : match.start()])
            parts.append(_MARKER_TEMPLATE.format(index=len(placeholders)))
            placeholders.append(Placeholder(token=match.group(0), position=match.start()))
            cursor = match.end()
        parts.append(value[cursor:])
        return ExtractedValue(text="".join(parts), placeholders=tuple(placeholders))

    def reinsert(self, translated: str, placeholders: Sequence[Placeholder]) -> str:
        """Put original tokens back in place of the markers found in ``translated``.

        Markers are resolved by the index they carry, so a translation that
        reorders them keeps each token attached to its marker. Markers that do
        not resolve stay untouched and a warning is logged when the marker count
        differs from the placeholder count; this never raises.
        """
        if not placeholders:
            return translated

        found = 0

        def substitute(match: re.Match[str]) -> str:
            nonlocal found
            found += 1
            index = int(match.group(1))
            if index < len(placeholders):
                return placeholders[index].token
            return match.group(0)

        result = _MARKER_RE.sub(substitute, translated)
        if found != len(placeholders):
            logger.warning(
                "Placeholder mismatch: expected %s markers, found %s in %r.",
                len(placeholders),
                found,
                translated,
            )
        return result
