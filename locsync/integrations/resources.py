from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Sequence

from locsync.core.errors import ConfigurationError, StoreError
from locsync.schemas.translation import StringEntry


logger = logging.getLogger(__name__)


class ResourceStore(ABC):
    """Read and write one resource file format as flat key/value entries."""

    name: str = ""

    async def read_source(self, path: Path) -> list[StringEntry]:
        entries = await self.read_target(path)
        if entries is None:
            logger.warning("Source file %s does not exist; treating it as empty.", path)
            return []
        return [StringEntry(key=entry.key, value=entry.value or "") for entry in entries]

    async def read_target(self, path: Path) -> list[StringEntry] | None:
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise StoreError(f"Unable to decode {path}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Unable to read {path}: {exc}") from exc
        if not text.strip():
            return []
        try:
            return self.parse(text)
        except ValueError as exc:
            raise StoreError(f"Malformed {self.name} file {path}: {exc}") from exc

    async def write_target(
        self,
        path: Path,
        entries: Sequence[StringEntry],
        *,
        language: str | None = None,
    ) -> None:
        content = self.render(entries, language=language)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Unable to write {path}: {exc}") from exc

    @abstractmethod
    def parse(self, text: str) -> list[StringEntry]:
        """Parse file content; raise ValueError on malformed input."""

    @abstractmethod
    def render(self, entries: Sequence[StringEntry], *, language: str | None = None) -> str:
        """Serialize entries in order."""


def _load_json_object(text: str) -> dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object at the top level")
    return data


def _dump_json(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def _check_value(key: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"value of '{key}' must be a string or null, got {type(value).__name__}")


class FlatJSONStore(ResourceStore):
    name = "flat-json"

    def parse(self, text: str) -> list[StringEntry]:
        data = _load_json_object(text)
        return [StringEntry(key=key, value=_check_value(key, value)) for key, value in data.items()]

    def render(self, entries: Sequence[StringEntry], *, language: str | None = None) -> str:
        return _dump_json({entry.key: entry.value for entry in entries})


class NestedJSONStore(ResourceStore):
    name = "nested-json"
    separator = "."

    def parse(self, text: str) -> list[StringEntry]:
        entries: list[StringEntry] = []
        self._flatten(_load_json_object(text), "", entries)
        return entries

    def _flatten(self, node: dict[str, Any], prefix: str, entries: list[StringEntry]) -> None:
        for key, value in node.items():
            full_key = f"{prefix}{self.separator}{key}" if prefix else key
            if isinstance(value, dict):
                self._flatten(value, full_key, entries)
            else:
                entries.append(StringEntry(key=full_key, value=_check_value(full_key, value)))

    def render(self, entries: Sequence[StringEntry], *, language: str | None = None) -> str:
        root: dict[str, Any] = {}
        for entry in entries:
            node = root
            *parents, leaf = entry.key.split(self.separator)
            for part in parents:
                child = node.setdefault(part, {})
                if not isinstance(child, dict):
                    raise StoreError(f"Key '{entry.key}' collides with a string value at '{part}'.")
                node = child
            if isinstance(node.get(leaf), dict):
                raise StoreError(f"Key '{entry.key}' collides with nested keys below it.")
            node[leaf] = entry.value
        return _dump_json(root)


class ARBStore(ResourceStore):
    """Flutter application resource bundles; ``@`` metadata is not translated."""

    name = "arb"

    def parse(self, text: str) -> list[StringEntry]:
        data = _load_json_object(text)
        return [
            StringEntry(key=key, value=_check_value(key, value))
            for key, value in data.items()
            if not key.startswith("@")
        ]

    def render(self, entries: Sequence[StringEntry], *, language: str | None = None) -> str:
        data: dict[str, Any] = {}
        if language:
            data["@@locale"] = language
        data.update({entry.key: entry.value for entry in entries})
        return _dump_json(data)


_STRINGS_COMMENT_RE = re.compile(r"/\*.*?\*/|^\s*//[^\n]*$", re.DOTALL | re.MULTILINE)
_STRINGS_PAIR_RE = re.compile(r'"((?:[^"\\]|\\.)*)"\s*=\s*"((?:[^"\\]|\\.)*)"\s*;')
_STRINGS_UNESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "'": "'"}


def _unescape_strings(value: str) -> str:
    return re.sub(r"\\(.)", lambda match: _STRINGS_UNESCAPES.get(match.group(1), match.group(0)), value)


def _escape_strings(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )


class IOSStringsStore(ResourceStore):
    name = "ios-strings"

    def parse(self, text: str) -> list[StringEntry]:
        stripped = _STRINGS_COMMENT_RE.sub("", text)
        entries = [
            StringEntry(key=_unescape_strings(key), value=_unescape_strings(value))
            for key, value in _STRINGS_PAIR_RE.findall(stripped)
        ]
        if not entries and stripped.strip():
            raise ValueError("no \"key\" = \"value\"; pairs found")
        return entries

    def render(self, entries: Sequence[StringEntry], *, language: str | None = None) -> str:
        lines = [
            f'"{_escape_strings(entry.key)}" = "{_escape_strings(entry.value or "")}";'
            for entry in entries
        ]
        return "\n".join(lines) + "\n"


_ANDROID_UNESCAPES = {"'": "'", '"': '"', "n": "\n", "t": "\t", "@": "@", "?": "?", "\\": "\\"}


def _unescape_android(value: str) -> str:
    return re.sub(r"\\(.)", lambda match: _ANDROID_UNESCAPES.get(match.group(1), match.group(0)), value)


def _escape_android(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\n", "\\n")
    )
    if escaped.startswith(("@", "?")):
        escaped = "\\" + escaped
    return escaped


class AndroidXMLStore(ResourceStore):
    name = "android-xml"

    def parse(self, text: str) -> list[StringEntry]:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ValueError(str(exc)) from exc
        if root.tag != "resources":
            raise ValueError(f"expected <resources> root, got <{root.tag}>")

        entries: list[StringEntry] = []
        for element in root.findall("string"):
            name = element.get("name")
            if not name or element.get("translatable") == "false":
                continue
            entries.append(StringEntry(key=name, value=_unescape_android("".join(element.itertext()))))
        return entries

    def render(self, entries: Sequence[StringEntry], *, language: str | None = None) -> str:
        root = ET.Element("resources")
        for entry in entries:
            element = ET.SubElement(root, "string", name=entry.key)
            element.text = _escape_android(entry.value or "")
        ET.indent(root, space="    ")
        body = ET.tostring(root, encoding="unicode")
        return f'<?xml version="1.0" encoding="utf-8"?>\n{body}\n'


RESOURCE_FORMATS: dict[str, type[ResourceStore]] = {
    store.name: store
    for store in (FlatJSONStore, NestedJSONStore, ARBStore, IOSStringsStore, AndroidXMLStore)
}

_SUFFIX_FORMATS = {
    ".json": "flat-json",
    ".arb": "arb",
    ".strings": "ios-strings",
    ".xml": "android-xml",
}


def infer_format(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix not in _SUFFIX_FORMATS:
        raise ConfigurationError(
            f"Cannot infer a resource format for '{path}'; pass one of {', '.join(RESOURCE_FORMATS)}."
        )
    return _SUFFIX_FORMATS[suffix]


def get_resource_store(format_name: str) -> ResourceStore:
    store_cls = RESOURCE_FORMATS.get(format_name)
    if store_cls is None:
        raise ConfigurationError(
            f"Unknown resource format '{format_name}'. Available formats: {', '.join(RESOURCE_FORMATS)}."
        )
    return store_cls()
