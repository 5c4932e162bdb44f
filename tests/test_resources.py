from __future__ import annotations

import json
from pathlib import Path

import pytest

from locsync.core.errors import ConfigurationError, StoreError
from locsync.integrations.resources import (
    AndroidXMLStore,
    ARBStore,
    FlatJSONStore,
    IOSStringsStore,
    NestedJSONStore,
    get_resource_store,
    infer_format,
)
from locsync.schemas.translation import StringEntry


@pytest.mark.asyncio
async def test_flat_json_keeps_nulls_for_targets(tmp_path: Path) -> None:
    path = tmp_path / "de.json"
    path.write_text(json.dumps({"fruit": None, "veg": "Karotte"}), encoding="utf-8")
    store = FlatJSONStore()

    target = await store.read_target(path)
    source = await store.read_source(path)

    assert target == [StringEntry(key="fruit", value=None), StringEntry(key="veg", value="Karotte")]
    assert source[0] == StringEntry(key="fruit", value="")


@pytest.mark.asyncio
async def test_missing_target_reads_as_none_and_missing_source_as_empty(tmp_path: Path) -> None:
    store = FlatJSONStore()

    assert await store.read_target(tmp_path / "absent.json") is None
    assert await store.read_source(tmp_path / "absent.json") == []


@pytest.mark.asyncio
async def test_flat_json_rejects_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "en.json"
    path.write_text(json.dumps({"count": 3}), encoding="utf-8")

    with pytest.raises(StoreError):
        await FlatJSONStore().read_source(path)


@pytest.mark.asyncio
async def test_nested_json_flattens_and_rebuilds(tmp_path: Path) -> None:
    path = tmp_path / "en.json"
    path.write_text(
        json.dumps({"menu": {"file": "File", "edit": {"copy": "Copy"}}, "title": "Editor"}),
        encoding="utf-8",
    )
    store = NestedJSONStore()

    entries = await store.read_source(path)
    out = tmp_path / "out" / "de.json"
    await store.write_target(out, entries)

    assert [entry.key for entry in entries] == ["menu.file", "menu.edit.copy", "title"]
    assert json.loads(out.read_text(encoding="utf-8")) == {
        "menu": {"file": "File", "edit": {"copy": "Copy"}},
        "title": "Editor",
    }

    with pytest.raises(StoreError):
        store.render([StringEntry(key="a.b", value="x"), StringEntry(key="a", value="y")])
    with pytest.raises(StoreError):
        store.render([StringEntry(key="a", value="y"), StringEntry(key="a.b", value="x")])


@pytest.mark.asyncio
async def test_arb_skips_metadata_and_writes_locale(tmp_path: Path) -> None:
    path = tmp_path / "intl_en.arb"
    path.write_text(
        json.dumps({"@@locale": "en", "hello": "Hello {name}", "@hello": {"description": "greeting"}}),
        encoding="utf-8",
    )
    store = ARBStore()

    entries = await store.read_source(path)
    out = tmp_path / "intl_de.arb"
    await store.write_target(out, [StringEntry(key="hello", value="Hallo {name}")], language="de")

    assert entries == [StringEntry(key="hello", value="Hello {name}")]
    assert json.loads(out.read_text(encoding="utf-8")) == {"@@locale": "de", "hello": "Hallo {name}"}


@pytest.mark.asyncio
async def test_ios_strings_parses_comments_and_escapes(tmp_path: Path) -> None:
    path = tmp_path / "Localizable.strings"
    path.write_text(
        '/* Greeting shown on launch */\n'
        '"greeting" = "Say \\"hi\\"\\nthere";\n'
        '// trailing comment\n'
        '"farewell" = "Bye";\n',
        encoding="utf-8",
    )
    store = IOSStringsStore()

    entries = await store.read_source(path)
    out = tmp_path / "de.lproj" / "Localizable.strings"
    await store.write_target(out, entries)

    assert entries == [
        StringEntry(key="greeting", value='Say "hi"\nthere'),
        StringEntry(key="farewell", value="Bye"),
    ]
    assert await store.read_source(out) == entries


@pytest.mark.asyncio
async def test_android_xml_skips_untranslatable_and_escapes(tmp_path: Path) -> None:
    path = tmp_path / "strings.xml"
    path.write_text(
        '<?xml version="1.0" encoding="utf-8"?>\n'
        "<resources>\n"
        '    <string name="app_name" translatable="false">Fruits</string>\n'
        '    <string name="greeting">Don\\\'t panic</string>\n'
        "</resources>\n",
        encoding="utf-8",
    )
    store = AndroidXMLStore()

    entries = await store.read_source(path)
    out = tmp_path / "values-de" / "strings.xml"
    await store.write_target(out, [StringEntry(key="greeting", value="Keine Panik, it's fine")])

    assert entries == [StringEntry(key="greeting", value="Don't panic")]
    assert "it\\'s fine" in out.read_text(encoding="utf-8")
    assert await store.read_source(out) == [StringEntry(key="greeting", value="Keine Panik, it's fine")]


@pytest.mark.asyncio
async def test_malformed_xml_raises_store_error(tmp_path: Path) -> None:
    path = tmp_path / "strings.xml"
    path.write_text("<resources><string name='x'>", encoding="utf-8")

    with pytest.raises(StoreError):
        await AndroidXMLStore().read_source(path)


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("fruits.json", "flat-json"),
        ("intl_de.arb", "arb"),
        ("Localizable.strings", "ios-strings"),
        ("strings.xml", "android-xml"),
    ],
)
def test_infer_format(filename: str, expected: str) -> None:
    assert infer_format(filename) == expected


def test_unknown_formats_raise_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        infer_format("fruits.yaml")
    with pytest.raises(ConfigurationError):
        get_resource_store("yaml")


@pytest.mark.asyncio
async def test_undecodable_file_raises_store_error(tmp_path: Path) -> None:
    path = tmp_path / "de.json"
    path.write_bytes(b'{"a": "\xff\xfe"}')

    with pytest.raises(StoreError) as excinfo:
        await FlatJSONStore().read_target(path)

    assert str(path) in str(excinfo.value)
