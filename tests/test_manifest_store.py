from __future__ import annotations

import json
from pathlib import Path

import pytest

from folio.errors import ManifestNotFoundError, ManifestParseError
from folio.manifest import (
    EntryStatus,
    ManifestEntry,
    entry_exists,
    load_manifest,
    resolve_manifest_path,
    save_manifest,
)


def _write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_missing_manifest_raises_unless_missing_ok(tmp_path: Path) -> None:
    path = tmp_path / "images.json"
    with pytest.raises(ManifestNotFoundError):
        load_manifest(path)
    assert load_manifest(path, missing_ok=True) == []


@pytest.mark.parametrize(
    "content, message",
    [
        ("{not json", "invalid JSON"),
        ('{"url": "a.jpg"}', "must be an array"),
        ('["a.jpg"]', "entry 0 is not an object"),
    ],
)
def test_malformed_manifest_is_a_parse_error(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "broken.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ManifestParseError, match=message):
        load_manifest(path)


def test_unknown_keys_survive_a_rewrite(tmp_path: Path) -> None:
    path = tmp_path / "images.json"
    _write_json(
        path,
        [
            {
                "url": "images/a.jpg",
                "title": "Letter",
                "pipeline": ["ocr", "summarize"],
                "metadata": {"date": "1888"},
                "notes": "keep me",
            }
        ],
    )

    entries = load_manifest(path)
    assert entries[0].extra == {"notes": "keep me"}
    entries[0].mark_complete("abc.json")
    save_manifest(path, entries)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw == [
        {
            "url": "images/a.jpg",
            "title": "Letter",
            "pipeline": ["ocr", "summarize"],
            "metadata": {"date": "1888"},
            "result_file": "abc.json",
            "status": "complete",
            "notes": "keep me",
        }
    ]


def test_pending_entry_omits_unset_fields(tmp_path: Path) -> None:
    entry = ManifestEntry(url="https://example.org/a.pdf", metadata={}, inputs=None)
    assert entry.to_dict() == {"url": "https://example.org/a.pdf", "pipeline": []}


def test_unknown_status_reads_as_pending() -> None:
    entry = ManifestEntry.from_dict({"url": "a.jpg", "status": "in-progress"})
    assert entry.status is EntryStatus.PENDING


def test_save_creates_parent_directories_and_leaves_no_temp_files(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "data" / "pdfs.json"
    save_manifest(path, [ManifestEntry(url="b.pdf", title="Ünïcode")])

    assert [p.name for p in path.parent.iterdir()] == ["pdfs.json"]
    assert "Ünïcode" in path.read_text(encoding="utf-8")
    assert load_manifest(path)[0].title == "Ünïcode"


def test_entry_exists_is_an_exact_match() -> None:
    entries = [ManifestEntry(url="https://example.org/a.jpg")]
    assert entry_exists(entries, "https://example.org/a.jpg")
    assert not entry_exists(entries, "https://example.org/a.jpg?size=full")
    assert not entry_exists(entries, "https://EXAMPLE.org/a.jpg")


def test_resolve_manifest_path(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    assert resolve_manifest_path("images.json", data_dir) == data_dir / "images.json"
    absolute = tmp_path / "elsewhere" / "m.json"
    assert resolve_manifest_path(absolute, data_dir) == absolute
