from __future__ import annotations

from pathlib import Path
from typing import Any

from PIL import Image
import pytest

from folio.errors import TaskSkipped
from folio.pipeline import TaskRegistry, default_registry
from folio.tasks import builtin


def _png(path: Path, size: tuple[int, int] = (40, 30)) -> Path:
    Image.new("RGB", size, color="white").save(path, format="PNG")
    return path


def test_image_metadata_reads_local_files(tmp_path: Path) -> None:
    image = _png(tmp_path / "page.png")
    payload = builtin.image_metadata({"image_url": image.as_uri()}, {})
    assert payload == {"width": 40, "height": 30, "mode": "RGB", "format": "PNG", "frames": 1}


def test_image_metadata_skips_pdfs() -> None:
    with pytest.raises(TaskSkipped):
        builtin.image_metadata({"image_url": "https://example.org/report.pdf"}, {})


def test_image_metadata_rejects_non_images(tmp_path: Path) -> None:
    bogus = tmp_path / "notes.jpg"
    bogus.write_text("not an image", encoding="utf-8")
    with pytest.raises(ValueError, match="Not a readable image"):
        builtin.image_metadata({"image_url": bogus.as_uri()}, {})


def test_media_probe_local_file(tmp_path: Path) -> None:
    image = _png(tmp_path / "page.png")
    payload = builtin.media_probe({"image_url": image.as_uri()}, {})
    assert payload == {"content_type": "image/png", "size_bytes": image.stat().st_size}


def test_media_probe_remote(monkeypatch: pytest.MonkeyPatch) -> None:
    class _Response:
        headers = {"Content-Type": "image/jpeg", "Content-Length": "2048"}

        def raise_for_status(self) -> None:
            return None

    def fake_head(url: str, **kwargs: Any) -> _Response:
        assert kwargs["allow_redirects"] is True
        return _Response()

    monkeypatch.setattr(builtin.requests, "head", fake_head)
    payload = builtin.media_probe({"image_url": "https://example.org/a.jpg"}, {})
    assert payload == {"content_type": "image/jpeg", "size_bytes": 2048}


def test_default_registry_includes_builtin_tasks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(TaskRegistry, "load_entry_points", lambda self, group="folio.tasks": None)
    registry = default_registry()
    assert registry.names()[:2] == ["media_probe", "image_metadata"]


def test_broken_entry_point_is_reported(
    monkeypatch: pytest.MonkeyPatch, log_messages: list[str]
) -> None:
    class _BrokenEntryPoint:
        name = "broken"
        value = "missing.module:task"

        def load(self) -> Any:
            raise ImportError("No module named 'missing'")

    class _GoodEntryPoint:
        name = "echo"
        value = "tests:echo"

        def load(self) -> Any:
            return lambda inputs, prior: dict(inputs)

    from folio.pipeline import tasks as tasks_module

    monkeypatch.setattr(
        tasks_module, "entry_points", lambda group: [_BrokenEntryPoint(), _GoodEntryPoint()]
    )
    registry = TaskRegistry()
    registry.load_entry_points()

    assert registry.names() == ["echo"]
    assert any("broken" in message for message in log_messages)
