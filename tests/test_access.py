from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
import requests

from folio.pipeline.access import AccessibilityProbe, local_path_from_file_url, resolve_fetchable_url


class _Response:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.closed = False

    def close(self) -> None:
        self.closed = True


class StubSession:
    def __init__(self, head_status: int, get_status: int = 200) -> None:
        self.head_status = head_status
        self.get_status = get_status
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def head(self, url: str, **kwargs: Any) -> _Response:
        self.calls.append(("HEAD", kwargs))
        return _Response(self.head_status)

    def get(self, url: str, **kwargs: Any) -> _Response:
        self.calls.append(("GET", kwargs))
        return _Response(self.get_status)


def test_relative_urls_resolve_under_asset_root(tmp_path: Path) -> None:
    fetchable = resolve_fetchable_url("images/a b.jpg", tmp_path)
    assert fetchable.startswith("file://")
    assert local_path_from_file_url(fetchable) == (tmp_path / "images" / "a b.jpg").resolve()
    leading_slash = resolve_fetchable_url("/images/a.jpg", tmp_path)
    assert leading_slash == (tmp_path / "images" / "a.jpg").resolve().as_uri()


@pytest.mark.parametrize("url", ["https://example.org/a.jpg", "file:///srv/a.jpg"])
def test_network_and_file_urls_pass_through(tmp_path: Path, url: str) -> None:
    assert resolve_fetchable_url(url, tmp_path) == url


def test_local_file_probe(tmp_path: Path) -> None:
    image = tmp_path / "a.jpg"
    probe = AccessibilityProbe(session=StubSession(200))  # type: ignore[arg-type]

    assert probe.check(image.as_uri()) is not None
    image.write_bytes(b"\xff\xd8")
    assert probe.check(image.as_uri()) is None


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions")
def test_unreadable_local_file(tmp_path: Path) -> None:
    image = tmp_path / "a.jpg"
    image.write_bytes(b"x")
    image.chmod(0)
    probe = AccessibilityProbe(session=StubSession(200))  # type: ignore[arg-type]
    assert "not readable" in (probe.check(image.as_uri()) or "")


def test_remote_probe_success_and_error_status() -> None:
    assert AccessibilityProbe(session=StubSession(200)).check("https://example.org/a.jpg") is None  # type: ignore[arg-type]
    assert AccessibilityProbe(session=StubSession(404)).check("https://example.org/a.jpg") == "HTTP 404"  # type: ignore[arg-type]


def test_remote_probe_falls_back_to_get_when_head_is_refused() -> None:
    session = StubSession(head_status=405, get_status=200)
    probe = AccessibilityProbe(session=session, timeout=2.5)  # type: ignore[arg-type]

    assert probe.check("https://example.org/a.jpg") is None
    assert [method for method, _ in session.calls] == ["HEAD", "GET"]
    assert session.calls[1][1]["stream"] is True
    assert session.calls[1][1]["timeout"] == 2.5


def test_remote_probe_reports_network_failures() -> None:
    class _Failing(StubSession):
        def head(self, url: str, **kwargs: Any) -> _Response:
            raise requests.ConnectionError("refused")

    reason = AccessibilityProbe(session=_Failing(200)).check("https://example.org/a.jpg")  # type: ignore[arg-type]
    assert reason is not None and reason.startswith("request failed")


def test_unknown_scheme_is_not_accessible() -> None:
    reason = AccessibilityProbe(session=StubSession(200)).check("ftp://example.org/a.jpg")  # type: ignore[arg-type]
    assert reason is not None and "unsupported" in reason
