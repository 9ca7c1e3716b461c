"""Tests for the centralised configuration loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from folio.config.settings import DEFAULT_HTTP_RETRIES, DEFAULT_RASTER_DPI, get_settings


def _write_env(path: Path, content: str) -> None:
    lines = [line.strip() for line in content.strip().splitlines()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_env_file_values_are_loaded(tmp_path: Path) -> None:
    """Ensure values from a dedicated env file are parsed into the snapshot."""
    env_file = tmp_path / "test.env"
    _write_env(
        env_file,
        f"""
        FOLIO_PUBLIC_DIR={tmp_path / "site"}
        FOLIO_HTTP_TIMEOUT=7.5
        FOLIO_RASTER_DPI=300
        FOLIO_RASTERIZER=PyMuPDF
        FOLIO_TRIM_BINARY=/opt/im/mogrify
        FOLIO_USER_AGENT=archive-bot/1.0
        """,
    )
    settings = get_settings(env_file=env_file, reload=True)

    assert settings.env_file == env_file.resolve()
    assert settings.paths.public_dir == (tmp_path / "site").resolve()
    assert settings.paths.data_dir == (tmp_path / "site" / "data").resolve()
    assert settings.paths.pages_dir == (tmp_path / "site" / "data" / "pages").resolve()
    assert settings.http.timeout == 7.5
    assert settings.http.user_agent == "archive-bot/1.0"
    assert settings.raster.dpi == 300
    assert settings.raster.engine == "pymupdf"
    assert settings.raster.trim_binary == "/opt/im/mogrify"


def test_environment_variables_override_env_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Existing environment variables should take precedence over .env contents."""
    env_file = tmp_path / "override.env"
    _write_env(
        env_file,
        """
        FOLIO_RASTER_DPI=200
        FOLIO_HTTP_RETRIES=5
        """,
    )
    monkeypatch.setenv("FOLIO_RASTER_DPI", "96")

    settings = get_settings(env_file=env_file, reload=True)

    assert settings.raster.dpi == 96
    assert settings.http.retries == 5


def test_invalid_numbers_fall_back_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FOLIO_RASTER_DPI", "high")
    monkeypatch.setenv("FOLIO_HTTP_RETRIES", "0")

    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    assert settings.raster.dpi == DEFAULT_RASTER_DPI
    assert settings.http.retries == 1
    assert DEFAULT_HTTP_RETRIES > 1


def test_explicit_data_and_pages_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FOLIO_DATA_DIR", str(tmp_path / "results"))
    monkeypatch.setenv("FOLIO_PAGES_DIR", str(tmp_path / "pngs"))

    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    assert settings.paths.data_dir == (tmp_path / "results").resolve()
    assert settings.paths.pages_dir == (tmp_path / "pngs").resolve()


def test_reload_picks_up_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Calling get_settings with reload=True should refresh cached values."""
    env_file = tmp_path / "reload.env"
    _write_env(env_file, "FOLIO_PROBE_TIMEOUT=3")
    settings = get_settings(env_file=env_file, reload=True)
    assert settings.http.probe_timeout == 3.0

    monkeypatch.setenv("FOLIO_PROBE_TIMEOUT", "4")
    assert get_settings(env_file=env_file).http.probe_timeout == 3.0
    updated = get_settings(env_file=env_file, reload=True)
    assert updated.http.probe_timeout == 4.0


def test_logging_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FOLIO_LOG_LEVEL", "warning")
    monkeypatch.setenv("FOLIO_LOG_FILE", "")

    settings = get_settings(env_file=tmp_path / "missing.env", reload=True)

    assert settings.logging.console_level == "WARNING"
    assert settings.logging.file_path is None

    monkeypatch.setenv("FOLIO_LOG_FILE", str(tmp_path / "logs" / "folio.log"))
    updated = get_settings(env_file=tmp_path / "missing.env", reload=True)
    assert updated.logging.file_path == (tmp_path / "logs" / "folio.log").resolve()
