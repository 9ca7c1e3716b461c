"""Centralised environment configuration for folio.

This module ensures `.env` loading happens in one place and exposes a
typed snapshot of directory layout, network timeouts, and the external
tools used by the page-splitting stage. Downstream modules call
`get_settings()` instead of touching `os.environ` directly, making it
easier to validate values and override behaviour in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv

from folio import __version__


_DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_HTTP_TIMEOUT = 15.0
DEFAULT_PROBE_TIMEOUT = 10.0
DEFAULT_DOWNLOAD_TIMEOUT = 120.0
DEFAULT_RASTER_TIMEOUT = 300.0
DEFAULT_RASTER_DPI = 150
DEFAULT_HTTP_RETRIES = 3
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "debug_logs.log"


def _coerce_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _coerce_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class PathSettings:
    public_dir: Path
    data_dir: Path
    pages_dir: Path


@dataclass(frozen=True)
class HttpSettings:
    timeout: float
    probe_timeout: float
    download_timeout: float
    retries: int
    user_agent: str


@dataclass(frozen=True)
class RasterSettings:
    engine: str
    dpi: int
    timeout: float
    trim_binary: str


@dataclass(frozen=True)
class LogSettings:
    console_level: str
    file_path: Path | None


@dataclass(frozen=True)
class FolioSettings:
    """Top-level snapshot of configuration values."""

    env_file: Path
    paths: PathSettings
    http: HttpSettings
    raster: RasterSettings
    logging: LogSettings


def _resolve_env_path(env_file: os.PathLike[str] | str | None) -> Path:
    if env_file is None:
        return _DEFAULT_ENV_PATH
    return Path(env_file).resolve()


@lru_cache(maxsize=4)
def _load_settings(env_path: Path) -> FolioSettings:
    # Existing environment variables take precedence over `.env` defaults.
    load_dotenv(dotenv_path=env_path, override=False)

    public_dir = Path(os.getenv("FOLIO_PUBLIC_DIR") or "public").expanduser().resolve()
    data_dir = Path(os.getenv("FOLIO_DATA_DIR") or public_dir / "data").expanduser().resolve()
    pages_dir = Path(os.getenv("FOLIO_PAGES_DIR") or data_dir / "pages").expanduser().resolve()

    http = HttpSettings(
        timeout=_coerce_float(os.getenv("FOLIO_HTTP_TIMEOUT"), DEFAULT_HTTP_TIMEOUT),
        probe_timeout=_coerce_float(os.getenv("FOLIO_PROBE_TIMEOUT"), DEFAULT_PROBE_TIMEOUT),
        download_timeout=_coerce_float(
            os.getenv("FOLIO_DOWNLOAD_TIMEOUT"), DEFAULT_DOWNLOAD_TIMEOUT
        ),
        retries=max(_coerce_int(os.getenv("FOLIO_HTTP_RETRIES"), DEFAULT_HTTP_RETRIES), 1),
        user_agent=os.getenv("FOLIO_USER_AGENT") or f"folio/{__version__}",
    )

    raster = RasterSettings(
        engine=(os.getenv("FOLIO_RASTERIZER") or "pdftoppm").strip().lower(),
        dpi=_coerce_int(os.getenv("FOLIO_RASTER_DPI"), DEFAULT_RASTER_DPI),
        timeout=_coerce_float(os.getenv("FOLIO_RASTER_TIMEOUT"), DEFAULT_RASTER_TIMEOUT),
        trim_binary=os.getenv("FOLIO_TRIM_BINARY") or "mogrify",
    )

    # An empty FOLIO_LOG_FILE disables the debug file sink.
    log_file = os.getenv("FOLIO_LOG_FILE", DEFAULT_LOG_FILE)
    log_settings = LogSettings(
        console_level=(os.getenv("FOLIO_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
        file_path=Path(log_file).expanduser().resolve() if log_file else None,
    )

    return FolioSettings(
        env_file=env_path,
        paths=PathSettings(public_dir=public_dir, data_dir=data_dir, pages_dir=pages_dir),
        http=http,
        raster=raster,
        logging=log_settings,
    )


def get_settings(
    env_file: os.PathLike[str] | str | None = None,
    *,
    reload: bool = False,
) -> FolioSettings:
    """Return the cached settings snapshot.

    Args:
        env_file: Optional explicit path to a `.env` file. When omitted the repo
            root `.env` file is used.
        reload: When True the cached snapshot is cleared before loading.
    """
    env_path = _resolve_env_path(env_file)
    if reload:
        _load_settings.cache_clear()
    return _load_settings(env_path)
