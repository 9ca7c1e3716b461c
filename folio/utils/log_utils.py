"""Logging utilities shared across the folio package.

Console output goes to stderr so that commands printing JSON to stdout (for
example `folio add --dry-run`) can be piped. Levels and the debug file
location come from `FOLIO_LOG_LEVEL` and `FOLIO_LOG_FILE`.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

from folio.config.settings import get_settings


_CONFIGURED: bool = False
_CONSOLE_SINK_ID: int | None = None

DEFAULT_FILE_LEVEL = "DEBUG"
DEFAULT_FILE_ROTATION = "5 MB"
DEFAULT_FILE_RETENTION = 2

_RICH_HANDLER_KWARGS: dict[str, Any] = {
    "markup": True,
    "show_time": False,
    "show_path": False,
}


def _add_console_sink(level: str) -> int:
    return logger.add(
        RichHandler(console=Console(stderr=True), **_RICH_HANDLER_KWARGS),  # type: ignore[arg-type]
        level=level,
        format="{message}",
    )


def _configure_logging(*, force: bool = False) -> None:
    """Configure the shared logger once per process."""
    global _CONFIGURED, _CONSOLE_SINK_ID
    if _CONFIGURED and not force:
        return

    settings = get_settings().logging
    logger.remove()
    _CONSOLE_SINK_ID = _add_console_sink(settings.console_level)

    if settings.file_path is not None:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.file_path),
            level=DEFAULT_FILE_LEVEL,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
            rotation=DEFAULT_FILE_ROTATION,
            retention=DEFAULT_FILE_RETENTION,
            enqueue=True,
        )

    _CONFIGURED = True


def set_console_level(level: str) -> None:
    """Swap the console sink for one at `level`; the file sink is untouched."""
    global _CONSOLE_SINK_ID
    if _CONSOLE_SINK_ID is not None:
        logger.remove(_CONSOLE_SINK_ID)
    _CONSOLE_SINK_ID = _add_console_sink(level.upper())


__all__ = ["logger", "set_console_level"]

# Configure logging on import so callers only need to import `logger`.
_configure_logging()
