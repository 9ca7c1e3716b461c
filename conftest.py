# Test configuration utilities.
# Ensures the repository root is on sys.path so that 'folio' can be imported
# when running pytest without installing the package.
from __future__ import annotations

from collections.abc import Generator
import os
from pathlib import Path
import sys

import pytest


ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def isolated_folio_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Hide ambient FOLIO_* variables and drop any a test's `.env` file added."""
    from folio.config.settings import _load_settings

    for key in [key for key in os.environ if key.startswith("FOLIO_")]:
        monkeypatch.delenv(key)
    _load_settings.cache_clear()
    yield
    for key in [key for key in os.environ if key.startswith("FOLIO_")]:
        del os.environ[key]
    _load_settings.cache_clear()


@pytest.fixture
def log_messages() -> Generator[list[str], None, None]:
    """Collect WARNING-and-above loguru messages emitted during a test."""
    from folio.utils.log_utils import logger

    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    try:
        yield messages
    finally:
        logger.remove(sink_id)
