from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from schemata.config import get_settings, reset_defaults
from schemata.logging import LoggerRegistry


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Every test starts from built-in defaults and a fresh settings read."""
    for name in ("SCHEMATA_ABORT_EARLY", "SCHEMATA_DEBUG", "SCHEMATA_LOG_LEVEL", "SCHEMATA_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_defaults()
    yield
    get_settings.cache_clear()
    reset_defaults()
    LoggerRegistry._loggers.clear()
    structlog.reset_defaults()

