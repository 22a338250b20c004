"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

RECORDS_FILE_ENV = "INCOMPAT_RECORDS_FILE"
LOG_LEVEL_ENV = "INCOMPAT_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    records_file: str = ""  # Empty means the built-in set
    log_level: str = "WARNING"

    @property
    def log_level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return Settings(
        records_file=env.get(RECORDS_FILE_ENV, "").strip(),
        log_level=env.get(LOG_LEVEL_ENV, "WARNING").strip() or "WARNING",
    )
