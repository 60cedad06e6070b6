"""Configuration for docstore stores."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Number of string/integer index slot pairs on every table.
MAX_INDEX = 5

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class StoreConfig:
    """Configuration for a Store."""

    data_dir: str = "data"
    dir_mode: int = 0o755
    journal_mode: str | None = None
    busy_timeout_ms: int = 5000
    vacuum_on_close: bool = True

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Build a config from DOCSTORE_* environment variables."""
        cfg = cls()
        data_dir = os.getenv("DOCSTORE_DATA_DIR")
        if data_dir:
            cfg.data_dir = data_dir
        journal_mode = os.getenv("DOCSTORE_JOURNAL_MODE")
        if journal_mode:
            cfg.journal_mode = journal_mode
        busy_timeout = os.getenv("DOCSTORE_BUSY_TIMEOUT_MS")
        if busy_timeout:
            cfg.busy_timeout_ms = int(busy_timeout)
        vacuum = os.getenv("DOCSTORE_VACUUM_ON_CLOSE")
        if vacuum:
            cfg.vacuum_on_close = vacuum.strip().lower() in _TRUE_VALUES
        return cfg
