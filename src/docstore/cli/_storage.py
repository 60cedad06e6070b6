"""CLI helpers for opening the selected store."""

from __future__ import annotations

from docstore.config import StoreConfig
from docstore.store import Store


def open_store() -> Store:
    """Open the store selected by the global CLI options."""
    from docstore.cli import state

    config = StoreConfig.from_env()
    if state.data_dir is not None:
        config.data_dir = state.data_dir
    store = Store(state.store, config=config)
    store.open()
    return store
