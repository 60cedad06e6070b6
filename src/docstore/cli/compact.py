"""docstore compact / info — store file maintenance and status."""

from __future__ import annotations

import os

import typer

from docstore.cli import _exitcodes as ec
from docstore.cli._output import print_error, print_object
from docstore.cli._storage import open_store


def compact_cmd() -> None:
    """Reclaim space left by deleted and overwritten documents."""
    from docstore.cli import state

    try:
        store = open_store()
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.DATABASE_ERROR)

    try:
        before = os.path.getsize(store.path)
        store.compact()
        after = os.path.getsize(store.path)
        print_object(
            {"path": store.path, "size_before": before, "size_after": after},
            json_mode=state.json_output,
        )
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        store.close()


def info_cmd() -> None:
    """Show the store file location, size and document count."""
    from docstore.cli import state

    try:
        store = open_store()
    except Exception as e:
        print_error(f"Cannot open store: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)

    try:
        data = {
            "store": store.name,
            "path": store.path,
            "documents": store.count(),
            "file_size_bytes": os.path.getsize(store.path),
        }
        print_object(data, json_mode=state.json_output)
    finally:
        store.close()
