"""docstore CLI: inspect and edit a document store from the shell."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from docstore.cli import compact, documents

app = typer.Typer(
    name="docstore",
    help="docstore CLI — read, write and maintain a revisioned document store.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    data_dir: str | None = None
    store: str = "docs"
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        from docstore import __version__

        print(f"docstore {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    data_dir: Optional[str] = typer.Option(
        None,
        "--data-dir",
        envvar="DOCSTORE_DATA_DIR",
        help="Directory holding store files (default: data)",
    ),
    store: str = typer.Option(
        "docs", "--store", "-s", envvar="DOCSTORE_STORE", help="Store (table) name"
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all docstore commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    state.data_dir = data_dir
    state.store = store
    state.json_output = json_output


app.command(name="put")(documents.put_cmd)
app.command(name="load")(documents.load_cmd)
app.command(name="get")(documents.get_cmd)
app.command(name="count")(documents.count_cmd)
app.command(name="delete")(documents.delete_cmd)
app.command(name="export")(documents.export_cmd)
app.command(name="compact")(compact.compact_cmd)
app.command(name="info")(compact.info_cmd)


def main() -> None:
    """Entry point for the docstore CLI."""
    app()
