"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from docstore import Store
from docstore.cli import app
from tests.conftest import make_doc

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_dir(tmp_path):
    return str(tmp_path / "cli_data")


@pytest.fixture
def seeded_dir(cli_dir):
    """A data directory whose 'docs' store holds three documents."""
    with Store("docs", cli_dir) as s:
        s.put(
            [
                make_doc("a", 1, {"n": 1, "f": 1.5}, si0="red", ni0=10),
                make_doc("b", 2, {"n": 2}, si0="blue", ni0=20),
                make_doc("c", 1, {"n": 3}, si0="red", ni0=30),
            ]
        )
    return cli_dir


def invoke(runner: CliRunner, args: list[str], data_dir: str | None = None) -> "Result":
    """Invoke the CLI against a data directory."""
    if data_dir:
        args = ["--data-dir", data_dir] + args
    return runner.invoke(app, args, catch_exceptions=False)
