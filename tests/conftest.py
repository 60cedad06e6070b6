"""Shared test fixtures for docstore tests."""

from __future__ import annotations

import sqlite3

import pytest

from docstore import DocumentRecord, Store, TableEngine, encode


def make_doc(pk: str, rev: int, payload: dict | None = None, **slots) -> DocumentRecord:
    """Build a record; ``si0="h"`` / ``ni2=5`` style keywords fill index slots."""
    doc = DocumentRecord(pk=pk, rev=rev, data=encode(payload) if payload is not None else "")
    for name, value in slots.items():
        slot = int(name[2:])
        if name.startswith("si"):
            doc.set_string_index(slot, value)
        else:
            doc.set_int_index(slot, value)
    return doc


@pytest.fixture
def data_dir(tmp_path):
    """A not-yet-existing data directory under the pytest tmp dir."""
    return str(tmp_path / "data")


@pytest.fixture
def store(data_dir):
    """An opened Store named 'testdb'."""
    s = Store("testdb", data_dir)
    s.open()
    yield s
    s.close()


@pytest.fixture
def engine():
    return TableEngine("docs")


@pytest.fixture
def conn(tmp_path, engine):
    """An autocommit sqlite3 connection with the engine's table created."""
    c = sqlite3.connect(str(tmp_path / "engine.db"), isolation_level=None)
    engine.create_schema(c)
    yield c
    c.close()
