"""Tests for the table engine: schema, upsert protocol, reads and deletes."""

from __future__ import annotations

import logging
import sqlite3

import pytest

from tests.conftest import make_doc
from docstore import DocumentRecord, QueryParams, TableEngine, where
from docstore.errors import (
    DocumentConflictError,
    EmptyBatchError,
    GetConflictedError,
    InvalidIdentifierError,
)
from docstore.table import Transaction, begin


class TestSchema:
    def test_table_and_partial_indexes(self, conn):
        cols = [row[1] for row in conn.execute('PRAGMA table_info("docs")')]
        assert cols == ["pk", "rev", "data", "si0", "ni0", "si1", "ni1", "si2", "ni2",
                        "si3", "ni3", "si4", "ni4"]
        rows = conn.execute(
            "SELECT name, sql FROM sqlite_master WHERE type = 'index' AND tbl_name = 'docs' "
            "AND name LIKE 'idx_%' ORDER BY name"
        ).fetchall()
        assert len(rows) == 10
        names = {r[0] for r in rows}
        assert "idx_docs_si0" in names
        assert "idx_docs_ni4" in names
        assert all("NOTNULL" in r[1] for r in rows)

    def test_create_schema_idempotent(self, conn, engine):
        engine.create_schema(conn)
        engine.create_schema(conn)

    def test_rejects_unsafe_name(self):
        with pytest.raises(InvalidIdentifierError):
            TableEngine('docs"; DROP TABLE x')


class TestPut:
    def test_insert_then_read(self, conn, engine):
        engine.put(conn, [make_doc("a", 1, {"n": 1}, si0="h", ni0=1)])
        got = engine.get_by_pk(conn, "a")
        assert got == make_doc("a", 1, {"n": 1}, si0="h", ni0=1)

    def test_increasing_revisions_overwrite(self, conn, engine):
        for rev in (1, 2, 3):
            engine.put(conn, [make_doc("a", rev, {"rev": rev}, si0=f"v{rev}")])
        rows = engine.get(conn, [QueryParams()])[0]
        assert rows == [make_doc("a", 3, {"rev": 3}, si0="v3")]

    @pytest.mark.parametrize("rev", [5, 4, 0, -1])
    def test_revision_gate(self, conn, engine, rev):
        stored = make_doc("a", 5, {"v": "stored"}, si0="s", ni1=9)
        engine.put(conn, [stored])
        with pytest.raises(DocumentConflictError) as exc_info:
            engine.put(conn, [make_doc("a", rev, {"v": "new"}, si0="n")])
        assert exc_info.value.record == stored
        assert engine.get_by_pk(conn, "a") == stored

    def test_index_slots_cleared_by_update(self, conn, engine):
        engine.put(conn, [make_doc("a", 1, {}, si0="h", ni0=1)])
        engine.put(conn, [make_doc("a", 2, {})])
        got = engine.get_by_pk(conn, "a")
        assert got.string_index[0] is None
        assert got.int_index[0] is None

    def test_empty_batch(self, conn, engine):
        with pytest.raises(EmptyBatchError):
            engine.put(conn, [])

    def test_stops_at_first_conflict(self, conn, engine):
        engine.put(conn, [make_doc("b", 2, {})])
        with pytest.raises(DocumentConflictError):
            engine.put(conn, [make_doc("a", 1, {}), make_doc("b", 1, {}), make_doc("c", 1, {})])
        # no transaction here, so the first write stays and the third never ran
        assert engine.get_by_pk(conn, "a") is not None
        assert engine.get_by_pk(conn, "c") is None

    def test_get_conflicted_when_row_vanishes(self, conn, engine):
        engine.put(conn, [make_doc("a", 5, {})])

        class VanishingExecutor:
            """Hides the stored row from the conflict re-read."""

            def execute(self, sql, parameters=()):
                if sql.startswith("SELECT") and "WHERE pk = ?" in sql:
                    return conn.execute("SELECT 1 WHERE 0")
                return conn.execute(sql, parameters)

        with pytest.raises(GetConflictedError) as exc_info:
            engine.put(VanishingExecutor(), [make_doc("a", 1, {})])
        assert exc_info.value.pk == "a"


class TestGet:
    @pytest.fixture
    def seeded(self, conn, engine):
        engine.put(conn, [make_doc(f"d{i}", 1, {"i": i}, si0="even" if i % 2 == 0 else "odd", ni0=i)
                          for i in range(6)])
        return conn

    def test_empty_params(self, seeded, engine):
        with pytest.raises(EmptyBatchError):
            engine.get(seeded, [])

    def test_results_follow_params_order(self, seeded, engine):
        res = engine.get(
            seeded,
            [
                QueryParams().where(where.equal("si0", "odd")).order_by("ni0"),
                QueryParams().count(),
                QueryParams().where(where.equal("pk", "missing")),
            ],
        )
        assert len(res) == 3
        assert [d.pk for d in res[0]] == ["d1", "d3", "d5"]
        assert res[1][0].count == 6
        assert res[2] == []

    def test_count_record_shape(self, seeded, engine):
        (doc,) = engine.get(seeded, [QueryParams().where(where.greater("ni0", 3)).count()])[0]
        assert doc.int_index[0] == 2
        assert doc.pk == ""
        assert doc.string_index == [None] * 5

    def test_order_and_limit(self, seeded, engine):
        res = engine.get(seeded, [QueryParams().order_by("ni0", ascending=False).limit(2, 1)])[0]
        assert [d.int_index[0] for d in res] == [4, 3]

    def test_decode_from_results(self, seeded, engine):
        (doc,) = engine.get(seeded, [QueryParams().where(where.equal("pk", "d2"))])[0]
        assert doc.decode() == {"i": 2}

    def test_returned_records_are_independent(self, seeded, engine):
        first = engine.get(seeded, [QueryParams().where(where.equal("pk", "d0"))])[0][0]
        first.set_string_index(0, "changed")
        again = engine.get(seeded, [QueryParams().where(where.equal("pk", "d0"))])[0][0]
        assert again.string_index[0] == "even"


class TestDelete:
    def test_delete_by_predicate(self, conn, engine):
        engine.put(conn, [make_doc("a", 1, {}), make_doc("b", 1, {})])
        assert engine.delete(conn, where.equal("pk", "zzz")) == 0
        assert engine.delete(conn, where.equal("pk", "a")) == 1
        assert engine.count(conn) == 1

    def test_delete_all(self, conn, engine):
        engine.put(conn, [make_doc(f"d{i}", 1, {}) for i in range(4)])
        assert engine.delete(conn, None) == 4
        assert engine.count(conn) == 0


class TestTransaction:
    def test_rollback_discards_writes(self, conn, engine):
        with begin(conn, write=True) as tx:
            engine.put(tx, [make_doc("a", 1, {})])
        assert not conn.in_transaction
        assert engine.count(conn) == 0

    def test_commit_keeps_writes_and_rollback_is_noop(self, conn, engine):
        with begin(conn, write=True) as tx:
            engine.put(tx, [make_doc("a", 1, {})])
            tx.commit()
            tx.rollback()
        assert tx.done
        assert engine.count(conn) == 1

    def test_read_transaction(self, conn, engine):
        engine.put(conn, [make_doc("a", 1, {})])
        with begin(conn, write=False) as tx:
            assert engine.count(tx) == 1
        assert not conn.in_transaction

    def test_rollback_after_engine_abort_is_silent(self, conn, engine):
        tx = begin(conn, write=True)
        conn.execute("ROLLBACK")
        tx.rollback()
        assert tx.done

    def test_engine_errors_propagate(self, conn, engine):
        conn.execute('DROP TABLE "docs"')
        with pytest.raises(sqlite3.OperationalError):
            engine.put(conn, [DocumentRecord("a", 1)])

    def test_failed_rollback_is_logged_and_body_error_propagates(self, conn, caplog):
        class FailingRollback:
            def __init__(self, conn):
                self._conn = conn

            @property
            def in_transaction(self):
                return self._conn.in_transaction

            def execute(self, sql, parameters=()):
                if sql == "ROLLBACK":
                    raise sqlite3.OperationalError("disk I/O error")
                return self._conn.execute(sql, parameters)

        with caplog.at_level(logging.WARNING, logger="docstore.table"):
            with pytest.raises(RuntimeError, match="boom"):
                with Transaction(FailingRollback(conn), write=True):
                    raise RuntimeError("boom")
        assert "rollback failed" in caplog.text
        conn.execute("ROLLBACK")
