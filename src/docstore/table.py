"""Table engine: schema, batched reads/writes and the revision-gated upsert."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Protocol, Sequence

from docstore.config import MAX_INDEX
from docstore.errors import DocumentConflictError, EmptyBatchError, GetConflictedError
from docstore.params import QueryParams
from docstore.record import ROW_COLUMNS, DocumentRecord, index_columns
from docstore.where import Predicate, validate_identifier, where_clause, where_params

logger = logging.getLogger(__name__)


class Executor(Protocol):
    """Anything that runs a statement with positional parameters."""

    def execute(self, sql: str, parameters: Sequence[Any] = ..., /) -> sqlite3.Cursor: ...


class Transaction:
    """An explicit transaction on an autocommit-mode connection.

    ``rollback()`` after ``commit()`` (or a second ``rollback()``) is a no-op,
    so callers can always roll back on the way out.
    """

    def __init__(self, conn: sqlite3.Connection, *, write: bool) -> None:
        self._conn = conn
        self.write = write
        self._done = False
        conn.execute("BEGIN IMMEDIATE" if write else "BEGIN DEFERRED")
        logger.debug("begin %s transaction", "write" if write else "read")

    @property
    def done(self) -> bool:
        return self._done

    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, parameters)

    def commit(self) -> None:
        if self._done:
            return
        self._conn.execute("COMMIT")
        self._done = True
        logger.debug("commit transaction")

    def rollback(self) -> None:
        if self._done:
            return
        self._done = True
        if not self._conn.in_transaction:
            # already rolled back by the engine
            return
        self._conn.execute("ROLLBACK")
        logger.debug("rollback transaction")

    def __enter__(self) -> Transaction:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        try:
            self.rollback()
        except sqlite3.Error as e:
            logger.warning("rollback failed: %s", e)


def begin(conn: sqlite3.Connection, *, write: bool) -> Transaction:
    return Transaction(conn, write=write)


class TableEngine:
    """Reads and writes documents in one table named after the store."""

    def __init__(self, name: str) -> None:
        self.name = validate_identifier(name, "store name")
        self._columns = ", ".join(ROW_COLUMNS)
        self._select_sql = f'SELECT {self._columns} FROM "{self.name}"'
        self._put_sql = self._build_put_sql()

    def _build_put_sql(self) -> str:
        updated = ["rev", "data", *index_columns()]
        placeholders = ", ".join("?" for _ in ROW_COLUMNS)
        return (
            f'INSERT INTO "{self.name}" ({self._columns}) VALUES ({placeholders}) '
            f"ON CONFLICT(pk) DO UPDATE SET ({', '.join(updated)}) = "
            f"({', '.join(f'excluded.{c}' for c in updated)}) "
            "WHERE rev < excluded.rev"
        )

    # --- Schema ---

    def schema_statements(self) -> list[str]:
        cols = ["pk TEXT NOT NULL PRIMARY KEY", "rev INTEGER NOT NULL", "data TEXT NOT NULL"]
        indexes: list[str] = []
        for i in range(MAX_INDEX):
            cols.append(f"si{i} TEXT")
            cols.append(f"ni{i} INTEGER")
        for col in index_columns():
            indexes.append(
                f'CREATE INDEX IF NOT EXISTS "idx_{self.name}_{col}" '
                f'ON "{self.name}" ({col}) WHERE {col} NOTNULL'
            )
        table = f'CREATE TABLE IF NOT EXISTS "{self.name}" ({", ".join(cols)})'
        return [table, *indexes]

    def create_schema(self, executor: Executor) -> None:
        for sql in self.schema_statements():
            executor.execute(sql)
        logger.debug("schema ready for table %s", self.name)

    def vacuum(self, executor: Executor) -> None:
        executor.execute("VACUUM")

    # --- Reads ---

    def get(
        self, executor: Executor, params_list: Sequence[QueryParams]
    ) -> list[list[DocumentRecord]]:
        if not params_list:
            raise EmptyBatchError()
        result: list[list[DocumentRecord]] = []
        for params in params_list:
            if params.is_count:
                result.append([self._get_count(executor, params.predicate)])
            else:
                result.append(self._get_items(executor, params))
        return result

    def _get_items(self, executor: Executor, params: QueryParams) -> list[DocumentRecord]:
        sql = f"{self._select_sql} {params.select_suffix()}".rstrip()
        rows = executor.execute(sql, params.parameters()).fetchall()
        return [DocumentRecord.from_row(row) for row in rows]

    def _get_count(self, executor: Executor, predicate: Predicate | None) -> DocumentRecord:
        doc = DocumentRecord(pk="", rev=0)
        doc.int_index[0] = self.count(executor, predicate)
        return doc

    def count(self, executor: Executor, predicate: Predicate | None = None) -> int:
        sql = f'SELECT COUNT(*) FROM "{self.name}" {where_clause(predicate)}'.rstrip()
        row = executor.execute(sql, where_params(predicate)).fetchone()
        return int(row[0])

    def get_by_pk(self, executor: Executor, pk: str) -> DocumentRecord | None:
        row = executor.execute(f"{self._select_sql} WHERE pk = ?", (pk,)).fetchone()
        if row is None:
            return None
        return DocumentRecord.from_row(row)

    # --- Writes ---

    def put(self, executor: Executor, records: Sequence[DocumentRecord]) -> None:
        """Upsert each record, stopping at the first rejected or failed write."""
        if not records:
            raise EmptyBatchError()
        for record in records:
            cursor = executor.execute(self._put_sql, record.to_params())
            if cursor.rowcount != 0:
                continue
            # Either the revision gate rejected the update or the row changed
            # underneath us; report whatever is stored now.
            current = self.get_by_pk(executor, record.pk)
            if current is None:
                raise GetConflictedError(record.pk)
            raise DocumentConflictError(current)

    def delete(self, executor: Executor, predicate: Predicate | None = None) -> int:
        sql = f'DELETE FROM "{self.name}" {where_clause(predicate)}'.rstrip()
        cursor = executor.execute(sql, where_params(predicate))
        return cursor.rowcount
