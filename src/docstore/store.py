"""Store handle: owns the database file, its connection and its table."""

from __future__ import annotations

import enum
import logging
import os
import sqlite3
import threading
from typing import Any, Sequence

from docstore.config import StoreConfig
from docstore.errors import EmptyBatchError, StorageBackendError
from docstore.params import QueryParams
from docstore.record import DocumentRecord
from docstore.table import TableEngine, begin
from docstore.where import Predicate, validate_identifier

logger = logging.getLogger(__name__)


class StoreState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class Store:
    """A named document store backed by ``<data_dir>/<name>.db``.

    The store holds exactly one connection between :meth:`open` and
    :meth:`close`; calls from several threads are serialized on it.
    """

    def __init__(
        self,
        name: str,
        data_dir: str | None = None,
        *,
        config: StoreConfig | None = None,
    ) -> None:
        self.config = config or StoreConfig()
        self.name = name
        self.data_dir = data_dir if data_dir is not None else self.config.data_dir
        self.table = TableEngine(name)
        self.state = StoreState.UNOPENED
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return os.path.join(self.data_dir, f"{self.name}.db")

    # --- Lifecycle ---

    def open(self) -> None:
        with self._lock:
            if self.state is StoreState.OPEN:
                return
            os.makedirs(self.data_dir, mode=self.config.dir_mode, exist_ok=True)
            conn = sqlite3.connect(
                self.path,
                timeout=self.config.busy_timeout_ms / 1000,
                isolation_level=None,
                check_same_thread=False,
            )
            try:
                if self.config.journal_mode:
                    mode = validate_identifier(self.config.journal_mode, "journal mode")
                    conn.execute(f"PRAGMA journal_mode={mode}")
                self.table.create_schema(conn)
                try:
                    self.table.get(conn, [QueryParams().limit(1)])
                except sqlite3.Error as e:
                    raise StorageBackendError("open", f"smoke test failed: {e}") from e
            except BaseException:
                conn.close()
                raise
            self._conn = conn
            self.state = StoreState.OPEN
            logger.debug("opened store %s at %s", self.name, self.path)

    def close(self) -> None:
        """Compact the file and release the connection; failures are logged."""
        with self._lock:
            conn = self._conn
            if conn is None:
                self.state = StoreState.CLOSED
                return
            if self.config.vacuum_on_close:
                try:
                    self.table.vacuum(conn)
                except sqlite3.Error as e:
                    logger.warning("vacuum failed for store %s: %s", self.name, e)
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.warning("db close failed for store %s: %s", self.name, e)
            self._conn = None
            self.state = StoreState.CLOSED

    def __enter__(self) -> Store:
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _connection(self, operation: str) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageBackendError(operation, f"store '{self.name}' is {self.state.value}")
        return self._conn

    # --- Operations ---

    def get(self, params_list: Sequence[QueryParams]) -> list[list[DocumentRecord]]:
        """Run each read; several reads share one snapshot."""
        if not params_list:
            raise EmptyBatchError()
        with self._lock:
            conn = self._connection("get")
            if len(params_list) == 1:
                return self.table.get(conn, params_list)
            # reads never need durability; the transaction is always rolled back
            with begin(conn, write=False) as tx:
                return self.table.get(tx, params_list)

    def put(self, records: Sequence[DocumentRecord]) -> None:
        """Write every record or, for a batch, none of them."""
        if not records:
            raise EmptyBatchError()
        with self._lock:
            conn = self._connection("put")
            if len(records) == 1:
                self.table.put(conn, records)
                return
            with begin(conn, write=True) as tx:
                self.table.put(tx, records)
                tx.commit()

    def delete(self, predicate: Predicate | None = None) -> int:
        """Delete matching rows (all rows for no predicate); return the count."""
        with self._lock:
            return self.table.delete(self._connection("delete"), predicate)

    def count(self, predicate: Predicate | None = None) -> int:
        with self._lock:
            return self.table.count(self._connection("count"), predicate)

    def compact(self) -> None:
        with self._lock:
            self.table.vacuum(self._connection("compact"))
