"""SQLite-backed record store with lifecycle hooks."""

import re
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from typing import Any, TypeVar

import structlog

from searchable.store.events import Handler, LifecycleHooks, RecordEvent
from searchable.store.records import Record

logger = structlog.get_logger()

R = TypeVar("R", bound=Record)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Keeps IN (...) lists under SQLite's bound-parameter limit
_LOOKUP_CHUNK = 500


def _quote(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


class SqliteRecordStore:
    """Relational store keeping one table per registered record class.

    Thread-safe via a reentrant lock; the connection uses
    check_same_thread=False so writes may come from any thread. Lifecycle
    hooks fire after the write has been committed, so a failing hook
    leaves the row in place.
    """

    def __init__(self, path: str = ":memory:") -> None:
        """Open the database.

        Args:
            path: SQLite database path, ``:memory:`` for a private database.
        """
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._hooks = LifecycleHooks()
        self._models: set[type[Record]] = set()

    def register(self, model: type[Record]) -> None:
        """Create the table backing a record class if it does not exist.

        Args:
            model: Record class to persist.
        """
        columns = ", ".join(_quote(name) for name in model.column_names())
        table = _quote(model.document_type())
        ddl = f"CREATE TABLE IF NOT EXISTS {table} (id INTEGER PRIMARY KEY AUTOINCREMENT"
        ddl += f", {columns})" if columns else ")"
        with self._lock:
            self._conn.execute(ddl)
            self._conn.commit()
            self._models.add(model)
        logger.info("store_table_registered", table=model.document_type())

    def subscribe(
        self, model: type[Record], event: RecordEvent, handler: Handler
    ) -> None:
        """Register a lifecycle handler for a record class."""
        self._hooks.subscribe(model, event, handler)

    def _require(self, model: type[Record]) -> str:
        if model not in self._models:
            raise ValueError(f"{model.__name__} is not registered with the store")
        return _quote(model.document_type())

    def create(self, record: R) -> R:
        """Insert a record, assign its identifier and fire ``after_create``.

        Args:
            record: Unsaved record.

        Returns:
            The same record with ``id`` set.
        """
        if record.is_persisted:
            raise ValueError(f"{type(record).__name__} {record.id} already exists")
        table = self._require(type(record))
        names = type(record).column_names()
        values = [getattr(record, name) for name in names]

        with self._lock:
            if names:
                sql = (
                    f"INSERT INTO {table} ({', '.join(_quote(n) for n in names)}) "
                    f"VALUES ({', '.join('?' for _ in names)})"
                )
            else:
                sql = f"INSERT INTO {table} DEFAULT VALUES"
            cursor = self._conn.execute(sql, values)
            self._conn.commit()
            record.id = cursor.lastrowid

        self._hooks.fire(RecordEvent.AFTER_CREATE, record)
        return record

    def update(self, record: R) -> R:
        """Persist changed attributes and fire ``after_update``.

        Args:
            record: Previously created record.

        Returns:
            The same record.

        Raises:
            ValueError: If the record is unsaved or its row no longer exists.
        """
        if not record.is_persisted:
            raise ValueError(f"Cannot update unsaved {type(record).__name__}")
        table = self._require(type(record))
        names = type(record).column_names()

        if names:
            assignments = ", ".join(f"{_quote(n)} = ?" for n in names)
            values = [getattr(record, name) for name in names]
        else:
            assignments = "id = id"
            values = []
        with self._lock:
            cursor = self._conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*values, record.id),
            )
            self._conn.commit()
        if cursor.rowcount == 0:
            raise ValueError(f"{type(record).__name__} {record.id} does not exist")

        self._hooks.fire(RecordEvent.AFTER_UPDATE, record)
        return record

    def destroy(self, record: Record) -> None:
        """Delete a record and fire ``after_destroy``.

        Args:
            record: Previously created record.
        """
        if not record.is_persisted:
            raise ValueError(f"Cannot destroy unsaved {type(record).__name__}")
        table = self._require(type(record))
        with self._lock:
            self._conn.execute(f"DELETE FROM {table} WHERE id = ?", (record.id,))
            self._conn.commit()

        self._hooks.fire(RecordEvent.AFTER_DESTROY, record)

    def get(self, model: type[R], record_id: Any) -> R | None:
        """Fetch a single record by identifier."""
        table = self._require(model)
        with self._lock:
            row = self._conn.execute(
                f"SELECT * FROM {table} WHERE id = ?", (record_id,)
            ).fetchone()
        return model.model_validate(dict(row)) if row else None

    def find_many(self, model: type[R], ids: Iterable[Any]) -> list[R]:
        """Fetch the records matching ``ids`` in identifier order.

        Args:
            model: Record class to load.
            ids: Identifiers to look up; unknown ids are ignored.

        Returns:
            Records that exist.
        """
        table = self._require(model)
        # Engine hits carry identifiers as strings
        wanted = [int(i) for i in ids if str(i).lstrip("-").isdigit()]
        rows: list[sqlite3.Row] = []
        with self._lock:
            for start in range(0, len(wanted), _LOOKUP_CHUNK):
                chunk = wanted[start : start + _LOOKUP_CHUNK]
                placeholders = ", ".join("?" for _ in chunk)
                rows.extend(
                    self._conn.execute(
                        f"SELECT * FROM {table} WHERE id IN ({placeholders}) ORDER BY id",
                        chunk,
                    ).fetchall()
                )
        return [model.model_validate(dict(row)) for row in rows]

    def iterate(self, model: type[R], batch_size: int = 500) -> Iterator[R]:
        """Yield every record of a class in identifier order, in batches.

        Args:
            model: Record class to load.
            batch_size: Rows fetched per query.

        Yields:
            Records ordered by identifier.
        """
        table = self._require(model)
        last_id = 0
        while True:
            with self._lock:
                rows = self._conn.execute(
                    f"SELECT * FROM {table} WHERE id > ? ORDER BY id LIMIT ?",
                    (last_id, batch_size),
                ).fetchall()
            if not rows:
                return
            for row in rows:
                yield model.model_validate(dict(row))
            last_id = rows[-1]["id"]

    def count(self, model: type[Record]) -> int:
        """Number of stored records of a class."""
        table = self._require(model)
        with self._lock:
            return self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()
            logger.info("store_closed")
