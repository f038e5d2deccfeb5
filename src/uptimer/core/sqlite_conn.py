"""SQLite connection adapter.

Wraps a raw :class:`sqlite3.Connection` to satisfy the
:class:`~uptimer.core.protocols.Connection` protocol.

A bare ``sqlite3.Connection`` exposes ``execute()`` (returns a cursor)
but not ``fetchone()`` / ``fetchall()`` at the connection level.  This
adapter bridges the gap, and turns every driver error into
:class:`~uptimer.core.errors.RepositoryUnavailable` so callers deal in one
storage failure type.

Usage::

    from uptimer.core.sqlite_conn import SqliteConnection

    conn = SqliteConnection(":memory:")
    conn.execute("CREATE TABLE t (id INTEGER)")
    conn.execute("INSERT INTO t VALUES (?)", (1,))
    conn.execute("SELECT * FROM t")
    row = conn.fetchone()
    conn.commit()
    conn.close()
"""

from __future__ import annotations

import sqlite3
from typing import Any

from uptimer.core.errors import RepositoryUnavailable


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Maintains a single cursor so that ``execute`` / ``fetchone`` /
    ``fetchall`` operate on the same result set.  The connection is opened
    with ``check_same_thread=False`` because the scheduler thread takes it
    over from the thread that created it.
    """

    def __init__(self, path: str = ":memory:", *, row_factory: Any = sqlite3.Row) -> None:
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
        except sqlite3.Error as e:
            raise RepositoryUnavailable(
                f"Cannot open SQLite database: {e}", cause=e
            ).with_context(path=path) from e
        self._conn.row_factory = row_factory
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._cursor = self._conn.cursor()
        self.path = path

    # -- Connection protocol -----------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        try:
            self._cursor.execute(sql, params)
        except sqlite3.Error as e:
            raise RepositoryUnavailable(f"Query failed: {e}", cause=e) from e
        return self._cursor

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        try:
            self._cursor.executemany(sql, params)
        except sqlite3.Error as e:
            raise RepositoryUnavailable(f"Query failed: {e}", cause=e) from e
        return self._cursor

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        return self._cursor.fetchall()

    def commit(self) -> None:
        try:
            self._conn.commit()
        except sqlite3.Error as e:
            raise RepositoryUnavailable(f"Commit failed: {e}", cause=e) from e

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    def __repr__(self) -> str:
        return f"SqliteConnection({self.path!r})"
