"""
Storage protocol for uptimer.

Repositories, the schema loader and the connection factory accept any
object with the ``Connection`` shape; ``SqliteConnection`` is the one
shipped adapter.  Storage calls are synchronous.  The only awaits in the
dispatch loop are HTTP requests and lock acquisition.

Guardrails:
    ❌ DON'T: Import sqlite3 in repositories
    ✅ DO: Take a ``Connection`` and build SQL with a ``Dialect``

Tags:
    protocol, connection, database, uptimer-core
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    Synchronous DB-API-like connection.

    ``execute`` returns the cursor it ran on, so writers can read
    ``rowcount`` (claims) and ``lastrowid`` (inserts) straight off it.

    Examples:
        >>> cursor = conn.execute("DELETE FROM jobs WHERE id = ?", (7,))
        >>> conn.commit()
        >>> cursor.rowcount
        1
    """

    def execute(self, sql: str, params: tuple = ()) -> Any: ...

    def executemany(self, sql: str, params: list[tuple]) -> Any: ...

    def fetchone(self) -> Any: ...

    def fetchall(self) -> list: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


__all__ = ["Connection"]
