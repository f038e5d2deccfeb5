"""SQL dialect used by the repositories.

The repositories ask the dialect for parameter placeholders and the
table-existence query, so SQL text in ``scheduling/`` never spells out
driver-specific syntax.

Examples:
    >>> SQLiteDialect().placeholders(3)
    '?, ?, ?'

Tags:
    dialect, sql, sqlite, uptimer-core
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """Backend-specific SQL fragments."""

    @property
    def name(self) -> str: ...

    def placeholders(self, count: int) -> str:
        """``count`` comma-separated bind parameters."""
        ...

    def table_exists_query(self) -> str:
        """One-parameter query that returns a row iff the table exists."""
        ...


class SQLiteDialect:
    """``sqlite3`` paramstyle is qmark."""

    name = "sqlite"

    def placeholders(self, count: int) -> str:
        return ", ".join(["?"] * count)

    def table_exists_query(self) -> str:
        return "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?"


__all__ = ["Dialect", "SQLiteDialect"]
