"""SQL schema loading utilities.

Applies the ``core/schema/*.sql`` files to a connection, in filename order.
Every statement is ``CREATE ... IF NOT EXISTS`` so applying twice is safe.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from uptimer.core.dialect import Dialect, SQLiteDialect
from uptimer.core.logging import get_logger
from uptimer.core.protocols import Connection

logger = get_logger(__name__)

# Default schema directory
SCHEMA_DIR = Path(__file__).resolve().parent / "schema"


def _split_sql(sql: str) -> list[str]:
    """Split a SQL script into individual statements.

    Skips blank lines and ``--`` comment lines; a statement ends at a line
    ending with ``;``.
    """
    statements = []
    current = []
    for line in sql.splitlines():
        stripped = line.strip()
        if stripped.startswith("--") or not stripped:
            continue
        current.append(line)
        if stripped.endswith(";"):
            stmt = "\n".join(current).strip()
            if stmt and stmt != ";":
                statements.append(stmt)
            current = []
    if current:
        stmt = "\n".join(current).strip()
        if stmt:
            statements.append(stmt)
    return statements


def get_schema_files(schema_dir: Path | str | None = None) -> list[Path]:
    """Get sorted list of SQL schema files (``01_``, ``02_``, ...)."""
    directory = Path(schema_dir) if schema_dir else SCHEMA_DIR
    if not directory.exists():
        return []
    return sorted(directory.glob("*.sql"))


def apply_all_schemas(
    conn: Connection,
    schema_dir: Path | str | None = None,
    *,
    skip_files: Sequence[str] | None = None,
) -> list[str]:
    """Apply all SQL schema files to a database connection.

    Returns:
        List of applied schema filenames.
    """
    skip_set = set(skip_files or [])
    applied = []

    for sql_file in get_schema_files(schema_dir):
        if sql_file.name in skip_set:
            logger.debug("schema_skipped", file=sql_file.name)
            continue

        sql = sql_file.read_text(encoding="utf-8")
        for statement in _split_sql(sql):
            conn.execute(statement)
        applied.append(sql_file.name)
        logger.debug("schema_applied", file=sql_file.name)

    conn.commit()
    logger.info("schema_all_applied", count=len(applied))
    return applied


def get_table_list(conn: Connection, dialect: Dialect | None = None) -> list[str]:
    """Get the table names in the database, sorted alphabetically."""
    dialect = dialect or SQLiteDialect()
    if dialect.name != "sqlite":
        raise ValueError(f"Table listing not supported for dialect {dialect.name!r}")
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' "
        "AND name NOT LIKE 'sqlite_%' ORDER BY name"
    )
    return [row[0] for row in cursor.fetchall()]


def table_exists(conn: Connection, table: str, dialect: Dialect | None = None) -> bool:
    """Return True if ``table`` exists."""
    dialect = dialect or SQLiteDialect()
    conn.execute(dialect.table_exists_query(), (table,))
    return conn.fetchone() is not None


__all__ = [
    "SCHEMA_DIR",
    "apply_all_schemas",
    "get_schema_files",
    "get_table_list",
    "table_exists",
]
