"""Connection factory - create database connections from URL strings.

This is the **single entry point** for creating database connections in
uptimer.  The CLI and ``initialize_scheduler`` callers use
``create_connection()`` rather than constructing adapters directly.

Supported URL schemes
---------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                SQLite file
``(file path)``     ``./data/my.db`` or ``/tmp/uptimer.db``      SQLite file
==================  ==========================================  ============

Any other ``scheme://`` URL is rejected with
:class:`~uptimer.core.errors.ConfigError`.

Usage
-----
::

    from uptimer.core.connection import create_connection

    conn, info = create_connection("sqlite:///uptimer.db", init_schema=True)
    print(info)
    # ConnectionInfo(backend='sqlite', persistent=True, path='/abs/uptimer.db')
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from uptimer.core.errors import ConfigError, RepositoryUnavailable
from uptimer.core.logging import get_logger
from uptimer.core.sqlite_conn import SqliteConnection

logger = get_logger(__name__)


# ── ConnectionInfo ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier: ``"sqlite"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={self.url!r}")
        return f"ConnectionInfo({', '.join(parts)})"


# ── Backends ─────────────────────────────────────────────────────────────


def _create_sqlite_memory() -> tuple[SqliteConnection, ConnectionInfo]:
    """Create an in-memory SQLite connection."""
    conn = SqliteConnection(":memory:")
    info = ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")
    return conn, info


def _create_sqlite_file(path_str: str) -> tuple[SqliteConnection, ConnectionInfo]:
    """Create a file-based SQLite connection."""
    path = Path(path_str).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RepositoryUnavailable(
            f"Cannot create database directory: {e}", cause=e
        ).with_context(path=str(path.parent)) from e
    resolved = str(path.resolve())

    conn = SqliteConnection(resolved)
    info = ConnectionInfo(
        backend="sqlite",
        persistent=True,
        url=path_str,
        resolved_path=resolved,
    )
    return conn, info


# ── URL parsing ──────────────────────────────────────────────────────────


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into (scheme, target).

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"file"`` or the
    unrecognised scheme itself.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if "://" in db:
        return db.split("://", 1)[0], db

    # Bare file path - treat as SQLite file
    return "file", db


# ── Main factory ─────────────────────────────────────────────────────────


def create_connection(
    db: str | None = None,
    *,
    init_schema: bool = False,
) -> tuple[SqliteConnection, ConnectionInfo]:
    """Create a database connection from a URL, path, or keyword.

    Parameters
    ----------
    db:
        ``None`` / ``"memory"`` for in-memory SQLite, ``"sqlite:///path"``
        or a plain file path for file-based SQLite.
    init_schema:
        If ``True``, apply the uptimer schema (idempotent
        ``CREATE TABLE IF NOT EXISTS``).

    Raises
    ------
    ConfigError
        If the URL names a backend uptimer does not support.
    RepositoryUnavailable
        If the database cannot be opened.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        conn, info = _create_sqlite_memory()
    elif scheme in ("sqlite", "file"):
        conn, info = _create_sqlite_file(target)
    else:
        raise ConfigError(
            f"Unsupported database URL scheme {scheme!r}; use sqlite:///path or memory"
        ).with_context(url=db)

    if init_schema:
        from uptimer.core.schema_loader import apply_all_schemas

        apply_all_schemas(conn)

    logger.debug("connection_created", backend=info.backend, persistent=info.persistent)
    return conn, info


__all__ = ["ConnectionInfo", "create_connection"]
