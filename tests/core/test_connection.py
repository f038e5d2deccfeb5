"""Tests for the connection factory and SQLite adapter."""

import pytest

from uptimer.core.connection import ConnectionInfo, create_connection
from uptimer.core.errors import ConfigError, RepositoryUnavailable
from uptimer.core.protocols import Connection
from uptimer.core.schema_loader import get_table_list, table_exists
from uptimer.core.sqlite_conn import SqliteConnection


class TestCreateConnection:
    @pytest.mark.parametrize("db", [None, "", "memory", ":memory:", "sqlite://", "sqlite:///:memory:"])
    def test_memory(self, db):
        conn, info = create_connection(db)
        try:
            assert info.backend == "sqlite"
            assert info.persistent is False
            assert info.resolved_path is None
        finally:
            conn.close()

    def test_sqlite_url(self, tmp_path):
        path = tmp_path / "nested" / "uptimer.db"
        conn, info = create_connection(f"sqlite:///{path}", init_schema=True)
        try:
            assert info.persistent is True
            assert info.resolved_path == str(path.resolve())
            assert path.exists()
            assert get_table_list(conn) == ["jobs", "schedules"]
        finally:
            conn.close()

    def test_bare_path(self, tmp_path):
        path = tmp_path / "plain.db"
        conn, info = create_connection(str(path))
        try:
            assert info.resolved_path == str(path.resolve())
        finally:
            conn.close()

    def test_unsupported_scheme(self):
        with pytest.raises(ConfigError) as exc_info:
            create_connection("postgresql://localhost/uptimer")
        assert exc_info.value.context.url == "postgresql://localhost/uptimer"

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(RepositoryUnavailable):
            create_connection(str(blocker / "sub" / "uptimer.db"))

    def test_repr(self):
        info = ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")
        assert repr(info) == "ConnectionInfo(backend='sqlite', persistent=False, url=':memory:')"


class TestSqliteConnection:
    def test_satisfies_protocol(self):
        conn = SqliteConnection()
        try:
            assert isinstance(conn, Connection)
        finally:
            conn.close()

    def test_execute_and_fetch(self):
        conn = SqliteConnection()
        try:
            conn.execute("CREATE TABLE t (id INTEGER)")
            conn.executemany("INSERT INTO t VALUES (?)", [(1,), (2,)])
            conn.commit()
            conn.execute("SELECT id FROM t ORDER BY id")
            assert [row[0] for row in conn.fetchall()] == [1, 2]
        finally:
            conn.close()

    def test_driver_errors_become_repository_unavailable(self):
        conn = SqliteConnection()
        try:
            with pytest.raises(RepositoryUnavailable):
                conn.execute("SELECT * FROM no_such_table")
        finally:
            conn.close()


class TestSchemaLoader:
    def test_schema_is_idempotent(self, conn):
        from uptimer.core.schema_loader import apply_all_schemas

        assert apply_all_schemas(conn) == ["01_monitoring.sql"]
        assert table_exists(conn, "schedules") is True
        assert table_exists(conn, "jobs") is True
        assert table_exists(conn, "nope") is False

    def test_skip_files(self):
        from uptimer.core.schema_loader import apply_all_schemas

        conn = SqliteConnection()
        try:
            assert apply_all_schemas(conn, skip_files=["01_monitoring.sql"]) == []
            assert get_table_list(conn) == []
        finally:
            conn.close()
