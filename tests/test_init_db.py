import psycopg2
import pytest

from db import init_db
from db.errors import SchemaError, UnreachableStoreError
from tests.fakes import FakeConnection, FakePgError


@pytest.fixture()
def server_conn(monkeypatch):
    """Capture the maintenance connection made by create_database()."""
    holder = {}

    def connect(dsn, **kwargs):
        holder["dsn"] = dsn
        return holder["conn"]

    monkeypatch.setattr(init_db.psycopg2, "connect", connect)
    return holder


class TestCreateDatabase:

    def test_creates_database(self, server_conn):
        conn = server_conn["conn"] = FakeConnection()
        init_db.create_database("postgresql://localhost/postgres", "huibitica")
        assert conn.autocommit is True
        assert len(conn.executed) == 1
        assert conn.closed

    def test_already_exists_is_ignored(self, server_conn):
        conn = server_conn["conn"] = FakeConnection([FakePgError("42P04")])
        init_db.create_database("postgresql://localhost/postgres", "huibitica")
        assert conn.closed

    def test_other_failure_is_fatal(self, server_conn):
        server_conn["conn"] = FakeConnection([FakePgError("42501")])
        with pytest.raises(SchemaError):
            init_db.create_database("postgresql://localhost/postgres", "huibitica")

    def test_unreachable_server(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise psycopg2.OperationalError("could not connect to server")

        monkeypatch.setattr(init_db.psycopg2, "connect", refuse)
        with pytest.raises(UnreachableStoreError):
            init_db.create_database("postgresql://localhost/postgres", "huibitica")


class TestCreateTables:

    def test_dependency_order(self):
        assert [name for name, _ in init_db.TABLES] == [
            "users", "passwords", "habits", "dailies", "tasks",
        ]

    def test_child_tables_cascade_and_bound_difficulty(self):
        ddl = dict(init_db.TABLES)
        for table in ("passwords", "habits", "dailies", "tasks"):
            assert "REFERENCES users(user_id) ON DELETE CASCADE" in ddl[table]
        for table in ("habits", "dailies", "tasks"):
            assert "CHECK (difficulty BETWEEN 1 AND 5)" in ddl[table]

    def test_each_table_committed(self, fake_pool):
        init_db.create_tables()
        conn = fake_pool.handed_out[0]
        assert len(conn.executed) == 5
        assert conn.commits == 5
        assert all("IF NOT EXISTS" in sql for sql in conn.statements)

    def test_concurrent_creation_is_skipped(self, fake_pool):
        conn = fake_pool.script(FakePgError("42P07"))
        init_db.create_tables()
        assert len(conn.executed) == 5
        assert conn.commits == 4

    def test_failure_is_fatal(self, fake_pool):
        fake_pool.script(FakePgError("42501"))
        with pytest.raises(SchemaError, match="users"):
            init_db.create_tables()
        assert fake_pool.all_returned
