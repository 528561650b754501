"""
In-memory stand-ins for psycopg2 pools, connections and cursors.

A FakeConnection is scripted with one outcome per execute() call: a
Result (rows and rowcount) or an exception to raise.
"""

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Optional

import psycopg2


@dataclass
class Result:
    rows: tuple = ()
    rowcount: Optional[int] = None


class FakePgError(psycopg2.IntegrityError):
    """A server error carrying an SQLSTATE and constraint name."""

    def __init__(self, pgcode: str, constraint: Optional[str] = None):
        super().__init__(f"fake error {pgcode} on {constraint}")
        self._pgcode = pgcode
        self._diag = SimpleNamespace(constraint_name=constraint)

    @property
    def pgcode(self):
        return self._pgcode

    @property
    def diag(self):
        return self._diag


def unique_violation(constraint: str) -> FakePgError:
    return FakePgError("23505", constraint)


def check_violation(constraint: str) -> FakePgError:
    return FakePgError("23514", constraint)


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        text = " ".join(sql.split()) if isinstance(sql, str) else sql
        self.conn.executed.append((text, params))
        outcome = self.conn.outcomes.pop(0) if self.conn.outcomes else Result()
        if isinstance(outcome, BaseException):
            raise outcome
        self._rows = list(outcome.rows)
        self.rowcount = len(outcome.rows) if outcome.rowcount is None else outcome.rowcount

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows


class FakeConnection:
    def __init__(self, outcomes=(), fail_rollback: bool = False):
        self.outcomes = list(outcomes)
        self.fail_rollback = fail_rollback
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0
        self.autocommit = False

    @property
    def statements(self) -> list:
        return [sql for sql, _ in self.executed]

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1
        if self.fail_rollback:
            self.closed = 2
            raise psycopg2.InterfaceError("connection already closed")

    def close(self):
        self.closed = 1


class FakePool:
    """Hands out scripted connections in order, then blank ones."""

    def __init__(self):
        self.pending = []
        self.handed_out = []
        self.returned = []
        self.closed = False

    def script(self, *outcomes, **kwargs) -> FakeConnection:
        conn = FakeConnection(outcomes, **kwargs)
        self.pending.append(conn)
        return conn

    def getconn(self):
        conn = self.pending.pop(0) if self.pending else FakeConnection()
        self.handed_out.append(conn)
        return conn

    def putconn(self, conn, close=False):
        self.returned.append((conn, close))

    def closeall(self):
        self.closed = True

    @property
    def all_returned(self) -> bool:
        returned = [conn for conn, _ in self.returned]
        return all(conn in returned for conn in self.handed_out)
