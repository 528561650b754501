"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's ThreadedConnectionPool so request handlers running on
different threads can share it; a semaphore bounds how long a caller
waits for a free connection.

Repositories borrow through the `acquire()` and `begin_transaction()`
context managers, which return the connection to the pool on every exit
path.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2 import pool

from config import (
    DATABASE_URL,
    DB_CONNECT_TIMEOUT,
    DB_POOL_MAX,
    DB_POOL_MIN,
    DB_POOL_TIMEOUT,
    DB_STATEMENT_TIMEOUT_MS,
)
from db.errors import StoreConnectionError, UnreachableStoreError
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.ThreadedConnectionPool | None = None
_slots: threading.BoundedSemaphore | None = None


def init_pool(
    dsn: Optional[str] = None,
    min_conn: Optional[int] = None,
    max_conn: Optional[int] = None,
) -> None:
    """
    Initialize the database connection pool and ping the database.

    Args:
        dsn: Connection string of the target database (default: DATABASE_URL).
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.

    Raises:
        UnreachableStoreError: If the database is unreachable or the ping fails.
    """
    global _pool, _slots
    if _pool is not None:
        return
    min_conn = DB_POOL_MIN if min_conn is None else min_conn
    max_conn = DB_POOL_MAX if max_conn is None else max_conn
    try:
        _pool = pool.ThreadedConnectionPool(
            min_conn,
            max_conn,
            dsn or DATABASE_URL,
            connect_timeout=DB_CONNECT_TIMEOUT,
            options=f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}",
        )
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise UnreachableStoreError("unable to connect to database", cause=e) from e
    _slots = threading.BoundedSemaphore(max_conn)

    try:
        ping()
    except StoreConnectionError as e:
        close_pool()
        logger.error(f"Database ping failed: {e.cause or e}")
        raise UnreachableStoreError("unable to ping database", cause=e.cause) from e
    logger.info(f"Database connection pool initialized ({min_conn}..{max_conn} connections).")


def get_connection(timeout: Optional[float] = None):
    """
    Get a connection from the pool, waiting at most ``timeout`` seconds.

    Every successful call must be matched by `release_connection()`;
    prefer the `acquire()` context manager.

    Returns:
        A psycopg2 connection object.

    Raises:
        RuntimeError: If the pool has not been initialized.
        StoreConnectionError: If no connection became free in time or a new
            connection could not be opened.
    """
    if _pool is None or _slots is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    wait = DB_POOL_TIMEOUT if timeout is None else timeout
    if not _slots.acquire(timeout=wait):
        logger.warning(f"No pooled connection became free within {wait}s.")
        raise StoreConnectionError(f"no database connection available within {wait}s")
    try:
        return _pool.getconn()
    except psycopg2.Error as e:
        _slots.release()
        logger.error(f"Failed to open database connection: {e}")
        raise StoreConnectionError("unable to obtain database connection", cause=e) from e


def release_connection(conn, discard: bool = False) -> None:
    """
    Return a connection back to the pool.

    Args:
        conn: The psycopg2 connection to release.
        discard: Close the connection instead of keeping it for reuse.
            Connections that are already closed are always discarded.
    """
    try:
        if _pool is not None:
            _pool.putconn(conn, close=discard or bool(conn.closed))
        elif not conn.closed:
            conn.close()
    finally:
        if _slots is not None:
            _slots.release()


def _rollback_quietly(conn) -> bool:
    """Roll back ``conn``; return False if the connection is unusable."""
    if conn.closed:
        return False
    try:
        conn.rollback()
        return True
    except psycopg2.Error as e:
        logger.warning(f"Rollback failed, discarding connection: {e}")
        return False


@contextmanager
def acquire(timeout: Optional[float] = None) -> Iterator:
    """
    Borrow one connection for one logical operation.

    On any exception (including KeyboardInterrupt and task cancellation)
    the connection is rolled back before it goes back to the pool; a
    connection that cannot be rolled back is closed instead.

    Usage:
        with acquire() as conn:
            with conn.cursor() as cur:
                ...
            conn.commit()
    """
    conn = get_connection(timeout)
    usable = True
    try:
        yield conn
    except BaseException:
        usable = _rollback_quietly(conn)
        raise
    finally:
        release_connection(conn, discard=not usable)


class Transaction:
    """
    A connection whose statements commit or roll back as one unit.

    Attributes:
        conn: The borrowed psycopg2 connection.
        finished: True once commit() or rollback() has been called.
    """

    def __init__(self, conn):
        self.conn = conn
        self.finished = False

    def cursor(self):
        return self.conn.cursor()

    def commit(self) -> None:
        self.conn.commit()
        self.finished = True

    def rollback(self) -> None:
        self.conn.rollback()
        self.finished = True


@contextmanager
def begin_transaction(timeout: Optional[float] = None) -> Iterator[Transaction]:
    """
    Open a transaction context.

    If the block exits without calling commit() or rollback(), the
    transaction is rolled back.
    """
    with acquire(timeout) as conn:
        tx = Transaction(conn)
        try:
            yield tx
        finally:
            if not tx.finished:
                _rollback_quietly(conn)


def ping() -> None:
    """
    Run a trivial query against the database.

    Raises:
        StoreConnectionError: If the query fails.
    """
    try:
        with acquire() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
    except psycopg2.Error as e:
        raise StoreConnectionError("database ping failed", cause=e) from e


def close_pool() -> None:
    """Close all connections in the pool."""
    global _pool, _slots
    if _pool is not None:
        _pool.closeall()
        _pool = None
        _slots = None
        logger.info("Database connection pool closed.")
