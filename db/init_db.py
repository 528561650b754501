"""
db/init_db.py
-------------
Creates the database and its schema (tables) if they do not already exist.
Safe to run on every process start. Run this module directly to
initialize a fresh database:
    python -m db.init_db
"""

from typing import Optional

import psycopg2
from psycopg2 import sql
from psycopg2.extensions import make_dsn

from config import DB_CONNECT_TIMEOUT, DB_NAME, SERVER_URL
from db.connection import acquire, init_pool
from db.errors import SchemaError, StoreConnectionError, UnreachableStoreError
from utils.logger import get_logger

logger = get_logger(__name__)

DUPLICATE_DATABASE = "42P04"
DUPLICATE_TABLE = "42P07"
# Concurrent CREATE ... IF NOT EXISTS can lose the race on the catalog index.
UNIQUE_VIOLATION = "23505"

# Users first: every other table references it.
TABLES: list[tuple[str, str]] = [
    ("users", """
        CREATE TABLE IF NOT EXISTS users (
            user_id     SERIAL PRIMARY KEY,
            username    VARCHAR(255) UNIQUE NOT NULL,
            email       VARCHAR(255) UNIQUE NOT NULL,
            phone       VARCHAR(20),
            created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
    """),
    ("passwords", """
        CREATE TABLE IF NOT EXISTS passwords (
            user_id     INTEGER PRIMARY KEY,
            username    VARCHAR(255) UNIQUE NOT NULL,
            password    VARCHAR(255) NOT NULL,
            CONSTRAINT fk_passwords_user
                FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE
        );
    """),
    ("habits", """
        CREATE TABLE IF NOT EXISTS habits (
            id                  SERIAL PRIMARY KEY,
            user_id             INTEGER NOT NULL,
            text                VARCHAR(63) NOT NULL,
            note                VARCHAR(255),
            good                BOOLEAN DEFAULT TRUE NOT NULL,
            bad                 BOOLEAN DEFAULT FALSE NOT NULL,
            difficulty          INT NOT NULL CHECK (difficulty BETWEEN 1 AND 5),
            count_reset_after   INT DEFAULT 0 NOT NULL,
            good_count          INT DEFAULT 0 NOT NULL,
            bad_count           INT DEFAULT 0 NOT NULL,
            CONSTRAINT fk_habits_user
                FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_habits_user ON habits(user_id);
    """),
    ("dailies", """
        CREATE TABLE IF NOT EXISTS dailies (
            id              SERIAL PRIMARY KEY,
            user_id         INTEGER NOT NULL,
            text            VARCHAR(63) NOT NULL,
            note            VARCHAR(255),
            difficulty      INT NOT NULL CHECK (difficulty BETWEEN 1 AND 5),
            start_date      DATE NOT NULL,
            repeat_every    INT DEFAULT 0 NOT NULL,
            repeat_every_x  INT NOT NULL,
            dayweeks        VARCHAR(32) DEFAULT NULL,
            streak          INT DEFAULT 0 NOT NULL,
            CONSTRAINT fk_dailies_user
                FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_dailies_user ON dailies(user_id);
    """),
    ("tasks", """
        CREATE TABLE IF NOT EXISTS tasks (
            id          SERIAL PRIMARY KEY,
            user_id     INTEGER NOT NULL,
            name        VARCHAR(63) NOT NULL,
            note        VARCHAR(255),
            difficulty  INT NOT NULL CHECK (difficulty BETWEEN 1 AND 5),
            deadline    DATE NOT NULL,
            completed   BOOLEAN DEFAULT FALSE NOT NULL,
            CONSTRAINT fk_tasks_user
                FOREIGN KEY (user_id) REFERENCES users(user_id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id);
    """),
]


def create_database(server_dsn: str, db_name: str) -> None:
    """
    Create ``db_name`` on the server unless it already exists.

    Args:
        server_dsn: Connection string of a database that always exists
            on the server (usually ``postgres``).
        db_name: Name of the database to create.

    Raises:
        UnreachableStoreError: If the server cannot be reached.
        SchemaError: If CREATE DATABASE fails for any other reason than
            the database already existing.
    """
    try:
        conn = psycopg2.connect(server_dsn, connect_timeout=DB_CONNECT_TIMEOUT)
    except psycopg2.OperationalError as e:
        logger.error(f"Unable to connect to database server: {e}")
        raise UnreachableStoreError("unable to connect to database server", cause=e) from e

    try:
        # CREATE DATABASE cannot run inside a transaction block.
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute(sql.SQL("CREATE DATABASE {};").format(sql.Identifier(db_name)))
        logger.info(f"Created database '{db_name}'.")
    except psycopg2.Error as e:
        if e.pgcode in (DUPLICATE_DATABASE, UNIQUE_VIOLATION):
            logger.debug(f"Database '{db_name}' already exists.")
            return
        logger.error(f"Failed to create database '{db_name}': {e}")
        raise SchemaError(f"unable to create database {db_name}", cause=e) from e
    finally:
        conn.close()


def create_tables() -> None:
    """
    Create all tables in dependency order.
    Safe to call multiple times (uses IF NOT EXISTS); each table is
    committed on its own so a concurrent bootstrap cannot undo another.

    Raises:
        SchemaError: If a table cannot be created.
    """
    with acquire() as conn:
        for table, ddl in TABLES:
            try:
                with conn.cursor() as cur:
                    cur.execute(ddl)
                conn.commit()
            except psycopg2.Error as e:
                conn.rollback()
                if e.pgcode in (DUPLICATE_TABLE, UNIQUE_VIOLATION):
                    logger.debug(f"Table '{table}' created concurrently, skipping.")
                    continue
                logger.error(f"Failed to create table '{table}': {e}")
                raise SchemaError(f"unable to create table {table}", cause=e) from e
    logger.info("Database schema initialized successfully.")


def bootstrap(server_dsn: Optional[str] = None, db_name: Optional[str] = None) -> None:
    """
    Ensure the database exists, open the pool against it and create the schema.

    Raises:
        StoreConnectionError: If the server or the new database is unreachable.
        SchemaError: If the database or a table cannot be created.
    """
    server_dsn = server_dsn or SERVER_URL
    db_name = db_name or DB_NAME
    create_database(server_dsn, db_name)
    init_pool(make_dsn(server_dsn, dbname=db_name))
    create_tables()


if __name__ == "__main__":
    try:
        bootstrap()
    except (StoreConnectionError, SchemaError) as e:
        raise SystemExit(f"Database bootstrap failed: {e}")
    print("Database schema created successfully.")
