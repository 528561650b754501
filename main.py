"""
main.py
-------
Process bootstrap for the habit tracker backend.

Responsibilities:
    - Create the database and schema if needed (idempotent).
    - Open and verify the shared connection pool.
    - Close the pool on shutdown.

Request routing lives in the HTTP layer, which imports the repositories
once `start()` has run.
"""

import sys

from config import DB_HOST, DB_NAME, DB_PORT
from db.connection import close_pool
from db.errors import SchemaError, StoreConnectionError
from db.init_db import bootstrap
from utils.logger import get_logger

logger = get_logger(__name__)


def start() -> None:
    """Bootstrap the database; exit the process if that is impossible."""
    logger.info(f"Initializing database '{DB_NAME}' on {DB_HOST}:{DB_PORT}...")
    try:
        bootstrap()
    except (StoreConnectionError, SchemaError) as e:
        logger.critical(f"Database bootstrap failed: {e} ({e.cause})")
        sys.exit(1)
    logger.info("Database ready.")


def stop() -> None:
    close_pool()
    logger.info("Habit tracker backend stopped.")


def main() -> None:
    start()
    stop()


if __name__ == "__main__":
    main()
