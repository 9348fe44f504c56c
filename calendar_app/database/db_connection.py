"""
PostgreSQL connection helper.
Provides get_db() for use by services.
"""

import os
import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extras import DictCursor
from dotenv import load_dotenv

from calendar_app.errors import StoreUnavailable

# Load .env variables from the project root
load_dotenv()

# Get the database URL from environment variable
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")

CONNECT_TIMEOUT_SECONDS = int(os.getenv("DB_CONNECT_TIMEOUT", 5))


@contextmanager
def get_db() -> Iterator["psycopg2.extensions.connection"]:
    """
    Open a psycopg2 connection with dictionary-based row access.

    The connection runs one transaction: committed when the block exits
    normally, rolled back when it raises, and closed either way.

    Usage:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(...)

    Raises:
        StoreUnavailable: If the database cannot be reached.
    """
    try:
        conn = psycopg2.connect(DATABASE_URL, connect_timeout=CONNECT_TIMEOUT_SECONDS)
    except psycopg2.OperationalError as e:
        logging.error(f"Error connecting to database: {e}")
        raise StoreUnavailable() from e

    # Rows come back as dictionaries (e.g., {"user_id": 1, "email": "..."})
    conn.cursor_factory = DictCursor
    try:
        with conn:
            yield conn
    finally:
        conn.close()
