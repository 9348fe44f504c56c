"""
Schema bootstrap for the calendar database.

Creates the `users` (credential store) and `events` (event store) tables if
they do not exist yet. Safe to run on every startup.

Run manually with:
    python -m calendar_app.database.init_db
"""

import logging
import sys

from calendar_app.database.db_connection import get_db
from calendar_app.errors import StoreUnavailable

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS users (
        user_id       SERIAL PRIMARY KEY,
        username      VARCHAR(50)  NOT NULL UNIQUE,
        email         VARCHAR(255) NOT NULL UNIQUE,
        password_hash TEXT         NOT NULL,
        created_at    TIMESTAMPTZ  NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS events (
        event_id      SERIAL PRIMARY KEY,
        user_id       INTEGER      NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
        title         VARCHAR(200) NOT NULL,
        description   TEXT,
        date          TIMESTAMPTZ  NOT NULL,
        category      VARCHAR(50),
        reminder      BOOLEAN      NOT NULL DEFAULT FALSE,
        reminder_time TIMESTAMPTZ,
        version       INTEGER      NOT NULL DEFAULT 1,
        created_at    TIMESTAMPTZ  NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at    TIMESTAMPTZ  NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    -- Every event query filters on the owner
    CREATE INDEX IF NOT EXISTS idx_events_user_id ON events (user_id);
"""

EXPECTED_TABLES = ["users", "events"]


def init_db() -> None:
    """
    Apply the schema and check that the expected tables exist.

    Raises:
        StoreUnavailable: If the database is unreachable.
        RuntimeError: If a table is still missing after the schema ran.
    """
    with get_db() as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)

            missing = []
            for table in EXPECTED_TABLES:
                cur.execute("SELECT to_regclass(%s);", (table,))
                if cur.fetchone()[0] is None:
                    missing.append(table)

    if missing:
        raise RuntimeError(f"Tables missing after schema bootstrap: {', '.join(missing)}")

    logging.info(f"Database schema ready ({', '.join(EXPECTED_TABLES)}).")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    try:
        init_db()
    except (StoreUnavailable, RuntimeError) as e:
        logging.error(f"Database initialization FAILED: {e}")
        sys.exit(1)
