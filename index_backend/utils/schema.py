"""
DDL for the books_index table

Applied by scripts/create-books-index.py and by the integration tests.
"""

from __future__ import annotations

import logging

# Support both Lambda deployment and local development
try:
    import config
except ImportError:
    import index_backend.config as config

logger = logging.getLogger(__name__)

BOOKS_INDEX_DDL = (
    "CREATE EXTENSION IF NOT EXISTS postgis",
    f"""
    CREATE TABLE IF NOT EXISTS {config.BOOKS_INDEX_TABLE} (
        id          TEXT PRIMARY KEY,
        title       TEXT NOT NULL CHECK (btrim(title) <> ''),
        author      TEXT NOT NULL CHECK (btrim(author) <> ''),
        isbn        TEXT,
        coordinates GEOGRAPHY(POINT, 4326),
        created_at  TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    f"""
    CREATE INDEX IF NOT EXISTS {config.BOOKS_INDEX_TABLE}_coordinates_idx
        ON {config.BOOKS_INDEX_TABLE} USING GIST (coordinates)
    """,
    f"""
    CREATE INDEX IF NOT EXISTS {config.BOOKS_INDEX_TABLE}_created_at_idx
        ON {config.BOOKS_INDEX_TABLE} (created_at DESC)
    """,
)


def create_schema(conn) -> None:
    """
    Create the PostGIS extension, the books_index table and its indexes.

    Idempotent. The caller owns the transaction.

    Args:
        conn: Open psycopg connection
    """
    for statement in BOOKS_INDEX_DDL:
        conn.execute(statement)
    logger.info(f"Ensured schema for {config.BOOKS_INDEX_TABLE}")
