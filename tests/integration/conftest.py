"""
Pytest configuration for integration tests against a real PostGIS database.
"""

import os
from unittest.mock import patch

import psycopg
import pytest

from index_backend import config
from index_backend.utils.db import pool_manager
from index_backend.utils.schema import create_schema


@pytest.fixture(scope="session")
def database_url():
    """Connection string of a disposable PostGIS database"""
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        pytest.skip("Test database not provided. Set TEST_DATABASE_URL to a PostGIS connection string.")
    return url


@pytest.fixture(scope="session")
def ssl_mode():
    """Local test databases usually run without TLS"""
    return os.getenv("TEST_DB_SSL_MODE", "prefer")


@pytest.fixture
def index_db(database_url, ssl_mode):
    """Point the handlers at the test database with an empty books_index table.

    Yields:
        Callable: Runs a SQL statement on a fresh connection and returns all rows
    """
    with psycopg.connect(database_url, sslmode=ssl_mode) as conn:
        create_schema(conn)
        conn.execute(f"TRUNCATE {config.BOOKS_INDEX_TABLE}")

    def run_sql(statement, params=None):
        with psycopg.connect(database_url, sslmode=ssl_mode) as conn:
            return conn.execute(statement, params).fetchall()

    with patch.object(config, "DATABASE_URL", database_url), \
         patch.object(config, "DB_SSL_MODE", ssl_mode):
        pool_manager.reset()
        yield run_sql
        pool_manager.reset()
