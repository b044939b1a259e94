"""
PostgreSQL connection pool for the book index

One pool is created lazily per warm Lambda process. Handlers borrow a
connection with ``with get_pool().connection() as conn:``, which returns it to
the pool on exit, committing on success and rolling back on error.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

# Support both Lambda deployment and local development
try:
    import config
except ImportError:
    import index_backend.config as config

from .secrets_manager import SecretResolver, secret_resolver

logger = logging.getLogger(__name__)


class PoolManager:
    """Lazily creates and reuses a single connection pool."""

    def __init__(
        self,
        resolver: SecretResolver,
        pool_factory: Callable[..., Any] = ConnectionPool,
    ) -> None:
        self._resolver = resolver
        self._pool_factory = pool_factory
        self._pool: ConnectionPool | None = None

    def get_pool(self) -> ConnectionPool:
        """
        Get the process-wide connection pool, creating it on first use.

        Returns:
            ConnectionPool: Pool of dict-row connections with TLS required

        Raises:
            SecretUnavailable: If the connection string cannot be resolved
        """
        if self._pool is None:
            conninfo = self._resolver.get_connection_secret()
            logger.info(
                f"Creating connection pool (max_size={config.DB_POOL_MAX_SIZE}, "
                f"sslmode={config.DB_SSL_MODE})"
            )
            self._pool = self._pool_factory(
                conninfo=conninfo,
                kwargs={"sslmode": config.DB_SSL_MODE, "row_factory": dict_row},
                min_size=1,
                max_size=max(config.DB_POOL_MAX_SIZE, 1),
                timeout=config.DB_POOL_TIMEOUT_SECONDS,
                open=True,
            )
        return self._pool

    def reset(self) -> None:
        """Close and forget the pool (used by tests and scripts)."""
        if self._pool is not None:
            self._pool.close()
            self._pool = None


pool_manager = PoolManager(secret_resolver)


def get_pool() -> ConnectionPool:
    return pool_manager.get_pool()
