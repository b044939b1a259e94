"""
Database connection secret resolution

The connection string lives in AWS Secrets Manager. It is fetched once per
warm Lambda process and kept in memory afterwards.
"""

from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

# Support both Lambda deployment and local development
try:
    import config
except ImportError:
    import index_backend.config as config

from .errors import SecretUnavailable

logger = logging.getLogger(__name__)


class SecretResolver:
    """Resolves and memoizes the database connection string."""

    def __init__(self) -> None:
        self._connection_string: str | None = None

    def get_connection_secret(self) -> str:
        """
        Get the database connection string.

        Returns:
            str: libpq connection string or URL

        Raises:
            SecretUnavailable: If the secret is not configured or cannot be fetched
        """
        if self._connection_string is not None:
            return self._connection_string

        if config.DATABASE_URL:
            logger.info("Using DATABASE_URL from environment")
            self._connection_string = config.DATABASE_URL
            return self._connection_string

        if not config.SECRET_NAME:
            raise SecretUnavailable("SECRET_NAME is not configured")

        try:
            response = config.secrets_client.get_secret_value(
                SecretId=config.SECRET_NAME,
                VersionStage=config.SECRET_VERSION_STAGE,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error retrieving secret {config.SECRET_NAME}: {str(e)}")
            raise SecretUnavailable(f"Could not retrieve secret {config.SECRET_NAME}") from e

        secret = response.get("SecretString")
        if not secret:
            raise SecretUnavailable(f"Secret {config.SECRET_NAME} has no string value")

        logger.info(f"Resolved database secret {config.SECRET_NAME}")
        self._connection_string = secret
        return secret

    def clear(self) -> None:
        self._connection_string = None


secret_resolver = SecretResolver()


def get_connection_secret() -> str:
    return secret_resolver.get_connection_secret()
