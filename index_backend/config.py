"""
Configuration and AWS client initialization for Book Index Lambda handlers

This module provides:
- AWS service clients (Secrets Manager)
- Environment variable configuration
- Constants used across handlers
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import boto3

if TYPE_CHECKING:
    from mypy_boto3_secretsmanager.client import SecretsManagerClient

# Constants
PAGE_SIZE = 100  # Search results per page
MAX_PAGE = (2**63 - 1) // PAGE_SIZE  # OFFSET must fit in a bigint
COUNT_CACHE_TTL_SECONDS = 60  # Lifetime of the cached unfiltered COUNT(*)
MAX_STRING_LENGTH = 500  # Maximum length for string fields
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0
MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
BOOKS_INDEX_TABLE = "books_index"
SECRET_VERSION_STAGE = "AWSCURRENT"

# Environment configuration
REGION = os.environ.get("REGION") or os.environ.get("AWS_REGION", "us-east-2")
SECRET_NAME = os.environ.get("SECRET_NAME")
DATABASE_URL = os.environ.get("DATABASE_URL")  # Local development only, bypasses Secrets Manager
APP_ENV = os.environ.get("APP_ENV", "production")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# The managed Postgres provider serves certificates that are not in the system
# trust store: "require" encrypts the connection without verifying the peer.
DB_SSL_MODE = os.environ.get("DB_SSL_MODE", "require")
DB_POOL_MAX_SIZE = int(os.environ.get("DB_POOL_MAX_SIZE", "2"))
DB_POOL_TIMEOUT_SECONDS = float(os.environ.get("DB_POOL_TIMEOUT_SECONDS", "10"))

# Initialize AWS clients with type hints
secrets_client: "SecretsManagerClient" = boto3.client("secretsmanager", region_name=REGION)


def is_development() -> bool:
    """Whether detailed error messages may be returned to callers."""
    return APP_ENV == "development"
