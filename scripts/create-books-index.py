#!/usr/bin/env python3
"""
Create the books_index table (and PostGIS extension) in the index database.

This script:
1. Resolves the connection string (DATABASE_URL, or SECRET_NAME in Secrets Manager)
2. Creates the PostGIS extension, the books_index table and its indexes
3. Prints the current row count

Safe to run more than once.

Usage:
    SECRET_NAME=book-index/db python3 scripts/create-books-index.py

Environment variables:
    REGION / AWS_REGION: AWS region (default: us-east-2)
    SECRET_NAME: Secrets Manager secret holding the connection string
    DATABASE_URL: Connection string, bypasses Secrets Manager
    DB_SSL_MODE: libpq sslmode (default: require)
"""

import sys

import psycopg

import index_backend.config as config
from index_backend.utils.errors import SecretUnavailable
from index_backend.utils.schema import create_schema
from index_backend.utils.secrets_manager import get_connection_secret


def main():
    """Create the schema and report the table size."""
    print("=" * 60)
    print("📚 Book Index Schema Setup")
    print("=" * 60)
    print(f"Region: {config.REGION}")
    print(f"Secret: {config.SECRET_NAME or '(DATABASE_URL)'}")
    print(f"Table:  {config.BOOKS_INDEX_TABLE}")
    print()

    try:
        conninfo = get_connection_secret()
    except SecretUnavailable as e:
        print(f"❌ {e.message}")
        return 1

    print("🔧 Creating schema...")
    with psycopg.connect(conninfo, sslmode=config.DB_SSL_MODE) as conn:
        create_schema(conn)
        total = conn.execute(f"SELECT COUNT(*) FROM {config.BOOKS_INDEX_TABLE}").fetchone()[0]

    print(f"✅ Schema ready - {total} books indexed")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"\n❌ Fatal error: {str(e)}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
