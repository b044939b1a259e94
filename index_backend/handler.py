"""
Lambda handlers for the Book Index API

This module serves as the entry point for all Lambda functions.
It re-exports handlers from their respective modules for Lambda function configuration.

Architecture:
- API Gateway -> Lambda -> PostgreSQL/PostGIS (books_index table)
- Lambda -> Secrets Manager (database connection string, cached per process)
- Web client -> primary store create -> ingest_book_handler (best-effort index write)

Handlers:
1. ingest_book_handler: Adds a book (with optional coordinates) to the search index
2. search_books_handler: Paginated fuzzy/legacy text search with optional distance ranking
"""

# Re-export handlers for Lambda function configuration
# Support both local development (index_backend.X) and Lambda deployment (X)
try:
    # Lambda deployment (files are in root, not in index_backend/)
    from handlers.ingest_handlers import ingest_book_handler
    from handlers.search_handlers import search_books_handler
    from utils.count_cache import count_cache
    from utils.db import pool_manager
    import config
except ImportError:
    # Local development / testing (with index_backend package structure)
    from index_backend.handlers.ingest_handlers import ingest_book_handler
    from index_backend.handlers.search_handlers import search_books_handler
    from index_backend.utils.count_cache import count_cache
    from index_backend.utils.db import pool_manager
    import index_backend.config as config

# Make handlers available at module level for Lambda
__all__ = [
    "ingest_book_handler",
    "search_books_handler",
    # Also export process-wide state for tests
    "count_cache",
    "pool_manager",
    "config",
]
