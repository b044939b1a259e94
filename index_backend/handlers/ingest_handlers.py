"""
Lambda handler for adding books to the search index

Called by the web client right after a book was created in the primary
store. The index row is immutable once written.
"""

from __future__ import annotations

import logging

import psycopg

# Support both Lambda deployment and local development
try:
    # Lambda deployment
    import config
    from utils import db
    from utils.auth import get_user_id
    from utils.errors import IndexBackendError, classify_store_error
    from utils.response import (
        api_response,
        error_response,
        is_preflight,
        options_response,
        serialize_indexed_book,
    )
    from utils.validation import (
        parse_json_body,
        validate_coordinates,
        validate_required_fields,
        validate_string_field,
    )
except ImportError:
    # Local development
    import index_backend.config as config
    from index_backend.utils import db
    from index_backend.utils.auth import get_user_id
    from index_backend.utils.errors import IndexBackendError, classify_store_error
    from index_backend.utils.response import (
        api_response,
        error_response,
        is_preflight,
        options_response,
        serialize_indexed_book,
    )
    from index_backend.utils.validation import (
        parse_json_body,
        validate_coordinates,
        validate_required_fields,
        validate_string_field,
    )

logger = logging.getLogger()
logger.setLevel(config.LOG_LEVEL)

GENERIC_ERROR_MESSAGE = "Error adding book to database"

INSERT_SQL = f"""
    INSERT INTO {config.BOOKS_INDEX_TABLE} (id, title, author, isbn)
    VALUES (%s, %s, %s, %s)
    RETURNING id, title, author, isbn, created_at
"""

# ST_MakePoint takes longitude first
INSERT_WITH_COORDINATES_SQL = f"""
    INSERT INTO {config.BOOKS_INDEX_TABLE} (id, title, author, isbn, coordinates)
    VALUES (%s, %s, %s, %s, ST_MakePoint(%s, %s)::geography)
    RETURNING id, title, author, isbn, created_at,
              ST_X(coordinates::geometry) AS longitude,
              ST_Y(coordinates::geometry) AS latitude
"""


def _validate_book(body: dict) -> dict | None:
    """
    Run ingestion validators in order, returning the first failure.

    Args:
        body: Parsed request body

    Returns:
        dict: Error response if validation fails, None if valid
    """
    error = validate_required_fields(body)
    if error:
        return error

    error = validate_coordinates(body)
    if error:
        return error

    for field in ("id", "title", "author", "isbn"):
        error = validate_string_field(body, field, max_length=config.MAX_STRING_LENGTH)
        if error:
            return error

    return None


def build_insert(body: dict) -> tuple[str, list]:
    """
    Build the INSERT statement for a validated ingestion request.

    Args:
        body: Validated request body

    Returns:
        tuple: (sql, params)
    """
    isbn = body.get("isbn")
    if isbn is not None and not isbn.strip():
        isbn = None

    params = [body["id"], body["title"], body["author"], isbn]
    if body.get("longitude") is None:
        return INSERT_SQL, params
    return INSERT_WITH_COORDINATES_SQL, params + [float(body["longitude"]), float(body["latitude"])]


def _insert_indexed_book(body: dict) -> dict:
    """
    Insert one row into the book index.

    Args:
        body: Validated request body

    Returns:
        dict: Stored row

    Raises:
        psycopg.Error: If the insert fails (e.g. duplicate id)
        SecretUnavailable: If the database secret cannot be resolved
    """
    sql, params = build_insert(body)
    with db.get_pool().connection() as conn:
        return conn.execute(sql, params).fetchone()


def _store_error_response(error: IndexBackendError) -> dict:
    detail = str(error.__cause__ or error) if config.is_development() else None

    if error.status_code in (400, 409):
        logger.warning(f"Rejected by book index: {error.message}")
        return error_response(error.status_code, error.message, detail)

    logger.error(f"Error indexing book: {str(error.__cause__ or error)}", exc_info=True)
    return error_response(500, GENERIC_ERROR_MESSAGE, detail)


def ingest_book_handler(event, context):
    """
    Lambda handler to add a book to the search index.
    Expects JSON body with:
    - id, title, author: required, id is the primary store identifier
    - isbn: optional
    - longitude, latitude: optional, both or neither

    Returns 201 with the stored row, including the decoded coordinates.
    """
    if is_preflight(event):
        return options_response()

    logger.info("ingest_book_handler invoked")

    try:
        body, error = parse_json_body(event)
        if error:
            return error

        error = _validate_book(body)
        if error:
            logger.warning(f"Invalid ingestion request: {error['body']}")
            return error

        logger.info(f"Indexing book {body['id']} for user {get_user_id(event)}")

        row = _insert_indexed_book(body)

        logger.info(f"Successfully indexed book {body['id']}")
        return api_response(
            201,
            {"message": "Book added successfully", "data": serialize_indexed_book(row)},
        )

    except psycopg.Error as e:
        return _store_error_response(classify_store_error(e))
    except IndexBackendError as e:
        return _store_error_response(e)
    except Exception as e:
        logger.error(f"Unexpected error indexing book: {str(e)}", exc_info=True)
        return error_response(
            500, GENERIC_ERROR_MESSAGE, str(e) if config.is_development() else None
        )
