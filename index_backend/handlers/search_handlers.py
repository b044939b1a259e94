"""
Lambda handler for searching the book index

Returns one page of matching book ids. Full book records are fetched by the
client from the primary store.
"""

from __future__ import annotations

import logging

import psycopg

# Support both Lambda deployment and local development
try:
    # Lambda deployment
    import config
    from utils import db
    from utils.count_cache import count_cache
    from utils.errors import IndexBackendError, classify_store_error
    from utils.query import (
        SearchCriteria,
        build_count_query,
        build_page_query,
        build_predicates,
        total_pages,
    )
    from utils.response import (
        api_response,
        error_response,
        is_preflight,
        options_response,
        serialize_search_result,
    )
    from utils.validation import parse_json_body, parse_search_criteria
except ImportError:
    # Local development
    import index_backend.config as config
    from index_backend.utils import db
    from index_backend.utils.count_cache import count_cache
    from index_backend.utils.errors import IndexBackendError, classify_store_error
    from index_backend.utils.query import (
        SearchCriteria,
        build_count_query,
        build_page_query,
        build_predicates,
        total_pages,
    )
    from index_backend.utils.response import (
        api_response,
        error_response,
        is_preflight,
        options_response,
        serialize_search_result,
    )
    from index_backend.utils.validation import parse_json_body, parse_search_criteria

logger = logging.getLogger()
logger.setLevel(config.LOG_LEVEL)

GENERIC_ERROR_MESSAGE = "Failed to fetch books"


def _count_matches(conn, predicates) -> int:
    """
    Count rows matching the predicates.

    The unfiltered total is served from the process-wide count cache while
    it is fresh; filtered counts always hit the database.
    """
    if not predicates:
        cached = count_cache.get()
        if cached is not None:
            logger.info(f"Using cached total count: {cached}")
            return cached

    sql, params = build_count_query(predicates)
    total = int(conn.execute(sql, params).fetchone()["total"])

    if not predicates:
        count_cache.set(total)
    return total


def _search(criteria: SearchCriteria) -> dict:
    """
    Run the count and page queries for one search.

    The two statements are independent reads on the same connection, so the
    total and the page may disagree under concurrent inserts.

    Args:
        criteria: Normalized search criteria

    Returns:
        dict: Response body for a successful search
    """
    predicates = build_predicates(criteria)

    with db.get_pool().connection() as conn:
        total = _count_matches(conn, predicates)

        sql, params = build_page_query(criteria, predicates, config.PAGE_SIZE)
        rows = conn.execute(sql, params).fetchall()

    results = [serialize_search_result(row) for row in rows]
    return {
        "message": "Success",
        "page": criteria.page,
        "totalPages": total_pages(total, config.PAGE_SIZE),
        "count": len(results),
        "results": results,
    }


def search_books_handler(event, context):
    """
    Lambda handler to search the book index.
    Accepts JSON body with:
    - page: 0-based page number (defaults to 0)
    - query or title/author/isbn: text filters
    - latitude, longitude, radius (meters): geo filter, active only when all three are set

    Returns {message, page, totalPages, count, results: [{id, distance?}]}.
    """
    if is_preflight(event):
        return options_response()

    logger.info("search_books_handler invoked")

    try:
        body, error = parse_json_body(event)
        if error:
            return error

        criteria, error = parse_search_criteria(body)
        if error:
            logger.warning(f"Invalid search request: {error['body']}")
            return error

        logger.info(
            f"Searching page {criteria.page} (text={criteria.text!r}, "
            f"geo={criteria.has_geo_filter})"
        )

        return api_response(200, _search(criteria))

    except psycopg.Error as e:
        classified = classify_store_error(e)
        logger.error(f"{classified.message}: {str(e)}", exc_info=True)
        return error_response(500, GENERIC_ERROR_MESSAGE, str(e))
    except IndexBackendError as e:
        logger.error(f"Error searching book index: {e.message}", exc_info=True)
        return error_response(500, GENERIC_ERROR_MESSAGE, str(e.__cause__ or e))
    except Exception as e:
        logger.error(f"Unexpected error searching book index: {str(e)}", exc_info=True)
        return error_response(500, GENERIC_ERROR_MESSAGE, str(e))
