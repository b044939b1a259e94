"""
Response building utilities for Book Index API

Provides functions to create standardized API Gateway responses.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Authorization, Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Max-Age": "600",
}


def api_response(status_code: int, body: Any) -> dict:
    """
    Helper to format API Gateway response with CORS headers.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON serialized)

    Returns:
        dict: API Gateway response with headers
    """
    return {
        "statusCode": status_code,
        "body": json.dumps(body),
        "headers": {"Content-Type": "application/json", **CORS_HEADERS},
    }


def error_response(status_code: int, message: str, error: str | None = None) -> dict:
    """
    Helper to create error response.

    Args:
        status_code: HTTP status code
        message: Error message shown to the caller
        error: Optional diagnostic detail (underlying error text)

    Returns:
        dict: API Gateway error response
    """
    body = {"message": message}
    if error is not None:
        body["error"] = error
    return api_response(status_code, body)


def options_response() -> dict:
    """Answer a CORS preflight request."""
    return {"statusCode": 200, "headers": dict(CORS_HEADERS), "body": ""}


def is_preflight(event: dict) -> bool:
    """Check for OPTIONS on both REST (v1) and HTTP (v2) API Gateway events."""
    request_context = event.get("requestContext") or {}
    method = event.get("httpMethod") or (request_context.get("http") or {}).get("method")
    return str(method).upper() == "OPTIONS"


def convert_decimal(value: Any) -> Any:
    """
    Convert Decimal types (from NUMERIC columns) to int or float for JSON serialization.

    Args:
        value: Value that might be a Decimal

    Returns:
        Converted value (int if whole number, otherwise original value)
    """
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    return value


def serialize_indexed_book(row: dict) -> dict:
    """
    Convert a books_index row returned by INSERT ... RETURNING to API response format.

    Args:
        row: Database row (dict_row)

    Returns:
        dict: Indexed book for API response
    """
    created_at = row.get("created_at")
    if isinstance(created_at, (datetime, date)):
        created_at = created_at.isoformat()

    book: dict[str, Any] = {
        "id": row.get("id"),
        "title": row.get("title"),
        "author": row.get("author"),
        "isbn": row.get("isbn"),
        "created_at": created_at,
    }

    # Coordinates are only returned when the book was indexed with a location
    if row.get("longitude") is not None:
        book["longitude"] = float(row["longitude"])
    if row.get("latitude") is not None:
        book["latitude"] = float(row["latitude"])

    return book


def serialize_search_result(row: dict) -> dict:
    """
    Convert a search row to ``{id, distance?}``.

    Args:
        row: Database row with ``id`` and, for geo searches, ``distance``

    Returns:
        dict: Search result for API response
    """
    result: dict[str, Any] = {"id": row.get("id")}
    if row.get("distance") is not None:
        result["distance"] = int(round(convert_decimal(row["distance"])))
    return result
