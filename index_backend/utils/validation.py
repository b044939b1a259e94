"""
Request validation utilities for Book Index API

Provides functions to validate and extract data from API Gateway events.
Validators return an error response (or a ``(value, error_response)`` tuple);
callers return the error response as-is when it is not None.
"""

from __future__ import annotations

import base64
import json
import logging
import math
import re
from typing import Any

# Support both Lambda deployment and local development
try:
    import config
except ImportError:
    import index_backend.config as config

from .query import SearchCriteria
from .response import error_response

logger = logging.getLogger(__name__)

REQUIRED_BOOK_FIELDS = ("id", "title", "author")
SEARCH_TEXT_FIELDS = ("query", "title", "author", "isbn")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_json_body(event: dict) -> tuple[dict, dict | None]:
    """
    Parse JSON object body from API Gateway event.

    Args:
        event: API Gateway event

    Returns:
        tuple: (parsed_body, error_response) - If successful, error_response is None
               If error, parsed_body is empty dict (caller should check error first)
    """
    raw = event.get("body") or "{}"
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw)
    except (ValueError, TypeError):
        logger.warning("Invalid JSON in request body")
        return {}, error_response(400, "Invalid JSON in request body")

    if not isinstance(body, dict):
        logger.warning("Request body is not a JSON object")
        return {}, error_response(400, "Invalid JSON in request body")
    return body, None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_required_fields(body: dict) -> dict | None:
    """Check that id, title and author are all present and non-empty."""
    if any(_is_blank(body.get(field)) for field in REQUIRED_BOOK_FIELDS):
        return error_response(
            400, "Missing required fields: id, title, and author are required"
        )
    return None


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_coordinates(body: dict) -> dict | None:
    """
    Validate the optional longitude/latitude pair of an ingestion request.

    Rules are checked in order and the first failure is returned:
    both or neither present, longitude range, latitude range.

    Args:
        body: Request body dictionary

    Returns:
        dict: Error response if validation fails, None if valid
    """
    longitude = body.get("longitude")
    latitude = body.get("latitude")

    if (longitude is None) != (latitude is None):
        return error_response(400, "Both longitude and latitude must be provided together")

    if longitude is None:
        return None

    if not _is_finite_number(longitude) or not (
        config.MIN_LONGITUDE <= longitude <= config.MAX_LONGITUDE
    ):
        return error_response(400, "Longitude must be between -180 and 180")

    if not _is_finite_number(latitude) or not (
        config.MIN_LATITUDE <= latitude <= config.MAX_LATITUDE
    ):
        return error_response(400, "Latitude must be between -90 and 90")

    return None


def validate_string_field(
    body: dict, field: str, max_length: int = 500, required: bool = False
) -> dict | None:
    """
    Validate a string field in request body.

    Args:
        body: Request body dictionary
        field: Field name to validate
        max_length: Maximum allowed length
        required: Whether the field is required

    Returns:
        dict: Error response if validation fails, None if valid
    """
    if body.get(field) is None:
        if required:
            return error_response(400, f'Field "{field}" is required')
        return None

    value = body[field]
    if not isinstance(value, str):
        return error_response(400, f'Field "{field}" must be a string')

    if len(value) > max_length:
        return error_response(
            400, f'Field "{field}" exceeds maximum length of {max_length}'
        )

    if required and not value.strip():
        return error_response(400, f'Field "{field}" cannot be empty')

    return None


def parse_page(value: Any) -> int:
    """
    Normalize the requested page number.

    Integers pass through, floats and numeric strings are truncated;
    anything absent, non-numeric or negative becomes page 0. Pages are capped
    at ``MAX_PAGE`` so the offset stays within a bigint; such pages are empty.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        page = value
    elif isinstance(value, float):
        page = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        page = int(match.group(1)) if match else 0
    else:
        page = 0
    return min(max(page, 0), config.MAX_PAGE)


def parse_optional_number(body: dict, field: str) -> tuple[float | None, dict | None]:
    """
    Extract an optional finite number from the request body.

    Args:
        body: Request body dictionary
        field: Field name to extract

    Returns:
        tuple: (number, error_response) - number is None when the field is absent
    """
    value = body.get(field)
    if value is None or value == "":
        return None, None

    number = None
    if not isinstance(value, bool):
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None

    if number is None or not math.isfinite(number):
        return None, error_response(400, f'Field "{field}" must be a number')
    return number, None


def _parse_search_text(body: dict, field: str) -> tuple[str | None, dict | None]:
    value = body.get(field)
    if value is None:
        return None, None
    if _is_finite_number(value):
        value = str(value)
    if not isinstance(value, str):
        return None, error_response(400, f'Field "{field}" must be a string')
    value = value.strip()
    if len(value) > config.MAX_STRING_LENGTH:
        return None, error_response(
            400, f'Field "{field}" exceeds maximum length of {config.MAX_STRING_LENGTH}'
        )
    return value or None, None


def parse_search_criteria(body: dict) -> tuple[SearchCriteria | None, dict | None]:
    """
    Build normalized search criteria from a search request body.

    The fuzzy term comes from ``query``. Without it, ``title`` is used as the
    fuzzy term when it is the only text field or when author/isbn repeat the
    same value (the web client sends its search box this way). Otherwise
    title/author/isbn are kept as separate per-field filters.

    Args:
        body: Request body dictionary

    Returns:
        tuple: (criteria, error_response) - If successful, error_response is None
    """
    texts: dict[str, str | None] = {}
    for field in SEARCH_TEXT_FIELDS:
        texts[field], error = _parse_search_text(body, field)
        if error:
            return None, error

    numbers: dict[str, float | None] = {}
    for field in ("latitude", "longitude", "radius"):
        numbers[field], error = parse_optional_number(body, field)
        if error:
            return None, error

    radius = numbers["radius"]
    if radius is not None and radius < 0:
        return None, error_response(400, 'Field "radius" cannot be negative')

    text, title, author, isbn = texts["query"], texts["title"], texts["author"], texts["isbn"]
    if text is None and title is not None and author in (None, title) and isbn in (None, title):
        text, title, author, isbn = title, None, None, None

    criteria = SearchCriteria(
        page=parse_page(body.get("page")),
        text=text,
        title=title,
        author=author,
        isbn=isbn,
        latitude=numbers["latitude"],
        longitude=numbers["longitude"],
        radius=radius,
    )
    return criteria, None
