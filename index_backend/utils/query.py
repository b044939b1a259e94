"""
SQL builders for book index search

Each optional filter is a predicate builder: given the search criteria it
yields zero or one ``Predicate`` (a clause with ``%s`` placeholders plus the
values bound to them). Predicates are ANDed together in builder order, so the
parameter list always lines up with the placeholders in the statement text.
Values are never interpolated into the SQL.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

# Support both Lambda deployment and local development
try:
    import config
except ImportError:
    import index_backend.config as config

POINT_SQL = "ST_MakePoint(%s, %s)::geography"


@dataclass(frozen=True)
class Predicate:
    clause: str
    params: tuple[Any, ...] = ()


@dataclass(frozen=True)
class SearchCriteria:
    """
    Normalized search request.

    ``text`` is the fuzzy term matched against title OR author OR isbn.
    ``title``, ``author`` and ``isbn`` are the legacy per-field filters.
    """

    page: int = 0
    text: str | None = None
    title: str | None = None
    author: str | None = None
    isbn: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius: float | None = None

    @property
    def has_geo_filter(self) -> bool:
        return (
            self.latitude is not None
            and self.longitude is not None
            and self.radius is not None
        )


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(term: str) -> str:
    return f"%{escape_like(term)}%"


def geo_predicate(criteria: SearchCriteria) -> Predicate | None:
    """Rows whose coordinates lie within ``radius`` meters of the point."""
    if not criteria.has_geo_filter:
        return None
    return Predicate(
        f"ST_DWithin(coordinates, {POINT_SQL}, %s)",
        (criteria.longitude, criteria.latitude, criteria.radius),
    )


def fuzzy_text_predicate(criteria: SearchCriteria) -> Predicate | None:
    if not criteria.text:
        return None
    pattern = contains_pattern(criteria.text)
    return Predicate(
        "(title ILIKE %s OR author ILIKE %s OR isbn ILIKE %s)",
        (pattern, pattern, pattern),
    )


def title_predicate(criteria: SearchCriteria) -> Predicate | None:
    if not criteria.title:
        return None
    return Predicate("title ILIKE %s", (contains_pattern(criteria.title),))


def author_predicate(criteria: SearchCriteria) -> Predicate | None:
    if not criteria.author:
        return None
    return Predicate("author ILIKE %s", (contains_pattern(criteria.author),))


def isbn_predicate(criteria: SearchCriteria) -> Predicate | None:
    if not criteria.isbn:
        return None
    return Predicate("isbn = %s", (criteria.isbn,))


PREDICATE_BUILDERS: tuple[Callable[[SearchCriteria], Predicate | None], ...] = (
    geo_predicate,
    fuzzy_text_predicate,
    title_predicate,
    author_predicate,
    isbn_predicate,
)


def build_predicates(criteria: SearchCriteria) -> list[Predicate]:
    predicates = []
    for builder in PREDICATE_BUILDERS:
        predicate = builder(criteria)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def build_where_clause(predicates: list[Predicate]) -> tuple[str, list[Any]]:
    """
    Fold predicates into a WHERE clause.

    Args:
        predicates: Predicates to AND together

    Returns:
        tuple: (where_clause, params) - where_clause is empty when there are no predicates

    Example:
        where, params = build_where_clause([
            Predicate("title ILIKE %s", ("%dune%",)),
            Predicate("isbn = %s", ("9780441013593",)),
        ])
        # where = "WHERE title ILIKE %s AND isbn = %s"
        # params = ["%dune%", "9780441013593"]
    """
    if not predicates:
        return "", []

    params: list[Any] = []
    for predicate in predicates:
        params.extend(predicate.params)
    return "WHERE " + " AND ".join(p.clause for p in predicates), params


def build_count_query(predicates: list[Predicate]) -> tuple[str, list[Any]]:
    where_clause, params = build_where_clause(predicates)
    sql = f"SELECT COUNT(*) AS total FROM {config.BOOKS_INDEX_TABLE} {where_clause}".rstrip()
    return sql, params


def build_page_query(
    criteria: SearchCriteria,
    predicates: list[Predicate],
    page_size: int = config.PAGE_SIZE,
) -> tuple[str, list[Any]]:
    """
    Build the statement fetching one page of matching ids.

    With an active geo filter rows carry a rounded ``distance`` in meters and
    are ordered nearest first; otherwise newest first.

    Args:
        criteria: Normalized search criteria (page and geo point)
        predicates: Predicates built from the same criteria
        page_size: Rows per page

    Returns:
        tuple: (sql, params) with params in placeholder order
    """
    where_clause, where_params = build_where_clause(predicates)

    if criteria.has_geo_filter:
        columns = f"id, ROUND(ST_Distance(coordinates, {POINT_SQL})) AS distance"
        select_params: list[Any] = [criteria.longitude, criteria.latitude]
        # Unrounded, so books less than a meter apart keep nearest-first order
        order_by = f"ST_Distance(coordinates, {POINT_SQL}) ASC"
        order_params: list[Any] = [criteria.longitude, criteria.latitude]
    else:
        columns = "id"
        select_params = []
        order_by = "created_at DESC"
        order_params = []

    parts = [f"SELECT {columns}", f"FROM {config.BOOKS_INDEX_TABLE}"]
    if where_clause:
        parts.append(where_clause)
    parts.append(f"ORDER BY {order_by}")
    parts.append("LIMIT %s OFFSET %s")

    params = select_params + where_params + order_params + [page_size, criteria.page * page_size]
    return " ".join(parts), params


def total_pages(total_count: int, page_size: int = config.PAGE_SIZE) -> int:
    return math.ceil(total_count / page_size)
