"""
HTTP client for the Book Index API

Used by callers that create books in the primary store and then add them to
the search index. The index is derived data: a failed index write never
undoes the primary write, it is reported as a warning instead.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


class IndexRequestError(Exception):
    """The index endpoint could not be reached or returned an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class IndexedCreateResult:
    book: dict
    indexed: bool
    warning: str | None = None


class IndexClient:
    """
    Calls the ingest and search endpoints with the caller's bearer token.

    Args:
        ingest_url: URL of the ingestion endpoint
        search_url: URL of the search endpoint
        token_provider: Returns the current ID token, or None when signed out
        timeout: Socket timeout in seconds
    """

    def __init__(
        self,
        ingest_url: str,
        search_url: str,
        token_provider: Callable[[], str | None],
        timeout: float = 10,
    ):
        self.ingest_url = ingest_url
        self.search_url = search_url
        self.token_provider = token_provider
        self.timeout = timeout

    def _post(self, url: str, payload: dict) -> dict:
        token = self.token_provider()
        if not token:
            raise IndexRequestError("No authentication token available")

        request = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as e:
            raise IndexRequestError(_error_message(e), e.code) from e
        except urllib.error.URLError as e:
            raise IndexRequestError(f"Index endpoint unreachable: {e.reason}") from e

        return json.loads(raw) if raw else {}

    def add_book(self, book: dict, coordinates: Coordinates | None = None) -> dict:
        """
        Add a book that already exists in the primary store to the index.

        Args:
            book: Book with id (from the primary store), title, author and optional isbn
            coordinates: Owner location, if known

        Returns:
            dict: Response body ({message, data})

        Raises:
            IndexRequestError: If the request fails
        """
        payload: dict[str, Any] = {
            "id": book["id"],
            "title": book["title"],
            "author": book["author"],
            "isbn": book.get("isbn") or None,
        }
        if coordinates is not None:
            payload["longitude"] = coordinates.longitude
            payload["latitude"] = coordinates.latitude

        logger.info(f"Sending book {book['id']} to index")
        return self._post(self.ingest_url, payload)

    def search(
        self,
        page: int = 0,
        query: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        radius: float | None = None,
    ) -> dict:
        """
        Search the index.

        The free-text query is sent as title, author and isbn so the endpoint
        matches it against any of them. The geo filter is only sent when the
        radius and both coordinates are known.

        Returns:
            dict: Response body ({message, page, totalPages, count, results})

        Raises:
            IndexRequestError: If the request fails
        """
        payload: dict[str, Any] = {"page": page}
        if query:
            payload.update(title=query, author=query, isbn=query)
        if radius and latitude is not None and longitude is not None:
            payload.update(radius=radius, latitude=latitude, longitude=longitude)
        return self._post(self.search_url, payload)


def _error_message(error: urllib.error.HTTPError) -> str:
    try:
        body = json.loads(error.read() or b"{}")
    except ValueError:
        body = {}
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP error! status: {error.code}"


def create_book_with_index(
    create_primary: Callable[[dict], dict],
    index_client: IndexClient,
    book: dict,
    coordinates: Coordinates | None = None,
) -> IndexedCreateResult:
    """
    Create a book in the primary store, then add it to the search index.

    Errors from ``create_primary`` propagate. An index failure is logged and
    returned as a warning; the primary record is kept.

    Args:
        create_primary: Creates the book in the primary store and returns it with its id
        index_client: Client for the ingestion endpoint
        book: Book fields (title, author, isbn)
        coordinates: Owner location, if known

    Returns:
        IndexedCreateResult: Created book, whether it was indexed, and any warning
    """
    created = create_primary(book)
    indexed_book = {**book, **created}

    try:
        index_client.add_book(indexed_book, coordinates)
    except IndexRequestError as e:
        logger.warning(f"Book {created.get('id')} saved but not indexed: {e.message}")
        return IndexedCreateResult(
            book=created,
            indexed=False,
            warning=f"Book saved, but it could not be added to search: {e.message}",
        )

    return IndexedCreateResult(book=created, indexed=True)
