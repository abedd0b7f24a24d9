"""
Version-aware cursor pagination.

The two API versions carry pagination cursors differently:
- 2021-01: in the ``Link`` response header, as a ``cursor`` query parameter
  of the ``rel="next"`` / ``rel="previous"`` URLs
- 2021-11: as ``next_cursor`` / ``previous_cursor`` fields of the JSON body

``Paginator`` hides the difference and yields items lazily across pages.
"""

import itertools
import logging
import re
import urllib.parse
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Generic, NamedTuple, TypeVar

from recharge_cli.core.client import RawResponse, ValidationError
from recharge_cli.core.enums import ApiVersion

if TYPE_CHECKING:
    from recharge_cli.core.client import APIClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="?(next|previous)(?:"|\s*(?:;|$))')


# =============================================================================
# Cursor extraction
# =============================================================================


class Cursors(NamedTuple):
    next: str | None = None
    previous: str | None = None


def _cursor_from_url(url: str) -> str | None:
    values = urllib.parse.parse_qs(urllib.parse.urlsplit(url).query).get("cursor")
    return values[0] if values else None


def extract_link_cursors(response: RawResponse) -> Cursors:
    """Parse ``<url>; rel="next", <url>; rel="previous"`` from the Link header."""
    link = response.header("Link")
    if not link:
        return Cursors()

    found: dict[str, str | None] = {"next": None, "previous": None}
    for part in link.split(","):
        match = _LINK_RE.search(part)
        if match:
            url, rel = match.groups()
            found[rel] = _cursor_from_url(url)
    return Cursors(**found)


def extract_body_cursors(response: RawResponse) -> Cursors:
    """Read ``next_cursor`` / ``previous_cursor`` from the decoded body."""
    return Cursors(
        next=response.body.get("next_cursor") or None,
        previous=response.body.get("previous_cursor") or None,
    )


def extract_cursors(response: RawResponse, version: ApiVersion) -> Cursors:
    """Extract cursors using the strategy for ``version``."""
    if version.uses_link_header:
        cursors = extract_link_cursors(response)
        # Some legacy endpoints still embed cursors in the body
        if cursors.next is None and cursors.previous is None:
            return extract_body_cursors(response)
        return cursors
    return extract_body_cursors(response)


# =============================================================================
# Paginator
# =============================================================================


class Paginator(Generic[T]):
    """
    Lazy sequence over every item of a cursor-paginated list endpoint.

    Each iteration starts again from page one with the original query
    parameters. Pages are fetched only when the consumer pulls past the end
    of the current one. The client's API version is read on every page, so
    switching it mid-iteration changes how later cursors are parsed.

    Example:
        charges = Paginator(client, "/charges", {"limit": 50}, items_key="charges")
        for charge in charges:
            ...
        first_ten = charges.take(10)

    """

    def __init__(
        self,
        client: "APIClient",
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        items_key: str = "items",
        transform: Callable[[dict[str, Any]], T] | None = None,
    ):
        self._client = client
        self.endpoint = endpoint
        self.params = dict(params or {})
        self.items_key = items_key
        self.transform = transform

    def __iter__(self) -> Iterator[T]:
        params = dict(self.params)
        has_more = True
        page = 0

        while has_more:
            response = self._client.get(self.endpoint, params, include_headers=True)
            if not isinstance(response, RawResponse):
                break
            page += 1

            items = response.body.get(self.items_key) or []
            logger.debug("Fetched page %d of %s (%d items)", page, self.endpoint, len(items))
            for item in items:
                yield self.transform(item) if self.transform else item

            cursors = extract_cursors(response, self._client.api_version)
            if cursors.next:
                params["cursor"] = cursors.next
            else:
                has_more = False

    def __repr__(self) -> str:
        return f"Paginator(endpoint={self.endpoint!r}, params={self.params!r}, items_key={self.items_key!r})"

    def first(self) -> T | None:
        """First item, or None if the collection is empty."""
        return next(iter(self), None)

    def take(self, limit: int) -> list[T]:
        """Up to ``limit`` items, fetching no more pages than needed."""
        if limit <= 0:
            return []
        return list(itertools.islice(self, limit))

    def all(self) -> list[T]:
        """Every item (fetches all pages; careful with large collections)."""
        return list(self)

    def chunk(self, size: int) -> Iterator[list[T]]:
        """Yield consecutive lists of ``size`` items; the last may be shorter."""
        if size < 1:
            raise ValidationError("Chunk size must be at least 1")
        iterator = iter(self)
        while batch := list(itertools.islice(iterator, size)):
            yield batch

    def count(self) -> int:
        """Number of items (fetches all pages)."""
        return sum(1 for _ in self)

    def is_empty(self) -> bool:
        """True when ``first()`` is None, including a first item transformed to None."""
        return self.first() is None
