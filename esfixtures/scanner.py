"""Cursor-based paginated scanning of all documents in a scope."""

import logging
from collections.abc import Generator, Mapping
from typing import Any, Optional

from .api import SearchClient
from .exceptions import TransportError
from .models import ScanCursor, ScanPage, Scope
from .utils import DEFAULT_SCROLL_TTL

logger = logging.getLogger(__name__)


def _parse_total(hits: Mapping[str, Any]) -> Optional[int]:
    total = hits.get("total")
    if isinstance(total, Mapping):
        total = total.get("value")
    return int(total) if total is not None else None


class PaginatedScanner:
    """Scans every document of an index (or index/type) page by page.

    Pages are fetched lazily: the next page is only requested when the
    consumer resumes iteration, so at most one page is held in memory.

    Examples:
        >>> scanner = PaginatedScanner(client, scroll_ttl="1m")
        >>> for page in scanner.iter_pages(Scope("fixtures", "doc")):
        ...     print(page.ids)
    """

    def __init__(
        self,
        client: SearchClient,
        scroll_ttl: str = DEFAULT_SCROLL_TTL,
        page_size: Optional[int] = None,
    ):
        """Initialize the scanner.

        Args:
            client: Search engine client
            scroll_ttl: Time-to-live of the cursor between two pages
            page_size: Hits per page (server default if None)
        """
        self.client = client
        self.scroll_ttl = scroll_ttl
        self.page_size = page_size

    def _to_page(self, response: Mapping[str, Any]) -> ScanPage:
        hits = response.get("hits") or {}
        scroll_id = response.get("_scroll_id")
        cursor = ScanCursor(scroll_id, self.scroll_ttl) if scroll_id else None
        return ScanPage(
            hits=list(hits.get("hits") or []),
            cursor=cursor,
            total=_parse_total(hits),
        )

    def open(self, scope: Scope) -> ScanPage:
        """Open a scan and return its first page."""
        response = self.client.open_scroll(
            scope.require_index(),
            doc_type=scope.doc_type,
            scroll=self.scroll_ttl,
            size=self.page_size,
        )
        page = self._to_page(response)
        logger.debug(
            f"Opened scan over {scope}: {page.total} document(s), "
            f"first page has {len(page)}"
        )
        return page

    def next_page(self, cursor: ScanCursor) -> ScanPage:
        """Fetch the page following ``cursor``.

        Raises:
            ScanExpiredError: If the cursor expired on the server
        """
        return self._to_page(self.client.scroll(cursor.scroll_id, scroll=cursor.ttl))

    def release(self, cursor: ScanCursor) -> None:
        """Release the server-side resources of a scan.

        A failed release is logged and not raised; the cursor then expires
        after its time-to-live.
        """
        try:
            self.client.clear_scroll(cursor.scroll_id)
        except TransportError as e:
            logger.warning(f"Could not release scan cursor: {e}")

    def iter_pages(self, scope: Scope) -> Generator[ScanPage, None, None]:
        """Iterate over the non-empty pages of a scan.

        The cursor is released when iteration ends, fails or the generator
        is closed.

        Yields:
            Pages in server order until an empty page is returned
        """
        page = self.open(scope)
        cursor = page.cursor
        number = 0
        try:
            while page.hits:
                number += 1
                logger.debug(f"Scan page {number} over {scope}: {len(page)} hit(s)")
                yield page
                if page.cursor is None:
                    break
                page = self.next_page(page.cursor)
                cursor = page.cursor or cursor
        finally:
            if cursor is not None:
                self.release(cursor)
