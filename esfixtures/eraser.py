"""Removal of every document from an index or index/type.

Servers with a built-in ``_delete_by_query`` endpoint are cleared with one
request. Older servers are cleared by scanning the scope and deleting each
page of documents before the next page is requested.
"""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from contextlib import closing
from typing import Optional

from .api import SearchClient
from .exceptions import ScopeError
from .models import ClearResult, ScanPage, Scope, ServerVersionInfo
from .scanner import PaginatedScanner
from .utils import DEFAULT_DELETE_WORKERS, DEFAULT_SCROLL_TTL

logger = logging.getLogger(__name__)


class DeletionStrategy:
    """Base class of the ways a scope can be emptied."""

    name = ""

    def __init__(self, client: SearchClient, version: ServerVersionInfo):
        self.client = client
        self.version = version

    def erase(self, scope: Scope, refresh: bool) -> ClearResult:
        raise NotImplementedError


class DeleteByQueryStrategy(DeletionStrategy):
    """Single server-side delete-by-query request."""

    name = "delete_by_query"

    def erase(self, scope: Scope, refresh: bool) -> ClearResult:
        # Servers without mapping types reject a type segment in the URL
        doc_type = scope.doc_type if self.version.requires_document_type else None
        response = self.client.delete_by_query(
            scope.require_index(), doc_type=doc_type, refresh=refresh
        )
        deleted = int(response.get("deleted", 0))
        logger.info(f"Deleted {deleted} document(s) from {scope} by query")
        return ClearResult(self.name, deleted=deleted, pages=0)


class ScanAndDeleteStrategy(DeletionStrategy):
    """Scan the scope and delete every page of documents one by one.

    Deletes of one page run concurrently; all of them complete before the
    next page is requested. The first failed delete aborts the scan.
    """

    name = "scan_and_delete"

    def __init__(
        self,
        client: SearchClient,
        version: ServerVersionInfo,
        scanner: PaginatedScanner,
        max_workers: int = DEFAULT_DELETE_WORKERS,
    ):
        super().__init__(client, version)
        self.scanner = scanner
        self.max_workers = max(1, max_workers)

    def erase(self, scope: Scope, refresh: bool) -> ClearResult:
        index = scope.require_index()
        if not scope.doc_type and self.version.requires_document_type:
            raise ScopeError(
                f"Clearing {index} on server {self.version.number} requires a type"
            )

        result = ClearResult(self.name)
        with ThreadPoolExecutor(
            max_workers=self.max_workers
        ) as executor, closing(self.scanner.iter_pages(scope)) as pages:
            for page in pages:
                self._delete_page(executor, page, scope, refresh)
                result.pages += 1
                result.deleted += len(page)

        logger.info(
            f"Deleted {result.deleted} document(s) from {scope} "
            f"in {result.pages} page(s)"
        )
        return result

    def _delete_page(
        self,
        executor: ThreadPoolExecutor,
        page: ScanPage,
        scope: Scope,
        refresh: bool,
    ) -> None:
        futures = [
            executor.submit(
                self.client.delete_document,
                scope.index,
                doc_id,
                doc_type=scope.doc_type,
                refresh=refresh,
            )
            for doc_id in page.ids
        ]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in done:
            if future.exception() is not None:
                for other in pending:
                    other.cancel()
                raise future.exception()  # type: ignore[misc]


class CollectionEraser:
    """Empties a scope using the strategy the server version allows."""

    def __init__(
        self,
        client: SearchClient,
        scroll_ttl: str = DEFAULT_SCROLL_TTL,
        page_size: Optional[int] = None,
        max_workers: int = DEFAULT_DELETE_WORKERS,
    ):
        """Initialize the eraser.

        Args:
            client: Search engine client
            scroll_ttl: Cursor time-to-live used by the scan strategy
            page_size: Scan page size (server default if None)
            max_workers: Concurrent deletes per page for the scan strategy
        """
        self.client = client
        self.scroll_ttl = scroll_ttl
        self.page_size = page_size
        self.max_workers = max_workers

    def select_strategy(self, version: ServerVersionInfo) -> DeletionStrategy:
        """Pick the deletion strategy for a server version."""
        if version.supports_delete_by_query:
            return DeleteByQueryStrategy(self.client, version)
        scanner = PaginatedScanner(
            self.client, scroll_ttl=self.scroll_ttl, page_size=self.page_size
        )
        return ScanAndDeleteStrategy(
            self.client, version, scanner, max_workers=self.max_workers
        )

    def clear(self, scope: Scope, refresh: bool = True) -> ClearResult:
        """Delete every document in the scope.

        Not linearizable against concurrent writers: documents indexed
        after the scan was opened may survive.

        Args:
            scope: Index (and optional type) to empty
            refresh: Make the deletes immediately visible

        Returns:
            Summary with the strategy used and the number of deleted documents
        """
        scope.require_index()
        version = self.client.get_server_version()
        strategy = self.select_strategy(version)
        logger.debug(
            f"Server {version.distribution} {version.number}: "
            f"clearing {scope} with {strategy.name}"
        )
        return strategy.erase(scope, refresh)
