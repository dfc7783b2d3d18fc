"""High-level fixture loader combining encoding, bulk writes and clearing."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .api import SearchClient
from .bulk import BulkExecutor, BulkInput
from .config import config
from .encoder import DocumentBatchEncoder, strategy_for
from .eraser import CollectionEraser
from .indices import IndexLifecycleManager
from .models import BulkResult, ClearResult, IdentifierStrategy, Scope, SyncOptions
from .utils import DEFAULT_DELETE_WORKERS, DEFAULT_SCROLL_TTL

logger = logging.getLogger(__name__)


class FixtureLoader:
    """Loads and clears fixture documents of one index (and type).

    The scope is fixed for the lifetime of the loader. All operations share
    the loader's client; none of them is retried on failure.

    Examples:
        >>> with bootstrap("fixtures", "doc", host="localhost:9200") as loader:
        ...     loader.clear_and_load([{"name": "Jotaro"}, {"name": "Jolyne"}])
    """

    def __init__(
        self,
        client: SearchClient,
        index: Optional[str] = None,
        doc_type: Optional[str] = None,
        scroll_ttl: str = DEFAULT_SCROLL_TTL,
        page_size: Optional[int] = None,
        max_workers: int = DEFAULT_DELETE_WORKERS,
    ):
        """Initialize the loader.

        Args:
            client: Search engine client shared by every operation
            index: Index used by the operations
            doc_type: Optional type used by the operations
            scroll_ttl: Cursor time-to-live when clearing by scan
            page_size: Scan page size when clearing by scan (server default if None)
            max_workers: Concurrent deletes per scanned page
        """
        self.client = client
        self.scope = Scope(index, doc_type)
        self.encoder = DocumentBatchEncoder()
        self.executor = BulkExecutor(client)
        self.eraser = CollectionEraser(
            client, scroll_ttl=scroll_ttl, page_size=page_size, max_workers=max_workers
        )
        self.indices = IndexLifecycleManager(client, self.scope)

    @property
    def index(self) -> Optional[str]:
        return self.scope.index

    @property
    def doc_type(self) -> Optional[str]:
        return self.scope.doc_type

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> FixtureLoader:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def load(
        self,
        documents: Iterable[Mapping[str, Any]],
        options: Optional[SyncOptions] = None,
        strategy: Optional[IdentifierStrategy] = None,
    ) -> BulkResult:
        """Index documents.

        By default a document's ``_id`` field is used as its identifier (and
        removed from the stored body); documents without one get a random
        identifier. With ``options.incremental`` documents get 1..N instead.

        Args:
            documents: Documents to index
            options: Load options (incremental, refresh)
            strategy: Explicit identifier strategy, overrides ``incremental``

        Returns:
            Bulk result; check ``errors`` for partial failures
        """
        options = options or SyncOptions()
        self.scope.require_index()
        strategy = strategy or strategy_for(options.incremental)
        operations = self.encoder.encode(documents, strategy)
        return self.executor.execute(operations, self.scope, refresh=options.refresh)

    def clear(self, options: Optional[SyncOptions] = None) -> ClearResult:
        """Delete every document of the index (or of the type)."""
        options = options or SyncOptions()
        return self.eraser.clear(self.scope, refresh=options.refresh)

    def clear_and_load(
        self,
        documents: Iterable[Mapping[str, Any]],
        options: Optional[SyncOptions] = None,
    ) -> BulkResult:
        """Delete every document, then index ``documents``.

        This is two separate operations, not a transaction: if the load
        fails or the process stops after the clear, the index is left empty.
        """
        options = options or SyncOptions()
        cleared = self.clear(options)
        logger.debug(f"Cleared {cleared.deleted} document(s), loading new ones")
        return self.load(documents, options)

    def bulk(
        self, operations: BulkInput, options: Optional[SyncOptions] = None
    ) -> BulkResult:
        """Perform raw bulk operations.

        ``operations`` are BulkOperation objects or entries in the bulk
        wire format; the loader's index and type are the defaults for
        actions that do not name their own.
        """
        options = options or SyncOptions()
        return self.executor.execute(operations, self.scope, refresh=options.refresh)

    def create_index(
        self,
        body: Optional[Mapping[str, Any]] = None,
        options: Optional[SyncOptions] = None,
    ) -> dict[str, Any]:
        """Create the index; with ``options.force`` delete it first."""
        options = options or SyncOptions()
        return self.indices.create_index(body, force=options.force)

    def recreate_index(self, body: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Create the index, deleting it first only if it exists."""
        return self.indices.recreate_index(body)

    def add_mapping(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Add a mapping to the existing index (or to the type)."""
        return self.indices.add_mapping(body)

    def count(self) -> int:
        """Count the documents of the index (or of the type)."""
        return self.client.count(self.scope.require_index(), self.scope.doc_type)

    def info(self) -> dict[str, Any]:
        """Get server information; does not require an index."""
        return self.client.info()


def bootstrap(
    index: Optional[str] = None,
    doc_type: Optional[str] = None,
    host: Optional[str] = None,
    **kwargs: Any,
) -> FixtureLoader:
    """Create a loader with its own client.

    Args:
        index: Index used by the operations
        doc_type: Optional type used by the operations
        host: Search engine host (uses config if not provided)
        **kwargs: ``username``, ``password`` and ``timeout`` go to the
            client; anything else goes to FixtureLoader. ``scroll_ttl``
            defaults to the configured value (ESFIXTURES_SCROLL)

    Returns:
        A FixtureLoader owning a new SearchClient
    """
    client_kwargs = {
        key: kwargs.pop(key)
        for key in ("username", "password", "timeout")
        if key in kwargs
    }
    kwargs.setdefault("scroll_ttl", config.scroll_ttl)
    client = SearchClient(host=host, **client_kwargs)
    return FixtureLoader(client, index, doc_type, **kwargs)
