"""esfixtures - Load and clear fixture documents in Elasticsearch/OpenSearch."""

from .api import SearchClient
from .bulk import BulkExecutor, parse_bulk_entries
from .encoder import DocumentBatchEncoder
from .eraser import CollectionEraser
from .exceptions import (
    AuthenticationError,
    DataFileError,
    EsFixturesConfigError,
    EsFixturesError,
    IndexExistsError,
    IndexNotFoundError,
    InvalidDocumentError,
    NotFoundError,
    ScanExpiredError,
    ScopeError,
    TransportError,
    WriteFailedError,
)
from .indices import IndexLifecycleManager
from .loader import FixtureLoader, bootstrap
from .models import (
    BulkOperation,
    BulkResult,
    ClearResult,
    IdentifierStrategy,
    Scope,
    ServerVersionInfo,
    SyncOptions,
)
from .scanner import PaginatedScanner

__all__ = [
    "bootstrap",
    "FixtureLoader",
    "SearchClient",
    "BulkExecutor",
    "CollectionEraser",
    "DocumentBatchEncoder",
    "IndexLifecycleManager",
    "PaginatedScanner",
    "parse_bulk_entries",
    "BulkOperation",
    "BulkResult",
    "ClearResult",
    "IdentifierStrategy",
    "Scope",
    "ServerVersionInfo",
    "SyncOptions",
    "AuthenticationError",
    "DataFileError",
    "EsFixturesConfigError",
    "EsFixturesError",
    "IndexExistsError",
    "IndexNotFoundError",
    "InvalidDocumentError",
    "NotFoundError",
    "ScanExpiredError",
    "ScopeError",
    "TransportError",
    "WriteFailedError",
]
