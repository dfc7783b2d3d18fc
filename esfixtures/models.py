"""Data models for search engine requests and responses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .exceptions import ScopeError
from .utils import parse_version_number

DocumentId = Union[str, int]

BULK_ACTIONS = ("index", "create", "update", "delete")


@dataclass(frozen=True)
class Scope:
    """The (index, type) pair every operation is restricted to."""

    index: Optional[str] = None
    """Index name; mandatory for everything but connectivity checks"""

    doc_type: Optional[str] = None
    """Document type; only meaningful on servers that still have types"""

    def require_index(self) -> str:
        """Return the index name or raise ScopeError if it is missing."""
        if not self.index:
            raise ScopeError("An index is required for this operation")
        return self.index

    def __str__(self) -> str:
        if self.doc_type:
            return f"{self.index}/{self.doc_type}"
        return str(self.index)


@dataclass(frozen=True)
class ServerVersionInfo:
    """Version of the connected search engine."""

    number: str
    major: int
    minor: int = 0
    distribution: str = "elasticsearch"

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> ServerVersionInfo:
        """Create from the root info endpoint response.

        Examples:
            >>> info = ServerVersionInfo.from_api_response(
            ...     {"version": {"number": "2.4.6"}}
            ... )
            >>> info.major
            2
        """
        version = data.get("version") or {}
        number = str(version.get("number", ""))
        try:
            major, minor = parse_version_number(number)
        except ValueError as e:
            raise ValueError(f"Unrecognized server version: {number!r}") from e
        distribution = version.get("distribution") or "elasticsearch"
        return cls(
            number=number, major=major, minor=minor, distribution=distribution
        )

    @property
    def is_opensearch(self) -> bool:
        return self.distribution == "opensearch"

    @property
    def supports_delete_by_query(self) -> bool:
        """Whether the server has a built-in _delete_by_query endpoint."""
        return self.is_opensearch or self.major >= 5

    @property
    def requires_document_type(self) -> bool:
        """Whether document-level URLs must include a mapping type."""
        return not self.is_opensearch and self.major < 7


class IdentifierStrategy(Enum):
    """How document identifiers are chosen when loading documents."""

    RANDOM = "random"
    """The server assigns an identifier to every document"""

    INCREMENTAL = "incremental"
    """Identifiers 1..N are assigned in document order"""

    EXPLICIT = "explicit"
    """A document's own ``_id`` field is used, otherwise the server assigns one"""


@dataclass
class BulkOperation:
    """One action of a bulk request, with its payload."""

    action: str
    """One of index, create, update or delete"""

    identifier: Optional[DocumentId] = None
    body: Optional[dict[str, Any]] = None
    index: Optional[str] = None
    doc_type: Optional[str] = None

    def action_entry(self) -> dict[str, Any]:
        """Build the action descriptor line of the bulk wire format."""
        meta: dict[str, Any] = {}
        if self.index is not None:
            meta["_index"] = self.index
        if self.doc_type is not None:
            meta["_type"] = self.doc_type
        if self.identifier is not None:
            meta["_id"] = self.identifier
        return {self.action: meta}

    def to_entries(self) -> list[dict[str, Any]]:
        """Serialize to the action entry followed by the payload, if any."""
        if self.action == "delete":
            return [self.action_entry()]
        return [self.action_entry(), self.body if self.body is not None else {}]


@dataclass
class BulkItemResult:
    """Outcome of a single item of a bulk request."""

    action: str
    index: Optional[str]
    doc_type: Optional[str]
    id: Optional[str]
    status: int
    error: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status < 300

    @classmethod
    def from_api_response(cls, item: Mapping[str, Any]) -> BulkItemResult:
        action, details = next(iter(item.items()))
        return cls(
            action=action,
            index=details.get("_index"),
            doc_type=details.get("_type"),
            id=details.get("_id"),
            status=int(details.get("status", 0)),
            error=details.get("error"),
        )


@dataclass
class BulkResult:
    """Response of a bulk request.

    ``errors`` is the aggregate flag reported by the server; callers are
    expected to check it since partial failures are not raised.
    """

    took: int = 0
    errors: bool = False
    items: list[BulkItemResult] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> BulkResult:
        return cls(
            took=int(data.get("took", 0)),
            errors=bool(data.get("errors", False)),
            items=[BulkItemResult.from_api_response(i) for i in data.get("items", [])],
            raw=dict(data),
        )

    @property
    def failed_items(self) -> list[BulkItemResult]:
        return [item for item in self.items if not item.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "took": self.took,
            "errors": self.errors,
            "items": len(self.items),
            "failed": len(self.failed_items),
        }


@dataclass(frozen=True)
class ScanCursor:
    """Opaque continuation handle of a scroll."""

    scroll_id: str
    ttl: str


@dataclass
class ScanPage:
    """One page of a scan: the hits plus the cursor for the next page."""

    hits: list[dict[str, Any]]
    cursor: Optional[ScanCursor]
    total: Optional[int] = None

    @property
    def ids(self) -> list[str]:
        return [hit["_id"] for hit in self.hits]

    def __len__(self) -> int:
        return len(self.hits)


@dataclass
class ClearResult:
    """Summary of a clear operation."""

    strategy: str
    """Deletion strategy that ran ("delete_by_query" or "scan_and_delete")"""

    deleted: int = 0
    pages: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"strategy": self.strategy, "deleted": self.deleted, "pages": self.pages}


@dataclass
class SyncOptions:
    """Options recognized by the loader operations."""

    incremental: bool = False
    """Assign sequential identifiers instead of random/explicit ones"""

    refresh: bool = True
    """Make writes immediately visible to subsequent reads"""

    force: bool = False
    """Delete the index before creating it"""
