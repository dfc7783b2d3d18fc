"""Shared fixtures: an in-memory search engine standing in for SearchClient."""

import itertools
import threading
import uuid
from typing import Any, Optional

import pytest

from esfixtures.bulk import parse_bulk_entries
from esfixtures.exceptions import (
    IndexExistsError,
    IndexNotFoundError,
    NotFoundError,
    ScanExpiredError,
)
from esfixtures.loader import FixtureLoader
from esfixtures.models import ServerVersionInfo

DEFAULT_PAGE_SIZE = 10


class FakeSearchClient:
    """Implements the SearchClient surface over in-memory dictionaries.

    Documents are keyed by (type, id). Ids are stored as strings like the
    real engine returns them. Writes are visible immediately regardless of
    the refresh flag; the flag is recorded for assertions.
    """

    def __init__(self, version: str = "2.4.6", distribution: str = "elasticsearch"):
        self.version = version
        self.distribution = distribution
        self.indices: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self._scrolls: dict[str, list[tuple[str, str]]] = {}
        self._scroll_ids = itertools.count(1)
        self._lock = threading.Lock()

    def _record(self, name: str, **kwargs: Any) -> None:
        with self._lock:
            self.calls.append((name, kwargs))

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        return [kwargs for call, kwargs in self.calls if call == name]

    def _get_index(self, index: str) -> dict[str, Any]:
        if index not in self.indices:
            raise IndexNotFoundError(
                f"Index not found: no such index [{index}]",
                status_code=404,
                error_type="index_not_found_exception",
            )
        return self.indices[index]

    def _ensure_index(self, index: str) -> dict[str, Any]:
        return self.indices.setdefault(index, {"body": None, "docs": {}, "mappings": {}})

    def _matching(self, index: str, doc_type: Optional[str]) -> list[tuple[str, str]]:
        docs = self._get_index(index)["docs"]
        return [key for key in docs if doc_type is None or key[0] == doc_type]

    def close(self) -> None:
        self.closed = True

    # Cluster

    def info(self) -> dict[str, Any]:
        self._record("info")
        return {
            "cluster_name": "fixtures",
            "version": {"number": self.version, "distribution": self.distribution},
        }

    def get_server_version(self) -> ServerVersionInfo:
        return ServerVersionInfo.from_api_response(self.info())

    # Documents

    def bulk(self, entries, index=None, doc_type=None, refresh=False):
        entries = list(entries)
        self._record("bulk", index=index, doc_type=doc_type, refresh=refresh)
        items = []
        for op in parse_bulk_entries(entries):
            target = op.index or index
            target_type = op.doc_type or doc_type or "_doc"
            docs = self._ensure_index(target)["docs"]
            if op.action == "delete":
                key = (target_type, str(op.identifier))
                found = docs.pop(key, None) is not None
                items.append(
                    {
                        "delete": {
                            "_index": target,
                            "_type": target_type,
                            "_id": str(op.identifier),
                            "status": 200 if found else 404,
                        }
                    }
                )
                continue
            doc_id = (
                str(op.identifier) if op.identifier is not None else uuid.uuid4().hex
            )
            docs[(target_type, doc_id)] = dict(op.body or {})
            items.append(
                {
                    op.action: {
                        "_index": target,
                        "_type": target_type,
                        "_id": doc_id,
                        "status": 201,
                    }
                }
            )
        return {"took": 1, "errors": False, "items": items}

    def seed_document(self, index, body, doc_type=None, doc_id=None):
        """Store a document directly, bypassing the bulk endpoint."""
        doc_id = str(doc_id) if doc_id is not None else uuid.uuid4().hex
        self._ensure_index(index)["docs"][(doc_type or "_doc", doc_id)] = dict(body)
        return {"_index": index, "_id": doc_id, "created": True}

    def delete_document(self, index, doc_id, doc_type=None, refresh=False):
        self._record(
            "delete_document",
            index=index,
            doc_id=doc_id,
            doc_type=doc_type,
            refresh=refresh,
        )
        with self._lock:
            docs = self._get_index(index)["docs"]
            if docs.pop((doc_type or "_doc", str(doc_id)), None) is None:
                raise NotFoundError(
                    f"Resource not found: {doc_id}", status_code=404
                )
        return {"found": True, "_id": doc_id}

    def delete_by_query(self, index, doc_type=None, query=None, refresh=False):
        self._record("delete_by_query", index=index, doc_type=doc_type, refresh=refresh)
        keys = self._matching(index, doc_type)
        docs = self.indices[index]["docs"]
        for key in keys:
            del docs[key]
        return {"deleted": len(keys), "failures": []}

    def count(self, index, doc_type=None):
        return len(self._matching(index, doc_type))

    def get_document(self, index, doc_id, doc_type="_doc"):
        return self._get_index(index)["docs"][(doc_type, str(doc_id))]

    def ids(self, index, doc_type=None):
        return [key[1] for key in self._matching(index, doc_type)]

    # Scroll

    def _page(self, scroll_id: str, size: int, total: int) -> dict[str, Any]:
        remaining = self._scrolls[scroll_id]
        page, self._scrolls[scroll_id] = remaining[:size], remaining[size:]
        return {
            "_scroll_id": scroll_id,
            "hits": {
                "total": total,
                "hits": [{"_type": t, "_id": i, "_score": None} for t, i in page],
            },
        }

    def open_scroll(self, index, doc_type=None, scroll="30s", size=None, source=False):
        self._record("open_scroll", index=index, doc_type=doc_type, scroll=scroll)
        keys = self._matching(index, doc_type)
        scroll_id = f"scroll-{next(self._scroll_ids)}"
        self._scrolls[scroll_id] = list(keys)
        self._page_size = size or DEFAULT_PAGE_SIZE
        return self._page(scroll_id, self._page_size, len(keys))

    def scroll(self, scroll_id, scroll="30s"):
        self._record("scroll", scroll_id=scroll_id, scroll=scroll)
        if scroll_id not in self._scrolls:
            raise ScanExpiredError("Scroll cursor expired", status_code=404)
        return self._page(scroll_id, self._page_size, 0)

    def clear_scroll(self, scroll_id):
        self._record("clear_scroll", scroll_id=scroll_id)
        self._scrolls.pop(scroll_id, None)
        return {"succeeded": True}

    # Indices

    def create_index(self, index, body=None):
        self._record("create_index", index=index, body=body)
        if index in self.indices:
            raise IndexExistsError(
                f"Index already exists: [{index}]",
                status_code=400,
                error_type="index_already_exists_exception",
            )
        self.indices[index] = {"body": body, "docs": {}, "mappings": {}}
        return {"acknowledged": True}

    def delete_index(self, index):
        self._record("delete_index", index=index)
        self._get_index(index)
        del self.indices[index]
        return {"acknowledged": True}

    def index_exists(self, index):
        self._record("index_exists", index=index)
        return index in self.indices

    def put_mapping(self, index, body, doc_type=None):
        self._record("put_mapping", index=index, doc_type=doc_type)
        self._get_index(index)["mappings"][doc_type] = body
        return {"acknowledged": True}


@pytest.fixture
def fake_client():
    """In-memory engine reporting a 2.x version (scan-and-delete path)."""
    return FakeSearchClient(version="2.4.6")


@pytest.fixture
def loader(fake_client):
    """Loader on fixtures/my_type backed by the in-memory engine."""
    return FixtureLoader(fake_client, "fixtures", "my_type", page_size=DEFAULT_PAGE_SIZE)
