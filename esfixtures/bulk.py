"""Submission of bulk operations to the search engine."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Union

from .api import SearchClient
from .exceptions import (
    InvalidDocumentError,
    ScopeError,
    TransportError,
    WriteFailedError,
)
from .models import BULK_ACTIONS, BulkOperation, BulkResult, Scope

logger = logging.getLogger(__name__)

BulkInput = Union[Sequence[BulkOperation], Sequence[Mapping[str, Any]]]


def parse_bulk_entries(entries: Iterable[Mapping[str, Any]]) -> list[BulkOperation]:
    """Pair raw bulk entries into operations.

    ``entries`` uses the documented bulk format: an action entry such as
    ``{"index": {"_id": 1}}`` followed by its payload, except for ``delete``
    actions which have none.

    Raises:
        InvalidDocumentError: If the entries are not correctly paired
    """
    operations = []
    iterator = iter(enumerate(entries))
    for position, entry in iterator:
        if not isinstance(entry, Mapping) or len(entry) != 1:
            raise InvalidDocumentError(
                f"Bulk entry {position} is not an action: expected a single key "
                f"out of {', '.join(BULK_ACTIONS)}"
            )
        action, meta = next(iter(entry.items()))
        if action not in BULK_ACTIONS:
            raise InvalidDocumentError(f"Unknown bulk action {action!r} at {position}")
        meta = meta or {}
        if not isinstance(meta, Mapping):
            raise InvalidDocumentError(f"Bulk action at {position} is not an object")

        body = None
        if action != "delete":
            try:
                _, body = next(iterator)
            except StopIteration:
                raise InvalidDocumentError(
                    f"Bulk action {action!r} at {position} has no payload"
                ) from None
            if not isinstance(body, Mapping):
                raise InvalidDocumentError(
                    f"Payload of bulk action at {position} is not an object"
                )
            body = dict(body)

        operations.append(
            BulkOperation(
                action,
                identifier=meta.get("_id"),
                body=body,
                index=meta.get("_index"),
                doc_type=meta.get("_type"),
            )
        )
    return operations


class BulkExecutor:
    """Submits bulk operations and interprets the per-item response."""

    def __init__(self, client: SearchClient):
        """Initialize the executor.

        Args:
            client: Search engine client
        """
        self.client = client

    def execute(
        self,
        operations: BulkInput,
        scope: Scope,
        refresh: bool = True,
    ) -> BulkResult:
        """Submit operations to the bulk endpoint.

        Partial failures do not raise; check ``BulkResult.errors``.

        Args:
            operations: BulkOperation objects or raw action/payload entries
            scope: Default index/type for operations that do not name one
            refresh: Make the writes immediately visible

        Returns:
            Parsed bulk response

        Raises:
            WriteFailedError: If the request as a whole fails
        """
        ops = self._coerce(operations)
        if not ops:
            logger.debug("Empty bulk request, nothing to submit")
            return BulkResult()
        if not scope.index and any(op.index is None for op in ops):
            raise ScopeError("Bulk actions without an _index need a default index")

        entries = [entry for op in ops for entry in op.to_entries()]
        try:
            response = self.client.bulk(
                entries,
                index=scope.index,
                doc_type=scope.doc_type,
                refresh=refresh,
            )
        except TransportError as e:
            raise WriteFailedError(f"Bulk request to {scope} failed: {e}") from e

        result = BulkResult.from_api_response(response)
        if result.errors:
            logger.warning(
                f"Bulk request to {scope}: {len(result.failed_items)} of "
                f"{len(result.items)} item(s) failed"
            )
        else:
            logger.info(f"Bulk request to {scope}: {len(result.items)} item(s) written")
        return result

    @staticmethod
    def _coerce(operations: BulkInput) -> list[BulkOperation]:
        ops = list(operations)
        if all(isinstance(op, BulkOperation) for op in ops):
            return ops  # type: ignore[return-value]
        return parse_bulk_entries(ops)  # type: ignore[arg-type]
