"""Encoding of fixture documents into bulk index operations."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import InvalidDocumentError
from .models import BulkOperation, IdentifierStrategy

logger = logging.getLogger(__name__)

ID_FIELD = "_id"


def strategy_for(incremental: bool) -> IdentifierStrategy:
    """Return the identifier strategy used by ``load`` for the given flag."""
    return IdentifierStrategy.INCREMENTAL if incremental else IdentifierStrategy.EXPLICIT


class DocumentBatchEncoder:
    """Turns documents into ``index`` bulk operations.

    Encoding is a pure transformation. Caller documents are never modified:
    when an ``_id`` field is consumed, the operation carries a copy of the
    document without it.

    Examples:
        >>> encoder = DocumentBatchEncoder()
        >>> ops = encoder.encode([{"name": "Jotaro"}], IdentifierStrategy.INCREMENTAL)
        >>> ops[0].identifier
        1
    """

    def encode(
        self,
        documents: Iterable[Mapping[str, Any]],
        strategy: IdentifierStrategy = IdentifierStrategy.EXPLICIT,
    ) -> list[BulkOperation]:
        """Encode documents in input order.

        Args:
            documents: Documents to index
            strategy: How identifiers are assigned

        Returns:
            One index operation per document, in input order

        Raises:
            InvalidDocumentError: If an element is not a mapping
        """
        operations = []
        for position, document in enumerate(documents):
            if not isinstance(document, Mapping):
                raise InvalidDocumentError(
                    f"Document at position {position} is not an object: "
                    f"{type(document).__name__}"
                )

            if strategy is IdentifierStrategy.INCREMENTAL:
                operations.append(
                    BulkOperation("index", identifier=position + 1, body=dict(document))
                )
            elif strategy is IdentifierStrategy.EXPLICIT and ID_FIELD in document:
                # Empty ids ("", 0, null) fall back to a random id
                body = {k: v for k, v in document.items() if k != ID_FIELD}
                operations.append(
                    BulkOperation(
                        "index", identifier=document[ID_FIELD] or None, body=body
                    )
                )
            else:
                operations.append(BulkOperation("index", body=dict(document)))

        logger.debug(f"Encoded {len(operations)} document(s) with {strategy.value} ids")
        return operations
