"""Index and mapping lifecycle operations."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from .api import SearchClient
from .exceptions import IndexNotFoundError
from .models import Scope

logger = logging.getLogger(__name__)


class IndexLifecycleManager:
    """Creates, re-creates and maps the index of a scope."""

    def __init__(self, client: SearchClient, scope: Scope):
        """Initialize the manager.

        Args:
            client: Search engine client
            scope: Index (and type, for mappings) to manage
        """
        self.client = client
        self.scope = scope

    def exists(self) -> bool:
        return self.client.index_exists(self.scope.require_index())

    def delete_index(self, ignore_missing: bool = False) -> bool:
        """Delete the index.

        Args:
            ignore_missing: Treat a missing index as success

        Returns:
            True if an index was deleted, False if it did not exist
        """
        index = self.scope.require_index()
        try:
            self.client.delete_index(index)
        except IndexNotFoundError:
            if not ignore_missing:
                raise
            logger.debug(f"Index {index} does not exist, nothing to delete")
            return False
        logger.info(f"Deleted index {index}")
        return True

    def create_index(
        self, body: Optional[Mapping[str, Any]] = None, force: bool = False
    ) -> dict[str, Any]:
        """Create the index with optional settings and mappings.

        Args:
            body: Optional "settings"/"mappings" body
            force: Delete the index first if it exists

        Raises:
            IndexExistsError: If the index exists and ``force`` is not set
        """
        index = self.scope.require_index()
        if force:
            self.delete_index(ignore_missing=True)
        response = self.client.create_index(index, body)
        logger.info(f"Created index {index}")
        return response

    def recreate_index(self, body: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        """Create the index, deleting it first only if it already exists."""
        if self.exists():
            self.delete_index()
        return self.create_index(body)

    def add_mapping(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Add a mapping to the existing index (or to its type).

        Raises:
            IndexNotFoundError: If the index does not exist
        """
        index = self.scope.require_index()
        response = self.client.put_mapping(index, body, doc_type=self.scope.doc_type)
        logger.info(f"Added mapping to {self.scope}")
        return response
