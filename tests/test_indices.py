"""Unit tests for IndexLifecycleManager."""

from unittest.mock import Mock

import pytest

from esfixtures.api import SearchClient
from esfixtures.exceptions import IndexExistsError, IndexNotFoundError, ScopeError
from esfixtures.indices import IndexLifecycleManager
from esfixtures.models import Scope

from .conftest import FakeSearchClient


@pytest.fixture
def mock_client():
    client = Mock(spec=SearchClient)
    client.create_index.return_value = {"acknowledged": True}
    return client


class TestCreateIndex:
    """Tests for create_index()."""

    def test_create_without_force(self, mock_client):
        """Test that no delete is issued without force."""
        manager = IndexLifecycleManager(mock_client, Scope("fx"))

        manager.create_index({"settings": {"number_of_shards": 1}})

        mock_client.delete_index.assert_not_called()
        mock_client.create_index.assert_called_once_with(
            "fx", {"settings": {"number_of_shards": 1}}
        )

    def test_existing_index_without_force(self, mock_client):
        """Test that IndexExistsError reaches the caller."""
        mock_client.create_index.side_effect = IndexExistsError("Index already exists")
        manager = IndexLifecycleManager(mock_client, Scope("fx"))

        with pytest.raises(IndexExistsError):
            manager.create_index()

    def test_force_deletes_first(self, mock_client):
        """Test delete-then-create order with force."""
        parent = Mock()
        parent.attach_mock(mock_client.delete_index, "delete_index")
        parent.attach_mock(mock_client.create_index, "create_index")
        manager = IndexLifecycleManager(mock_client, Scope("fx"))

        manager.create_index({"mappings": {}}, force=True)

        assert [c[0] for c in parent.mock_calls] == ["delete_index", "create_index"]

    def test_force_on_missing_index(self, mock_client):
        """Test that a missing index is not an error with force."""
        mock_client.delete_index.side_effect = IndexNotFoundError("Index not found")
        manager = IndexLifecycleManager(mock_client, Scope("fx"))

        manager.create_index(None, force=True)

        mock_client.create_index.assert_called_once_with("fx", None)

    def test_force_replaces_existing_index(self):
        """Test that the new body replaces the old index."""
        client = FakeSearchClient()
        client.create_index("fx", {"settings": {"old": True}})
        manager = IndexLifecycleManager(client, Scope("fx"))

        manager.create_index({"settings": {"new": True}}, force=True)

        assert client.indices["fx"]["body"] == {"settings": {"new": True}}

    def test_requires_index(self, mock_client):
        with pytest.raises(ScopeError):
            IndexLifecycleManager(mock_client, Scope()).create_index()


class TestRecreateIndex:
    """Tests for recreate_index()."""

    def test_absent_index_not_deleted(self):
        """Test that no delete request is made for a missing index."""
        client = FakeSearchClient()
        manager = IndexLifecycleManager(client, Scope("fx"))

        manager.recreate_index({"settings": {}})

        assert client.calls_to("delete_index") == []
        assert "fx" in client.indices

    def test_present_index_deleted(self):
        """Test that an existing index is replaced."""
        client = FakeSearchClient()
        client.create_index("fx", {"settings": {"old": True}})
        manager = IndexLifecycleManager(client, Scope("fx"))

        manager.recreate_index({"settings": {"new": True}})

        assert client.calls_to("delete_index") == [{"index": "fx"}]
        assert client.indices["fx"]["body"] == {"settings": {"new": True}}


class TestDeleteIndex:
    """Tests for delete_index()."""

    def test_missing_index_raises(self, mock_client):
        mock_client.delete_index.side_effect = IndexNotFoundError("Index not found")

        with pytest.raises(IndexNotFoundError):
            IndexLifecycleManager(mock_client, Scope("fx")).delete_index()

    def test_missing_index_ignored(self, mock_client):
        mock_client.delete_index.side_effect = IndexNotFoundError("Index not found")

        deleted = IndexLifecycleManager(mock_client, Scope("fx")).delete_index(
            ignore_missing=True
        )

        assert deleted is False


class TestAddMapping:
    """Tests for add_mapping()."""

    def test_mapping_on_type(self, mock_client):
        """Test that the scope's type is used for the mapping."""
        manager = IndexLifecycleManager(mock_client, Scope("fx", "t"))
        mapping = {"properties": {"name": {"type": "keyword"}}}

        manager.add_mapping(mapping)

        mock_client.put_mapping.assert_called_once_with("fx", mapping, doc_type="t")

    def test_missing_index(self):
        """Test that a missing index surfaces as IndexNotFoundError."""
        manager = IndexLifecycleManager(FakeSearchClient(), Scope("missing", "t"))

        with pytest.raises(IndexNotFoundError):
            manager.add_mapping({"properties": {}})
