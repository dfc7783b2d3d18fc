"""Unit tests for PaginatedScanner."""

import logging
from unittest.mock import Mock

import pytest

from esfixtures.api import SearchClient
from esfixtures.exceptions import ScanExpiredError, ScopeError, TransportError
from esfixtures.models import ScanCursor, Scope
from esfixtures.scanner import PaginatedScanner


def page(scroll_id, ids, total=None):
    hits = {"hits": [{"_id": i} for i in ids]}
    if total is not None:
        hits["total"] = total
    return {"_scroll_id": scroll_id, "hits": hits}


@pytest.fixture
def mock_client():
    return Mock(spec=SearchClient)


class TestPaginatedScanner:
    """Tests for page iteration."""

    def test_iterates_until_empty_page(self, mock_client):
        """Test that pages are yielded until the server returns none."""
        mock_client.open_scroll.return_value = page("s1", ["1", "2"], total=3)
        mock_client.scroll.side_effect = [page("s2", ["3"]), page("s3", [])]
        scanner = PaginatedScanner(mock_client, scroll_ttl="30s", page_size=2)

        pages = [p.ids for p in scanner.iter_pages(Scope("fx", "t"))]

        assert pages == [["1", "2"], ["3"]]
        mock_client.open_scroll.assert_called_once_with(
            "fx", doc_type="t", scroll="30s", size=2
        )
        assert [c.args[0] for c in mock_client.scroll.call_args_list] == ["s1", "s2"]
        mock_client.clear_scroll.assert_called_once_with("s3")

    def test_uses_latest_cursor_and_ttl(self, mock_client):
        """Test that each page continues from the cursor it returned."""
        mock_client.open_scroll.return_value = page("s1", ["1"])
        mock_client.scroll.side_effect = [page("s2", ["2"]), page("s2", [])]
        scanner = PaginatedScanner(mock_client, scroll_ttl="2m")

        list(scanner.iter_pages(Scope("fx")))

        mock_client.scroll.assert_called_with("s2", scroll="2m")

    def test_empty_scope(self, mock_client):
        """Test that an empty first page yields nothing."""
        mock_client.open_scroll.return_value = page("s1", [], total=0)
        scanner = PaginatedScanner(mock_client)

        assert list(scanner.iter_pages(Scope("fx"))) == []
        mock_client.scroll.assert_not_called()
        mock_client.clear_scroll.assert_called_once_with("s1")

    def test_pages_are_lazy(self, mock_client):
        """Test that the next page is requested only when iteration resumes."""
        mock_client.open_scroll.return_value = page("s1", ["1"])
        mock_client.scroll.return_value = page("s1", [])
        scanner = PaginatedScanner(mock_client)

        pages = scanner.iter_pages(Scope("fx"))
        first = next(pages)

        assert first.ids == ["1"]
        mock_client.scroll.assert_not_called()
        assert list(pages) == []
        mock_client.scroll.assert_called_once()

    def test_total_as_object(self, mock_client):
        """Test the 7.x "total": {"value": n} form."""
        mock_client.open_scroll.return_value = page(
            "s1", ["1"], total={"value": 1, "relation": "eq"}
        )
        scanner = PaginatedScanner(mock_client)

        assert scanner.open(Scope("fx")).total == 1

    def test_cursor(self, mock_client):
        """Test the cursor carried by a page."""
        mock_client.open_scroll.return_value = page("abc", ["1"])
        scanner = PaginatedScanner(mock_client, scroll_ttl="45s")

        assert scanner.open(Scope("fx")).cursor == ScanCursor("abc", "45s")

    def test_expired_cursor_propagates(self, mock_client):
        """Test that an expired cursor ends the scan with an error."""
        mock_client.open_scroll.return_value = page("s1", ["1"])
        mock_client.scroll.side_effect = ScanExpiredError("Scroll cursor expired")
        scanner = PaginatedScanner(mock_client)

        with pytest.raises(ScanExpiredError):
            list(scanner.iter_pages(Scope("fx")))
        mock_client.clear_scroll.assert_called_once_with("s1")

    def test_requires_index(self, mock_client):
        """Test that scanning needs an index."""
        with pytest.raises(ScopeError):
            list(PaginatedScanner(mock_client).iter_pages(Scope()))


class TestRelease:
    """Tests for releasing the scan cursor."""

    def test_released_when_iteration_stops_early(self, mock_client):
        """Test that closing the iterator releases the cursor."""
        mock_client.open_scroll.return_value = page("s1", ["1", "2"])
        scanner = PaginatedScanner(mock_client)

        pages = scanner.iter_pages(Scope("fx"))
        next(pages)
        pages.close()

        mock_client.scroll.assert_not_called()
        mock_client.clear_scroll.assert_called_once_with("s1")

    def test_release_failure_is_logged(self, mock_client, caplog):
        """Test that a failed release does not fail the scan."""
        mock_client.open_scroll.return_value = page("s1", ["1"])
        mock_client.scroll.return_value = page("s1", [])
        mock_client.clear_scroll.side_effect = TransportError("Network error: reset")
        scanner = PaginatedScanner(mock_client)

        with caplog.at_level(logging.WARNING, logger="esfixtures.scanner"):
            pages = [p.ids for p in scanner.iter_pages(Scope("fx"))]

        assert pages == [["1"]]
        assert "Could not release scan cursor" in caplog.text
