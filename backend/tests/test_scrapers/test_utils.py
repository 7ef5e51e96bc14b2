"""
Tests for scraper text utilities.
"""

import pytest

from job_collector.scrapers.utils import (
    block_lines,
    block_text,
    normalize_text,
    resolve_url,
    split_lines,
    truncate,
)
from tests.conftest import parse_html


@pytest.mark.unit
class TestNormalizeText:
    """Test whitespace normalization."""

    def test_collapses_whitespace_runs(self):
        """Test tabs, newlines and repeated spaces become one space."""
        assert normalize_text("  Quant \n\t Researcher   ") == "Quant Researcher"

    @pytest.mark.parametrize("value", [None, "", "   \n\t "])
    def test_empty_input(self, value):
        """Test empty and missing input yield an empty string."""
        assert normalize_text(value) == ""

    def test_split_lines_drops_blanks(self):
        """Test line splitting trims and drops blank lines."""
        assert split_lines("  a \n\n  b\n   \nc") == ["a", "b", "c"]
        assert split_lines(None) == []


@pytest.mark.unit
class TestBlockLines:
    """Test block-aware text extraction."""

    def test_one_line_per_block(self):
        """Test each block element becomes its own line."""
        soup = parse_html("<div><h3>Title</h3><div>Acme <b>Capital</b></div><p>2 days ago</p></div>")
        assert block_lines(soup.div) == ["Title", "Acme Capital", "2 days ago"]

    def test_br_splits_lines(self):
        """Test <br> starts a new line."""
        soup = parse_html("<div>First line<br>Second   line<br/></div>")
        assert block_lines(soup.div) == ["First line", "Second line"]

    def test_ignores_scripts_and_comments(self):
        """Test script content and comments are not visible text."""
        soup = parse_html("<div><script>var x = 1;</script><!-- hidden --><p>Shown</p></div>")
        assert block_lines(soup.div) == ["Shown"]

    def test_block_text_joins_with_newlines(self):
        """Test block_text keeps line structure."""
        soup = parse_html("<div><p>One</p><ul><li>Two</li><li>Three</li></ul></div>")
        assert block_text(soup.div) == "One\nTwo\nThree"

    def test_none_element(self):
        """Test a missing element yields no lines."""
        assert block_lines(None) == []


@pytest.mark.unit
class TestUrlAndTruncate:
    """Test URL resolution and truncation."""

    def test_resolves_site_relative_href(self):
        """Test /paths are resolved against the site root."""
        assert resolve_url("/jobs/view/42", "https://www.linkedin.com") == "https://www.linkedin.com/jobs/view/42"

    def test_keeps_absolute_href(self):
        """Test absolute URLs are returned unchanged."""
        url = "https://www.linkedin.com/jobs/view/42?trk=x"
        assert resolve_url(url, "https://www.linkedin.com") == url

    def test_empty_href(self):
        """Test missing href yields an empty string."""
        assert resolve_url(None, "https://www.linkedin.com") == ""
        assert resolve_url("  ", "https://www.linkedin.com") == ""

    def test_truncate(self):
        """Test truncation appends the marker only when cut."""
        assert truncate("abcdef", 3) == "abc..."
        assert truncate("abc", 3) == "abc"
        assert truncate("abcdef", 4, marker="~") == "abcd~"
