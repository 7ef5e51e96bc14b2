"""
Tests for ordered selector chains.
"""

import pytest

from job_collector.scrapers.selectors import (
    COMPANY_CHAIN,
    DESCRIPTION_CHAIN,
    LOCATION_CHAIN,
    TITLE_CHAIN,
    URL_CHAIN,
    SelectorChain,
)
from tests.conftest import parse_html


@pytest.mark.unit
class TestSelectorChain:
    """Test first-match-wins evaluation."""

    def test_chain_sizes(self):
        """Test the field chains carry every candidate."""
        assert len(TITLE_CHAIN) == 9
        assert len(COMPANY_CHAIN) == 8
        assert len(LOCATION_CHAIN) == 6
        assert len(URL_CHAIN) == 6
        assert len(DESCRIPTION_CHAIN) == 9

    def test_empty_chain_rejected(self):
        """Test a chain needs at least one selector."""
        with pytest.raises(ValueError):
            SelectorChain("empty", ())

    def test_earlier_selector_wins(self):
        """Test a specific selector beats a generic one regardless of document order."""
        soup = parse_html(
            "<div><h3>Generic heading</h3>"
            "<span class='base-search-card__title'>Specific Title</span></div>"
        )
        assert TITLE_CHAIN.first_text(soup) == "Specific Title"

    def test_empty_match_falls_through(self):
        """Test an element with no text does not stop the chain."""
        soup = parse_html(
            "<div><span class='base-search-card__title'>   </span><h3>Fallback Title</h3></div>"
        )
        assert TITLE_CHAIN.first_text(soup) == "Fallback Title"

    def test_same_input_same_result(self):
        """Test evaluation is deterministic."""
        soup = parse_html(
            "<div><div class='job-card-list__title'>A</div><h3>B</h3>"
            "<div class='artdeco-entity-lockup__title'>C</div></div>"
        )
        results = {TITLE_CHAIN.first_text(soup) for _ in range(5)}
        assert results == {"B"}

    def test_reject_predicate_skips_candidate(self):
        """Test rejected text moves on to the next selector."""
        soup = parse_html(
            "<div><span class='job-search-card__location'>2 days ago</span>"
            "<span class='job-card-list__metadata'>Taipei, Taiwan</span></div>"
        )
        assert LOCATION_CHAIN.first_text(soup, reject=lambda t: "ago" in t) == "Taipei, Taiwan"

    def test_no_match_returns_empty(self):
        """Test no candidate yields an empty string."""
        soup = parse_html("<div><p>Nothing here</p></div>")
        assert COMPANY_CHAIN.first_text(soup) == ""
        assert URL_CHAIN.first_attr(soup, "href") == ""

    def test_first_attr_skips_missing_href(self):
        """Test an anchor without href falls through to the next candidate."""
        soup = parse_html(
            "<div><a class='base-card__full-link'></a>"
            "<a href='/jobs/view/7'>link</a></div>"
        )
        assert URL_CHAIN.first_attr(soup, "href") == "/jobs/view/7"
