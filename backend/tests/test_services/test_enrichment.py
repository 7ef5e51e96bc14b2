"""
Tests for the enrichment engine.

Covers summary generation, categorization, scoring, priority, tags and
requirement/benefit extraction driven by the default rule tables.
"""

import pytest

from job_collector.core.enrichment_rules import EnrichmentRules, ScoreRule, TagRule
from job_collector.scrapers.base import ListingDetail
from job_collector.scrapers.linkedin import LinkedInScraper
from job_collector.services.enrichment import (
    EnrichmentEngine,
    calculate_score,
    categorize,
    contains_keyword,
    create_summary,
    determine_priority,
    extract_benefits,
    extract_requirements,
    format_tags,
    generate_tags,
)
from tests.conftest import DETAIL_PAGE, FakeFetcher, make_listing, parse_html


@pytest.mark.unit
class TestKeywordMatching:
    """Test keyword matching rules."""

    def test_long_keywords_match_substrings(self):
        """Test keywords longer than three letters match inside words."""
        assert contains_keyword("quantitative researcher", "quant")

    @pytest.mark.parametrize("text,expected", [
        ("ai engineer", True),
        ("gen-ai platform", True),
        ("email campaign manager", False),
        ("maintenance", False),
    ])
    def test_short_keywords_need_word_boundaries(self, text, expected):
        """Test short alphabetic keywords only match whole words."""
        assert contains_keyword(text, "ai") is expected

    def test_single_letter_keyword(self):
        """Test the R language keyword does not fire on every word with an r."""
        assert contains_keyword("python or r required", "r")
        assert not contains_keyword("senior researcher", "r")

    @pytest.mark.parametrize("text,expected", [
        ("python, r, sql", True),
        ("skills: python and r", True),
        ("experience with r.", True),
        ("r&d team", False),
        ("see r/quant for details", False),
    ])
    def test_single_letter_needs_separator(self, text, expected):
        """Test a single-letter keyword must be followed by a separator or the end."""
        assert contains_keyword(text, "r") is expected


@pytest.mark.unit
class TestSummary:
    """Test key-point summaries."""

    def test_first_two_sentences(self):
        """Test short fragments are dropped and two sentences kept."""
        description = "Hi! We build trading systems daily. Ok. You will own research pipelines. Apply now today please."
        assert create_summary(description) == "We build trading systems daily. You will own research pipelines"

    def test_long_summary_truncated(self):
        """Test a summary over the limit is cut to 200 chars plus ellipsis."""
        summary = create_summary("a" * 250)
        assert len(summary) == 203
        assert summary.endswith("...")

    def test_summary_under_limit_unchanged(self):
        """Test a summary under the limit is not cut."""
        assert create_summary("b" * 150) == "b" * 150

    def test_empty_description(self):
        """Test empty descriptions give an empty summary."""
        assert create_summary("") == ""
        assert create_summary("Short. Tiny!") == ""

    def test_custom_limits(self):
        """Test sentence count and length limits are configurable."""
        description = "First sentence is long enough. Second sentence is long enough."
        assert create_summary(description, max_sentences=1) == "First sentence is long enough"
        assert create_summary(description, max_sentences=1, max_length=5) == "First..."


@pytest.mark.unit
class TestCategorize:
    """Test category selection."""

    def test_first_category_in_table_order_wins(self):
        """Test Quantitative Research beats Software Engineering."""
        assert categorize("Quant Software Engineer", "") == "Quantitative Research"

    def test_description_contributes(self):
        """Test description keywords select a category."""
        assert categorize("Platform Role", "Run kubernetes clusters") == "DevOps"

    def test_default_category(self):
        """Test no keyword hit gives the default category."""
        assert categorize("Barista", "Serve coffee to guests") == "Other"

    def test_custom_default_category(self):
        """Test the default category comes from the rules."""
        rules = EnrichmentRules(categories=[], default_category="Uncategorized")
        assert categorize("Quant", "", rules) == "Uncategorized"


@pytest.mark.unit
class TestScoring:
    """Test score calculation and priority."""

    def test_empty_inputs_score_zero(self):
        """Test empty strings and missing posted time score zero."""
        assert calculate_score("", "", "", None) == 0

    def test_score_clamped_to_maximum(self):
        """Test scores above 100 are clamped."""
        assert calculate_score("Quantitative Researcher", "", "WorldQuant", "1 hour ago") == 100

    def test_score_clamped_to_minimum(self):
        """Test penalties cannot push the score below 0."""
        assert calculate_score("Senior Director", "", "", None) == 0

    def test_weights_add_up(self):
        """Test title, employer and recency weights combine."""
        assert calculate_score("Data Analyst", "", "Google", "2 days ago") == 75

    def test_senior_excludes_generic_role_weights(self):
        """Test senior titles lose the generic quant and researcher weights."""
        assert calculate_score("Senior Quant Researcher", "", "", None) == 30

    def test_remote_in_description(self):
        """Test the remote weight considers the description."""
        assert calculate_score("Barista", "Fully remote position", "", None) == 25

    def test_all_of_requires_every_keyword(self):
        """Test all_of keywords must be present for the rule to fire."""
        rules = EnrichmentRules(score_rules=[
            ScoreRule(name="qra", weight=65, keywords=["research analyst"], all_of=["quant"])
        ])
        assert calculate_score("Research Analyst", "", "", None, rules) == 0
        assert calculate_score("Quant Research Analyst", "", "", None, rules) == 65

    @pytest.mark.parametrize("score,priority", [
        (100, "High"), (80, "High"), (79, "Medium"), (60, "Medium"), (59, "Low"), (0, "Low"),
    ])
    def test_priority_thresholds(self, score, priority):
        """Test priority buckets."""
        assert determine_priority(score) == priority


@pytest.mark.unit
class TestTags:
    """Test tag generation."""

    def test_tags_in_table_order(self):
        """Test tags follow the rule table order."""
        tags = generate_tags("Senior Remote Quant Intern", "", "Taipei, Taiwan")
        assert tags == ["Remote", "Quant", "Senior", "Intern", "Taiwan"]

    def test_remote_tag_from_description(self):
        """Test the remote tag considers the description."""
        assert generate_tags("Analyst", "This role is remote", "") == ["Remote"]

    def test_ai_tag_uses_word_boundaries(self):
        """Test AI/ML fires on whole words only."""
        assert generate_tags("AI Engineer", "", "") == ["AI/ML"]
        assert generate_tags("Email Specialist", "", "") == []

    def test_taiwan_tag_is_case_sensitive(self):
        """Test the location tag matches case-sensitively."""
        assert generate_tags("Analyst", "", "Taipei, Taiwan") == ["Taiwan"]
        assert generate_tags("Analyst", "", "taipei, taiwan") == []

    def test_custom_tag_rules(self):
        """Test tag rules come from the rule set."""
        rules = EnrichmentRules(tag_rules=[TagRule(tag="Python", keywords=["python"], fields=["description"])])
        assert generate_tags("Engineer", "We use Python", "", rules) == ["Python"]

    def test_format_tags(self):
        """Test tags display as a comma-separated string."""
        assert format_tags(["Remote", "Quant"]) == "Remote, Quant"
        assert format_tags([]) == ""


@pytest.mark.unit
class TestSections:
    """Test requirement and benefit extraction."""

    DESCRIPTION = (
        "About the team\n"
        "Requirements: PhD in statistics\n"
        "  Must have Python  \n"
        "We offer equity\n"
        "Health benefits included"
    )

    def test_extract_requirements(self):
        """Test requirement lines are kept in order and trimmed."""
        assert extract_requirements(self.DESCRIPTION) == "Requirements: PhD in statistics\nMust have Python"

    def test_extract_benefits(self):
        """Test benefit lines are kept in order."""
        assert extract_benefits(self.DESCRIPTION) == "We offer equity\nHealth benefits included"

    def test_sections_truncated(self):
        """Test section text is cut to 500 characters."""
        description = "\n".join(f"Must have skill number {i}" for i in range(100))
        assert len(extract_requirements(description)) == 500

    def test_empty_description(self):
        """Test empty descriptions give empty sections."""
        assert extract_requirements("") == ""
        assert extract_benefits("") == ""


@pytest.mark.unit
class TestEnrichmentEngine:
    """Test full record enrichment."""

    def test_enrich_with_detail(self):
        """Test a listing with a parsed detail page."""
        detail = LinkedInScraper(FakeFetcher()).extract_detail(parse_html(DETAIL_PAGE))
        listing = make_listing(
            title="Quantitative Researcher",
            company="WorldQuant",
            location="Taipei, Taiwan",
            posted_time="3 hours ago"
        )

        record = EnrichmentEngine().enrich(listing, detail)

        assert record.title == "Quantitative Researcher"
        assert record.full_details
        assert record.category == "Quantitative Research"
        assert record.score == 100
        assert record.priority == "High"
        assert record.tags == ("Remote", "Quant", "Taiwan")
        assert record.summary == (
            "We are hiring a quantitative researcher to build alpha signals across markets. "
            "You will work with petabytes of financial data every single day"
        )
        assert record.requirements == "Requirements: PhD in mathematics or statistics\nMust have strong Python skills"
        assert record.benefits == "We offer a generous compensation package\nRemote friendly benefits"
        assert record.criteria["employment_type"] == "Full-time"
        assert record.company_info["industry"] == "Financial Services"
        assert record.status == "new"

    def test_enrich_without_detail(self, empty_detail):
        """Test a listing whose detail page failed still enriches."""
        listing = make_listing(title="Software Engineer", company="Acme", posted_time=None)

        record = EnrichmentEngine().enrich(listing, empty_detail)

        assert not record.full_details
        assert record.description == ""
        assert record.summary == ""
        assert record.category == "Software Engineering"
        assert record.score == 0
        assert record.priority == "Low"
        assert record.tags == ()

    def test_custom_summary_limits(self):
        """Test engine summary limits are applied."""
        detail = ListingDetail(description="This is a fairly long opening sentence. And another one here.")
        record = EnrichmentEngine(summary_max_sentences=1, summary_max_length=10).enrich(make_listing(), detail)
        assert record.summary == "This is a ..."
