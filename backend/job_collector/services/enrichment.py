"""
Enrichment Engine

Derives summary, category, score, priority, tags, requirements and benefits
for a new listing. Every function is pure and driven by EnrichmentRules.
"""

import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Pattern, Sequence

from job_collector.core.enrichment_rules import EnrichmentRules
from job_collector.scrapers.base import ListingDetail, RawListing
from job_collector.scrapers.utils import truncate
from job_collector.schemas.job import EnrichedRecord
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_DEFAULT_RULES = EnrichmentRules()

MIN_SENTENCE_LENGTH = 10


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> Optional[Pattern[str]]:
    # Short alphabetic keywords ("ai", "ml", "pm", "vp", "r") need word boundaries
    if keyword.isalpha() and len(keyword) == 1:
        # Single letters must be followed by a separator: "r," matches, "r&d" and "r/" do not
        return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?=[\s,.;:)]|$)")
    if keyword.isalpha() and len(keyword) <= 3:
        return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])")
    return None


def contains_keyword(text: str, keyword: str) -> bool:
    """Match a lower-cased keyword against lower-cased text."""
    pattern = _keyword_pattern(keyword)
    if pattern is None:
        return keyword in text
    return pattern.search(text) is not None


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(contains_keyword(text, keyword.lower()) for keyword in keywords)


def create_summary(description: str, max_sentences: int = 2, max_length: int = 200) -> str:
    """
    Build a key-point summary of a description.

    The description is split on runs of sentence punctuation; fragments of
    ten characters or fewer are dropped and the first ``max_sentences`` are
    joined with ". ". A result longer than ``max_length`` is cut to that many
    characters and suffixed with "...".
    """
    if not description:
        return ""

    sentences = [
        fragment.strip()
        for fragment in _SENTENCE_SPLIT_RE.split(description)
        if len(fragment.strip()) > MIN_SENTENCE_LENGTH
    ]
    summary = ". ".join(sentences[:max_sentences])

    return truncate(summary, max_length)


def categorize(title: str, description: str, rules: EnrichmentRules = _DEFAULT_RULES) -> str:
    """Return the first category in table order with a keyword hit."""
    text = f"{title or ''} {description or ''}".lower()
    for category in rules.categories:
        if contains_any(text, category.keywords):
            return category.name
    return rules.default_category


def calculate_score(
    title: str,
    description: str,
    company: str,
    posted_time: Optional[str],
    rules: EnrichmentRules = _DEFAULT_RULES
) -> int:
    """
    Sum the weights of all firing score rules, clamped to the score range.

    Args:
        title: Job title
        description: Job description
        company: Company name
        posted_time: Relative posting time text, may be None
        rules: Rule tables

    Returns:
        int: Score within [rules.score_min, rules.score_max]
    """
    fields: Dict[str, str] = {
        "title": (title or "").lower(),
        "description": (description or "").lower(),
        "company": (company or "").lower(),
        "posted_time": (posted_time or "").lower(),
        "location": "",
    }

    score = 0
    for rule in rules.score_rules:
        texts = [fields[name] for name in rule.fields]
        if not any(contains_any(text, rule.keywords) for text in texts):
            continue
        if rule.all_of and not all(
            any(contains_keyword(text, keyword.lower()) for text in texts)
            for keyword in rule.all_of
        ):
            continue
        if rule.exclude and any(contains_any(text, rule.exclude) for text in texts):
            continue
        score += rule.weight

    return max(rules.score_min, min(rules.score_max, score))


def determine_priority(score: int, rules: EnrichmentRules = _DEFAULT_RULES) -> str:
    if score >= rules.high_priority_threshold:
        return "High"
    if score >= rules.medium_priority_threshold:
        return "Medium"
    return "Low"


def generate_tags(
    title: str,
    description: str,
    location: str,
    rules: EnrichmentRules = _DEFAULT_RULES
) -> List[str]:
    """Evaluate tag predicates in table order."""
    raw_fields = {
        "title": title or "",
        "description": description or "",
        "location": location or "",
        "company": "",
        "posted_time": "",
    }

    tags = []
    for rule in rules.tag_rules:
        for name in rule.fields:
            text = raw_fields[name]
            if rule.case_sensitive:
                hit = any(keyword in text for keyword in rule.keywords)
            else:
                hit = contains_any(text.lower(), rule.keywords)
            if hit:
                tags.append(rule.tag)
                break
    return tags


def format_tags(tags: Sequence[str]) -> str:
    return ", ".join(tags)


def _extract_lines(description: str, keywords: Sequence[str], max_length: int) -> str:
    if not description:
        return ""
    lines = [
        line.strip()
        for line in description.split("\n")
        if contains_any(line.lower(), keywords)
    ]
    return truncate("\n".join(lines), max_length, marker="")


def extract_requirements(description: str, rules: EnrichmentRules = _DEFAULT_RULES) -> str:
    """Description lines mentioning requirements, truncated to the section length."""
    return _extract_lines(description, rules.requirement_keywords, rules.section_max_length)


def extract_benefits(description: str, rules: EnrichmentRules = _DEFAULT_RULES) -> str:
    """Description lines mentioning benefits, truncated to the section length."""
    return _extract_lines(description, rules.benefit_keywords, rules.section_max_length)


class EnrichmentEngine:
    """Combines a listing and its detail into an EnrichedRecord."""

    def __init__(
        self,
        rules: Optional[EnrichmentRules] = None,
        summary_max_sentences: int = 2,
        summary_max_length: int = 200
    ) -> None:
        self.rules = rules or EnrichmentRules()
        self.summary_max_sentences = summary_max_sentences
        self.summary_max_length = summary_max_length

    def enrich(self, listing: RawListing, detail: ListingDetail) -> EnrichedRecord:
        """
        Derive all computed fields for a new listing.

        Args:
            listing: Listing extracted from the search results card
            detail: Detail page content, possibly ListingDetail.empty()

        Returns:
            EnrichedRecord: Immutable record ready for a sink
        """
        description = detail.description
        score = calculate_score(
            listing.title, description, listing.company, listing.posted_time, self.rules
        )

        record = EnrichedRecord(
            title=listing.title,
            company=listing.company,
            location=listing.location,
            url=listing.url,
            source=listing.source,
            scraped_at=listing.scraped_at,
            posted_time=listing.posted_time,
            application_status=listing.application_status,
            job_type=listing.job_type,
            description=description,
            criteria=dict(detail.criteria),
            company_info=dict(detail.company_info),
            full_details=detail.full_details,
            summary=create_summary(description, self.summary_max_sentences, self.summary_max_length),
            category=categorize(listing.title, description, self.rules),
            score=score,
            priority=determine_priority(score, self.rules),
            tags=tuple(generate_tags(listing.title, description, listing.location, self.rules)),
            requirements=extract_requirements(description, self.rules),
            benefits=extract_benefits(description, self.rules),
        )

        logger.debug(
            "Enriched listing",
            title=record.title,
            category=record.category,
            score=record.score,
            priority=record.priority
        )
        return record
