"""
Enrichment Rules

Keyword tables that drive categorization, scoring and tagging of listings.
Defaults live here; a JSON file can override any top-level table.
"""

import json
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from job_collector.core.exceptions import ConfigurationError
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)

MatchField = Literal["title", "description", "company", "posted_time", "location"]


class CategoryRule(BaseModel):
    """A category and the keywords that select it."""
    name: str
    keywords: List[str] = Field(min_length=1)


class ScoreRule(BaseModel):
    """
    Weighted scoring rule.

    Fires when any keyword appears in any of ``fields``, every ``all_of``
    keyword appears there too, and no ``exclude`` keyword does.
    """
    name: str
    weight: int
    keywords: List[str] = Field(min_length=1)
    fields: List[MatchField] = Field(default_factory=lambda: ["title"], min_length=1)
    all_of: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


class TagRule(BaseModel):
    """Tag attached when any keyword appears in any of ``fields``."""
    tag: str
    keywords: List[str] = Field(min_length=1)
    fields: List[MatchField] = Field(default_factory=lambda: ["title"], min_length=1)
    case_sensitive: bool = False


DEFAULT_CATEGORIES = [
    CategoryRule(name="Quantitative Research",
                 keywords=["quant", "quantitative", "research", "analyst", "brain", "wqbrain"]),
    CategoryRule(name="Machine Learning",
                 keywords=["machine learning", "ml", "ai", "artificial intelligence", "data science"]),
    CategoryRule(name="Software Engineering",
                 keywords=["software", "engineer", "developer", "programming", "coding"]),
    CategoryRule(name="Data Science",
                 keywords=["data scientist", "data analyst", "analytics", "statistics"]),
    CategoryRule(name="Finance",
                 keywords=["finance", "financial", "trading", "investment", "portfolio"]),
    CategoryRule(name="Security",
                 keywords=["security", "cybersecurity", "assurance", "risk"]),
    CategoryRule(name="DevOps",
                 keywords=["devops", "containerization", "virtualization", "kubernetes", "docker"]),
    CategoryRule(name="Product Management",
                 keywords=["product manager", "product owner", "pm"]),
    CategoryRule(name="Consulting",
                 keywords=["consultant", "consulting", "advisory"]),
]

DEFAULT_SCORE_RULES = [
    # Role fit
    ScoreRule(name="quant_researcher", weight=70,
              keywords=["quantitative researcher", "quant researcher"]),
    ScoreRule(name="quant_analyst", weight=60,
              keywords=["quantitative analyst", "quant analyst"]),
    ScoreRule(name="quant_research_analyst", weight=65,
              keywords=["research analyst"], all_of=["quant"]),
    ScoreRule(name="quant", weight=50, keywords=["quant"], exclude=["senior"]),
    ScoreRule(name="researcher", weight=40, keywords=["researcher"], exclude=["senior"]),
    ScoreRule(name="analyst", weight=35, keywords=["analyst"], exclude=["senior"]),

    # Remote work
    ScoreRule(name="remote", weight=25, keywords=["remote"], fields=["title", "description"]),

    # Experience level
    ScoreRule(name="junior", weight=30, keywords=["junior", "entry", "associate"]),
    ScoreRule(name="intern", weight=40, keywords=["intern", "internship"]),
    ScoreRule(name="graduate", weight=35, keywords=["graduate", "new grad"]),
    ScoreRule(name="senior_penalty", weight=-40, keywords=["senior", "lead", "principal"]),
    ScoreRule(name="director_penalty", weight=-50, keywords=["director", "head", "chief"]),
    ScoreRule(name="vp_penalty", weight=-60, keywords=["vp", "vice president"]),

    # Skills
    ScoreRule(name="python", weight=15, keywords=["python"], fields=["title", "description"]),
    ScoreRule(name="r_language", weight=15, keywords=["r"], fields=["title", "description"]),
    ScoreRule(name="statistics", weight=20, keywords=["statistics", "statistical"]),
    ScoreRule(name="mathematics", weight=20, keywords=["mathematics", "math"]),
    ScoreRule(name="finance", weight=15, keywords=["finance", "financial"]),
    ScoreRule(name="machine_learning", weight=25, keywords=["machine learning", "ai"]),
    ScoreRule(name="data_science", weight=20, keywords=["data science", "data scientist"]),

    # Employers
    ScoreRule(name="tier1_quant_a", weight=50, keywords=["worldquant", "citadel"], fields=["company"]),
    ScoreRule(name="tier1_quant_b", weight=50, keywords=["two sigma", "renaissance"], fields=["company"]),
    ScoreRule(name="tier1_quant_c", weight=45, keywords=["de shaw", "aqr"], fields=["company"]),
    ScoreRule(name="tier1_quant_d", weight=45, keywords=["point72", "millennium"], fields=["company"]),
    ScoreRule(name="trading_firm_a", weight=40, keywords=["jump trading", "optiver"], fields=["company"]),
    ScoreRule(name="trading_firm_b", weight=40, keywords=["jane street", "susquehanna"], fields=["company"]),
    ScoreRule(name="big_tech_a", weight=25, keywords=["google", "meta"], fields=["company"]),
    ScoreRule(name="big_tech_b", weight=20, keywords=["amazon", "microsoft"], fields=["company"]),

    # Recency
    ScoreRule(name="posted_hours_ago", weight=20, keywords=["hour", "hours"], fields=["posted_time"]),
    ScoreRule(name="posted_days_ago", weight=15, keywords=["day", "days"], fields=["posted_time"]),
    ScoreRule(name="posted_weeks_ago", weight=10, keywords=["week"], fields=["posted_time"]),

    # Work arrangement
    ScoreRule(name="work_from_home", weight=15, keywords=["work from home", "wfh"], fields=["description"]),
    ScoreRule(name="flexible", weight=10, keywords=["hybrid", "flexible"], fields=["description"]),
]

DEFAULT_TAG_RULES = [
    TagRule(tag="Remote", keywords=["remote"], fields=["title", "description"]),
    TagRule(tag="Quant", keywords=["quant"]),
    TagRule(tag="AI/ML", keywords=["ai", "machine learning"]),
    TagRule(tag="Senior", keywords=["senior", "lead"]),
    TagRule(tag="Intern", keywords=["intern"]),
    TagRule(tag="Taiwan", keywords=["Taiwan"], fields=["location"], case_sensitive=True),
]

DEFAULT_REQUIREMENT_KEYWORDS = ["require", "qualification", "must have", "essential", "mandatory"]
DEFAULT_BENEFIT_KEYWORDS = ["benefit", "offer", "package", "compensation", "perk"]


class EnrichmentRules(BaseModel):
    """Complete rule set used by the enrichment engine."""

    categories: List[CategoryRule] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    default_category: str = "Other"

    score_rules: List[ScoreRule] = Field(default_factory=lambda: list(DEFAULT_SCORE_RULES))
    score_min: int = Field(0, ge=0)
    score_max: int = Field(100, le=100)

    high_priority_threshold: int = 80
    medium_priority_threshold: int = 60

    tag_rules: List[TagRule] = Field(default_factory=lambda: list(DEFAULT_TAG_RULES))

    requirement_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_REQUIREMENT_KEYWORDS))
    benefit_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_BENEFIT_KEYWORDS))
    section_max_length: int = Field(500, gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "EnrichmentRules":
        if self.score_min > self.score_max:
            raise ValueError("score_min must not exceed score_max")
        if self.medium_priority_threshold > self.high_priority_threshold:
            raise ValueError("medium_priority_threshold must not exceed high_priority_threshold")
        return self


def load_enrichment_rules(path: Optional[str] = None) -> EnrichmentRules:
    """
    Load enrichment rules, overriding defaults with a JSON file when given.

    Args:
        path: Path to a JSON object whose top-level keys replace default tables

    Returns:
        EnrichmentRules: Validated rule set

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    if not path:
        return EnrichmentRules()

    rules_path = Path(path)
    try:
        with open(rules_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read enrichment rules from {rules_path}: {e}",
            details={"path": str(rules_path)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Enrichment rules in {rules_path} must be a JSON object",
            details={"path": str(rules_path)}
        )

    try:
        rules = EnrichmentRules.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid enrichment rules in {rules_path}",
            details={"path": str(rules_path), "errors": e.errors(include_url=False, include_context=False, include_input=False)}
        ) from e

    logger.info("Loaded enrichment rules", path=str(rules_path), overrides=sorted(data))
    return rules
