"""
Selector Chains

Ordered CSS selector candidates for one logical field. The first candidate
yielding a non-empty value wins; order runs from the most specific selector
to the most generic.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from bs4 import Tag

from job_collector.scrapers.utils import normalize_text


@dataclass(frozen=True)
class SelectorChain:
    """Typed, ordered list of CSS selector candidates for a field."""

    field: str
    selectors: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.selectors:
            raise ValueError(f"Selector chain '{self.field}' needs at least one selector")

    def __len__(self) -> int:
        return len(self.selectors)

    def first_element(self, root: Tag) -> Optional[Tag]:
        """Return the first element matched by any candidate, in chain order."""
        for selector in self.selectors:
            element = root.select_one(selector)
            if element is not None:
                return element
        return None

    def first_value(
        self,
        root: Tag,
        extract: Callable[[Tag], str],
        reject: Optional[Callable[[str], bool]] = None
    ) -> str:
        """
        Return the first non-empty extracted value in chain order.

        Args:
            root: Element to search within
            extract: Turns a matched element into a string value
            reject: Optional predicate; values for which it returns True are
                skipped and the next candidate is tried

        Returns:
            str: Matched value or "" when no candidate yields one
        """
        for selector in self.selectors:
            element = root.select_one(selector)
            if element is None:
                continue
            value = extract(element)
            if not value:
                continue
            if reject is not None and reject(value):
                continue
            return value
        return ""

    def first_text(
        self,
        root: Tag,
        reject: Optional[Callable[[str], bool]] = None
    ) -> str:
        """Return the first non-empty whitespace-normalized text in chain order."""
        return self.first_value(root, lambda el: normalize_text(el.get_text(" ")), reject)

    def first_attr(self, root: Tag, attr: str) -> str:
        """Return the first non-empty attribute value in chain order."""
        def extract(element: Tag) -> str:
            value = element.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            return (value or "").strip()

        return self.first_value(root, extract)


# Listing card fields
TITLE_CHAIN = SelectorChain("title", (
    ".base-search-card__title a",
    ".base-search-card__title",
    ".job-search-card__title",
    "h3",
    ".job-card-list__title",
    ".job-card-container__job-title",
    ".job-card-list__title-text",
    '[data-test-id="job-title"]',
    ".artdeco-entity-lockup__title",
))

COMPANY_CHAIN = SelectorChain("company", (
    ".base-search-card__subtitle a",
    ".base-search-card__subtitle",
    ".job-search-card__company-name",
    ".job-card-container__company-name",
    ".job-card-list__company-name",
    ".artdeco-entity-lockup__subtitle",
    ".job-card-container__primary-description",
    ".job-card-list__company-name-text",
))

LOCATION_CHAIN = SelectorChain("location", (
    ".job-search-card__location",
    ".base-search-card__metadata",
    ".job-card-container__metadata-item",
    ".job-card-list__metadata",
    ".artdeco-entity-lockup__caption",
    ".job-card-container__secondary-description",
))

URL_CHAIN = SelectorChain("url", (
    ".base-card__full-link",
    ".base-search-card__title a",
    'a[href*="/jobs/view/"]',
    'a[data-test-id="job-title"]',
    ".job-card-list__title a",
    ".artdeco-entity-lockup__title a",
))

# Detail page fields
DESCRIPTION_CHAIN = SelectorChain("description", (
    ".jobs-box__html-content .jobs-description-content__text",
    ".jobs-description-content__text",
    ".jobs-box__html-content",
    ".jobs-description__content",
    ".jobs-description-content__text div",
    ".description__text",
    "[data-job-description-container]",
    ".jobs-box-list-container",
    ".jobs-box__html-content div",
))

CRITERIA_SELECTORS: Tuple[str, ...] = (
    ".jobs-unified-top-card__job-insight",
    ".jobs-box__group",
    ".jobs-unified-top-card__job-insight-view-model",
    ".description__job-criteria-item",
)

COMPANY_NAME_CHAIN = SelectorChain("company_name", (
    ".jobs-unified-top-card__company-name",
    ".jobs-unified-top-card__subtitle-primary",
    ".jobs-company__box .jobs-company__name",
))

COMPANY_INDUSTRY_CHAIN = SelectorChain("company_industry", (
    ".jobs-unified-top-card__subtitle-secondary",
    ".jobs-company__box .jobs-company__industry",
))
