"""
LinkedIn Job Scraper

Scraper for the LinkedIn guest job search. Listing cards and detail pages use
non-semantic, frequently changing markup, so every field is resolved through
an ordered selector chain with text-position fallbacks.
"""

from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag

from job_collector.core.config import Settings
from job_collector.core.exceptions import ExtractionError, FetchError
from job_collector.scrapers.base import BaseScraper, ListingDetail, RawListing
from job_collector.scrapers.fetcher import HttpFetcher
from job_collector.scrapers.selectors import (
    COMPANY_CHAIN,
    COMPANY_INDUSTRY_CHAIN,
    COMPANY_NAME_CHAIN,
    CRITERIA_SELECTORS,
    DESCRIPTION_CHAIN,
    LOCATION_CHAIN,
    TITLE_CHAIN,
    URL_CHAIN,
)
from job_collector.scrapers.utils import block_lines, block_text, normalize_text, resolve_url
from job_collector.utils.logger import get_logger, log_scraping_activity

logger = get_logger(__name__)

LINKEDIN_ROOT = "https://www.linkedin.com"
CARD_SELECTOR = ".job-search-card"
UNKNOWN_COMPANY = "Unknown Company"

COMPANY_LINE_REJECT_WORDS = ("ago", "applicant", "hour", "day", "week", "month")
LOCATION_HINTS = ("Taiwan", "Taipei", "Remote", "City", "County", "District")
POSTED_TIME_MARKERS = ("ago", "week", "day", "hour")
APPLICATION_STATUS_MARKERS = ("applicant", "Actively Hiring", "early applicant")

CRITERIA_LABELS: Tuple[Tuple[str, str], ...] = (
    ("Employment type", "employment_type"),
    ("Job function", "job_function"),
    ("Industries", "industries"),
    ("Seniority level", "seniority_level"),
)


def build_search_url(keywords: str, geo_id: str) -> str:
    """Build the guest job search URL for a keyword query and geo id."""
    return (
        f"{LINKEDIN_ROOT}/jobs/search/?keywords={quote(keywords)}"
        f"&geoId={geo_id}&origin=JOB_SEARCH_PAGE_SEARCH_BUTTON&refresh=true"
    )


def resolve_search_url(settings: Settings) -> str:
    """Explicit SEARCH_URL if configured, else one built from keywords and geo id."""
    return settings.SEARCH_URL or build_search_url(settings.JOB_KEYWORDS, settings.JOB_GEO_ID)


def _is_company_line(line: str) -> bool:
    if any(word in line for word in COMPANY_LINE_REJECT_WORDS):
        return False
    return 2 < len(line) < 100


class LinkedInScraper(BaseScraper):
    """
    LinkedIn guest search scraper.

    Only the first page of results is read; cards are located with
    ``.job-search-card`` and returned in document order.
    """

    def __init__(self, fetcher: Optional[HttpFetcher] = None) -> None:
        super().__init__(fetcher or HttpFetcher())

    @property
    def name(self) -> str:
        return "linkedin"

    @property
    def base_url(self) -> str:
        return LINKEDIN_ROOT

    async def collect(self, search_url: str) -> List[RawListing]:
        """
        Fetch the search results page and extract its valid listings.

        Args:
            search_url: LinkedIn job search URL

        Returns:
            List[RawListing]: Valid listings in document order
        """
        log_scraping_activity(self.name, "collect", url=search_url)

        try:
            markup = await self.fetcher.fetch(search_url)
        except FetchError as e:
            self._stats["errors"] += 1
            self.last_error = e.message
            logger.error(
                "Failed to fetch search results",
                url=search_url,
                error_code=e.error_code,
                error=e.message
            )
            return []

        self._stats["pages_fetched"] += 1
        listings = self.extract_listings(BeautifulSoup(markup, "html.parser"))
        logger.info(f"Collected {len(listings)} listings from {self.name}", url=search_url)
        return listings

    def extract_listings(self, page: Tag) -> List[RawListing]:
        """Extract valid listings from a search results page."""
        cards = page.select(CARD_SELECTOR)
        self._stats["cards_found"] += len(cards)
        logger.debug(f"Found {len(cards)} job cards on page")

        listings = []
        for card in cards:
            listing = self.extract_listing(card)
            if listing.is_valid:
                self._stats["listings_valid"] += 1
                listings.append(listing)
            else:
                self._stats["listings_invalid"] += 1
                logger.debug("Skipping invalid listing card", title=listing.title, url=listing.url)
        return listings

    def extract_listing(self, card: Tag) -> RawListing:
        """Extract a listing from a card; unreadable cards yield an invalid listing."""
        try:
            return self._extract_listing(card)
        except Exception as e:
            error = ExtractionError(f"Could not extract listing card: {e}")
            logger.warning(
                "Listing card extraction failed",
                error_code=error.error_code,
                error=error.message
            )
            return RawListing(title="", company="", location="", url="", source=self.name)

    def _extract_listing(self, card: Tag) -> RawListing:
        lines = block_lines(card)

        title = TITLE_CHAIN.first_text(card)
        company = COMPANY_CHAIN.first_text(card) or self._company_from_lines(lines)
        if not company:
            company = UNKNOWN_COMPANY
            logger.warning("Company not found on listing card", title=title)

        location = LOCATION_CHAIN.first_text(card, reject=lambda text: "ago" in text)
        if not location:
            location = next(
                (line for line in lines if any(hint in line for hint in LOCATION_HINTS)),
                ""
            )

        url = resolve_url(URL_CHAIN.first_attr(card, "href"), self.base_url)

        posted_time, application_status, job_type = self._extract_metadata(lines)

        return RawListing(
            title=title,
            company=company,
            location=location,
            url=url,
            source=self.name,
            posted_time=posted_time,
            application_status=application_status,
            job_type=job_type
        )

    @staticmethod
    def _company_from_lines(lines: List[str]) -> str:
        for index in (1, 2):
            if len(lines) > index and _is_company_line(lines[index]):
                return lines[index]
        return ""

    @staticmethod
    def _extract_metadata(lines: List[str]) -> Tuple[Optional[str], Optional[str], str]:
        # Both scans run over the same lines, so one line may fill both fields
        posted_time = next(
            (line for line in lines if any(m in line for m in POSTED_TIME_MARKERS)),
            None
        )
        application_status = next(
            (line for line in lines if any(m in line for m in APPLICATION_STATUS_MARKERS)),
            None
        )

        full_text = " ".join(lines).lower()
        if "remote" in full_text:
            job_type = "remote"
        elif "hybrid" in full_text:
            job_type = "hybrid"
        else:
            job_type = "on-site"

        return posted_time, application_status, job_type

    async def get_listing_detail(self, url: str) -> ListingDetail:
        """
        Fetch and extract a job detail page.

        Args:
            url: Job detail URL

        Returns:
            ListingDetail: Extracted detail, or ListingDetail.empty() on failure
        """
        try:
            markup = await self.fetcher.fetch(url)
        except FetchError as e:
            self._stats["detail_failures"] += 1
            logger.warning("Failed to fetch job detail", url=url, error=e.message)
            return ListingDetail.empty()

        try:
            return self.extract_detail(BeautifulSoup(markup, "html.parser"))
        except Exception as e:
            self._stats["detail_failures"] += 1
            logger.warning("Failed to parse job detail", url=url, error=str(e))
            return ListingDetail.empty()

    def extract_detail(self, page: Tag) -> ListingDetail:
        """Extract description, criteria and company info from a detail page."""
        description = DESCRIPTION_CHAIN.first_value(page, block_text)

        return ListingDetail(
            description=description,
            criteria=self._extract_criteria(page),
            company_info=self._extract_company_info(page),
            full_details=True
        )

    @staticmethod
    def _extract_criteria(page: Tag) -> Dict[str, str]:
        criteria: Dict[str, str] = {}
        for selector in CRITERIA_SELECTORS:
            for element in page.select(selector):
                text = normalize_text(element.get_text(" "))
                for label, key in CRITERIA_LABELS:
                    if label in text:
                        criteria[key] = normalize_text(text.replace(label, "")) or text
                        break
        return criteria

    @staticmethod
    def _extract_company_info(page: Tag) -> Dict[str, str]:
        company_info = {}

        name = COMPANY_NAME_CHAIN.first_text(page)
        if name:
            company_info["name"] = name

        industry = COMPANY_INDUSTRY_CHAIN.first_text(page)
        if industry:
            company_info["industry"] = industry

        return company_info
