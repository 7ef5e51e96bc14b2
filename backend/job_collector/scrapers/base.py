"""
Base Scraper Classes

Data structures and the abstract interface shared by job board scrapers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from bs4 import Tag

if TYPE_CHECKING:
    from job_collector.scrapers.fetcher import HttpFetcher


def composite_key(company: str, title: str, location: str) -> str:
    """Secondary identity of a listing: company-title-location, lower-cased."""
    return "-".join(
        (part or "").strip().lower() for part in (company, title, location)
    )


@dataclass
class RawListing:
    """Job listing as extracted from a search results card."""

    title: str
    company: str
    location: str
    url: str
    source: str
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    posted_time: Optional[str] = None
    application_status: Optional[str] = None
    job_type: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """A listing without a title or URL is discarded."""
        return bool(self.title.strip()) and bool(self.url.strip())

    @property
    def composite_key(self) -> str:
        return composite_key(self.company, self.title, self.location)


@dataclass
class ListingDetail:
    """Content of a job detail page."""

    description: str = ""
    criteria: Dict[str, str] = field(default_factory=dict)
    company_info: Dict[str, str] = field(default_factory=dict)
    full_details: bool = True

    @classmethod
    def empty(cls) -> "ListingDetail":
        """Blank detail used when the page could not be fetched or parsed."""
        return cls(full_details=False)


@dataclass
class ScrapingConfig:
    """Configuration for fetching and scraping operations."""

    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_seconds: float = 1.0

    rate_limit_per_minute: int = 30
    min_request_interval: float = 0.0

    user_agent: Optional[str] = None


class BaseScraper(ABC):
    """
    Abstract base class for job board scrapers.

    A scraper turns one search results page into RawListings and one detail
    page into a ListingDetail. Pages are retrieved through the injected
    fetcher.
    """

    def __init__(self, fetcher: "HttpFetcher") -> None:
        self.fetcher = fetcher
        self.last_error: Optional[str] = None

        self._stats = {
            "pages_fetched": 0,
            "cards_found": 0,
            "listings_valid": 0,
            "listings_invalid": 0,
            "detail_failures": 0,
            "errors": 0
        }

    @property
    @abstractmethod
    def name(self) -> str:
        """Scraper name, also used as the listing source."""
        pass

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Root origin of the job board."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.fetcher.close()

    @abstractmethod
    def extract_listing(self, card: Tag) -> RawListing:
        """
        Extract a listing from one search results card.

        Never raises; a card that cannot be read yields an invalid listing.
        """
        pass

    @abstractmethod
    def extract_detail(self, page: Tag) -> ListingDetail:
        """Extract description, criteria and company info from a detail page."""
        pass

    @abstractmethod
    async def collect(self, search_url: str) -> List[RawListing]:
        """
        Fetch a search results page and return its valid listings.

        Args:
            search_url: Search results URL

        Returns:
            List[RawListing]: Valid listings in document order, [] on fetch failure
        """
        pass

    @abstractmethod
    async def get_listing_detail(self, url: str) -> ListingDetail:
        """Fetch and extract a detail page; failures yield ListingDetail.empty()."""
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Get scraping statistics."""
        stats: Dict[str, Any] = dict(self._stats)
        stats["last_error"] = self.last_error
        return stats
