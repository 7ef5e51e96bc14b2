"""
Test Configuration for Job Collector

Shared HTML fixtures, fake fetchers and sink helpers.
"""

from typing import Dict, List, Optional

import pytest
from bs4 import BeautifulSoup

from job_collector.core.exceptions import FetchError
from job_collector.scrapers.base import ListingDetail, RawListing
from job_collector.scrapers.linkedin import LinkedInScraper
from job_collector.schemas.job import EnrichedRecord
from job_collector.sinks.memory import InMemorySink


SEARCH_URL = "https://www.linkedin.com/jobs/search/?keywords=quant"


def make_card(
    title: str,
    company: str,
    location: str,
    job_id: str,
    posted: str = "1 day ago",
    status: str = "Be an early applicant"
) -> str:
    """Guest search card markup as served by the results page."""
    return f"""
    <li>
      <div class="base-card job-search-card">
        <a class="base-card__full-link" href="https://www.linkedin.com/jobs/view/{job_id}?trk=guest"></a>
        <div class="base-search-card__info">
          <h3 class="base-search-card__title">{title}</h3>
          <h4 class="base-search-card__subtitle"><a href="/company/x">{company}</a></h4>
          <div class="base-search-card__metadata">
            <span class="job-search-card__location">{location}</span>
            <span class="job-search-card__benefits">{status}</span>
            <time class="job-search-card__listdate">{posted}</time>
          </div>
        </div>
      </div>
    </li>
    """


SEARCH_PAGE = f"""
<html><body><ul class="jobs-search__results-list">
{make_card("Quantitative Researcher", "WorldQuant", "Taipei, Taiwan", "1001", posted="3 hours ago")}
<li><div class="job-search-card"><span>no title and no link</span></div></li>
{make_card("Software Engineer", "Acme Capital", "Remote", "1002")}
{make_card("Data Analyst", "Globex", "Taipei City, Taiwan", "1003", posted="2 weeks ago")}
</ul></body></html>
"""

DETAIL_PAGE = """
<html><body>
  <div class="top-card-layout">
    <div class="jobs-unified-top-card__company-name">WorldQuant</div>
    <div class="jobs-unified-top-card__subtitle-secondary">Financial Services</div>
  </div>
  <div class="description__text">
    <div class="show-more-less-html__markup">
      <p>We are hiring a quantitative researcher to build alpha signals across markets.</p>
      <p>You will work with petabytes of financial data every single day!</p>
      <ul>
        <li>Requirements: PhD in mathematics or statistics</li>
        <li>Must have strong Python skills</li>
        <li>We offer a generous compensation package</li>
        <li>Remote friendly benefits</li>
      </ul>
    </div>
  </div>
  <ul class="description__job-criteria-list">
    <li class="description__job-criteria-item"><h3>Seniority level</h3><span>Entry level</span></li>
    <li class="description__job-criteria-item"><h3>Employment type</h3><span>Full-time</span></li>
    <li class="description__job-criteria-item"><h3>Job function</h3><span>Research</span></li>
    <li class="description__job-criteria-item"><h3>Industries</h3><span>Investment Management</span></li>
  </ul>
</body></html>
"""


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def first_card(markup: str):
    return parse_html(markup).select_one(".job-search-card")


class FakeFetcher:
    """Fetcher returning canned pages by URL; unknown URLs raise FetchError."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, default: Optional[str] = None):
        self.pages = pages or {}
        self.default = default
        self.calls: List[str] = []
        self.closed = False

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url in self.pages:
            return self.pages[url]
        if self.default is not None:
            return self.default
        raise FetchError(f"HTTP error 404 fetching {url}", url=url, status_code=404)

    async def close(self) -> None:
        self.closed = True


def make_listing(
    title: str = "Quant Researcher",
    company: str = "Acme",
    location: str = "Remote",
    url: str = "https://www.linkedin.com/jobs/view/1",
    posted_time: Optional[str] = "2 days ago"
) -> RawListing:
    return RawListing(
        title=title,
        company=company,
        location=location,
        url=url,
        source="linkedin",
        posted_time=posted_time
    )


def make_record(
    title: str = "Quant Researcher",
    company: str = "Acme",
    location: str = "Remote",
    url: str = "https://www.linkedin.com/jobs/view/1",
    **kwargs
) -> EnrichedRecord:
    return EnrichedRecord(title=title, company=company, location=location, url=url, **kwargs)


@pytest.fixture
def search_page() -> str:
    return SEARCH_PAGE


@pytest.fixture
def detail_page() -> str:
    return DETAIL_PAGE


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher({SEARCH_URL: SEARCH_PAGE}, default=DETAIL_PAGE)


@pytest.fixture
def scraper(fake_fetcher) -> LinkedInScraper:
    return LinkedInScraper(fake_fetcher)


@pytest.fixture
def memory_sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def empty_detail() -> ListingDetail:
    return ListingDetail.empty()
