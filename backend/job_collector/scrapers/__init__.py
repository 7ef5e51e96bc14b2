"""
Job Scrapers Package

Contains the LinkedIn guest search scraper together with the shared
listing/detail data structures, selector chains and the HTTP fetcher.
"""

from .base import BaseScraper, RawListing, ListingDetail, ScrapingConfig, composite_key
from .fetcher import HttpFetcher
from .linkedin import LinkedInScraper, build_search_url, resolve_search_url
from .selectors import SelectorChain

__all__ = [
    # Base classes
    'BaseScraper',
    'RawListing',
    'ListingDetail',
    'ScrapingConfig',
    'composite_key',

    # Fetching
    'HttpFetcher',

    # Scrapers
    'LinkedInScraper',
    'build_search_url',
    'resolve_search_url',
    'SelectorChain'
]
