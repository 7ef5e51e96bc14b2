"""
HTTP Fetcher

Fetches raw markup over httpx with request-rate limiting, retries and
exponential backoff. Failures surface as FetchError subtypes.
"""

import asyncio
import time
from typing import Dict, List, Optional

import httpx

from job_collector.core.exceptions import AuthenticationError, FetchError, RateLimitError
from job_collector.scrapers.base import ScrapingConfig
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class HttpFetcher:
    """
    Async page fetcher.

    The underlying ``httpx.AsyncClient`` is created lazily unless one is
    injected; an injected client is left open on ``close()``.
    """

    def __init__(
        self,
        config: Optional[ScrapingConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ) -> None:
        self.config = config or ScrapingConfig()
        self._client = client
        self._owns_client = client is None

        # Rate limiting
        self._request_times: List[float] = []
        self._last_request_time = 0.0

        self._stats = {
            "requests": 0,
            "failures": 0,
            "retries": 0
        }

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _build_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.user_agent or DEFAULT_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._build_headers(),
                timeout=self.config.timeout_seconds,
                follow_redirects=True
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _rate_limit_check(self) -> None:
        """Check and enforce rate limiting."""
        current_time = time.monotonic()

        # Remove requests older than 1 minute
        cutoff_time = current_time - 60
        self._request_times = [t for t in self._request_times if t > cutoff_time]

        if len(self._request_times) >= self.config.rate_limit_per_minute:
            sleep_time = 60 - (current_time - self._request_times[0])
            if sleep_time > 0:
                logger.warning(f"Rate limit reached, sleeping for {sleep_time:.2f}s")
                await asyncio.sleep(sleep_time)
                current_time = time.monotonic()

        time_since_last = current_time - self._last_request_time
        if time_since_last < self.config.min_request_interval:
            await asyncio.sleep(self.config.min_request_interval - time_since_last)
            current_time = time.monotonic()

        self._request_times.append(current_time)
        self._last_request_time = current_time

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[int]:
        value = response.headers.get("Retry-After", "")
        return int(value) if value.isdigit() else None

    async def fetch(self, url: str) -> str:
        """
        Fetch a page and return its markup.

        Args:
            url: Absolute URL to fetch

        Returns:
            str: Response body text

        Raises:
            RateLimitError: On HTTP 429
            AuthenticationError: On HTTP 401 or 403
            FetchError: On other HTTP errors or network failures after retries
        """
        client = self._get_client()
        attempts = self.config.max_retries

        for attempt in range(attempts):
            await self._rate_limit_check()
            self._stats["requests"] += 1

            try:
                response = await client.get(url)
                response.raise_for_status()
                return response.text

            except (httpx.InvalidURL, ValueError) as e:
                # Raised before any request is sent, never retried
                self._stats["failures"] += 1
                raise FetchError(f"Invalid URL {url!r}: {e}", url=url) from e

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code == 429:
                    self._stats["failures"] += 1
                    raise RateLimitError(url=url, retry_after=self._retry_after(e.response))
                if status_code in (401, 403):
                    self._stats["failures"] += 1
                    raise AuthenticationError(url=url, status_code=status_code)
                if status_code < 500 or attempt == attempts - 1:
                    self._stats["failures"] += 1
                    raise FetchError(
                        f"HTTP error {status_code} fetching {url}",
                        url=url,
                        status_code=status_code
                    ) from e

            except httpx.HTTPError as e:
                if attempt == attempts - 1:
                    self._stats["failures"] += 1
                    raise FetchError(f"Request failed for {url}: {e}", url=url) from e

            # Exponential backoff
            wait_time = (2 ** attempt) * self.config.backoff_seconds
            self._stats["retries"] += 1
            logger.debug(
                "Retrying request",
                url=url,
                attempt=attempt + 1,
                wait_seconds=wait_time
            )
            await asyncio.sleep(wait_time)

        raise FetchError(f"Request failed for {url}", url=url)

    def get_stats(self) -> Dict[str, int]:
        """Get request statistics."""
        return self._stats.copy()
