"""
Job Collection Service

Runs one collection cycle: snapshot the sink, collect listings, drop the ones
already known, then fetch details, enrich and store the rest one at a time.
"""

import asyncio
from enum import Enum
from typing import List, Optional, Set

from structlog.contextvars import bound_contextvars

from job_collector.core.exceptions import JobCollectorError
from job_collector.scrapers.base import BaseScraper, RawListing
from job_collector.schemas.collector import CycleSummary
from job_collector.services.enrichment import EnrichmentEngine
from job_collector.sinks.base import JobSink, KnownRecordSnapshot
from job_collector.utils.logger import get_logger, log_error

logger = get_logger(__name__)


class CycleState(str, Enum):
    """Collection cycle states."""
    IDLE = "idle"
    COLLECTING = "collecting"
    FILTERING = "filtering"
    INGESTING = "ingesting"


class JobCollectionService:
    """
    Deduplication and ingestion loop.

    Only one cycle runs at a time; a cycle requested while another is in
    progress is skipped, not queued.
    """

    def __init__(
        self,
        scraper: BaseScraper,
        sink: JobSink,
        enrichment: Optional[EnrichmentEngine] = None,
        request_delay_seconds: float = 3.0,
        max_item_errors: int = 5
    ) -> None:
        self.scraper = scraper
        self.sink = sink
        self.enrichment = enrichment or EnrichmentEngine()
        self.request_delay_seconds = request_delay_seconds
        self.max_item_errors = max_item_errors

        self._state = CycleState.IDLE
        self._last_summary: Optional[CycleSummary] = None

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is not CycleState.IDLE

    @property
    def last_summary(self) -> Optional[CycleSummary]:
        return self._last_summary

    async def run_cycle(self, search_url: str) -> Optional[CycleSummary]:
        """
        Run one collection cycle.

        Args:
            search_url: Search results URL to collect from

        Returns:
            Optional[CycleSummary]: Cycle outcome, or None if a cycle was
            already in progress
        """
        if self.is_running:
            logger.warning("Collection cycle already in progress, skipping", state=self._state.value)
            return None

        self._state = CycleState.COLLECTING
        summary = CycleSummary()

        try:
            with bound_contextvars(cycle_id=summary.cycle_id):
                logger.info("Starting collection cycle", url=search_url, sink=self.sink.name)
                return await self._run_stages(search_url, summary)
        finally:
            self._state = CycleState.IDLE

    async def _run_stages(self, search_url: str, summary: CycleSummary) -> CycleSummary:
        try:
            snapshot = await self.sink.snapshot()
        except JobCollectorError as e:
            log_error(e, {"stage": "snapshot", "sink": self.sink.name})
            summary.aborted = True
            summary.scrape_error = e.message
            return self._finish(summary)

        listings = await self.scraper.collect(search_url)
        summary.total_scraped = len(listings)
        if not listings and self.scraper.last_error:
            summary.scrape_error = self.scraper.last_error

        self._state = CycleState.FILTERING
        new_listings = self.filter_new(listings, snapshot)
        summary.new_jobs = len(new_listings)
        logger.info(
            f"Found {len(new_listings)} new jobs out of {len(listings)} scraped",
            known_urls=len(snapshot.urls)
        )

        self._state = CycleState.INGESTING
        await self._ingest(new_listings, summary)

        await self.attach_sink_stats(summary)
        return self._finish(summary)

    @staticmethod
    def filter_new(listings: List[RawListing], snapshot: KnownRecordSnapshot) -> List[RawListing]:
        """
        Drop listings whose URL or composite key is already known.

        Accepted listings are added to the known sets as the filter runs, so
        duplicates within one batch are dropped as well.
        """
        seen_urls: Set[str] = set(snapshot.urls)
        seen_keys: Set[str] = set(snapshot.composite_keys)

        new_listings = []
        for listing in listings:
            key = listing.composite_key
            if listing.url in seen_urls:
                logger.debug("Skipping known job", reason="url", title=listing.title, url=listing.url)
                continue
            if key in seen_keys:
                logger.debug("Skipping known job", reason="composite_key", title=listing.title, key=key)
                continue
            seen_urls.add(listing.url)
            seen_keys.add(key)
            new_listings.append(listing)

        return new_listings

    async def _ingest(self, listings: List[RawListing], summary: CycleSummary) -> None:
        for index, listing in enumerate(listings):
            summary.processed += 1
            try:
                detail = await self.scraper.get_listing_detail(listing.url)
                record = self.enrichment.enrich(listing, detail)
                created = await self.sink.create(record)
                if created is None:
                    summary.duplicates_rejected += 1
                    logger.info("Sink rejected duplicate job", title=listing.title, url=listing.url)
                else:
                    summary.created += 1
                    logger.info(
                        "Stored job",
                        title=record.title,
                        company=record.company,
                        score=record.score,
                        priority=record.priority
                    )
            except Exception as e:
                summary.errors += 1
                log_error(e, {"stage": "ingest", "title": listing.title, "url": listing.url})

            if summary.errors > self.max_item_errors:
                summary.aborted = True
                logger.error(
                    "Too many errors, abandoning remaining jobs",
                    errors=summary.errors,
                    remaining=len(listings) - index - 1
                )
                break

            if index < len(listings) - 1 and self.request_delay_seconds > 0:
                await asyncio.sleep(self.request_delay_seconds)

    def _finish(self, summary: CycleSummary) -> CycleSummary:
        self._last_summary = summary
        logger.info("Collection cycle finished", **summary.model_dump(exclude={"cycle_id", "sink_stats", "timestamp"}))
        return summary

    async def attach_sink_stats(self, summary: CycleSummary) -> None:
        try:
            summary.sink_stats = await self.sink.stats()
        except JobCollectorError as e:
            logger.warning("Could not read sink stats", sink=self.sink.name, error=e.message)
