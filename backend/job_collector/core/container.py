"""
Simple Dependency Container

Builds and owns the collector's long-lived components: fetcher, scraper,
sink, enrichment engine, collection service and scheduler.
"""

from typing import Dict, Any, Optional

from job_collector.core.config import Settings, get_settings
from job_collector.core.enrichment_rules import load_enrichment_rules
from job_collector.scrapers.base import ScrapingConfig
from job_collector.scrapers.fetcher import HttpFetcher
from job_collector.scrapers.linkedin import LinkedInScraper, resolve_search_url
from job_collector.services.collector import JobCollectionService
from job_collector.services.enrichment import EnrichmentEngine
from job_collector.services.scheduler import CollectionScheduler
from job_collector.sinks import build_sink
from job_collector.sinks.base import JobSink
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)


def scraping_config_from_settings(settings: Settings) -> ScrapingConfig:
    return ScrapingConfig(
        timeout_seconds=settings.TIMEOUT_SECONDS,
        max_retries=settings.MAX_RETRIES,
        rate_limit_per_minute=settings.RATE_LIMIT_PER_MINUTE,
        user_agent=settings.USER_AGENT
    )


class SimpleContainer:
    """Simple dependency injection container."""

    def __init__(self):
        self._instances: Dict[str, Any] = {}
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(
        self,
        settings: Optional[Settings] = None,
        sink: Optional[JobSink] = None,
        fetcher: Optional[HttpFetcher] = None
    ) -> None:
        """
        Initialize container and dependencies.

        Args:
            settings: Settings to use instead of the cached environment settings
            sink: Pre-built sink to use instead of the configured backend
            fetcher: Pre-built fetcher to use instead of a new HTTP fetcher
        """
        if self._initialized:
            return

        logger.info("Initializing application container...")

        settings = settings or get_settings()
        self._instances['settings'] = settings

        fetcher = fetcher or HttpFetcher(scraping_config_from_settings(settings))
        scraper = LinkedInScraper(fetcher)
        self._instances['fetcher'] = fetcher
        self._instances['scraper'] = scraper

        sink = sink or build_sink(settings)
        await sink.initialize()
        self._instances['sink'] = sink

        enrichment = EnrichmentEngine(
            rules=load_enrichment_rules(settings.ENRICHMENT_RULES_PATH),
            summary_max_sentences=settings.SUMMARY_MAX_SENTENCES,
            summary_max_length=settings.SUMMARY_MAX_LENGTH
        )
        service = JobCollectionService(
            scraper=scraper,
            sink=sink,
            enrichment=enrichment,
            request_delay_seconds=settings.REQUEST_DELAY_SECONDS,
            max_item_errors=settings.MAX_ITEM_ERRORS
        )
        self._instances['service'] = service

        self._instances['scheduler'] = CollectionScheduler(
            service=service,
            search_url=resolve_search_url(settings),
            interval_hours=settings.SCRAPE_INTERVAL_HOURS,
            run_on_startup=settings.RUN_ON_STARTUP
        )

        self._initialized = True
        logger.info("Container initialized successfully", sink=sink.name)

    async def shutdown(self) -> None:
        """Shutdown container and cleanup resources."""
        logger.info("Shutting down container...")

        if 'scheduler' in self._instances:
            await self._instances['scheduler'].stop()
        if 'sink' in self._instances:
            await self._instances['sink'].close()
        if 'fetcher' in self._instances:
            await self._instances['fetcher'].close()

        self._instances.clear()
        self._initialized = False
        logger.info("Container shutdown complete")

    def get(self, name: str) -> Any:
        """Get dependency by name."""
        return self._instances.get(name)


# Global container instance
container = SimpleContainer()


async def init_container(settings: Optional[Settings] = None) -> None:
    """Initialize the global container."""
    await container.initialize(settings)


async def shutdown_container() -> None:
    """Shutdown the global container."""
    await container.shutdown()


def get_container() -> SimpleContainer:
    """Get the global container instance."""
    return container
