"""
Mirrored Sink

Writes to a primary sink and copies every created record to secondary sinks.
Only the primary decides identity and duplicates. Mirror failures of any kind
are logged and counted; they never reach the ingestion loop.
"""

from typing import Any, Dict, List, Optional

from job_collector.core.exceptions import JobCollectorError
from job_collector.schemas.job import EnrichedRecord
from job_collector.sinks.base import JobSink, KnownRecordSnapshot
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)


def _error_text(error: Exception) -> str:
    return error.message if isinstance(error, JobCollectorError) else f"{type(error).__name__}: {error}"


class MirroredSink(JobSink):
    """Primary sink plus best-effort mirrors."""

    def __init__(self, primary: JobSink, mirrors: List[JobSink]) -> None:
        self.primary = primary
        self.mirrors = mirrors
        self._mirror_failures: Dict[str, int] = {mirror.name: 0 for mirror in mirrors}

    @property
    def name(self) -> str:
        return "+".join([self.primary.name] + [mirror.name for mirror in self.mirrors])

    async def initialize(self) -> None:
        await self.primary.initialize()
        for mirror in self.mirrors:
            try:
                await mirror.initialize()
            except Exception as e:
                logger.error("Mirror sink initialization failed", sink=mirror.name, error=_error_text(e))

    async def close(self) -> None:
        await self.primary.close()
        for mirror in self.mirrors:
            try:
                await mirror.close()
            except Exception as e:
                logger.warning("Mirror sink close failed", sink=mirror.name, error=_error_text(e))

    async def snapshot(self) -> KnownRecordSnapshot:
        return await self.primary.snapshot()

    async def create(self, record: EnrichedRecord) -> Optional[EnrichedRecord]:
        created = await self.primary.create(record)
        if created is None:
            return None

        for mirror in self.mirrors:
            try:
                await mirror.create(created)
            except Exception as e:
                self._mirror_failures[mirror.name] += 1
                logger.error(
                    "Mirror write failed",
                    sink=mirror.name,
                    title=record.title,
                    url=record.url,
                    error=_error_text(e)
                )
        return created

    async def stats(self) -> Dict[str, Any]:
        stats = await self.primary.stats()
        stats["mirrors"] = [mirror.name for mirror in self.mirrors]
        stats["mirror_failures"] = dict(self._mirror_failures)
        return stats
