"""
In-Memory Sink

Dictionary-backed sink keyed by URL, used for dry runs and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from job_collector.schemas.job import EnrichedRecord
from job_collector.sinks.base import JobSink, KnownRecordSnapshot


class InMemorySink(JobSink):
    """Keeps records in insertion order; a repeated URL is rejected."""

    def __init__(self) -> None:
        self._records: Dict[str, EnrichedRecord] = {}

    @property
    def name(self) -> str:
        return "memory"

    @property
    def records(self) -> List[EnrichedRecord]:
        return list(self._records.values())

    async def snapshot(self) -> KnownRecordSnapshot:
        return KnownRecordSnapshot.from_rows(
            (r.url, r.company, r.title, r.location) for r in self._records.values()
        )

    async def create(self, record: EnrichedRecord) -> Optional[EnrichedRecord]:
        if record.url in self._records:
            return None
        self._records[record.url] = record
        return record

    async def stats(self) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_ago = now - timedelta(days=7)
        records = self._records.values()

        return {
            "sink": self.name,
            "total_jobs": len(self._records),
            "unique_companies": len({r.company for r in records}),
            "new_jobs": sum(1 for r in records if r.status == "new"),
            "jobs_today": sum(1 for r in records if r.date_added >= today),
            "jobs_this_week": sum(1 for r in records if r.date_added >= week_ago),
            "high_priority": sum(1 for r in records if r.priority == "High"),
        }
