"""
Record Sinks Package

Persistence targets for enriched job records and the factory that builds the
configured sink.
"""

from typing import List

from job_collector.core.config import Settings
from job_collector.core.database import DatabaseManager
from job_collector.core.exceptions import SinkConfigurationError
from job_collector.sinks.base import JobSink, KnownRecordSnapshot
from job_collector.sinks.database import DatabaseSink
from job_collector.sinks.memory import InMemorySink
from job_collector.sinks.mirrored import MirroredSink
from job_collector.sinks.notion import NotionSink
from job_collector.sinks.sheets import SheetsSink

SINK_BACKENDS = ("memory", "database", "notion", "sheets")


def _build_single_sink(backend: str, settings: Settings) -> JobSink:
    if backend == "memory":
        return InMemorySink()
    if backend == "database":
        return DatabaseSink(DatabaseManager(settings.DATABASE_URL, echo=settings.DATABASE_ECHO))
    if backend == "notion":
        return NotionSink(settings.NOTION_API_KEY, settings.NOTION_DATABASE_ID)
    if backend == "sheets":
        return SheetsSink(settings.GOOGLE_SERVICE_ACCOUNT_FILE, settings.GOOGLE_SHEET_ID)
    raise SinkConfigurationError(
        backend,
        f"Unknown sink backend; expected one of {', '.join(SINK_BACKENDS)}"
    )


def build_sink(settings: Settings) -> JobSink:
    """
    Build the sink named by SINK_BACKEND, mirrored to SINK_MIRRORS if set.

    Raises:
        SinkConfigurationError: For unknown backends or missing credentials
    """
    primary = _build_single_sink(settings.SINK_BACKEND.strip().lower(), settings)
    mirrors: List[JobSink] = [
        _build_single_sink(name, settings)
        for name in settings.get_sink_mirrors_list()
        if name != primary.name
    ]
    if not mirrors:
        return primary
    return MirroredSink(primary, mirrors)


__all__ = [
    "JobSink",
    "KnownRecordSnapshot",
    "InMemorySink",
    "DatabaseSink",
    "NotionSink",
    "SheetsSink",
    "MirroredSink",
    "build_sink",
    "SINK_BACKENDS",
]
