"""
Base Sink Classes

Persistence contract for enriched job records.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from job_collector.scrapers.base import composite_key
from job_collector.schemas.job import EnrichedRecord


@dataclass(frozen=True)
class KnownRecordSnapshot:
    """Identities of stored records, taken at the start of a cycle."""

    urls: FrozenSet[str] = field(default_factory=frozenset)
    composite_keys: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[str, str, str, str]]) -> "KnownRecordSnapshot":
        """
        Build a snapshot from (url, company, title, location) rows.

        Empty URLs are not recorded.
        """
        urls = set()
        keys = set()
        for url, company, title, location in rows:
            if url:
                urls.add(url)
            keys.add(composite_key(company, title, location))
        return cls(urls=frozenset(urls), composite_keys=frozenset(keys))

    def __len__(self) -> int:
        return len(self.urls)


class JobSink(ABC):
    """
    Abstract base class for record sinks.

    ``create`` returns the stored record, or None when the sink rejects it as
    a duplicate. Any other failure raises a SinkError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Sink name for logs and stats."""
        pass

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self) -> None:
        """Prepare connections, tables or headers."""
        return None

    @abstractmethod
    async def snapshot(self) -> KnownRecordSnapshot:
        """Identities of every stored record."""
        pass

    @abstractmethod
    async def create(self, record: EnrichedRecord) -> Optional[EnrichedRecord]:
        """Store a record; None signals a duplicate rejection."""
        pass

    @abstractmethod
    async def stats(self) -> Dict[str, Any]:
        """Aggregate counts over stored records."""
        pass

    async def close(self) -> None:
        """Release sink resources."""
        return None
