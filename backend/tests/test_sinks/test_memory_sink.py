"""
Tests for the in-memory sink and the known-record snapshot.
"""

from datetime import datetime, timedelta, timezone

import pytest

from job_collector.sinks.base import KnownRecordSnapshot
from tests.conftest import make_record


@pytest.mark.sink
@pytest.mark.unit
class TestKnownRecordSnapshot:
    """Test snapshot construction."""

    def test_from_rows(self):
        """Test URLs and lower-cased composite keys are collected."""
        snapshot = KnownRecordSnapshot.from_rows([
            ("u1", "Acme", "Engineer", "Remote"),
            ("", "Globex", "Analyst", " Taipei "),
        ])

        assert snapshot.urls == frozenset({"u1"})
        assert snapshot.composite_keys == frozenset({"acme-engineer-remote", "globex-analyst-taipei"})
        assert len(snapshot) == 1

    def test_empty_snapshot(self):
        """Test the default snapshot knows nothing."""
        snapshot = KnownRecordSnapshot()
        assert not snapshot.urls
        assert not snapshot.composite_keys


@pytest.mark.sink
@pytest.mark.unit
class TestInMemorySink:
    """Test the dictionary-backed sink."""

    async def test_create_and_snapshot(self, memory_sink):
        """Test created records show up in the snapshot."""
        record = make_record()

        assert await memory_sink.create(record) is record

        snapshot = await memory_sink.snapshot()
        assert record.url in snapshot.urls
        assert record.composite_key in snapshot.composite_keys

    async def test_duplicate_url_rejected(self, memory_sink):
        """Test a second record with the same URL returns None."""
        await memory_sink.create(make_record())

        assert await memory_sink.create(make_record(title="Another Title")) is None
        assert len(memory_sink.records) == 1

    async def test_records_keep_insertion_order(self, memory_sink):
        """Test records are listed in creation order."""
        for i in range(3):
            await memory_sink.create(make_record(title=f"Job {i}", url=f"u{i}"))

        assert [record.title for record in memory_sink.records] == ["Job 0", "Job 1", "Job 2"]

    async def test_stats(self, memory_sink):
        """Test aggregate counts."""
        now = datetime.now(timezone.utc)
        await memory_sink.create(make_record(url="u1", company="Acme", priority="High", score=90))
        await memory_sink.create(make_record(url="u2", company="Acme", status="applied"))
        await memory_sink.create(make_record(url="u3", company="Globex", date_added=now - timedelta(days=30)))

        stats = await memory_sink.stats()

        assert stats["sink"] == "memory"
        assert stats["total_jobs"] == 3
        assert stats["unique_companies"] == 2
        assert stats["new_jobs"] == 2
        assert stats["jobs_this_week"] == 2
        assert stats["high_priority"] == 1

    async def test_context_manager(self):
        """Test the sink works as an async context manager."""
        from job_collector.sinks.memory import InMemorySink

        async with InMemorySink() as sink:
            assert await sink.create(make_record()) is not None
