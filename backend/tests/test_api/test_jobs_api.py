"""
Tests for the stored-jobs query endpoints.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from job_collector.api.deps import get_sink
from job_collector.core.exceptions import SinkError
from job_collector.main import app
from job_collector.schemas.job import CategoryCount, CompanyCount, JobResponse, JobSummary
from job_collector.sinks.database import DatabaseSink
from job_collector.sinks.memory import InMemorySink
from job_collector.sinks.mirrored import MirroredSink

ADDED = datetime(2026, 3, 1, tzinfo=timezone.utc)


def job(title: str = "Quant Researcher", company: str = "WorldQuant", **kwargs) -> JobResponse:
    return JobResponse(
        id=kwargs.pop("id", 1),
        title=title,
        company=company,
        url=kwargs.pop("url", "https://www.linkedin.com/jobs/view/1"),
        date_added=ADDED,
        **kwargs
    )


@pytest.fixture
def store():
    sink = MagicMock(spec=DatabaseSink)
    sink.name = "database"
    sink.search_jobs = AsyncMock(return_value=[job(description="Build alpha signals")])
    sink.get_recent_jobs = AsyncMock(return_value=[
        JobSummary(id=2, title="Data Analyst", company="Globex", url="https://x/2", date_added=ADDED)
    ])
    sink.get_jobs_by_category = AsyncMock(return_value=[job(category="Quantitative Research")])
    sink.get_jobs_by_company = AsyncMock(return_value=[job()])
    sink.get_categories = AsyncMock(return_value=[CategoryCount(category="Quantitative Research", count=2)])
    sink.get_top_companies = AsyncMock(return_value=[CompanyCount(company="WorldQuant", job_count=2)])
    return sink


@pytest.fixture
def client(store):
    app.dependency_overrides[get_sink] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.api
@pytest.mark.unit
class TestJobsEndpoints:
    """Test job search, lookups and groupings."""

    def test_search(self, client, store):
        """Test search passes the query and pagination through."""
        response = client.get("/api/v1/jobs/search", params={"q": "quant", "limit": 5, "offset": 10})

        assert response.status_code == 200
        data = response.json()
        assert data[0]["title"] == "Quant Researcher"
        assert data[0]["description"] == "Build alpha signals"
        store.search_jobs.assert_awaited_once_with("quant", limit=5, offset=10)

    def test_search_requires_query(self, client, store):
        """Test a missing query is rejected."""
        response = client.get("/api/v1/jobs/search")

        assert response.status_code == 422
        store.search_jobs.assert_not_awaited()

    def test_search_limit_bounds(self, client):
        """Test the page size is bounded."""
        assert client.get("/api/v1/jobs/search", params={"q": "quant", "limit": 0}).status_code == 422
        assert client.get("/api/v1/jobs/search", params={"q": "quant", "limit": 101}).status_code == 422

    def test_recent(self, client, store):
        """Test recent jobs default to twenty."""
        response = client.get("/api/v1/jobs/recent")

        assert response.json()[0]["company"] == "Globex"
        store.get_recent_jobs.assert_awaited_once_with(20)

    def test_by_category(self, client, store):
        """Test category lookups use the path value."""
        response = client.get("/api/v1/jobs/category/Quantitative Research", params={"limit": 3})

        assert response.json()[0]["category"] == "Quantitative Research"
        store.get_jobs_by_category.assert_awaited_once_with("Quantitative Research", 3)

    def test_by_company(self, client, store):
        """Test company lookups use the path value."""
        client.get("/api/v1/jobs/company/worldquant")
        store.get_jobs_by_company.assert_awaited_once_with("worldquant", 20)

    def test_categories(self, client):
        """Test the category list."""
        response = client.get("/api/v1/jobs/categories")
        assert response.json() == [{"category": "Quantitative Research", "count": 2}]

    def test_top_companies(self, client, store):
        """Test the top companies list."""
        response = client.get("/api/v1/jobs/companies/top", params={"limit": 3})

        assert response.json() == [{"company": "WorldQuant", "job_count": 2}]
        store.get_top_companies.assert_awaited_once_with(3)

    def test_mirrored_database_primary(self, store):
        """Test queries reach a database sink that is the primary of a mirrored sink."""
        mirrored = MirroredSink(store, [InMemorySink()])
        app.dependency_overrides[get_sink] = lambda: mirrored
        try:
            response = TestClient(app).get("/api/v1/jobs/categories")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200

    def test_non_database_sink(self):
        """Test other sinks answer 501."""
        app.dependency_overrides[get_sink] = lambda: InMemorySink()
        try:
            response = TestClient(app).get("/api/v1/jobs/recent")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 501
        assert "memory" in response.json()["detail"]

    def test_query_failure(self, client, store):
        """Test database failures become structured 503 errors."""
        store.get_categories = AsyncMock(side_effect=SinkError("database", "connection lost"))

        response = client.get("/api/v1/jobs/categories")

        assert response.status_code == 503
        assert response.json()["error_code"] == "SINK_ERROR"
