"""
Jobs API v1 Endpoints

Read-only queries over jobs stored by the database sink: recent jobs, text
search, category and company lookups.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Query

from job_collector.api.deps import get_job_store
from job_collector.schemas.job import CategoryCount, CompanyCount, JobResponse, JobSummary
from job_collector.sinks.database import DatabaseSink
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/recent", response_model=List[JobSummary])
async def recent_jobs(
    limit: int = Query(20, ge=1, le=100),
    store: DatabaseSink = Depends(get_job_store)
) -> List[JobSummary]:
    """Most recently added jobs."""
    return await store.get_recent_jobs(limit)


@router.get("/search", response_model=List[JobResponse])
async def search_jobs(
    q: str = Query(..., min_length=1, description="Terms that must all appear in title, company or description"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: DatabaseSink = Depends(get_job_store)
) -> List[JobResponse]:
    """Search stored jobs by text."""
    jobs = await store.search_jobs(q, limit=limit, offset=offset)
    logger.debug("Job search", query=q, results=len(jobs))
    return jobs


@router.get("/categories", response_model=List[CategoryCount])
async def list_categories(store: DatabaseSink = Depends(get_job_store)) -> List[CategoryCount]:
    """Categories with their job counts."""
    return await store.get_categories()


@router.get("/category/{category}", response_model=List[JobResponse])
async def jobs_by_category(
    category: str = Path(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    store: DatabaseSink = Depends(get_job_store)
) -> List[JobResponse]:
    return await store.get_jobs_by_category(category, limit)


@router.get("/companies/top", response_model=List[CompanyCount])
async def top_companies(
    limit: int = Query(10, ge=1, le=100),
    store: DatabaseSink = Depends(get_job_store)
) -> List[CompanyCount]:
    """Companies with the most stored jobs."""
    return await store.get_top_companies(limit)


@router.get("/company/{company}", response_model=List[JobResponse])
async def jobs_by_company(
    company: str = Path(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    store: DatabaseSink = Depends(get_job_store)
) -> List[JobResponse]:
    """Jobs whose company name contains the given text."""
    return await store.get_jobs_by_company(company, limit)
