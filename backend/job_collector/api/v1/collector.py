"""
Collector API v1 Endpoints

Manual cycle trigger, collector status and sink statistics.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from job_collector.api.deps import database_sink_of, get_collection_service, get_scheduler, get_sink
from job_collector.schemas.collector import (
    CollectorRunRequest,
    CollectorRunResponse,
    CollectorStatusResponse,
)
from job_collector.services.collector import JobCollectionService
from job_collector.services.scheduler import CollectionScheduler
from job_collector.sinks.base import JobSink
from job_collector.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/collector", tags=["collector"])


@router.post("/run", response_model=CollectorRunResponse)
async def run_collection(
    request: Optional[CollectorRunRequest] = Body(None),
    service: JobCollectionService = Depends(get_collection_service),
    scheduler: CollectionScheduler = Depends(get_scheduler)
) -> CollectorRunResponse:
    """Start a collection cycle in the background unless one is running."""
    search_url = (request.search_url if request else None) or scheduler.search_url
    started = scheduler.trigger(search_url)
    logger.info("Manual collection requested", started=started, url=search_url)

    return CollectorRunResponse(
        status="started" if started else "skipped",
        state=service.state.value,
        search_url=search_url
    )


@router.get("/status", response_model=CollectorStatusResponse)
async def collector_status(
    service: JobCollectionService = Depends(get_collection_service),
    scheduler: CollectionScheduler = Depends(get_scheduler)
) -> CollectorStatusResponse:
    """Current state and the most recent cycle summary."""
    return CollectorStatusResponse(
        state=service.state.value,
        is_running=service.is_running,
        scheduler_running=scheduler.is_running,
        interval_hours=scheduler.interval_hours,
        last_summary=service.last_summary,
        scraper_stats=service.scraper.get_stats()
    )


@router.get("/stats")
async def sink_stats(
    recent: int = Query(10, ge=0, le=100, description="Number of recent jobs to include"),
    sink: JobSink = Depends(get_sink)
) -> Dict[str, Any]:
    """Aggregate counts from the sink, plus recent jobs for the database sink."""
    stats = await sink.stats()

    database_sink = database_sink_of(sink)
    if recent and database_sink is not None:
        jobs = await database_sink.get_recent_jobs(recent)
        stats["recent_jobs"] = [job.model_dump(mode="json") for job in jobs]

    return stats
