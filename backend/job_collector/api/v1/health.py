"""
Health Check API v1 Endpoints

Service health and collector liveness.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Depends

from job_collector.api.deps import get_app_settings, get_collection_service, get_scheduler
from job_collector.core.config import Settings
from job_collector.services.collector import JobCollectionService
from job_collector.services.scheduler import CollectionScheduler

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(
    settings: Settings = Depends(get_app_settings),
    service: JobCollectionService = Depends(get_collection_service),
    scheduler: CollectionScheduler = Depends(get_scheduler)
) -> Dict[str, Any]:
    """Basic health check endpoint."""
    last_summary = service.last_summary
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "running": service.is_running,
        "state": service.state.value,
        "scheduler_running": scheduler.is_running,
        "last_run": last_summary.timestamp.isoformat() if last_summary else None,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
