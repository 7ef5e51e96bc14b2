"""
API Dependencies

Accessors for container-owned components used by the endpoints.
Tests override these with ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status

from job_collector.core.config import Settings, get_settings
from job_collector.core.container import get_container
from job_collector.services.collector import JobCollectionService
from job_collector.services.scheduler import CollectionScheduler
from job_collector.sinks.base import JobSink
from job_collector.sinks.database import DatabaseSink
from job_collector.sinks.mirrored import MirroredSink


def _require(name: str):
    component = get_container().get(name)
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Collector is not initialized"
        )
    return component


def get_app_settings() -> Settings:
    return get_container().get("settings") or get_settings()


def get_collection_service() -> JobCollectionService:
    return _require("service")


def get_scheduler() -> CollectionScheduler:
    return _require("scheduler")


def get_sink() -> JobSink:
    return _require("sink")


def database_sink_of(sink: JobSink) -> Optional[DatabaseSink]:
    """The database sink behind ``sink``, looking through a mirrored sink's primary."""
    primary = sink.primary if isinstance(sink, MirroredSink) else sink
    return primary if isinstance(primary, DatabaseSink) else None


def get_job_store(sink: JobSink = Depends(get_sink)) -> DatabaseSink:
    store = database_sink_of(sink)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail=f"Job queries need the database sink, configured sink is '{sink.name}'"
        )
    return store
