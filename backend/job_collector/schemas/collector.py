"""
Collector Pydantic Schemas

Cycle summary and request/response models for the collector endpoints.
"""

import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class CycleSummary(BaseModel):
    """Outcome of one collection cycle."""

    cycle_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12], description="Cycle identifier bound to its log lines")

    total_scraped: int = Field(0, ge=0, description="Valid listings returned by the scraper")
    new_jobs: int = Field(0, ge=0, description="Listings left after deduplication")
    processed: int = Field(0, ge=0, description="New listings attempted")
    created: int = Field(0, ge=0, description="Records the sink created")
    duplicates_rejected: int = Field(0, ge=0, description="Records the sink rejected as duplicates")
    errors: int = Field(0, ge=0, description="Per-item failures")
    aborted: bool = Field(False, description="Whether the cycle stopped early")
    scrape_error: Optional[str] = Field(None, description="Scraper or snapshot failure message")
    sink_stats: Dict[str, Any] = Field(default_factory=dict, description="Sink stats after the cycle")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CollectorRunRequest(BaseModel):
    """Optional overrides for a manually triggered cycle."""

    search_url: Optional[str] = Field(None, description="Search URL to use instead of the configured one")


class CollectorRunResponse(BaseModel):
    """Result of a trigger request."""

    status: str = Field(..., description="started or skipped")
    state: str = Field(..., description="Collector state at trigger time")
    search_url: str


class CollectorStatusResponse(BaseModel):
    """Current collector state and most recent cycle."""

    state: str
    is_running: bool
    scheduler_running: bool
    interval_hours: float
    last_summary: Optional[CycleSummary] = None
    scraper_stats: Dict[str, Any] = Field(default_factory=dict)
