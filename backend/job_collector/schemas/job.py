"""
Job Pydantic Schemas

Enriched job record handed from the enrichment engine to the sinks, and the
read models returned by the stats and jobs endpoints.
"""

from typing import Any, Optional, Dict, Tuple, Literal
from datetime import datetime, timezone

from pydantic import BaseModel, Field, ConfigDict

from job_collector.scrapers.base import composite_key

Priority = Literal["High", "Medium", "Low"]


class EnrichedRecord(BaseModel):
    """Listing, detail and derived fields of one new job. Immutable."""

    model_config = ConfigDict(frozen=True)

    # Listing
    title: str = Field(..., min_length=1, description="Job title")
    company: str = Field(..., description="Company name")
    location: str = Field("", description="Job location")
    url: str = Field(..., min_length=1, description="Job detail URL")
    source: str = Field("linkedin", description="Job board the listing came from")
    scraped_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    posted_time: Optional[str] = Field(None, description="Relative posting time text")
    application_status: Optional[str] = Field(None, description="Applicant count or hiring status")
    job_type: Optional[str] = Field(None, description="remote, hybrid or on-site")

    # Detail
    description: str = Field("", description="Job description text")
    criteria: Dict[str, str] = Field(default_factory=dict, description="Job criteria by label")
    company_info: Dict[str, str] = Field(default_factory=dict, description="Company name and industry")
    full_details: bool = Field(False, description="Whether the detail page was read")

    # Derived
    summary: str = Field("", description="Key-point summary of the description")
    category: str = Field("Other", description="Job category")
    score: int = Field(0, ge=0, le=100, description="Relevance score")
    priority: Priority = Field("Low", description="Priority bucket from score")
    tags: Tuple[str, ...] = Field(default_factory=tuple, description="Ordered tags")
    requirements: str = Field("", description="Requirement lines from the description")
    benefits: str = Field("", description="Benefit lines from the description")
    date_added: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: str = Field("new", description="Record status")

    @property
    def composite_key(self) -> str:
        return composite_key(self.company, self.title, self.location)

    @property
    def tags_display(self) -> str:
        return ", ".join(self.tags)


class JobSummary(BaseModel):
    """Stored job as listed by the stats endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    company: str
    location: Optional[str] = None
    url: str
    category: Optional[str] = None
    score: int = 0
    priority: Optional[str] = None
    tags: Optional[str] = None
    posted_time: Optional[str] = None
    date_added: datetime


class JobResponse(JobSummary):
    """Stored job with its detail and derived text, returned by the jobs endpoints."""

    source: Optional[str] = None
    job_type: Optional[str] = None
    application_status: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    criteria: Optional[Dict[str, Any]] = None
    company_info: Optional[Dict[str, Any]] = None
    status: str = "new"


class CategoryCount(BaseModel):
    category: str
    count: int


class CompanyCount(BaseModel):
    company: str
    job_count: int
