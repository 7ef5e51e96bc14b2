"""
Job Database Model

SQLAlchemy 2.0 model for collected job postings.
"""

from typing import Optional
from datetime import datetime, timezone

from sqlalchemy import (
    Integer, String, Text, DateTime, Boolean, JSON,
    CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from job_collector.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobPosting(Base):
    """
    Job posting collected from a job board and enriched with
    category, score, priority and tags.
    """

    __tablename__ = "job_postings"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Listing
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(String(50), default="linkedin", nullable=False)
    posted_time: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    application_status: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    job_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Detail
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    criteria: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    company_info: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    full_details: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Enrichment
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    priority: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    benefits: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="new", nullable=False)

    # Metadata
    scraped_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    date_added: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint('url', name='uq_job_posting_url'),
        CheckConstraint('score >= 0 AND score <= 100', name='ck_job_posting_score_range'),
        CheckConstraint(
            "priority IN ('High', 'Medium', 'Low') OR priority IS NULL",
            name='ck_job_posting_priority_valid'
        ),

        Index('idx_job_posting_company', 'company'),
        Index('idx_job_posting_date_added', 'date_added'),
        Index('idx_job_posting_priority', 'priority'),
        Index('idx_job_posting_identity', 'company', 'title', 'location'),
    )

    def __repr__(self) -> str:
        return f"<JobPosting(id={self.id}, title='{self.title}', company='{self.company}')>"

