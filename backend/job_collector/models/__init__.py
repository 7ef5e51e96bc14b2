"""
Database Models Package

Contains SQLAlchemy ORM models for the job collector.
"""

from job_collector.core.database import Base
from job_collector.models.job import JobPosting

__all__ = [
    "Base",
    "JobPosting",
]
