"""
API v1 Package

Contains all version 1 API endpoints for the job collector.
"""

from .collector import router as collector_router
from .health import router as health_router
from .jobs import router as jobs_router

__all__ = [
    "collector_router",
    "health_router",
    "jobs_router"
]
