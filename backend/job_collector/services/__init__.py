"""
Services Layer

Enrichment, the collection cycle and its scheduler.
"""

from .collector import CycleState, JobCollectionService
from .enrichment import EnrichmentEngine
from .scheduler import CollectionScheduler

__all__ = [
    "CycleState",
    "JobCollectionService",
    "EnrichmentEngine",
    "CollectionScheduler"
]
