"""
Database Sink

Relational sink over SQLAlchemy async sessions. The unique constraint on the
job URL is the final duplicate guard: an IntegrityError on insert is reported
as a duplicate rejection rather than an error.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from job_collector.core.database import DatabaseManager
from job_collector.core.exceptions import SinkError, SinkWriteError
from job_collector.models.job import JobPosting
from job_collector.schemas.job import CategoryCount, CompanyCount, EnrichedRecord, JobResponse, JobSummary
from job_collector.sinks.base import JobSink, KnownRecordSnapshot
from job_collector.utils.logger import get_logger, log_sink_operation

logger = get_logger(__name__)


class DatabaseSink(JobSink):
    """Stores records as JobPosting rows."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.db_manager = db_manager

    @property
    def name(self) -> str:
        return "database"

    async def initialize(self) -> None:
        if self.db_manager.is_initialized:
            return
        try:
            await self.db_manager.init_database()
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"Database initialization failed: {e}") from e

    async def close(self) -> None:
        await self.db_manager.close_connections()

    async def snapshot(self) -> KnownRecordSnapshot:
        """Identities of every stored posting."""
        try:
            async with self.db_manager.session() as session:
                result = await session.execute(
                    select(JobPosting.url, JobPosting.company, JobPosting.title, JobPosting.location)
                )
                rows = [(url, company, title, location or "") for url, company, title, location in result.all()]
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"Snapshot query failed: {e}") from e

        snapshot = KnownRecordSnapshot.from_rows(rows)
        logger.debug("Loaded database snapshot", known_urls=len(snapshot.urls))
        return snapshot

    @staticmethod
    def _to_model(record: EnrichedRecord) -> JobPosting:
        return JobPosting(
            title=record.title,
            company=record.company,
            location=record.location,
            url=record.url,
            source=record.source,
            posted_time=record.posted_time,
            application_status=record.application_status,
            job_type=record.job_type,
            description=record.description,
            criteria=dict(record.criteria),
            company_info=dict(record.company_info),
            full_details=record.full_details,
            summary=record.summary,
            category=record.category,
            score=record.score,
            priority=record.priority,
            tags=record.tags_display,
            requirements=record.requirements,
            benefits=record.benefits,
            status=record.status,
            scraped_at=record.scraped_at,
            date_added=record.date_added,
        )

    async def create(self, record: EnrichedRecord) -> Optional[EnrichedRecord]:
        """
        Insert a posting.

        Returns:
            Optional[EnrichedRecord]: The record, or None when the URL is already stored

        Raises:
            SinkWriteError: On any other database failure
        """
        try:
            async with self.db_manager.session() as session:
                session.add(self._to_model(record))
                await session.commit()
        except IntegrityError:
            logger.info("Duplicate posting rejected by database", title=record.title, url=record.url)
            return None
        except SQLAlchemyError as e:
            raise SinkWriteError(self.name, f"Insert failed: {e}", url=record.url) from e

        log_sink_operation("create", self.name, url=record.url, title=record.title)
        return record

    async def stats(self) -> Dict[str, Any]:
        """Aggregate counts over stored postings."""
        now = datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_ago = now - timedelta(days=7)

        try:
            async with self.db_manager.session() as session:
                row = (await session.execute(
                    select(
                        func.count(JobPosting.id),
                        func.count(func.distinct(JobPosting.company)),
                        func.count(JobPosting.id).filter(JobPosting.status == "new"),
                        func.count(JobPosting.id).filter(JobPosting.date_added >= today),
                        func.count(JobPosting.id).filter(JobPosting.date_added >= week_ago),
                        func.count(JobPosting.id).filter(JobPosting.priority == "High"),
                    )
                )).one()
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"Stats query failed: {e}") from e

        return {
            "sink": self.name,
            "total_jobs": row[0],
            "unique_companies": row[1],
            "new_jobs": row[2],
            "jobs_today": row[3],
            "jobs_this_week": row[4],
            "high_priority": row[5],
        }

    async def get_recent_jobs(self, limit: int = 10) -> List[JobSummary]:
        """Most recently added postings, newest first."""
        try:
            async with self.db_manager.session() as session:
                result = await session.execute(self._newest_first(select(JobPosting)).limit(limit))
                postings = result.scalars().all()
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"Recent jobs query failed: {e}") from e

        return [JobSummary.model_validate(posting) for posting in postings]

    async def _fetch_postings(self, query: Select, action: str) -> List[JobResponse]:
        try:
            async with self.db_manager.session() as session:
                postings = (await session.execute(query)).scalars().all()
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"{action} query failed: {e}") from e
        return [JobResponse.model_validate(posting) for posting in postings]

    @staticmethod
    def _newest_first(query: Select) -> Select:
        return query.order_by(JobPosting.date_added.desc(), JobPosting.id.desc())

    async def search_jobs(self, search_term: str, limit: int = 20, offset: int = 0) -> List[JobResponse]:
        """
        Full-text style search over title, company and description.

        Every whitespace-separated term must appear, case-insensitively, in at
        least one of the three columns.

        Args:
            search_term: Free text query
            limit: Maximum number of jobs
            offset: Number of matching jobs to skip

        Returns:
            List[JobResponse]: Matches, newest first
        """
        terms = search_term.split()
        if not terms:
            return []

        conditions = [
            or_(
                JobPosting.title.icontains(term, autoescape=True),
                JobPosting.company.icontains(term, autoescape=True),
                JobPosting.description.icontains(term, autoescape=True),
            )
            for term in terms
        ]
        query = self._newest_first(select(JobPosting).where(and_(*conditions))).limit(limit).offset(offset)
        return await self._fetch_postings(query, "Search")

    async def get_jobs_by_category(self, category: str, limit: int = 20) -> List[JobResponse]:
        """Jobs in one category, newest first."""
        query = self._newest_first(select(JobPosting).where(JobPosting.category == category)).limit(limit)
        return await self._fetch_postings(query, "Category")

    async def get_jobs_by_company(self, company: str, limit: int = 20) -> List[JobResponse]:
        """Jobs whose company name contains ``company``, case-insensitively."""
        query = self._newest_first(
            select(JobPosting).where(JobPosting.company.icontains(company, autoescape=True))
        ).limit(limit)
        return await self._fetch_postings(query, "Company")

    async def get_categories(self) -> List[CategoryCount]:
        """Categories with their job counts, largest first."""
        job_count = func.count(JobPosting.id).label("job_count")
        query = (
            select(JobPosting.category, job_count)
            .where(JobPosting.category.is_not(None))
            .group_by(JobPosting.category)
            .order_by(job_count.desc(), JobPosting.category)
        )
        try:
            async with self.db_manager.session() as session:
                rows = (await session.execute(query)).all()
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"Categories query failed: {e}") from e
        return [CategoryCount(category=category, count=count) for category, count in rows]

    async def get_top_companies(self, limit: int = 10) -> List[CompanyCount]:
        """Companies with the most stored jobs."""
        job_count = func.count(JobPosting.id).label("job_count")
        query = (
            select(JobPosting.company, job_count)
            .group_by(JobPosting.company)
            .order_by(job_count.desc(), JobPosting.company)
            .limit(limit)
        )
        try:
            async with self.db_manager.session() as session:
                rows = (await session.execute(query)).all()
        except SQLAlchemyError as e:
            raise SinkError(self.name, f"Top companies query failed: {e}") from e
        return [CompanyCount(company=company, job_count=count) for company, count in rows]
