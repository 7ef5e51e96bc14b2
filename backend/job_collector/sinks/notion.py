"""
Notion Sink

Writes enriched records as pages of a Notion database using the official
async client. Pages are matched by their Job URL property.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
from notion_client import AsyncClient
from notion_client.errors import APIResponseError, HTTPResponseError, RequestTimeoutError

from job_collector.core.exceptions import SinkConfigurationError, SinkError, SinkWriteError
from job_collector.schemas.job import EnrichedRecord
from job_collector.sinks.base import JobSink, KnownRecordSnapshot
from job_collector.utils.logger import get_logger, log_sink_operation

logger = get_logger(__name__)

RICH_TEXT_LIMIT = 2000

# Everything the client raises for a failed request
NOTION_ERRORS = (APIResponseError, HTTPResponseError, RequestTimeoutError, httpx.HTTPError)


def _rich_text(text: Optional[str], max_length: int = RICH_TEXT_LIMIT) -> List[Dict[str, Any]]:
    """Notion rich text array for plain text, truncated to one block."""
    text = (text or "").strip()
    if not text:
        return []
    if len(text) > max_length:
        text = text[:max_length - 3] + "..."
    return [{"type": "text", "text": {"content": text}}]


def _plain_text(prop: Optional[Dict[str, Any]]) -> str:
    """Read the plain text of a title, rich_text, url or select property."""
    if not prop:
        return ""
    kind = prop.get("type")
    if kind in ("title", "rich_text"):
        return "".join(part.get("plain_text", "") for part in prop.get(kind) or [])
    if kind == "url":
        return prop.get("url") or ""
    if kind == "select":
        return (prop.get("select") or {}).get("name", "")
    if kind == "date":
        return (prop.get("date") or {}).get("start", "")
    return ""


class NotionSink(JobSink):
    """
    Notion database sink.

    The target database must already exist with the properties listed in
    ``database_properties_schema``.
    """

    def __init__(
        self,
        api_key: Optional[str],
        database_id: Optional[str],
        client: Optional[AsyncClient] = None
    ) -> None:
        if not api_key and client is None:
            raise SinkConfigurationError("notion", "Notion API key is required")
        if not database_id:
            raise SinkConfigurationError("notion", "Notion database ID is required")

        self.database_id = database_id
        self.client = client or AsyncClient(auth=api_key)

        self._stats = {
            "pages_created": 0,
            "pages_skipped": 0,
            "errors": 0
        }

    @property
    def name(self) -> str:
        return "notion"

    async def close(self) -> None:
        await self.client.aclose()

    @staticmethod
    def database_properties_schema() -> Dict[str, Any]:
        """Properties the target database is expected to carry."""
        return {
            "Job Title": {"title": {}},
            "Company": {"rich_text": {}},
            "Location": {"rich_text": {}},
            "Job URL": {"url": {}},
            "Category": {"select": {}},
            "Priority": {
                "select": {
                    "options": [
                        {"name": "High", "color": "red"},
                        {"name": "Medium", "color": "yellow"},
                        {"name": "Low", "color": "gray"}
                    ]
                }
            },
            "Score": {"number": {"format": "number"}},
            "Posted Time": {"rich_text": {}},
            "Job Type": {"select": {}},
            "Status": {"select": {}},
            "Summary": {"rich_text": {}},
            "Tags": {"multi_select": {}},
            "Date Added": {"date": {}},
        }

    def format_properties(self, record: EnrichedRecord) -> Dict[str, Any]:
        """Map a record onto the database properties."""
        properties: Dict[str, Any] = {
            "Job Title": {"title": _rich_text(record.title)},
            "Company": {"rich_text": _rich_text(record.company)},
            "Location": {"rich_text": _rich_text(record.location)},
            "Job URL": {"url": record.url},
            "Category": {"select": {"name": record.category}},
            "Priority": {"select": {"name": record.priority}},
            "Score": {"number": record.score},
            "Posted Time": {"rich_text": _rich_text(record.posted_time)},
            "Status": {"select": {"name": record.status}},
            "Summary": {"rich_text": _rich_text(record.summary)},
            # Multi-select option names cannot contain commas
            "Tags": {"multi_select": [{"name": tag.replace(",", " ")} for tag in record.tags]},
            "Date Added": {"date": {"start": record.date_added.isoformat()}},
        }
        if record.job_type:
            properties["Job Type"] = {"select": {"name": record.job_type}}
        return properties

    async def _query_all_pages(self, **filters) -> List[Dict[str, Any]]:
        pages: List[Dict[str, Any]] = []
        query_params: Dict[str, Any] = {"database_id": self.database_id, **filters}
        has_more = True

        while has_more:
            response = await self.client.databases.query(**query_params)
            pages.extend(response.get("results", []))
            has_more = response.get("has_more", False)
            query_params["start_cursor"] = response.get("next_cursor")

        return pages

    async def snapshot(self) -> KnownRecordSnapshot:
        try:
            pages = await self._query_all_pages()
        except NOTION_ERRORS as e:
            raise SinkError(self.name, f"Database query failed: {e}") from e

        rows = []
        for page in pages:
            props = page.get("properties", {})
            rows.append((
                _plain_text(props.get("Job URL")),
                _plain_text(props.get("Company")),
                _plain_text(props.get("Job Title")),
                _plain_text(props.get("Location")),
            ))
        return KnownRecordSnapshot.from_rows(rows)

    async def find_existing_page(self, url: str) -> Optional[str]:
        """Page ID of the page carrying this Job URL, if any."""
        response = await self.client.databases.query(
            database_id=self.database_id,
            filter={"property": "Job URL", "url": {"equals": url}},
            page_size=1
        )
        results = response.get("results", [])
        return results[0]["id"] if results else None

    async def create(self, record: EnrichedRecord) -> Optional[EnrichedRecord]:
        try:
            if await self.find_existing_page(record.url):
                self._stats["pages_skipped"] += 1
                logger.info("Job already in Notion", title=record.title, url=record.url)
                return None

            await self.client.pages.create(
                parent={"database_id": self.database_id},
                properties=self.format_properties(record)
            )
        except NOTION_ERRORS as e:
            self._stats["errors"] += 1
            raise SinkWriteError(self.name, f"Page creation failed: {e}", url=record.url) from e

        self._stats["pages_created"] += 1
        log_sink_operation("create", self.name, url=record.url, title=record.title)
        return record

    async def stats(self) -> Dict[str, Any]:
        try:
            pages = await self._query_all_pages()
        except NOTION_ERRORS as e:
            raise SinkError(self.name, f"Database query failed: {e}") from e

        now = datetime.now(timezone.utc)
        today = now.date().isoformat()
        week_ago = (now - timedelta(days=7)).date().isoformat()

        companies = set()
        new_jobs = jobs_today = jobs_this_week = high_priority = 0
        for page in pages:
            props = page.get("properties", {})
            companies.add(_plain_text(props.get("Company")))
            added = _plain_text(props.get("Date Added"))[:10]
            if _plain_text(props.get("Status")) == "new":
                new_jobs += 1
            if added and added >= today:
                jobs_today += 1
            if added and added >= week_ago:
                jobs_this_week += 1
            if _plain_text(props.get("Priority")) == "High":
                high_priority += 1

        return {
            "sink": self.name,
            "total_jobs": len(pages),
            "unique_companies": len(companies),
            "new_jobs": new_jobs,
            "jobs_today": jobs_today,
            "jobs_this_week": jobs_this_week,
            "high_priority": high_priority,
            **self._stats
        }
