"""
Google Sheets Sink

Appends enriched records as rows of a worksheet. gspread is synchronous, so
every call runs in the default executor.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional

import gspread
from gspread.exceptions import APIError, GSpreadException
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from job_collector.core.exceptions import SinkConfigurationError, SinkError, SinkWriteError
from job_collector.schemas.job import EnrichedRecord
from job_collector.sinks.base import JobSink, KnownRecordSnapshot
from job_collector.utils.logger import get_logger, log_sink_operation

logger = get_logger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# requests transport errors subclass OSError
SHEETS_ERRORS = (APIError, GSpreadException, GoogleAuthError, OSError)

HEADERS = [
    "Job Title", "Company", "Location", "Category", "Priority", "Score",
    "Posted Time", "Status", "Job URL", "Summary", "Date Added", "Tags",
]


def authorise_worksheet(service_account_file: str, sheet_id: str) -> gspread.Worksheet:
    """Open the first worksheet of a spreadsheet with a service account."""
    creds = Credentials.from_service_account_file(service_account_file, scopes=SCOPES)
    client = gspread.authorize(creds)
    return client.open_by_key(sheet_id).sheet1


class SheetsSink(JobSink):
    """Worksheet sink; row 1 holds HEADERS, one row per record."""

    def __init__(
        self,
        service_account_file: Optional[str] = None,
        sheet_id: Optional[str] = None,
        worksheet: Optional[gspread.Worksheet] = None
    ) -> None:
        if worksheet is None and not (service_account_file and sheet_id):
            raise SinkConfigurationError(
                "sheets",
                "GOOGLE_SERVICE_ACCOUNT_FILE and GOOGLE_SHEET_ID are required"
            )
        self.service_account_file = service_account_file
        self.sheet_id = sheet_id
        self.worksheet = worksheet
        self._headers_checked = False

    @property
    def name(self) -> str:
        return "sheets"

    async def _run(self, func: Callable, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def initialize(self) -> None:
        """Open the worksheet and make sure the header row is present."""
        try:
            if self.worksheet is None:
                self.worksheet = await self._run(
                    authorise_worksheet, self.service_account_file, self.sheet_id
                )
            await self._ensure_headers()
        except SHEETS_ERRORS + (ValueError,) as e:
            raise SinkError(self.name, f"Cannot open worksheet: {e}") from e

    async def _ensure_headers(self) -> None:
        if self._headers_checked:
            return
        existing = await self._run(self.worksheet.row_values, 1)
        if existing != HEADERS:
            await self._run(self.worksheet.update, values=[HEADERS], range_name="A1")
            logger.info("Wrote worksheet header row")
        self._headers_checked = True

    async def _records(self) -> List[Dict[str, Any]]:
        if self.worksheet is None:
            await self.initialize()
        return await self._run(self.worksheet.get_all_records, expected_headers=HEADERS)

    @staticmethod
    def format_row(record: EnrichedRecord) -> List[Any]:
        return [
            record.title,
            record.company,
            record.location,
            record.category,
            record.priority,
            record.score,
            record.posted_time or "",
            record.status,
            record.url,
            record.summary,
            record.date_added.date().isoformat(),
            record.tags_display,
        ]

    async def snapshot(self) -> KnownRecordSnapshot:
        try:
            rows = await self._records()
        except SHEETS_ERRORS as e:
            raise SinkError(self.name, f"Cannot read worksheet: {e}") from e

        return KnownRecordSnapshot.from_rows(
            (
                str(row.get("Job URL", "")),
                str(row.get("Company", "")),
                str(row.get("Job Title", "")),
                str(row.get("Location", "")),
            )
            for row in rows
        )

    async def create(self, record: EnrichedRecord) -> Optional[EnrichedRecord]:
        try:
            if self.worksheet is None:
                await self.initialize()
            await self._ensure_headers()

            urls = await self._run(self.worksheet.col_values, HEADERS.index("Job URL") + 1)
            if record.url in urls[1:]:
                logger.info("Job already in worksheet", title=record.title, url=record.url)
                return None

            await self._run(
                self.worksheet.append_row,
                self.format_row(record),
                value_input_option="RAW"
            )
        except SHEETS_ERRORS as e:
            raise SinkWriteError(self.name, f"Row append failed: {e}", url=record.url) from e

        log_sink_operation("create", self.name, url=record.url, title=record.title)
        return record

    async def stats(self) -> Dict[str, Any]:
        try:
            rows = await self._records()
        except SHEETS_ERRORS as e:
            raise SinkError(self.name, f"Cannot read worksheet: {e}") from e

        now = datetime.now(timezone.utc)
        today = now.date().isoformat()
        week_ago = (now - timedelta(days=7)).date().isoformat()
        added = [str(row.get("Date Added", "")) for row in rows]

        return {
            "sink": self.name,
            "total_jobs": len(rows),
            "unique_companies": len({row.get("Company") for row in rows}),
            "new_jobs": sum(1 for row in rows if row.get("Status") == "new"),
            "jobs_today": sum(1 for day in added if day and day >= today),
            "jobs_this_week": sum(1 for day in added if day and day >= week_ago),
            "high_priority": sum(1 for row in rows if row.get("Priority") == "High"),
        }
