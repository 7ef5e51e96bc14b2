"""
Tests for the command line entry point.
"""

from unittest.mock import AsyncMock, patch

import pytest

from job_collector.cli import build_parser, main, run_once
from job_collector.core.config import Settings
from job_collector.schemas.collector import CycleSummary
from tests.conftest import SEARCH_URL


@pytest.mark.unit
class TestCli:
    """Test argument parsing and exit codes."""

    def test_parser(self):
        """Test the run subcommand options."""
        args = build_parser().parse_args(["run", "--search-url", "https://x", "--sink", "memory"])
        assert args.command == "run"
        assert args.search_url == "https://x"
        assert args.sink == "memory"

    def test_parser_rejects_unknown_sink(self):
        """Test sink choices are enforced."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "--sink", "ftp"])

    def test_run_prints_summary(self, capsys):
        """Test a completed cycle exits 0 and prints its summary."""
        summary = CycleSummary(total_scraped=2, new_jobs=1, created=1, processed=1)

        with patch("job_collector.cli.configure_logging"), \
                patch("job_collector.cli.run_once", new=AsyncMock(return_value=summary)) as run:
            code = main(["run", "--sink", "memory"])

        assert code == 0
        assert '"created": 1' in capsys.readouterr().out
        settings = run.await_args.args[0]
        assert settings.SINK_BACKEND == "memory"

    def test_run_aborted_exit_code(self):
        """Test an aborted cycle exits 1."""
        summary = CycleSummary(aborted=True)

        with patch("job_collector.cli.configure_logging"), \
                patch("job_collector.cli.run_once", new=AsyncMock(return_value=summary)):
            assert main(["run"]) == 1

    def test_run_skipped_exit_code(self):
        """Test a skipped cycle exits 1."""
        with patch("job_collector.cli.configure_logging"), \
                patch("job_collector.cli.run_once", new=AsyncMock(return_value=None)):
            assert main(["run"]) == 1

    async def test_run_once_with_memory_sink(self, fake_fetcher):
        """Test a one-shot cycle against canned pages."""
        settings = Settings(SINK_BACKEND="memory", SINK_MIRRORS="", REQUEST_DELAY_SECONDS=0)

        with patch("job_collector.core.container.HttpFetcher", return_value=fake_fetcher):
            summary = await run_once(settings, SEARCH_URL)

        assert summary.created == 3
        assert fake_fetcher.closed
