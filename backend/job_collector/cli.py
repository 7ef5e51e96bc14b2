"""
Job Collector command line.

    job-collector run [--search-url URL] [--sink BACKEND]
    job-collector schedule
    job-collector serve
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from job_collector.core.config import Settings, get_settings
from job_collector.core.container import SimpleContainer
from job_collector.core.exceptions import JobCollectorError
from job_collector.schemas.collector import CycleSummary
from job_collector.sinks import SINK_BACKENDS
from job_collector.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="job-collector", description="Job listing collector")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one collection cycle and print its summary")
    run_parser.add_argument("--search-url", help="Search results URL (defaults to configured search)")
    run_parser.add_argument("--sink", choices=SINK_BACKENDS, help="Sink backend to use for this run")

    subparsers.add_parser("schedule", help="Run collection cycles periodically until interrupted")
    subparsers.add_parser("serve", help="Run the HTTP API")

    return parser


async def run_once(settings: Settings, search_url: Optional[str] = None) -> Optional[CycleSummary]:
    """Run a single cycle with a dedicated container."""
    container = SimpleContainer()
    await container.initialize(settings)
    try:
        scheduler = container.get("scheduler")
        return await container.get("service").run_cycle(search_url or scheduler.search_url)
    finally:
        await container.shutdown()


async def run_scheduled(settings: Settings) -> None:
    """Run the scheduler until cancelled."""
    container = SimpleContainer()
    await container.initialize(settings)
    try:
        container.get("scheduler").start()
        await asyncio.Event().wait()
    finally:
        await container.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if getattr(args, "sink", None):
        settings = settings.model_copy(update={"SINK_BACKEND": args.sink})
    configure_logging(settings)

    try:
        if args.command == "run":
            summary = asyncio.run(run_once(settings, args.search_url))
            if summary is None:
                print("Collection skipped: a cycle is already running")
                return 1
            print(summary.model_dump_json(indent=2))
            return 1 if summary.aborted else 0

        if args.command == "schedule":
            asyncio.run(run_scheduled(settings))
            return 0

        from job_collector.main import run_server
        run_server()
        return 0

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except JobCollectorError as e:
        logger.error("Collector failed", **e.to_dict())
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
