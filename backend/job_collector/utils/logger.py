"""
Logging Configuration

structlog on top of the standard logging module. Development runs get a
colored console renderer. Otherwise structlog hands the event to logging as
``extra`` fields and python-json-logger writes one flat JSON object per line,
to stdout and to a file under ``LOG_DIR``.

Cycle-scoped fields (``cycle_id``) are bound through structlog contextvars
by the collection service and merged into every event.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

from job_collector.core.config import Settings, get_settings

LOG_FILE_NAME = "collector.log"
CONSOLE_HANDLER_NAME = "collector-console"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Keys logging refuses to take from ``extra``
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def _rename_reserved_keys(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    for key in [k for k in event_dict if k in _RECORD_ATTRS and k not in structlog.stdlib.LOG_KWARG_NAMES]:
        event_dict[f"{key}_"] = event_dict.pop(key)
    return event_dict


def _processors(debug: bool) -> List[Any]:
    shared: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if debug:
        return [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            *shared,
            structlog.dev.ConsoleRenderer(),
        ]
    return [*shared, _rename_reserved_keys, structlog.stdlib.render_to_log_kwargs]


def _replace_handler(root: logging.Logger, handler: logging.Handler) -> None:
    for existing in [h for h in root.handlers if h.get_name() == handler.get_name()]:
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)


def _console_handler(debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s") if debug else JsonFormatter(JSON_FORMAT))
    return handler


def _file_handler(log_dir: str) -> logging.Handler:
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path / LOG_FILE_NAME, encoding="utf-8")
    handler.set_name(LOG_FILE_NAME)
    handler.setFormatter(JsonFormatter(JSON_FORMAT))
    return handler


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog and the root logger from settings.

    Safe to call more than once: the console and file handlers are replaced,
    not duplicated.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    structlog.configure(
        processors=_processors(settings.DEBUG),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(level)
    _replace_handler(root, _console_handler(settings.DEBUG))

    for handler in [h for h in root.handlers if h.get_name() == LOG_FILE_NAME]:
        root.removeHandler(handler)
        handler.close()
    if settings.LOG_DIR and not settings.DEBUG:
        root.addHandler(_file_handler(settings.LOG_DIR))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def log_scraping_activity(
    scraper_name: str,
    action: str,
    url: Optional[str] = None,
    **kwargs
) -> None:
    """
    Log one step of a scraper run.

    Args:
        scraper_name: Scraper identifier, e.g. "linkedin"
        action: Step being performed ("collect", "detail")
        url: Page being fetched
        **kwargs: Counts or other step data
    """
    get_logger("scraping").info(
        "Scraping activity",
        scraper=scraper_name,
        action=action,
        url=url,
        **kwargs
    )


def log_sink_operation(
    operation: str,
    sink: str,
    url: Optional[str] = None,
    **kwargs
) -> None:
    """Log a write or read against a persistence sink."""
    get_logger("sinks").info(
        "Sink operation",
        operation=operation,
        sink=sink,
        url=url,
        **kwargs
    )


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    **kwargs
) -> None:
    """
    Log a recovered error with the listing it belongs to.

    Args:
        error: Exception that was caught
        context: Where it happened (stage, title, url)
        **kwargs: Extra fields
    """
    get_logger("errors").error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context or {},
        exc_info=error,
        **kwargs
    )
