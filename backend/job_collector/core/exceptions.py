"""
Custom Exceptions for Job Collector

Structured exceptions for fetching, extraction, and persistence failures.
Every error carries a category and severity so the collection loop and the
API layer can log and report it consistently.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum

from fastapi import status


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    AUTHENTICATION = "authentication"
    PARSING = "parsing"
    STORAGE = "storage"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class JobCollectorError(Exception):
    """
    Base exception for all application-specific errors.

    Provides structured error information for consistent logging
    and JSON error responses.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details or {}
        self.retry_after = retry_after
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "retry_after": self.retry_after
        }


# Fetch Exceptions
class FetchError(JobCollectorError):
    """Raised when a page cannot be fetched (timeout, non-2xx, network error)."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", "FETCH_ERROR")
        kwargs.setdefault("category", ErrorCategory.NETWORK)
        kwargs.setdefault("http_status", status.HTTP_502_BAD_GATEWAY)
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code
        self.details.update({"url": url, "status_code": status_code})


class RateLimitError(FetchError):
    """Raised when the scraped site answers 429."""

    def __init__(self, url: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(
            f"Rate limited while fetching {url}",
            url=url,
            status_code=429,
            error_code="RATE_LIMITED",
            category=ErrorCategory.RATE_LIMIT,
            http_status=status.HTTP_429_TOO_MANY_REQUESTS,
            retry_after=retry_after
        )


class AuthenticationError(FetchError):
    """Raised when the scraped site answers 401/403."""

    def __init__(self, url: Optional[str] = None, status_code: int = 403):
        super().__init__(
            f"Access denied while fetching {url}",
            url=url,
            status_code=status_code,
            error_code="ACCESS_DENIED",
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.HIGH
        )


# Extraction Exceptions
class ExtractionError(JobCollectorError):
    """Raised when a listing card or detail page cannot be parsed."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "EXTRACTION_ERROR")
        kwargs.setdefault("category", ErrorCategory.PARSING)
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        super().__init__(message, **kwargs)
        self.url = url
        self.details.update({"url": url})


# Sink Exceptions
class SinkError(JobCollectorError):
    """Base exception for sink failures."""

    def __init__(self, sink_name: str, message: str, **kwargs):
        kwargs.setdefault("error_code", "SINK_ERROR")
        kwargs.setdefault("category", ErrorCategory.STORAGE)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("http_status", status.HTTP_503_SERVICE_UNAVAILABLE)
        super().__init__(f"{sink_name}: {message}", **kwargs)
        self.sink_name = sink_name
        self.details.update({"sink": sink_name})


class SinkWriteError(SinkError):
    """Raised when a record cannot be written to a sink."""

    def __init__(self, sink_name: str, message: str, url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "SINK_WRITE_ERROR")
        super().__init__(sink_name, message, **kwargs)
        self.details.update({"url": url})


class SinkConfigurationError(SinkError):
    """Raised when a sink is missing credentials or targets."""

    def __init__(self, sink_name: str, message: str, **kwargs):
        kwargs.setdefault("error_code", "SINK_CONFIGURATION_ERROR")
        kwargs.setdefault("category", ErrorCategory.CONFIGURATION)
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
        super().__init__(sink_name, message, **kwargs)


# Configuration Exceptions
class ConfigurationError(JobCollectorError):
    """Raised when configuration files or settings are invalid."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "CONFIGURATION_ERROR")
        kwargs.setdefault("category", ErrorCategory.CONFIGURATION)
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
        super().__init__(message, **kwargs)
