"""
Exceptions for aqmonitor operations.
"""

from typing import Any, Dict, Optional


class AQMonitorError(Exception):
    """Base exception for aqmonitor errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class InvalidSelectionError(AQMonitorError, ValueError):
    """Raised when a selection is missing a field or carries an unreadable date."""

    def __str__(self) -> str:
        for key in ("missing", "invalid"):
            fields = self.details.get(key)
            if fields:
                return f"{self.message} ({key}: {', '.join(fields)})"
        return self.message


class DataSourceError(AQMonitorError):
    """Raised when retrieving rows from the data source fails."""

    pass


class DataSourceConnectionError(DataSourceError):
    """Network failure, rate limiting or server-side error."""

    pass


class DataSourceTimeoutError(DataSourceError):
    """The data source did not answer in time."""

    pass


class DataSourceAuthError(DataSourceError):
    """Missing credentials or access denied by the data source."""

    pass


class DataSourceResponseError(DataSourceError):
    """Response could not be decoded or rows were malformed."""

    pass
