"""
Client configuration for the measurement data source.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .exceptions import DataSourceAuthError

DEFAULT_TIMEOUT = 30.0


@dataclass
class ClientConfig:
    """Connection settings for a Supabase/PostgREST data source."""

    base_url: str
    api_key: str
    timeout: float = DEFAULT_TIMEOUT
    stations_table: str = "monitoring_stations"
    parameters_table: str = "parameters"
    measurements_table: str = "measurements"
    user_agent: str = "aqmonitor-client/0.1.0"

    @property
    def rest_url(self) -> str:
        """Base URL of the REST endpoint, without trailing slash."""
        return f"{self.base_url.rstrip('/')}/rest/v1"

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Reads ``SUPABASE_URL``, ``SUPABASE_KEY`` (or ``SUPABASE_ANON_KEY``)
        and ``AQMONITOR_TIMEOUT``.

        Raises:
            DataSourceAuthError: If the URL or the key is not set.
        """
        base_url = os.environ.get("SUPABASE_URL", "")
        api_key = os.environ.get("SUPABASE_KEY") or os.environ.get(
            "SUPABASE_ANON_KEY", ""
        )

        missing = []
        if not base_url:
            missing.append("SUPABASE_URL")
        if not api_key:
            missing.append("SUPABASE_KEY")
        if missing:
            raise DataSourceAuthError(
                f"Data source is not configured: set {', '.join(missing)}",
                details={"missing": missing},
            )

        if timeout is None:
            raw_timeout = os.environ.get("AQMONITOR_TIMEOUT")
            try:
                timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
            except ValueError as e:
                raise ValueError(
                    f"AQMONITOR_TIMEOUT must be a number, got {raw_timeout!r}"
                ) from e

        return cls(base_url=base_url, api_key=api_key, timeout=timeout)
