"""
Async REST client for a Supabase/PostgREST measurement store.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from .config import ClientConfig
from .exceptions import (
    DataSourceAuthError,
    DataSourceConnectionError,
    DataSourceError,
    DataSourceResponseError,
    DataSourceTimeoutError,
)
from .query import CollectionQuery

logger = logging.getLogger(__name__)


class SupabaseClient:
    """
    Client for reading monitoring data through the PostgREST API.

    Implements the ``DataSource`` protocol: ``fetch_all`` for reference
    collections and ``fetch_filtered`` for measurements. Every call
    performs a fresh request; nothing is cached.
    """

    def __init__(
        self, config: Optional[ClientConfig] = None, timeout: Optional[float] = None
    ):
        self.config = config or ClientConfig.from_env(timeout=timeout)
        self.timeout = timeout if timeout is not None else self.config.timeout
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
                "apikey": self.config.api_key,
                "Authorization": f"Bearer {self.config.api_key}",
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @staticmethod
    def _error_message(response: Any) -> str:
        """Extract PostgREST's error message from a failed response, if any."""
        try:
            body = response.json()
        except ValueError:
            return ""
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or "")
        return ""

    async def _make_request(
        self, table: str, params: Sequence[Tuple[str, str]]
    ) -> List[Dict[str, Any]]:
        """Make a request to the REST API with error handling."""
        url = f"{self.config.rest_url}/{table}"
        logger.debug(f"GET {url} params={list(params)}")

        try:
            response = await self._client.get(url, params=list(params))
            response.raise_for_status()
            data = response.json()

        except httpx.TimeoutException as e:
            raise DataSourceTimeoutError(
                f"Request timeout after {self.timeout}s", details={"table": table}
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = self._error_message(e.response)
            suffix = f": {detail}" if detail else ""
            details = {"table": table, "status_code": status}
            if status in (401, 403):
                raise DataSourceAuthError(
                    f"Access denied to '{table}'{suffix}", details=details
                ) from e
            elif status == 429:
                raise DataSourceConnectionError(
                    "Rate limit exceeded", details=details
                ) from e
            elif status >= 500:
                raise DataSourceConnectionError(
                    f"Data source temporarily unavailable{suffix}", details=details
                ) from e
            else:
                raise DataSourceConnectionError(
                    f"HTTP error {status}{suffix}", details=details
                ) from e
        except httpx.RequestError as e:
            raise DataSourceConnectionError(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise DataSourceResponseError(f"Invalid JSON response: {e}") from e

        if not isinstance(data, list):
            raise DataSourceResponseError(
                f"Expected a list of rows from '{table}', got {type(data).__name__}"
            )

        logger.debug(f"Received {len(data)} rows from '{table}'")
        return data

    async def execute(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        """
        Run a collection query.

        Args:
            query: Query naming the table, filters and ordering.

        Returns:
            Rows in the order returned by the data source.

        Raises:
            DataSourceError: On any retrieval or decoding failure.
        """
        if not query.table:
            raise ValueError("Query has no table; call from_() first")

        try:
            return await self._make_request(query.table, query.to_params())
        except DataSourceError:
            raise
        except Exception as e:
            raise DataSourceError(
                f"Failed to retrieve rows from '{query.table}': {e}"
            ) from e

    async def fetch_all(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        """Retrieve every row of a reference collection."""
        return await self.execute(query)

    async def fetch_filtered(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        """Retrieve the rows matching the query's filters, in its order."""
        return await self.execute(query)
