"""
Data source protocol and an in-memory implementation.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .exceptions import DataSourceResponseError
from .query import CollectionQuery

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    """Read-only collaborator that serves collection queries."""

    async def fetch_all(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        """Return every row of a reference collection in the query's order."""
        ...

    async def fetch_filtered(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        """Return the rows matching all of the query's filters, in its order."""
        ...


class InMemoryDataSource:
    """
    Data source backed by lists of rows held in memory.

    Filters are evaluated literally and ordering uses a stable sort, so a
    reversed date range yields no rows and equal timestamps keep their
    insertion order. Useful for offline analysis and tests.

    Args:
        tables: Mapping of table name to rows.
        fail_with: If set, every fetch raises this error instead.
    """

    def __init__(
        self,
        tables: Optional[Dict[str, Iterable[Dict[str, Any]]]] = None,
        fail_with: Optional[Exception] = None,
    ):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.fail_with = fail_with
        self.calls: List[CollectionQuery] = []

    def add_rows(self, table: str, rows: Iterable[Dict[str, Any]]) -> None:
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    async def _run(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        self.calls.append(query)
        if self.fail_with is not None:
            raise self.fail_with

        rows = self.tables.get(query.table, [])
        try:
            result = query.apply(rows)
        except (TypeError, ValueError) as e:
            raise DataSourceResponseError(
                f"Cannot evaluate query on '{query.table}': {e}"
            ) from e

        logger.debug(f"In-memory '{query.table}': {len(result)} of {len(rows)} rows")
        return result

    async def fetch_all(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        return await self._run(query)

    async def fetch_filtered(self, query: CollectionQuery) -> List[Dict[str, Any]]:
        return await self._run(query)

