"""
Query building for REST (PostgREST) collection requests.
"""

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .models import Selection
from .utils import as_utc, parse_timestamp, to_filter_value, to_utc_datetime

STATIONS_TABLE = "monitoring_stations"
PARAMETERS_TABLE = "parameters"
MEASUREMENTS_TABLE = "measurements"


class ColumnSets:
    """Column sets for the three collections."""

    STATION = ["station_id", "station_name"]
    PARAMETER = ["parameter_id", "parameter_description", "limit", "unit_description"]


# PostgREST operator name -> Python comparison
OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


@dataclass(frozen=True)
class Filter:
    """A single ``column <op> value`` condition."""

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(
                f"Unsupported filter operator '{self.op}'. "
                f"Supported: {', '.join(OPERATORS)}"
            )

    def to_param(self) -> Tuple[str, str]:
        return self.column, f"{self.op}.{to_filter_value(self.value)}"

    def matches(self, row: Dict[str, Any]) -> bool:
        """Evaluate the condition against a row, comparing dates as UTC datetimes."""
        if self.column not in row or row[self.column] is None:
            return False
        left = row[self.column]
        right = self.value
        if isinstance(right, date) or self.column.endswith("_date"):
            left = to_utc_datetime(left)
            right = to_utc_datetime(right)
        return OPERATORS[self.op](left, right)


class BaseQuery(ABC):
    """Base class for collection queries."""

    @abstractmethod
    def to_params(self) -> List[Tuple[str, str]]:
        """Convert the query to REST query-string parameters.

        Returns:
            List of ``(key, value)`` pairs. Keys may repeat.
        """
        pass


class CollectionQuery(BaseQuery):
    """Builder for filtered, ordered reads of one collection.

    Examples:
        query = (
            CollectionQuery()
            .from_("measurements")
            .eq("station_id", "S1")
            .gte("measurement_date", date(2024, 1, 1))
            .order_by("measurement_date")
        )
    """

    def __init__(self) -> None:
        self._table: str = ""
        self._columns: List[str] = []
        self._filters: List[Filter] = []
        self._order_column: Optional[str] = None
        self._ascending: bool = True

    @property
    def table(self) -> str:
        return self._table

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def filters(self) -> List[Filter]:
        return list(self._filters)

    @property
    def order_column(self) -> Optional[str]:
        return self._order_column

    @property
    def ascending(self) -> bool:
        return self._ascending

    def select(self, *columns: str) -> "CollectionQuery":
        """Set the columns to return. No columns means all of them.

        Returns:
            CollectionQuery: This query for method chaining.
        """
        self._columns = [c for c in columns if c != "*"]
        return self

    def from_(self, table: str) -> "CollectionQuery":
        """Set the collection to read from.

        Returns:
            CollectionQuery: This query for method chaining.
        """
        self._table = table
        return self

    def where(self, column: str, op: str, value: Any) -> "CollectionQuery":
        """Add a filter condition. Conditions are combined with AND.

        Args:
            column: Column name.
            op: One of ``eq``, ``neq``, ``gt``, ``gte``, ``lt``, ``lte``.
            value: Right-hand operand.

        Returns:
            CollectionQuery: This query for method chaining.
        """
        self._filters.append(Filter(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "CollectionQuery":
        return self.where(column, "eq", value)

    def gte(self, column: str, value: Any) -> "CollectionQuery":
        return self.where(column, "gte", value)

    def lte(self, column: str, value: Any) -> "CollectionQuery":
        return self.where(column, "lte", value)

    def order_by(self, column: str, ascending: bool = True) -> "CollectionQuery":
        """Set the sort column and direction.

        Returns:
            CollectionQuery: This query for method chaining.
        """
        self._order_column = column
        self._ascending = ascending
        return self

    def matches(self, row: Dict[str, Any]) -> bool:
        """True when the row satisfies every filter."""
        return all(f.matches(row) for f in self._filters)

    def apply(self, rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Filter and order rows the way the data source would.

        The sort is stable, so rows with equal keys keep their input order.
        """
        result = [row for row in rows if self.matches(row)]
        if self._order_column:
            result.sort(key=self._sort_key, reverse=not self._ascending)
        if self._columns:
            result = [{c: row.get(c) for c in self._columns} for row in result]
        return result

    def _sort_key(self, row: Dict[str, Any]) -> Any:
        value = row.get(self._order_column or "")
        if self._order_column and self._order_column.endswith("_date"):
            return as_utc(parse_timestamp(value))
        return value

    def to_params(self) -> List[Tuple[str, str]]:
        """Build PostgREST query parameters.

        Returns:
            List of ``(key, value)`` pairs: ``select``, one pair per filter
            and ``order``.
        """
        params: List[Tuple[str, str]] = [
            ("select", ",".join(self._columns) if self._columns else "*")
        ]
        params.extend(f.to_param() for f in self._filters)
        if self._order_column:
            direction = "asc" if self._ascending else "desc"
            params.append(("order", f"{self._order_column}.{direction}"))
        return params

    def __repr__(self) -> str:
        return f"CollectionQuery(table={self._table!r}, params={self.to_params()!r})"


def query_stations(table: str = STATIONS_TABLE) -> CollectionQuery:
    """All stations ordered by name."""
    return (
        CollectionQuery()
        .select(*ColumnSets.STATION)
        .from_(table)
        .order_by("station_name")
    )


def query_parameters(table: str = PARAMETERS_TABLE) -> CollectionQuery:
    """All parameters ordered by description."""
    return (
        CollectionQuery()
        .select(*ColumnSets.PARAMETER)
        .from_(table)
        .order_by("parameter_description")
    )


def query_measurements(
    selection: Selection, table: str = MEASUREMENTS_TABLE
) -> CollectionQuery:
    """
    Measurements for one station and parameter within an inclusive date range.

    The range is used as given; a start after the end is not corrected.

    Args:
        selection: Complete selection.
        table: Measurements table name.

    Returns:
        CollectionQuery ordered by ascending measurement date.
    """
    return (
        CollectionQuery()
        .from_(table)
        .eq("station_id", selection.station_id)
        .eq("parameter_id", selection.parameter_id)
        .gte("measurement_date", selection.start_date)
        .lte("measurement_date", selection.end_date)
        .order_by("measurement_date", ascending=True)
    )
