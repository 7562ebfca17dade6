"""
Data models for stations, parameters, measurements and analysis results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

from .utils import DateLike, to_utc_datetime

if TYPE_CHECKING:
    import pandas as pd

# Identifiers are opaque keys; the data source may use text or integer keys.
Identifier = Union[str, int]


@dataclass(frozen=True)
class Station:
    """A fixed monitoring location."""

    station_id: Identifier
    name: str


@dataclass(frozen=True)
class Parameter:
    """A monitored pollutant or metric with its regulatory limit."""

    parameter_id: Identifier
    description: str
    limit: Optional[float]  # None means no limit is defined
    unit: Optional[str] = None

    @property
    def has_limit(self) -> bool:
        return self.limit is not None


@dataclass(frozen=True)
class Measurement:
    """A single measured value for one station and parameter."""

    station_id: Identifier
    parameter_id: Identifier
    timestamp: datetime
    value: Optional[float]


@dataclass(frozen=True)
class Selection:
    """
    Station, parameter and date range driving one query.

    A selection is a plain value: the caller builds a new one whenever the
    user changes a field. Dates are inclusive on both ends and are passed
    to the data source as given, a reversed range included.
    """

    station_id: Optional[Identifier] = None
    parameter_id: Optional[Identifier] = None
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None

    def missing_fields(self) -> List[str]:
        """Names of the fields that are not set."""
        missing = []
        for name in ("station_id", "parameter_id", "start_date", "end_date"):
            value = getattr(self, name)
            if value is None or value == "":
                missing.append(name)
        return missing

    def is_complete(self) -> bool:
        return not self.missing_fields()

    @property
    def is_reversed(self) -> bool:
        """True when both dates are set and the start is after the end."""
        if self.start_date is None or self.end_date is None:
            return False
        return to_utc_datetime(self.start_date) > to_utc_datetime(self.end_date)

    @classmethod
    def last_year(
        cls,
        station_id: Identifier,
        parameter_id: Identifier,
        today: Optional[date] = None,
    ) -> "Selection":
        """
        Selection covering the year up to and including ``today``.

        Args:
            station_id: Station to query.
            parameter_id: Parameter to query.
            today: Reference day, defaults to the current date.

        Returns:
            Selection from one year before ``today`` to ``today``.
        """
        today = today or date.today()
        try:
            start = today.replace(year=today.year - 1)
        except ValueError:
            # 29 February has no counterpart in the previous year
            start = today.replace(year=today.year - 1, day=28)
        return cls(station_id, parameter_id, start, today)


@dataclass(frozen=True)
class ExceedanceStatistics:
    """Counts of measurements above a parameter's limit."""

    exceedance_count: int
    total_count: int
    percentage: Optional[float]  # None when undefined, full precision otherwise

    @property
    def has_exceedances(self) -> bool:
        return self.exceedance_count > 0

    @property
    def percentage_display(self) -> Optional[str]:
        """Percentage rounded to one decimal place, or None if undefined."""
        if self.percentage is None:
            return None
        return f"{self.percentage:.1f}"


@dataclass(frozen=True)
class AnalysisResult:
    """Time-ordered series for one selection plus its exceedance statistics."""

    selection: Selection
    parameter: Optional[Parameter]
    measurements: Tuple[Measurement, ...]
    statistics: ExceedanceStatistics

    @property
    def limit(self) -> Optional[float]:
        return self.parameter.limit if self.parameter else None

    def __len__(self) -> int:
        return len(self.measurements)

    def is_empty(self) -> bool:
        return len(self.measurements) == 0

    def chart_series(self) -> Tuple[List[datetime], List[Optional[float]]]:
        """Timestamps and values, in series order, for a line chart."""
        return (
            [m.timestamp for m in self.measurements],
            [m.value for m in self.measurements],
        )

    def to_pandas(self) -> "pd.DataFrame":
        """Series as a DataFrame with timestamp, value and exceeds_limit columns."""
        from .analysis import measurements_to_dataframe

        return measurements_to_dataframe(self.measurements, self.limit)

    def summary(self) -> str:
        """Human readable summary of the exceedance statistics."""
        stats = self.statistics
        description = (
            self.parameter.description
            if self.parameter
            else f"Parameter {self.selection.parameter_id}"
        )
        lines = [description]

        if self.limit is None:
            lines.append("Limit: not defined")
        else:
            unit = f" {self.parameter.unit}" if self.parameter and self.parameter.unit else ""
            lines.append(f"Limit: {self.limit:g}{unit}")

        lines.append(
            f"Exceedances: {stats.exceedance_count} of {stats.total_count} days"
        )
        if stats.has_exceedances:
            lines.append(f"Limit exceeded on {stats.percentage_display}% of days")
        return "\n".join(lines)


@dataclass
class ReferenceData:
    """Stations and parameters loaded once, indexed by identifier."""

    stations: List[Station] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    _stations_by_id: Dict[Identifier, Station] = field(
        init=False, repr=False, default_factory=dict
    )
    _parameters_by_id: Dict[Identifier, Parameter] = field(
        init=False, repr=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        self._stations_by_id = {s.station_id: s for s in self.stations}
        self._parameters_by_id = {p.parameter_id: p for p in self.parameters}

    def get_station(self, station_id: Any) -> Optional[Station]:
        return self._stations_by_id.get(station_id)

    def get_parameter(self, parameter_id: Any) -> Optional[Parameter]:
        return self._parameters_by_id.get(parameter_id)

    def limit_for(self, parameter_id: Any) -> Optional[float]:
        """Limit of a parameter; None when unknown or not defined."""
        parameter = self.get_parameter(parameter_id)
        return parameter.limit if parameter else None
