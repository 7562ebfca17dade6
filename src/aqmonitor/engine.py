"""
Measurement query and exceedance analysis.
"""

import logging
from typing import Any, Dict, List, Optional

from .analysis import compute_exceedance_statistics
from .exceptions import (
    DataSourceError,
    DataSourceResponseError,
    InvalidSelectionError,
)
from .models import AnalysisResult, Measurement, ReferenceData, Selection
from .query import MEASUREMENTS_TABLE, query_measurements
from .source import DataSource
from .utils import parse_timestamp, parse_value, to_utc_datetime

logger = logging.getLogger(__name__)


def measurement_from_row(row: Dict[str, Any]) -> Measurement:
    """
    Build a Measurement from a ``measurements`` row.

    Raises:
        DataSourceResponseError: If a required column is missing or invalid.
    """
    try:
        return Measurement(
            station_id=row["station_id"],
            parameter_id=row["parameter_id"],
            timestamp=parse_timestamp(row["measurement_date"]),
            value=parse_value(row.get("value")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DataSourceResponseError(f"Malformed measurement row {row!r}: {e}") from e


class MeasurementAnalysisEngine:
    """
    Fetches the measurements for a selection and derives exceedance statistics.

    The engine holds no mutable state: each call to :meth:`query` re-reads
    the data source. Concurrent calls are independent; ordering their
    results is up to the caller.

    Args:
        source: Data source serving the measurements collection.
        reference: Loaded stations and parameters, used to resolve limits.
        measurements_table: Name of the measurements collection.
    """

    def __init__(
        self,
        source: DataSource,
        reference: Optional[ReferenceData] = None,
        measurements_table: str = MEASUREMENTS_TABLE,
    ):
        self.source = source
        self.reference = reference or ReferenceData()
        self.measurements_table = measurements_table

    @staticmethod
    def validate(selection: Any) -> Selection:
        """Check that every selection field is set and both dates parse.

        Raises:
            InvalidSelectionError: If the selection is incomplete or a date
                cannot be read as a date or ISO 8601 timestamp.
        """
        if not isinstance(selection, Selection):
            raise InvalidSelectionError(
                f"Expected a Selection, got {type(selection).__name__}"
            )
        missing = selection.missing_fields()
        if missing:
            raise InvalidSelectionError(
                "Selection is incomplete", details={"missing": missing}
            )

        invalid = []
        for name in ("start_date", "end_date"):
            try:
                to_utc_datetime(getattr(selection, name))
            except (TypeError, ValueError, AttributeError):
                invalid.append(name)
        if invalid:
            raise InvalidSelectionError(
                "Selection has unparseable dates",
                details={"invalid": invalid},
            )
        return selection

    async def _fetch_rows(self, selection: Selection) -> List[Dict[str, Any]]:
        query = query_measurements(selection, table=self.measurements_table)
        try:
            rows = await self.source.fetch_filtered(query)
        except DataSourceError as e:
            logger.error(f"Failed to load measurements: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load measurements: {e}")
            raise DataSourceError(f"Failed to load measurements: {e}") from e

        if not isinstance(rows, list):
            raise DataSourceResponseError(
                f"Expected a list of measurements, got {type(rows).__name__}"
            )
        return rows

    async def query(self, selection: Selection) -> AnalysisResult:
        """
        Retrieve the time-ordered series for a selection and analyse it.

        Args:
            selection: Station, parameter and inclusive date range.

        Returns:
            AnalysisResult with the series in data source order (ascending
            by timestamp) and its exceedance statistics.

        Raises:
            InvalidSelectionError: If a selection field is missing or a date
                is unparseable. No retrieval is attempted.
            DataSourceError: If retrieval fails. No partial series is returned.
        """
        selection = self.validate(selection)
        if selection.is_reversed:
            logger.debug(
                f"Start {selection.start_date} is after end {selection.end_date}; "
                "querying the range as given"
            )

        rows = await self._fetch_rows(selection)
        measurements = tuple(measurement_from_row(row) for row in rows)

        parameter = self.reference.get_parameter(selection.parameter_id)
        if parameter is None:
            logger.warning(
                f"Parameter {selection.parameter_id!r} is not in the reference "
                "data; treating its limit as undefined"
            )
        limit = parameter.limit if parameter else None

        statistics = compute_exceedance_statistics(measurements, limit)
        logger.info(
            f"Station {selection.station_id!r}, parameter {selection.parameter_id!r}: "
            f"{statistics.exceedance_count} of {statistics.total_count} values "
            f"above limit {limit}"
        )

        return AnalysisResult(
            selection=selection,
            parameter=parameter,
            measurements=measurements,
            statistics=statistics,
        )
