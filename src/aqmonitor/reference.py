"""
Loading of the selectable stations and parameters.
"""

import logging
from typing import Any, Dict, List

from .exceptions import DataSourceError, DataSourceResponseError
from .models import Parameter, ReferenceData, Station
from .query import (
    PARAMETERS_TABLE,
    STATIONS_TABLE,
    query_parameters,
    query_stations,
)
from .source import DataSource
from .utils import parse_value

logger = logging.getLogger(__name__)


def _station_from_row(row: Dict[str, Any]) -> Station:
    if row.get("station_id") is None:
        raise DataSourceResponseError(f"Station row without station_id: {row!r}")
    return Station(
        station_id=row["station_id"],
        name=str(row.get("station_name") or ""),
    )


def _parameter_from_row(row: Dict[str, Any]) -> Parameter:
    if row.get("parameter_id") is None:
        raise DataSourceResponseError(f"Parameter row without parameter_id: {row!r}")
    try:
        limit = parse_value(row.get("limit"))
    except (TypeError, ValueError) as e:
        raise DataSourceResponseError(
            f"Invalid limit for parameter {row['parameter_id']}: {row.get('limit')!r}"
        ) from e
    return Parameter(
        parameter_id=row["parameter_id"],
        description=str(row.get("parameter_description") or ""),
        limit=limit,
        unit=row.get("unit_description"),
    )


class ReferenceDataLoader:
    """
    Loads the finite sets of stations and parameters.

    Both lists are sorted by display text with plain string ordering, so the
    result does not depend on the data source's collation. Failures are
    raised to the caller; an empty list is only returned when the collection
    really is empty.
    """

    def __init__(
        self,
        source: DataSource,
        stations_table: str = STATIONS_TABLE,
        parameters_table: str = PARAMETERS_TABLE,
    ):
        self.source = source
        self.stations_table = stations_table
        self.parameters_table = parameters_table

    async def _fetch(self, query: Any, what: str) -> List[Dict[str, Any]]:
        try:
            rows = await self.source.fetch_all(query)
        except DataSourceError as e:
            logger.error(f"Failed to load {what}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load {what}: {e}")
            raise DataSourceError(f"Failed to load {what}: {e}") from e

        if not isinstance(rows, list):
            raise DataSourceResponseError(
                f"Expected a list of {what}, got {type(rows).__name__}"
            )
        return rows

    async def load_stations(self) -> List[Station]:
        """
        Load all stations ordered by name.

        Raises:
            DataSourceError: If retrieval fails or a row is malformed.
        """
        rows = await self._fetch(query_stations(self.stations_table), "stations")
        stations = sorted((_station_from_row(r) for r in rows), key=lambda s: s.name)
        logger.info(f"Loaded {len(stations)} stations")
        return stations

    async def load_parameters(self) -> List[Parameter]:
        """
        Load all parameters ordered by description.

        Raises:
            DataSourceError: If retrieval fails or a row is malformed.
        """
        rows = await self._fetch(
            query_parameters(self.parameters_table), "parameters"
        )
        parameters = sorted(
            (_parameter_from_row(r) for r in rows), key=lambda p: p.description
        )
        logger.info(f"Loaded {len(parameters)} parameters")
        return parameters

    async def load(self) -> ReferenceData:
        """Load stations, then parameters, and index both by identifier."""
        stations = await self.load_stations()
        parameters = await self.load_parameters()
        return ReferenceData(stations=stations, parameters=parameters)
