"""
High-level convenience functions for one-off queries.

Each function accepts an optional client. When none is given, a temporary
``SupabaseClient`` is built from the environment and closed afterwards.
"""

from typing import Awaitable, Callable, List, Optional, TypeVar

from .client import SupabaseClient
from .engine import MeasurementAnalysisEngine
from .models import (
    AnalysisResult,
    Identifier,
    Parameter,
    ReferenceData,
    Selection,
    Station,
)
from .reference import ReferenceDataLoader
from .utils import DateLike

T = TypeVar("T")


async def _with_client(
    client: Optional[SupabaseClient],
    fn: Callable[[SupabaseClient], Awaitable[T]],
) -> T:
    if client is not None:
        return await fn(client)
    async with SupabaseClient() as temp_client:
        return await fn(temp_client)


def _loader(client: SupabaseClient) -> ReferenceDataLoader:
    return ReferenceDataLoader(
        client,
        stations_table=client.config.stations_table,
        parameters_table=client.config.parameters_table,
    )


async def get_stations(client: Optional[SupabaseClient] = None) -> List[Station]:
    """
    Get all monitoring stations ordered by name.

    Examples:
        >>> stations = await get_stations()
        >>> [s.name for s in stations[:3]]
    """
    return await _with_client(client, lambda c: _loader(c).load_stations())


async def get_parameters(client: Optional[SupabaseClient] = None) -> List[Parameter]:
    """Get all parameters ordered by description."""
    return await _with_client(client, lambda c: _loader(c).load_parameters())


async def load_reference_data(
    client: Optional[SupabaseClient] = None,
) -> ReferenceData:
    """Get stations and parameters indexed by identifier."""
    return await _with_client(client, lambda c: _loader(c).load())


async def analyze_measurements(
    station_id: Identifier,
    parameter_id: Identifier,
    start_date: DateLike,
    end_date: DateLike,
    client: Optional[SupabaseClient] = None,
    reference: Optional[ReferenceData] = None,
) -> AnalysisResult:
    """
    Fetch a station's series for one parameter and count limit exceedances.

    Args:
        station_id: Station identifier.
        parameter_id: Parameter identifier.
        start_date: First day of the range (inclusive).
        end_date: Last day of the range (inclusive).
        client: Client instance. If not provided, creates a temporary client.
        reference: Preloaded reference data. If not provided, parameters are
            loaded first to resolve the limit.

    Returns:
        AnalysisResult with the ordered series and exceedance statistics.

    Examples:
        >>> result = await analyze_measurements("S1", "PM10", date(2024, 1, 1), date(2024, 12, 31))
        >>> print(result.summary())
    """
    selection = Selection(station_id, parameter_id, start_date, end_date)
    MeasurementAnalysisEngine.validate(selection)

    async def _run(c: SupabaseClient) -> AnalysisResult:
        ref = reference
        if ref is None:
            ref = ReferenceData(parameters=await _loader(c).load_parameters())
        engine = MeasurementAnalysisEngine(
            c, ref, measurements_table=c.config.measurements_table
        )
        return await engine.query(selection)

    return await _with_client(client, _run)
