"""
Synchronous wrapper functions for aqmonitor.

Usage:
    # Instead of this async code:
    async with SupabaseClient() as client:
        result = await analyze_measurements("S1", "PM10", start, end, client=client)

    # Use this sync code:
    from aqmonitor.sync import analyze_measurements_sync
    result = analyze_measurements_sync("S1", "PM10", start, end)

Each wrapper call runs in its own event loop. An httpx connection pool is
bound to the loop that first used it, so a ``SupabaseClient`` passed to a
wrapper only lends its configuration: the call opens and closes a fresh
client with the same settings inside the new loop.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .client import SupabaseClient
from .models import AnalysisResult, Identifier, Parameter, ReferenceData, Station
from .utils import DateLike

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async functions from synchronous code."""

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> R:
        """Run an async function to completion in a new event loop.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within a running event loop
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        return asyncio.run(async_fn(*args, **(kwargs or {})))


async def _call_with_client(
    async_fn: Callable[..., Awaitable[R]], client: Optional[Any], *args: Any, **kwargs: Any
) -> R:
    """Call ``async_fn`` in the running loop with a client usable from it."""
    if isinstance(client, SupabaseClient):
        async with SupabaseClient(client.config, timeout=client.timeout) as loop_client:
            return await async_fn(*args, client=loop_client, **kwargs)
    return await async_fn(*args, client=client, **kwargs)


def get_stations_sync(client: Optional[Any] = None) -> List[Station]:
    """Synchronous version of get_stations."""
    from .convenience import get_stations

    return AsyncSyncBridge.run_async(_call_with_client, args=(get_stations, client))


def get_parameters_sync(client: Optional[Any] = None) -> List[Parameter]:
    """Synchronous version of get_parameters."""
    from .convenience import get_parameters

    return AsyncSyncBridge.run_async(_call_with_client, args=(get_parameters, client))


def load_reference_data_sync(client: Optional[Any] = None) -> ReferenceData:
    """Synchronous version of load_reference_data."""
    from .convenience import load_reference_data

    return AsyncSyncBridge.run_async(
        _call_with_client, args=(load_reference_data, client)
    )


def analyze_measurements_sync(
    station_id: Identifier,
    parameter_id: Identifier,
    start_date: DateLike,
    end_date: DateLike,
    client: Optional[Any] = None,
    reference: Optional[ReferenceData] = None,
) -> AnalysisResult:
    """Synchronous version of analyze_measurements.

    A ``SupabaseClient`` passed as ``client`` supplies settings only; it is
    not used for the request and stays open.

    Examples:
        >>> result = analyze_measurements_sync("S1", "PM10", "2024-01-01", "2024-12-31")
        >>> result.statistics.percentage_display
    """
    from .convenience import analyze_measurements

    return AsyncSyncBridge.run_async(
        _call_with_client,
        args=(analyze_measurements, client, station_id, parameter_id, start_date, end_date),
        kwargs={"reference": reference},
    )


__all__ = [
    "AsyncSyncBridge",
    "get_stations_sync",
    "get_parameters_sync",
    "load_reference_data_sync",
    "analyze_measurements_sync",
]
