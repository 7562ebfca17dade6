"""
Air quality monitoring data access and limit exceedance analysis.

Load stations and parameters, fetch a station's time series for one
parameter, and count the values above the parameter's regulatory limit.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .analysis import compute_exceedance_statistics, measurements_to_dataframe
from .client import SupabaseClient
from .config import ClientConfig
from .convenience import (
    analyze_measurements,
    get_parameters,
    get_stations,
    load_reference_data,
)
from .engine import MeasurementAnalysisEngine
from .exceptions import (
    AQMonitorError,
    DataSourceAuthError,
    DataSourceConnectionError,
    DataSourceError,
    DataSourceResponseError,
    DataSourceTimeoutError,
    InvalidSelectionError,
)
from .models import (
    AnalysisResult,
    ExceedanceStatistics,
    Measurement,
    Parameter,
    ReferenceData,
    Selection,
    Station,
)
from .query import (
    CollectionQuery,
    Filter,
    query_measurements,
    query_parameters,
    query_stations,
)
from .reference import ReferenceDataLoader
from .source import DataSource, InMemoryDataSource
from .sync import (
    AsyncSyncBridge,
    analyze_measurements_sync,
    get_parameters_sync,
    get_stations_sync,
    load_reference_data_sync,
)

__all__ = [
    # Core classes
    "ClientConfig",
    "SupabaseClient",
    "DataSource",
    "InMemoryDataSource",
    "CollectionQuery",
    "Filter",
    "ReferenceDataLoader",
    "MeasurementAnalysisEngine",
    # Models
    "Station",
    "Parameter",
    "Measurement",
    "Selection",
    "ExceedanceStatistics",
    "AnalysisResult",
    "ReferenceData",
    # Query templates
    "query_stations",
    "query_parameters",
    "query_measurements",
    # Analysis
    "compute_exceedance_statistics",
    "measurements_to_dataframe",
    # Exceptions
    "AQMonitorError",
    "InvalidSelectionError",
    "DataSourceError",
    "DataSourceConnectionError",
    "DataSourceTimeoutError",
    "DataSourceAuthError",
    "DataSourceResponseError",
    # Async convenience functions
    "get_stations",
    "get_parameters",
    "load_reference_data",
    "analyze_measurements",
    # Sync convenience functions
    "AsyncSyncBridge",
    "get_stations_sync",
    "get_parameters_sync",
    "load_reference_data_sync",
    "analyze_measurements_sync",
]
