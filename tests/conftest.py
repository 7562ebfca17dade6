"""
Shared fixtures for aqmonitor tests.
"""

from datetime import date

import pytest

from aqmonitor.config import ClientConfig
from aqmonitor.models import Parameter, ReferenceData, Selection, Station
from aqmonitor.source import InMemoryDataSource

STATION_ROWS = [
    {"station_id": "S2", "station_name": "Viale Verdi"},
    {"station_id": "S1", "station_name": "Parco Nord"},
    {"station_id": "S3", "station_name": "Corso Roma"},
]

PARAMETER_ROWS = [
    {
        "parameter_id": "P1",
        "parameter_description": "PM10",
        "limit": 50,
        "unit_description": "µg/m³",
    },
    {
        "parameter_id": "P2",
        "parameter_description": "Benzene",
        "limit": None,
        "unit_description": "µg/m³",
    },
    {
        "parameter_id": "P3",
        "parameter_description": "NO2",
        "limit": 200.0,
        "unit_description": "µg/m³",
    },
]

MEASUREMENT_ROWS = [
    {"station_id": "S1", "parameter_id": "P1", "measurement_date": "2024-01-02", "value": 60},
    {"station_id": "S1", "parameter_id": "P1", "measurement_date": "2024-01-01", "value": 40},
    {"station_id": "S1", "parameter_id": "P1", "measurement_date": "2024-01-03", "value": 50},
    {"station_id": "S1", "parameter_id": "P1", "measurement_date": "2024-01-05", "value": 90},
    {"station_id": "S1", "parameter_id": "P2", "measurement_date": "2024-01-02", "value": 7.5},
    {"station_id": "S1", "parameter_id": "P2", "measurement_date": "2024-01-01", "value": 1.2},
    {"station_id": "S2", "parameter_id": "P1", "measurement_date": "2024-01-02", "value": 99},
]


@pytest.fixture
def config():
    """Client configuration pointing at a fake project."""
    return ClientConfig(base_url="https://example.supabase.co", api_key="test-key", timeout=5)


@pytest.fixture
def source():
    """In-memory data source with stations, parameters and measurements."""
    return InMemoryDataSource(
        {
            "monitoring_stations": STATION_ROWS,
            "parameters": PARAMETER_ROWS,
            "measurements": MEASUREMENT_ROWS,
        }
    )


@pytest.fixture
def reference():
    """Reference data matching PARAMETER_ROWS and STATION_ROWS."""
    return ReferenceData(
        stations=[
            Station("S3", "Corso Roma"),
            Station("S1", "Parco Nord"),
            Station("S2", "Viale Verdi"),
        ],
        parameters=[
            Parameter("P2", "Benzene", None, "µg/m³"),
            Parameter("P3", "NO2", 200.0, "µg/m³"),
            Parameter("P1", "PM10", 50.0, "µg/m³"),
        ],
    )


@pytest.fixture
def scenario_a():
    """Station S1, PM10 (limit 50), 1-3 January 2024."""
    return Selection("S1", "P1", date(2024, 1, 1), date(2024, 1, 3))
