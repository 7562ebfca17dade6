"""
Tests for loading stations and parameters.
"""

from unittest.mock import AsyncMock

import pytest

from aqmonitor.exceptions import (
    DataSourceAuthError,
    DataSourceError,
    DataSourceResponseError,
)
from aqmonitor.models import Parameter, Station
from aqmonitor.reference import ReferenceDataLoader
from aqmonitor.source import InMemoryDataSource


class TestReferenceDataLoader:
    """Test ReferenceDataLoader functionality."""

    @pytest.mark.asyncio
    async def test_load_stations_sorted_by_name(self, source):
        loader = ReferenceDataLoader(source)

        stations = await loader.load_stations()

        assert stations == [
            Station("S3", "Corso Roma"),
            Station("S1", "Parco Nord"),
            Station("S2", "Viale Verdi"),
        ]

    @pytest.mark.asyncio
    async def test_load_parameters_sorted_by_description(self, source):
        loader = ReferenceDataLoader(source)

        parameters = await loader.load_parameters()

        assert [p.description for p in parameters] == ["Benzene", "NO2", "PM10"]
        assert parameters[0].limit is None
        assert parameters[2] == Parameter("P1", "PM10", 50.0, "µg/m³")

    @pytest.mark.asyncio
    async def test_sorting_does_not_rely_on_data_source_order(self):
        mock_source = AsyncMock()
        mock_source.fetch_all.return_value = [
            {"station_id": 2, "station_name": "b"},
            {"station_id": 3, "station_name": "B"},
            {"station_id": 1, "station_name": "a"},
        ]

        stations = await ReferenceDataLoader(mock_source).load_stations()

        # plain string ordering: upper case sorts first
        assert [s.station_id for s in stations] == [3, 1, 2]

    @pytest.mark.asyncio
    async def test_load_builds_index(self, source):
        reference = await ReferenceDataLoader(source).load()

        assert reference.get_station("S2").name == "Viale Verdi"
        assert reference.limit_for("P3") == 200.0
        assert len(source.calls) == 2

    @pytest.mark.asyncio
    async def test_custom_table_names(self):
        source = InMemoryDataSource(
            {"stazioni": [{"station_id": "X", "station_name": "Stazione X"}]}
        )
        loader = ReferenceDataLoader(source, stations_table="stazioni")

        stations = await loader.load_stations()

        assert stations == [Station("X", "Stazione X")]

    @pytest.mark.asyncio
    async def test_empty_collection_is_not_an_error(self):
        stations = await ReferenceDataLoader(InMemoryDataSource()).load_stations()

        assert stations == []

    @pytest.mark.asyncio
    async def test_failure_is_raised_not_emptied(self):
        error = DataSourceAuthError("Access denied to 'monitoring_stations'")
        loader = ReferenceDataLoader(InMemoryDataSource(fail_with=error))

        with pytest.raises(DataSourceAuthError):
            await loader.load_stations()

    @pytest.mark.asyncio
    async def test_parameters_not_loaded_when_stations_fail(self):
        mock_source = AsyncMock()
        mock_source.fetch_all.side_effect = DataSourceError("boom")

        with pytest.raises(DataSourceError):
            await ReferenceDataLoader(mock_source).load()

        assert mock_source.fetch_all.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self):
        mock_source = AsyncMock()
        mock_source.fetch_all.side_effect = RuntimeError("driver crashed")

        with pytest.raises(DataSourceError, match="driver crashed"):
            await ReferenceDataLoader(mock_source).load_parameters()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "rows",
        [
            [{"parameter_description": "PM10", "limit": 50}],
            [{"parameter_id": "P1", "parameter_description": "PM10", "limit": "high"}],
        ],
    )
    async def test_malformed_parameter_rows(self, rows):
        mock_source = AsyncMock()
        mock_source.fetch_all.return_value = rows

        with pytest.raises(DataSourceResponseError):
            await ReferenceDataLoader(mock_source).load_parameters()

    @pytest.mark.asyncio
    async def test_non_list_response(self):
        mock_source = AsyncMock()
        mock_source.fetch_all.return_value = None

        with pytest.raises(DataSourceResponseError):
            await ReferenceDataLoader(mock_source).load_stations()
