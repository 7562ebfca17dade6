"""
Tests for the REST data source client and its configuration.
"""

import json
from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest
from httpx import ConnectError, HTTPStatusError, TimeoutException

from aqmonitor.client import SupabaseClient
from aqmonitor.config import ClientConfig
from aqmonitor.exceptions import (
    DataSourceAuthError,
    DataSourceConnectionError,
    DataSourceResponseError,
    DataSourceTimeoutError,
)
from aqmonitor.models import Selection
from aqmonitor.query import query_measurements, query_stations


def _mock_response(data=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = data
    response.raise_for_status.return_value = None
    return response


def _status_error(status_code, body=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body
    return HTTPStatusError("error", request=Mock(), response=response)


class TestSupabaseClient:
    """Test SupabaseClient functionality."""

    @pytest.fixture
    def client(self, config):
        """Create a test client with a mocked HTTP transport."""
        client = SupabaseClient(config)
        client._client = AsyncMock()
        return client

    def test_init(self, config):
        client = SupabaseClient(config)

        assert client.timeout == 5
        assert client.config.rest_url == "https://example.supabase.co/rest/v1"
        assert client._client.headers["apikey"] == "test-key"
        assert client._client.headers["Authorization"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_fetch_all_stations(self, client):
        rows = [{"station_id": "S1", "station_name": "Parco Nord"}]
        client._client.get.return_value = _mock_response(rows)

        result = await client.fetch_all(query_stations())

        assert result == rows
        url = client._client.get.call_args[0][0]
        params = client._client.get.call_args[1]["params"]
        assert url == "https://example.supabase.co/rest/v1/monitoring_stations"
        assert ("order", "station_name.asc") in params

    @pytest.mark.asyncio
    async def test_fetch_filtered_sends_repeated_date_keys(self, client):
        client._client.get.return_value = _mock_response([])
        selection = Selection("S1", "P1", date(2024, 1, 1), date(2024, 1, 3))

        result = await client.fetch_filtered(query_measurements(selection))

        assert result == []
        params = client._client.get.call_args[1]["params"]
        date_params = [value for key, value in params if key == "measurement_date"]
        assert date_params == ["gte.2024-01-01", "lte.2024-01-03"]

    @pytest.mark.asyncio
    async def test_timeout_error(self, client):
        client._client.get.side_effect = TimeoutException("Timeout")

        with pytest.raises(DataSourceTimeoutError, match="Request timeout after 5"):
            await client.fetch_all(query_stations())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_permission_error(self, client, status_code):
        client._client.get.side_effect = _status_error(
            status_code, {"message": "permission denied for table monitoring_stations"}
        )

        with pytest.raises(DataSourceAuthError, match="permission denied") as exc_info:
            await client.fetch_all(query_stations())

        assert exc_info.value.details["status_code"] == status_code

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,message",
        [(429, "Rate limit exceeded"), (503, "temporarily unavailable"), (404, "HTTP error 404")],
    )
    async def test_http_errors(self, client, status_code, message):
        client._client.get.side_effect = _status_error(status_code)

        with pytest.raises(DataSourceConnectionError, match=message):
            await client.fetch_all(query_stations())

    @pytest.mark.asyncio
    async def test_network_error(self, client):
        client._client.get.side_effect = ConnectError("connection refused")

        with pytest.raises(DataSourceConnectionError, match="Network error"):
            await client.fetch_all(query_stations())

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        response = _mock_response()
        response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)
        client._client.get.return_value = response

        with pytest.raises(DataSourceResponseError, match="Invalid JSON"):
            await client.fetch_all(query_stations())

    @pytest.mark.asyncio
    async def test_non_list_body(self, client):
        client._client.get.return_value = _mock_response({"rows": []})

        with pytest.raises(DataSourceResponseError, match="Expected a list"):
            await client.fetch_all(query_stations())

    @pytest.mark.asyncio
    async def test_query_without_table(self, client):
        from aqmonitor.query import CollectionQuery

        with pytest.raises(ValueError, match="no table"):
            await client.fetch_all(CollectionQuery())

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self, config):
        async with SupabaseClient(config) as client:
            client._client = AsyncMock()
            inner = client._client

        inner.aclose.assert_awaited_once()


class TestClientConfig:
    """Test configuration from the environment."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co/")
        monkeypatch.setenv("SUPABASE_KEY", "secret")
        monkeypatch.setenv("AQMONITOR_TIMEOUT", "12.5")

        config = ClientConfig.from_env()

        assert config.api_key == "secret"
        assert config.timeout == 12.5
        assert config.rest_url == "https://abc.supabase.co/rest/v1"

    def test_anon_key_fallback(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.delenv("SUPABASE_KEY", raising=False)
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        monkeypatch.delenv("AQMONITOR_TIMEOUT", raising=False)

        config = ClientConfig.from_env()

        assert config.api_key == "anon"
        assert config.timeout == 30.0

    def test_missing_settings(self, monkeypatch):
        for name in ("SUPABASE_URL", "SUPABASE_KEY", "SUPABASE_ANON_KEY"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(DataSourceAuthError, match="SUPABASE_URL, SUPABASE_KEY"):
            ClientConfig.from_env()

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "secret")
        monkeypatch.setenv("AQMONITOR_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="AQMONITOR_TIMEOUT"):
            ClientConfig.from_env()
