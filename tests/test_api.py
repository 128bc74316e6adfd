"""Tests for the Airzone Cloud API client."""

import json
from typing import Any
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from pytest_httpx import HTTPXMock

from custom_components.airzone_cloud import api
from custom_components.airzone_cloud.api import (
    AirzoneApiAuthError,
    AirzoneApiClientError,
    AirzoneCloudApi,
)
from custom_components.airzone_cloud.const import API_URL

from .conftest import DEVICE_ID, INSTALLATION_ID

TOKEN = "test_token"
STATUS_URL = f"{API_URL}/devices/{DEVICE_ID}/status?installation_id={INSTALLATION_ID}"
DEVICE_URL = f"{API_URL}/devices/{DEVICE_ID}"


class TestAirzoneApiErrors:
    """Tests for the API exception hierarchy."""

    def test_auth_error_is_client_error(self) -> None:
        """Test that AirzoneApiAuthError is an AirzoneApiClientError."""
        error = AirzoneApiAuthError("Auth error")
        assert isinstance(error, AirzoneApiClientError)
        assert isinstance(error, Exception)


class TestCreateHeaders:
    """Tests for create_headers function."""

    def test_create_headers_returns_base_headers(self) -> None:
        """Test that create_headers returns JSON headers without auth."""
        headers = api.create_headers()
        assert headers["content-type"] == "application/json"
        assert headers["accept"] == "application/json"
        assert "authorization" not in headers

    def test_create_headers_includes_bearer_token(self) -> None:
        """Test that create_headers includes the bearer token."""
        headers = api.create_headers(TOKEN)
        assert headers["authorization"] == f"Bearer {TOKEN}"


class TestStatusHelpers:
    """Tests for is_http_error and is_auth_error."""

    def test_is_http_error(self) -> None:
        """Test that codes from 400 upwards are errors."""
        assert api.is_http_error(200) is False
        assert api.is_http_error(299) is False
        assert api.is_http_error(400) is True
        assert api.is_http_error(500) is True

    def test_is_auth_error(self) -> None:
        """Test that 401 and 403 are authentication errors."""
        assert api.is_auth_error(401) is True
        assert api.is_auth_error(403) is True
        assert api.is_auth_error(400) is False
        assert api.is_auth_error(500) is False


class TestValidateResponse:
    """Tests for validate_response function."""

    def test_validate_response_returns_data(self) -> None:
        """Test that a successful response returns its JSON body."""
        response = httpx.Response(200, json={"power": True})
        assert api.validate_response(response) == {"power": True}

    def test_validate_response_returns_empty_dict_for_empty_body(self) -> None:
        """Test that an empty body is returned as an empty dict."""
        response = httpx.Response(204)
        assert api.validate_response(response) == {}

    @pytest.mark.parametrize("status", [401, 403])
    def test_validate_response_raises_auth_error(self, status: int) -> None:
        """Test that auth status codes raise AirzoneApiAuthError."""
        response = httpx.Response(status)
        with pytest.raises(AirzoneApiAuthError):
            api.validate_response(response)

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_validate_response_raises_client_error(self, status: int) -> None:
        """Test that other error codes raise AirzoneApiClientError."""
        response = httpx.Response(status)
        with pytest.raises(AirzoneApiClientError, match=str(status)):
            api.validate_response(response)

    def test_validate_response_raises_client_error_on_invalid_json(self) -> None:
        """Test that a non-JSON body raises AirzoneApiClientError."""
        response = httpx.Response(200, content=b"not json")
        with pytest.raises(AirzoneApiClientError, match="Invalid JSON"):
            api.validate_response(response)


class TestCreateSessionClient:
    """Tests for create_session_client function."""

    @patch("custom_components.airzone_cloud.api.create_async_httpx_client")
    @patch("custom_components.airzone_cloud.api.RetryTransport")
    def test_create_session_client_creates_client_with_retry_transport(
        self,
        mock_retry_transport: Mock,
        mock_create_client: Mock,
    ) -> None:
        """Test that create_session_client wraps the transport with retries."""
        mock_hass = Mock()
        mock_client = Mock()
        mock_create_client.return_value = mock_client
        result = api.create_session_client(mock_hass)
        mock_create_client.assert_called_once_with(mock_hass, timeout=5.0)
        mock_retry_transport.assert_called_once()
        assert result == mock_client


class TestAsyncGetDeviceStatus:
    """Tests for async_get_device_status function."""

    @pytest.mark.asyncio
    async def test_async_get_device_status_returns_state(
        self,
        httpx_mock: HTTPXMock,
        sample_status_response: dict[str, Any],
    ) -> None:
        """Test that the status body is returned as a state record."""
        httpx_mock.add_response(
            url=STATUS_URL,
            method="GET",
            json=sample_status_response,
        )
        async with httpx.AsyncClient() as session:
            result = await api.async_get_device_status(
                session, TOKEN, INSTALLATION_ID, DEVICE_ID
            )
        assert result == sample_status_response
        request = httpx_mock.get_request()
        assert request.headers["authorization"] == f"Bearer {TOKEN}"

    @pytest.mark.asyncio
    async def test_async_get_device_status_raises_auth_error_on_http_401(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that a 401 raises AirzoneApiAuthError."""
        httpx_mock.add_response(url=STATUS_URL, method="GET", status_code=401)
        async with httpx.AsyncClient() as session:
            with pytest.raises(AirzoneApiAuthError):
                await api.async_get_device_status(
                    session, TOKEN, INSTALLATION_ID, DEVICE_ID
                )


class TestAsyncSendMachineEvent:
    """Tests for async_send_machine_event function."""

    @pytest.mark.asyncio
    async def test_async_send_machine_event_patches_device(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that the field update is sent as a PATCH request."""
        httpx_mock.add_response(url=DEVICE_URL, method="PATCH", json={})
        async with httpx.AsyncClient() as session:
            await api.async_send_machine_event(
                session, TOKEN, INSTALLATION_ID, DEVICE_ID, "setpoint_air_heat", 72
            )
        request = httpx_mock.get_request()
        assert request.method == "PATCH"
        assert json.loads(request.content) == {
            "param": "setpoint_air_heat",
            "value": 72,
            "installation_id": INSTALLATION_ID,
        }

    @pytest.mark.asyncio
    async def test_async_send_machine_event_raises_client_error_on_http_500(
        self,
        httpx_mock: HTTPXMock,
    ) -> None:
        """Test that a server error raises AirzoneApiClientError."""
        httpx_mock.add_response(url=DEVICE_URL, method="PATCH", status_code=500)
        async with httpx.AsyncClient() as session:
            with pytest.raises(AirzoneApiClientError):
                await api.async_send_machine_event(
                    session, TOKEN, INSTALLATION_ID, DEVICE_ID, "power", True
                )


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def cloud_api(mock_hass: Mock) -> AirzoneCloudApi:
    """Create an AirzoneCloudApi handle with a mock session."""
    return AirzoneCloudApi(mock_hass, Mock(spec=httpx.AsyncClient), TOKEN)


class TestAirzoneCloudApi:
    """Tests for the AirzoneCloudApi handle."""

    def test_send_machine_event_schedules_background_task(
        self,
        cloud_api: AirzoneCloudApi,
        mock_hass: Mock,
    ) -> None:
        """Test that send_machine_event returns without awaiting the request."""
        result = cloud_api.send_machine_event(
            INSTALLATION_ID, DEVICE_ID, "power", True
        )
        assert result is None
        mock_hass.async_create_background_task.assert_called_once()
        coro = mock_hass.async_create_background_task.call_args[0][0]
        coro.close()

    @pytest.mark.asyncio
    async def test_background_send_delegates_to_module_function(
        self,
        cloud_api: AirzoneCloudApi,
    ) -> None:
        """Test that the scheduled coroutine sends the field update."""
        with patch(
            "custom_components.airzone_cloud.api.async_send_machine_event",
            new_callable=AsyncMock,
        ) as mock_send:
            await cloud_api._async_send_machine_event(
                INSTALLATION_ID, DEVICE_ID, "mode", "heat"
            )
        mock_send.assert_awaited_once_with(
            cloud_api._session, TOKEN, INSTALLATION_ID, DEVICE_ID, "mode", "heat"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            AirzoneApiAuthError("Auth failed"),
            AirzoneApiClientError("API error"),
            httpx.RequestError("Connection error"),
            RuntimeError("Unexpected error"),
        ],
    )
    async def test_background_send_swallows_errors(
        self,
        cloud_api: AirzoneCloudApi,
        error: Exception,
    ) -> None:
        """Test that failures are logged and never propagated."""
        with patch(
            "custom_components.airzone_cloud.api.async_send_machine_event",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            await cloud_api._async_send_machine_event(
                INSTALLATION_ID, DEVICE_ID, "power", False
            )

    @pytest.mark.asyncio
    async def test_async_get_device_status_uses_stored_token(
        self,
        cloud_api: AirzoneCloudApi,
        sample_status_response: dict[str, Any],
    ) -> None:
        """Test that the handle forwards its session and token."""
        with patch(
            "custom_components.airzone_cloud.api.async_get_device_status",
            new_callable=AsyncMock,
            return_value=sample_status_response,
        ) as mock_status:
            result = await cloud_api.async_get_device_status(INSTALLATION_ID, DEVICE_ID)
        assert result == sample_status_response
        mock_status.assert_awaited_once_with(
            cloud_api._session, TOKEN, INSTALLATION_ID, DEVICE_ID
        )
