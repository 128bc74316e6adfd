"""API client for Airzone Cloud systems.

This module provides functions to interact with the Airzone Cloud API,
reading device status and sending single-field device updates, plus the
fire-and-forget handle that device twins use to forward user changes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import httpx
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import API_URL

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .models import DeviceData

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


class AirzoneApiClientError(Exception):
    """Base exception for Airzone Cloud API client errors."""


class AirzoneApiAuthError(AirzoneApiClientError):
    """Exception raised for authentication errors."""


class SupportsMachineEvents(Protocol):
    """Capability consumed by device twins."""

    def send_machine_event(
        self, installation: str, mac: str, param: str, value: Any
    ) -> None:
        """Request a single field update without waiting for the result."""


def create_headers(token: str | None = None) -> dict[str, str]:
    """Create HTTP headers for Airzone Cloud API requests.

    Args:
        token: Optional access token to include in headers.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "content-type": "application/json",
        "accept": "application/json",
    }
    if token:
        headers["authorization"] = f"Bearer {token}"
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates an authentication error."""
    return status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN)


def validate_response(response: httpx.Response) -> dict[str, Any]:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response, or an empty dict for an empty body.

    Raises:
        AirzoneApiAuthError: If authentication error is detected.
        AirzoneApiClientError: If the request failed or the body is not JSON.

    """
    if is_http_error(response.status_code):
        if is_auth_error(response.status_code):
            auth_error = "Authentication error"
            raise AirzoneApiAuthError(auth_error)

        client_error = f"Request failed: {response.status_code}"
        raise AirzoneApiClientError(client_error)

    if not response.content:
        return {}

    try:
        return response.json()
    except ValueError as err:
        error_msg = f"Invalid JSON response: {err}"
        raise AirzoneApiClientError(error_msg) from err


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for Airzone Cloud API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=5.0)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_get_device_status(
    session: httpx.AsyncClient,
    token: str,
    installation_id: str,
    device_id: str,
) -> DeviceData:
    """Fetch the current state record of a device.

    Args:
        session: HTTP client session.
        token: Access token.
        installation_id: Installation the device belongs to.
        device_id: Device address.

    Returns:
        Flat device state record in the device's native units.

    Raises:
        AirzoneApiAuthError: If authentication fails.
        AirzoneApiClientError: If API request fails.

    """
    url = f"{API_URL}/devices/{device_id}/status"
    params = {"installation_id": installation_id}

    _LOGGER.debug("Fetching status for device %s", device_id)
    response = await session.get(url, headers=create_headers(token), params=params)
    data = validate_response(response)
    _LOGGER.debug("Status for device %s: %s", device_id, data)
    return data


async def async_send_machine_event(
    session: httpx.AsyncClient,
    token: str,
    installation_id: str,
    device_id: str,
    param: str,
    value: Any,  # noqa: ANN401
) -> None:
    """Request a single field update on a device.

    Args:
        session: HTTP client session.
        token: Access token.
        installation_id: Installation the device belongs to.
        device_id: Device address.
        param: Device state field to change.
        value: New value in the device's native units.

    Raises:
        AirzoneApiAuthError: If authentication fails.
        AirzoneApiClientError: If API request fails.

    """
    url = f"{API_URL}/devices/{device_id}"
    payload = {"param": param, "value": value, "installation_id": installation_id}

    _LOGGER.debug("Sending %s=%s to device %s", param, value, device_id)
    response = await session.patch(url, headers=create_headers(token), json=payload)
    validate_response(response)


class AirzoneCloudApi:
    """Handle shared by the device twins of one config entry.

    Field updates are scheduled as background tasks so callers return
    immediately; their failures are logged here and never reach the caller.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        session: httpx.AsyncClient,
        token: str,
    ) -> None:
        self._hass = hass
        self._session = session
        self._token = token

    @property
    def token(self) -> str:
        """Return the access token used for requests."""
        return self._token

    async def async_get_device_status(
        self, installation: str, mac: str
    ) -> DeviceData:
        """Fetch the current state record of a device."""
        return await async_get_device_status(
            self._session, self._token, installation, mac
        )

    def send_machine_event(
        self,
        installation: str,
        mac: str,
        param: str,
        value: Any,  # noqa: ANN401
    ) -> None:
        """Schedule a single field update and return without waiting."""
        self._hass.async_create_background_task(
            self._async_send_machine_event(installation, mac, param, value),
            f"airzone_cloud send {param} to {installation}:{mac}",
        )

    async def _async_send_machine_event(
        self,
        installation: str,
        mac: str,
        param: str,
        value: Any,  # noqa: ANN401
    ) -> None:
        try:
            await async_send_machine_event(
                self._session, self._token, installation, mac, param, value
            )
        except AirzoneApiAuthError:
            _LOGGER.exception(
                "Authentication error sending %s to %s:%s. "
                "Please re-configure the integration.",
                param,
                installation,
                mac,
            )
        except AirzoneApiClientError:
            _LOGGER.exception(
                "API error while sending %s to %s:%s", param, installation, mac
            )
        except httpx.RequestError:
            _LOGGER.exception(
                "Connection error while sending %s to %s:%s", param, installation, mac
            )
        except Exception:
            _LOGGER.exception(
                "Unexpected error while sending %s to %s:%s", param, installation, mac
            )
        else:
            _LOGGER.debug("Sent %s=%s to %s:%s", param, value, installation, mac)
