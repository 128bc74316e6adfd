"""Pytest configuration and fixtures for Airzone Cloud tests."""

from typing import Any
from unittest.mock import Mock

import pytest

from custom_components.airzone_cloud.device import DeviceTwin
from custom_components.airzone_cloud.models import TemperatureUnits

INSTALLATION_ID = "installation1"
DEVICE_ID = "device1"
DEVICE_NAME = "Living Room"


@pytest.fixture
def sample_status_response() -> dict[str, Any]:
    """Fixture providing a device status response in Celsius.

    Returns:
        A dictionary representing a device status API response.

    """
    return {
        "name": DEVICE_NAME,
        "power": True,
        "mode": "cool",
        "real_mode": "cool",
        "units": TemperatureUnits.CELSIUS.value,
        "work_temp": 24.5,
        "setpoint_air_auto": 23,
        "setpoint_air_cool": 22,
        "setpoint_air_heat": 21,
        "humidity": 45,
    }


@pytest.fixture
def sample_fahrenheit_status_response() -> dict[str, Any]:
    """Fixture providing a device status response in Fahrenheit.

    Returns:
        A dictionary representing a device status API response.

    """
    return {
        "name": DEVICE_NAME,
        "power": True,
        "mode": "heat",
        "real_mode": "heat",
        "units": TemperatureUnits.FAHRENHEIT.value,
        "work_temp": 77,
        "setpoint_air_auto": 72,
        "setpoint_air_cool": 75,
        "setpoint_air_heat": 68,
    }


@pytest.fixture
def mock_api() -> Mock:
    """Create a mock API handle that records machine events."""
    api = Mock()
    api.send_machine_event = Mock(return_value=None)
    return api


@pytest.fixture
def twin(mock_api: Mock, sample_status_response: dict[str, Any]) -> DeviceTwin:
    """Create a Celsius device twin."""
    return DeviceTwin(INSTALLATION_ID, DEVICE_ID, mock_api, sample_status_response)


@pytest.fixture
def fahrenheit_twin(
    mock_api: Mock, sample_fahrenheit_status_response: dict[str, Any]
) -> DeviceTwin:
    """Create a Fahrenheit device twin."""
    return DeviceTwin(
        INSTALLATION_ID, DEVICE_ID, mock_api, sample_fahrenheit_status_response
    )
