"""Constants for Airzone Cloud integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and mapping dictionaries.
"""

from homeassistant.components.climate import HVACAction, HVACMode

from .models import DeviceMode

DOMAIN = "airzone_cloud"

API_URL = "https://m.airzonecloud.com/api/v1"
WEBSOCKET_URL = "https://m.airzonecloud.com"
WEBSOCKET_PATH = "/api/v1/websockets/socket.io"

DEFAULT_POLL_INTERVAL = 120  # WebSocket provides real-time updates
WEBSOCKET_RECONNECT_DELAY = 5  # First reconnect wait, doubled after each failure
WEBSOCKET_RECONNECT_MAX_DELAY = 300

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

CONF_INSTALLATION_ID = "installation_id"
CONF_DEVICE_ID = "device_id"

# Device state fields whose patches are announced to twin subscribers
EVENT_PROPERTIES = (
    "work_temp",
    "setpoint_air_auto",
    "setpoint_air_cool",
    "setpoint_air_heat",
    "real_mode",
    "mode",
    "power",
)

HVAC_MODE_MAP = {
    DeviceMode.AUTO: HVACMode.HEAT_COOL,
    DeviceMode.COOL: HVACMode.COOL,
    DeviceMode.HEAT: HVACMode.HEAT,
}
HVAC_MODE_REVERSE_MAP = {value: key for key, value in HVAC_MODE_MAP.items()}
HVAC_ACTION_MAP = {
    DeviceMode.COOL: HVACAction.COOLING,
    DeviceMode.HEAT: HVACAction.HEATING,
}
