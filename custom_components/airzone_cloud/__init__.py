from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.const import CONF_NAME, CONF_TOKEN, Platform

from .api import AirzoneCloudApi, create_session_client
from .const import CONF_DEVICE_ID, CONF_INSTALLATION_ID, DOMAIN
from .coordinator import AirzoneDeviceCoordinator
from .device import DeviceTwin
from .websocket import AirzoneWebSocketManager

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .websocket import WebSocketDeviceUpdate

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Airzone Cloud integration for entry %s", entry.entry_id)

    session = create_session_client(hass)
    cloud_api = AirzoneCloudApi(hass, session, entry.data[CONF_TOKEN])
    twin = DeviceTwin(
        entry.data[CONF_INSTALLATION_ID],
        entry.data[CONF_DEVICE_ID],
        cloud_api,
        {"name": entry.data[CONF_NAME]},
    )

    coordinator = AirzoneDeviceCoordinator(hass, entry, cloud_api, twin)
    # Raises ConfigEntryNotReady so Home Assistant retries the setup
    await coordinator.async_config_entry_first_refresh()

    websocket = AirzoneWebSocketManager(hass, lambda: cloud_api.token)

    def handle_device_update(update: WebSocketDeviceUpdate) -> None:
        if update.key == twin.key:
            twin.patch(update.change)

    def handle_refresh() -> None:
        hass.async_create_task(coordinator.async_request_refresh())

    websocket.register_device_update_callback(handle_device_update)
    websocket.register_refresh_callback(handle_refresh)

    if not await websocket.async_connect():
        _LOGGER.warning(
            "Push channel unavailable for %s, polling until it reopens", twin.key
        )

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "api": cloud_api,
        "twin": twin,
        "coordinator": coordinator,
        "websocket": websocket,
    }
    _LOGGER.debug("Stored data for entry %s: %s", entry.entry_id, twin)

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception:
        hass.data[DOMAIN].pop(entry.entry_id, None)
        await websocket.async_disconnect()
        raise

    _LOGGER.info(
        "Successfully setup Airzone Cloud integration for entry %s", entry.entry_id
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Airzone Cloud integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is not None:
        await entry_data["websocket"].async_disconnect()
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    _LOGGER.info(
        "Successfully unloaded Airzone Cloud integration for entry %s",
        entry.entry_id,
    )
    return True
