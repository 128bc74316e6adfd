"""Coordinator for Airzone Cloud integration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

import httpx
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api
from .const import DEFAULT_POLL_INTERVAL, DOMAIN
from .models import DeviceData

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .device import DeviceTwin

_LOGGER = logging.getLogger(__name__)


class AirzoneDeviceCoordinator(DataUpdateCoordinator[DeviceData]):
    """Coordinator that polls a device's status into its twin."""

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        cloud_api: api.AirzoneCloudApi,
        twin: DeviceTwin,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_{twin.key}",
            update_interval=timedelta(seconds=DEFAULT_POLL_INTERVAL),
        )
        self._api = cloud_api
        self.twin = twin

    async def _async_update_data(self) -> DeviceData:
        try:
            status = await self._api.async_get_device_status(
                self.twin.installation, self.twin.mac
            )
        except api.AirzoneApiAuthError as err:
            raise UpdateFailed(f"Authentication error while polling device: {err}") from err
        except api.AirzoneApiClientError as err:
            raise UpdateFailed(f"API error while polling device: {err}") from err
        except httpx.RequestError as err:
            raise UpdateFailed(f"Connection error while polling device: {err}") from err

        if not status:
            _LOGGER.debug("Did not receive state for device %s", self.twin.key)
            return self.twin.data

        self.twin.patch(status)
        return self.twin.data
