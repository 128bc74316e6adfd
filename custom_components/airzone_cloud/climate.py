"""Climate entities for Airzone Cloud devices.

Each entity renders one device twin. Reads come straight from the twin,
commands are written to the twin (which forwards them upstream), and
patched state is pushed to Home Assistant through a twin subscription.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature

from .const import DOMAIN, HVAC_ACTION_MAP, HVAC_MODE_MAP, HVAC_MODE_REVERSE_MAP

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .device import DeviceTwin
    from .models import TwinPatchEvent

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity for an Airzone Cloud device."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([AirzoneClimateEntity(entry_data["twin"])])


class AirzoneClimateEntity(ClimateEntity):
    """Climate entity backed by an Airzone Cloud device twin."""

    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = 0.5
    _attr_min_temp = 15.0
    _attr_max_temp = 30.0
    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False
    _attr_hvac_modes = [HVACMode.OFF, *HVAC_MODE_REVERSE_MAP]
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(self, twin: DeviceTwin) -> None:
        """Initialize the climate entity.

        Args:
            twin: Device twin rendered by this entity.

        """
        self._twin = twin
        self._attr_unique_id = twin.key
        self._attr_device_info = {
            "identifiers": {(DOMAIN, twin.key)},
            "name": twin.name,
            "manufacturer": "Airzone",
        }

    @property
    def hvac_mode(self) -> HVACMode:
        """Return the current HVAC mode."""
        if not self._twin.power:
            return HVACMode.OFF
        return HVAC_MODE_MAP.get(self._twin.mode, HVACMode.OFF)

    @property
    def hvac_action(self) -> HVACAction:
        """Return what the unit is actually doing."""
        if not self._twin.power:
            return HVACAction.OFF
        return HVAC_ACTION_MAP.get(self._twin.real_mode, HVACAction.IDLE)

    @property
    def current_temperature(self) -> float:
        return self._twin.current_temperature

    @property
    def target_temperature(self) -> float | None:
        return self._twin.target_temperature

    async def async_added_to_hass(self) -> None:
        """Subscribe to twin patches."""
        await super().async_added_to_hass()
        self.async_on_remove(
            self._twin.register_patch_callback(self._handle_twin_patch)
        )

    def _handle_twin_patch(self, event: TwinPatchEvent) -> None:
        _LOGGER.debug("%s: %s patched to %s", self._twin.key, event.field, event.value)
        self.async_write_ha_state()

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode.

        Args:
            hvac_mode: The HVAC mode to set.

        """
        if hvac_mode == HVACMode.OFF:
            self._twin.power = False
        elif (mode := HVAC_MODE_REVERSE_MAP.get(hvac_mode)) is not None:
            self._twin.mode = mode
            self._twin.power = True
        else:
            _LOGGER.warning("Unsupported HVAC mode for %s: %s", self.name, hvac_mode)
            return

        self.async_write_ha_state()

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return

        self._twin.target_temperature = temperature
        self.async_write_ha_state()

    async def async_turn_on(self) -> None:
        """Turn the device on in its last mode."""
        self._twin.power = True
        self.async_write_ha_state()

    async def async_turn_off(self) -> None:
        """Turn the device off."""
        self._twin.power = False
        self.async_write_ha_state()
