"""Device twin for Airzone Cloud air-conditioning units.

A twin mirrors the last known state of one device. Reads are served from
the local record; writes update the record and request the same change
upstream without waiting for the outcome. Server-originated state is merged
through ``patch``, which is also the only place change notifications are
emitted.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from .const import EVENT_PROPERTIES
from .models import DeviceChange, DeviceMode, TemperatureUnits, TwinPatchEvent

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .api import SupportsMachineEvents
    from .models import DeviceData, DeviceInfo

_LOGGER = logging.getLogger(__name__)

SETPOINT_FIELDS = {
    DeviceMode.AUTO: "setpoint_air_auto",
    DeviceMode.COOL: "setpoint_air_cool",
    DeviceMode.HEAT: "setpoint_air_heat",
}


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def to_fahrenheit(temperature: float) -> int:
    """Convert Celsius to Fahrenheit, rounded to a whole degree."""
    return int(_round_half_up(temperature * 9 / 5 + 32))


def to_celsius(temperature: float) -> float:
    """Convert Fahrenheit to Celsius, rounded to a tenth of a degree."""
    return _round_half_up((temperature - 32) * 5 / 9 * 10) / 10


def merge_state(
    current: Mapping[str, Any], partial: Mapping[str, Any]
) -> dict[str, Any]:
    """Return a new state record with ``partial`` written over ``current``.

    Keys present in ``partial`` always overwrite, including those whose value
    is None. Keys absent from ``partial`` keep their current value.
    """
    return {**current, **partial}


class DeviceTwin:
    """In-process mirror of a single Airzone Cloud device.

    Temperatures are stored in the device's native units and exposed in
    Celsius. The twin holds a reference to the API handle but never awaits
    it; reconciliation with the real device relies on later ``patch`` calls.
    """

    def __init__(
        self,
        installation: str,
        mac: str,
        api: SupportsMachineEvents,
        data: DeviceData | DeviceInfo,
    ) -> None:
        """Initialize the twin.

        Args:
            installation: Installation identifier the device belongs to.
            mac: Device address within the installation.
            api: Handle used to request field updates upstream.
            data: Initial state snapshot, full or name-only.

        """
        self.installation = installation
        self.mac = mac
        self._api = api
        self._data: dict[str, Any] = dict(data)
        self._patch_callbacks: list[Callable[[TwinPatchEvent], None]] = []

    def __repr__(self) -> str:
        return f"<DeviceTwin {self.key} name={self.name!r}>"

    @property
    def key(self) -> str:
        """Return the stable identity of this twin."""
        return f"{self.installation}:{self.mac}"

    @property
    def data(self) -> dict[str, Any]:
        """Return a copy of the current state record."""
        return dict(self._data)

    def register_patch_callback(
        self,
        callback: Callable[[TwinPatchEvent], None],
    ) -> Callable[[], None]:
        """Register a callback for patched state fields.

        Args:
            callback: Function to call for each watched field in a patch.

        Returns:
            A function to unregister the callback.

        """
        self._patch_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._patch_callbacks:
                self._patch_callbacks.remove(callback)

        return unregister

    def patch(self, data: Mapping[str, Any]) -> None:
        """Merge a partial state record and notify subscribers.

        Every watched field present in ``data`` is announced, in the order it
        appears, whether or not its value changed.
        """
        self._data = merge_state(self._data, data)
        _LOGGER.debug("Patched %s with %s", self.key, data)

        for field, value in data.items():
            if field in EVENT_PROPERTIES:
                self._notify(TwinPatchEvent(field=field, value=value))

    def _notify(self, event: TwinPatchEvent) -> None:
        for callback in list(self._patch_callbacks):
            try:
                callback(event)
            except Exception:
                _LOGGER.exception("Error in patch callback for %s", self.key)

    @property
    def name(self) -> str:
        return self._data.get("name", "")

    @property
    def power(self) -> bool:
        return self._data.get("power") is True

    @power.setter
    def power(self, value: bool) -> None:
        if change := self.power_change(value):
            self.apply_change(change)

    @property
    def mode(self) -> str | None:
        return self._data.get("mode")

    @mode.setter
    def mode(self, value: str) -> None:
        self.apply_change(self.mode_change(value))

    @property
    def real_mode(self) -> str | None:
        return self._data.get("real_mode")

    @property
    def temperature_units(self) -> TemperatureUnits | int | None:
        units = self._data.get("units")
        try:
            return TemperatureUnits(units)
        except ValueError:
            # None and unit codes this integration does not know about
            return units

    @property
    def _is_fahrenheit(self) -> bool:
        return self._data.get("units") == TemperatureUnits.FAHRENHEIT

    @property
    def _default_temperature(self) -> float:
        # 0 C and 32 F are the same reading once converted
        return 0 if self._data.get("units") == TemperatureUnits.CELSIUS else 32

    def _to_display(self, value: float) -> float:
        return to_celsius(value) if self._is_fahrenheit else value

    @property
    def current_temperature(self) -> float:
        """Return the measured temperature in Celsius."""
        value = self._data.get("work_temp")
        if value is None:
            value = self._default_temperature
        return self._to_display(value)

    @property
    def setpoint_temperature(self) -> float | None:
        """Return the current mode's setpoint in native units."""
        field = SETPOINT_FIELDS.get(self.mode)
        if field is None:
            return self._default_temperature
        return self._data.get(field)

    @property
    def target_temperature(self) -> float | None:
        """Return the current mode's setpoint in Celsius."""
        value = self.setpoint_temperature
        return None if value is None else self._to_display(value)

    @target_temperature.setter
    def target_temperature(self, celsius_value: float) -> None:
        if change := self.target_temperature_change(celsius_value):
            self.apply_change(change)

    def power_change(self, value: bool) -> DeviceChange | None:
        """Return the change needed to set power, or None when already set."""
        if value == self.power:
            return None
        return DeviceChange(field="power", value=value)

    def mode_change(self, value: str) -> DeviceChange:
        """Return the change needed to set the mode.

        Unlike power, the mode is resent even when it is already current.
        """
        return DeviceChange(field="mode", value=value)

    def target_temperature_change(self, celsius_value: float) -> DeviceChange | None:
        """Return the setpoint change for the current mode in native units.

        Returns None when the current mode has no setpoint field.
        """
        field = SETPOINT_FIELDS.get(self.mode)
        if field is None:
            _LOGGER.debug(
                "Ignoring target temperature for %s in mode %s", self.key, self.mode
            )
            return None

        value = to_fahrenheit(celsius_value) if self._is_fahrenheit else celsius_value
        return DeviceChange(field=field, value=value)

    def apply_change(self, change: DeviceChange) -> None:
        """Request the change upstream, then apply it to the local record.

        The local record is written even when the request cannot be issued.
        """
        _LOGGER.debug("Sending %s=%s for %s", change.field, change.value, self.key)
        try:
            self._api.send_machine_event(
                self.installation, self.mac, change.field, change.value
            )
        except Exception:
            _LOGGER.exception("Error sending %s for %s", change.field, self.key)
        self._data[change.field] = change.value
