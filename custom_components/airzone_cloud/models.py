"""Data models for Airzone Cloud integration."""

from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Any, TypedDict


class DeviceMode(StrEnum):
    """Operating modes understood by the twin's setpoint mapping."""

    OFF = "off"
    AUTO = "auto"
    COOL = "cool"
    HEAT = "heat"


class TemperatureUnits(IntEnum):
    """Native temperature unit system of a device."""

    CELSIUS = 0
    FAHRENHEIT = 1


class DeviceInfo(TypedDict):
    """Minimal device record known before the first status arrives."""

    name: str


class DeviceData(TypedDict, total=False):
    """Flat device state record as reported by the Airzone Cloud API.

    Temperatures are expressed in the device's own ``units``.
    """

    name: str
    power: bool
    mode: str
    real_mode: str
    units: int
    work_temp: float
    setpoint_air_auto: float
    setpoint_air_cool: float
    setpoint_air_heat: float


@dataclass(frozen=True, slots=True)
class DeviceChange:
    """A single-field mutation to request upstream and apply locally."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class TwinPatchEvent:
    """Notification emitted when a watched state field is patched."""

    field: str
    value: Any
