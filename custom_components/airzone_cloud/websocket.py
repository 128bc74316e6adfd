"""Push channel for Airzone Cloud device state.

The server pushes partial device records over Socket.IO. Each record is
handed to the registered update callbacks, which route it to the matching
device twin. The manager keeps the channel open by itself: a dropped or
failed connection is retried with a growing delay until it succeeds or the
manager is shut down.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import socketio

from .const import (
    DOMAIN,
    WEBSOCKET_PATH,
    WEBSOCKET_RECONNECT_DELAY,
    WEBSOCKET_RECONNECT_MAX_DELAY,
    WEBSOCKET_URL,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)

EVENT_DEVICE_STATE = "device-state"
EVENT_APP_MSG = "appMsg"


@dataclass
class WebSocketDeviceUpdate:
    """Partial device state pushed by the server."""

    installation_id: str
    device_id: str
    change: dict[str, Any]

    @property
    def key(self) -> str:
        """Return the twin key this update is addressed to."""
        return f"{self.installation_id}:{self.device_id}"


def _subscribe(callbacks: list[Any], callback: Any) -> Callable[[], None]:
    callbacks.append(callback)

    def unregister() -> None:
        if callback in callbacks:
            callbacks.remove(callback)

    return unregister


class AirzoneWebSocketManager:
    """Socket.IO connection delivering device-state and appMsg events."""

    def __init__(
        self,
        hass: HomeAssistant,
        get_token: Callable[[], str],
    ) -> None:
        """Initialize the manager.

        Args:
            hass: Home Assistant instance, used to run the reconnect loop.
            get_token: Returns the access token sent when connecting.

        """
        self._hass = hass
        self._get_token = get_token
        self._sio: socketio.AsyncClient | None = None
        self._connected = False
        self._shutdown = False
        self._reconnect_task: asyncio.Task[None] | None = None

        self._device_update_callbacks: list[
            Callable[[WebSocketDeviceUpdate], None]
        ] = []
        self._refresh_callbacks: list[Callable[[], None]] = []

    @property
    def connected(self) -> bool:
        """Return True while the server connection is open."""
        return self._connected

    def register_device_update_callback(
        self,
        callback: Callable[[WebSocketDeviceUpdate], None],
    ) -> Callable[[], None]:
        """Register a callback for pushed device state.

        Returns:
            A function that unregisters the callback.

        """
        return _subscribe(self._device_update_callbacks, callback)

    def register_refresh_callback(
        self,
        callback: Callable[[], None],
    ) -> Callable[[], None]:
        """Register a callback for server refresh requests."""
        return _subscribe(self._refresh_callbacks, callback)

    async def async_connect(self) -> bool:
        """Open the push channel.

        A failed attempt schedules background retries, so callers may
        carry on without the channel.

        Returns:
            True if the channel is open now.

        """
        if self._connected:
            return True

        if not self._get_token():
            _LOGGER.error("Cannot open push channel: no access token available")
            return False

        if not await self._async_open():
            self._schedule_reconnect()
        return self._connected

    async def _async_open(self) -> bool:
        sio = socketio.AsyncClient(
            reconnection=False,
            logger=False,
            engineio_logger=False,
        )
        sio.on("connect", self._on_connect)
        sio.on("disconnect", self._on_disconnect)
        sio.on("error", self._on_error)
        sio.on(EVENT_DEVICE_STATE, self._on_device_state)
        sio.on(EVENT_APP_MSG, self._on_app_msg)
        self._sio = sio

        _LOGGER.debug("Opening push channel to %s", WEBSOCKET_URL)
        try:
            await sio.connect(
                WEBSOCKET_URL,
                auth={"token": self._get_token()},
                transports=["websocket"],
                socketio_path=WEBSOCKET_PATH,
            )
        except socketio.exceptions.ConnectionError as err:
            _LOGGER.warning("Push channel connection failed: %s", err)
            self._connected = False
        except Exception:
            _LOGGER.exception("Unexpected error opening push channel")
            self._connected = False
        else:
            self._connected = True
            _LOGGER.info("Push channel open")

        return self._connected

    async def _on_connect(self) -> None:
        self._connected = True

    async def _on_disconnect(self, reason: Any = None) -> None:
        _LOGGER.warning("Push channel closed by server: %s", reason)
        self._connected = False
        self._schedule_reconnect()

    async def _on_error(self, data: Any) -> None:
        _LOGGER.error("Push channel error: %s", data)

    async def _on_device_state(self, data: dict[str, Any]) -> None:
        self._handle_device_state(data)

    async def _on_app_msg(self, data: dict[str, Any]) -> None:
        self._handle_app_msg(data)

    def _handle_device_state(self, data: dict[str, Any] | None) -> None:
        """Route a device-state event to the update callbacks.

        Expected payload: ``{installation_id, device_id, change: {...}}``.
        """
        data = data or {}
        installation_id = data.get("installation_id")
        device_id = data.get("device_id")
        change = data.get("change")

        if not installation_id or not device_id or not isinstance(change, dict):
            _LOGGER.warning("Dropping malformed device state event: %s", data)
            return

        update = WebSocketDeviceUpdate(
            installation_id=str(installation_id),
            device_id=str(device_id),
            change=change,
        )
        _LOGGER.debug("Pushed change for %s: %s", update.key, change)
        self._dispatch(self._device_update_callbacks, update)

    def _handle_app_msg(self, data: dict[str, Any] | None) -> None:
        if not data or data.get("msg") != "refresh":
            _LOGGER.debug("Ignoring application message: %s", data)
            return

        _LOGGER.debug("Server requested a refresh")
        self._dispatch(self._refresh_callbacks)

    @staticmethod
    def _dispatch(callbacks: list[Callable[..., None]], *args: Any) -> None:
        for callback in list(callbacks):
            try:
                callback(*args)
            except Exception:
                _LOGGER.exception("Error in push channel callback %s", callback)

    def _schedule_reconnect(self) -> None:
        if self._shutdown:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return

        self._reconnect_task = self._hass.async_create_background_task(
            self._async_reconnect(), name=f"{DOMAIN} push channel reconnect"
        )

    async def _async_reconnect(self) -> None:
        delay = WEBSOCKET_RECONNECT_DELAY
        while not self._shutdown:
            await asyncio.sleep(delay)
            if self._shutdown:
                return

            _LOGGER.info("Reopening push channel")
            if await self._async_open():
                return

            delay = min(delay * 2, WEBSOCKET_RECONNECT_MAX_DELAY)
            _LOGGER.debug("Next push channel attempt in %s seconds", delay)

    async def async_disconnect(self) -> None:
        """Close the push channel and stop reconnecting."""
        self._shutdown = True

        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconnect_task
            self._reconnect_task = None

        sio, self._sio = self._sio, None
        if sio is not None and self._connected:
            try:
                await sio.disconnect()
            except Exception:
                _LOGGER.exception("Error closing push channel")
        self._connected = False
        _LOGGER.info("Push channel closed")
