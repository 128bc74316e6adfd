"""
Configuration flow for Airzone Cloud integration.

This module handles the setup and configuration of an Airzone Cloud
device through Home Assistant's config flow system.
"""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_NAME, CONF_TOKEN
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    CONF_DEVICE_ID,
    CONF_INSTALLATION_ID,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)

_LOGGER = logging.getLogger(__name__)


class AirzoneCloudConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Airzone Cloud integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input with token, installation, device and name.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            token = user_input[CONF_TOKEN]
            installation_id = user_input[CONF_INSTALLATION_ID]
            device_id = user_input[CONF_DEVICE_ID]

            try:
                session = get_async_client(self.hass)
                await api.async_get_device_status(
                    session, token, installation_id, device_id
                )
                _LOGGER.info(
                    "Reached Airzone Cloud device %s:%s", installation_id, device_id
                )

            except api.AirzoneApiAuthError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except httpx.ConnectError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except httpx.TimeoutException:
                _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                errors["base"] = ERROR_TIMEOUT
            except api.AirzoneApiClientError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error while validating device (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                await self.async_set_unique_id(f"{installation_id}:{device_id}")
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=user_input[CONF_NAME],
                    data={
                        CONF_TOKEN: token,
                        CONF_INSTALLATION_ID: installation_id,
                        CONF_DEVICE_ID: device_id,
                        CONF_NAME: user_input[CONF_NAME],
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_TOKEN): str,
                    vol.Required(CONF_INSTALLATION_ID): str,
                    vol.Required(CONF_DEVICE_ID): str,
                    vol.Required(CONF_NAME): str,
                }
            ),
            errors=errors,
        )
