"""
Configuration flow for Tuya Free Cooling integration.

This module handles the setup and configuration of the Tuya Free Cooling
integration through Home Assistant's config flow system.
"""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_SCAN_INTERVAL

from . import api
from .const import (
    CONF_ACCESS_KEY,
    CONF_MEASURER_DEVICE_ID,
    CONF_MIN_INSIDE_TEMPERATURE,
    CONF_REGION,
    CONF_SECRET_KEY,
    CONF_SWITCH_DEVICE_ID,
    CONF_WEATHER_API_KEY,
    CONF_WEATHER_LOCATION,
    DEFAULT_MIN_INSIDE_TEMPERATURE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REGION,
    DOMAIN,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
    MIN_POLL_INTERVAL,
    TUYA_ENDPOINTS,
)
from .models import TuyaCredentials

_LOGGER = logging.getLogger(__name__)

DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_ACCESS_KEY): str,
        vol.Required(CONF_SECRET_KEY): str,
        vol.Required(CONF_REGION, default=DEFAULT_REGION): vol.In(list(TUYA_ENDPOINTS)),
        vol.Required(CONF_SWITCH_DEVICE_ID): str,
        vol.Required(CONF_MEASURER_DEVICE_ID): str,
        vol.Required(CONF_WEATHER_API_KEY): str,
        vol.Required(CONF_WEATHER_LOCATION): str,
        vol.Required(
            CONF_MIN_INSIDE_TEMPERATURE, default=DEFAULT_MIN_INSIDE_TEMPERATURE
        ): vol.Coerce(float),
        vol.Required(CONF_SCAN_INTERVAL, default=DEFAULT_POLL_INTERVAL): vol.All(
            vol.Coerce(int), vol.Range(min=MIN_POLL_INTERVAL)
        ),
    }
)


def error_key(err: api.AuthenticationError) -> str:
    """Map a token failure to a config flow error key."""
    if isinstance(err.__cause__, httpx.TimeoutException):
        return ERROR_TIMEOUT
    if isinstance(err.__cause__, httpx.HTTPError):
        return ERROR_CANNOT_CONNECT
    return ERROR_INVALID_AUTH


class TuyaFreeCoolingConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Tuya Free Cooling integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing credentials and devices.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            credentials = TuyaCredentials(
                access_key=user_input[CONF_ACCESS_KEY],
                secret_key=user_input[CONF_SECRET_KEY],
            )
            endpoint = TUYA_ENDPOINTS[user_input[CONF_REGION]]

            try:
                async with api.create_session_client(
                    self.hass, endpoint, auto_cleanup=False
                ) as session:
                    await api.async_get_token(session, credentials)
                _LOGGER.info("Successfully authenticated with Tuya API")

            except api.AuthenticationError as err:
                errors["base"] = error_key(err)
                _LOGGER.warning("Authentication failed (%s): %s", errors["base"], err)
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during authentication (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                await self.async_set_unique_id(user_input[CONF_SWITCH_DEVICE_ID])
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Free Cooling ({user_input[CONF_WEATHER_LOCATION]})",
                    data=user_input,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=DATA_SCHEMA,
            errors=errors,
        )
