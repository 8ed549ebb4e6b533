"""Readers for the Tuya devices' reported properties."""

import logging
from typing import Any

import httpx

from . import api
from .api import TuyaApiClientError
from .const import CODE_SWITCH, CODE_TEMPERATURE, TEMPERATURE_SCALE
from .models import TemperatureReading, TuyaCredentials

_LOGGER = logging.getLogger(__name__)


class MissingSensorDataError(TuyaApiClientError):
    """Exception raised when an expected property is absent from a device."""


def find_property(properties: list[dict[str, Any]], code: str) -> dict[str, Any]:
    """Return the property with the given code.

    Args:
        properties: Properties reported by a device.
        code: Property code to look up.

    Returns:
        The matching property mapping.

    Raises:
        MissingSensorDataError: If no property has this code.

    """
    for prop in properties:
        if isinstance(prop, dict) and prop.get("code") == code:
            return prop

    error_message = f"Property {code} not reported by device"
    raise MissingSensorDataError(error_message)


def extract_temperature(properties: list[dict[str, Any]]) -> TemperatureReading:
    """Decode the temperature property into a reading.

    The platform reports temperature in tenths of a degree Celsius and the
    sample time in epoch milliseconds.
    """
    prop = find_property(properties, CODE_TEMPERATURE)
    value = prop.get("value")
    observed_at = prop.get("time")

    if isinstance(value, bool) or not isinstance(value, int | float):
        error_message = f"Property {CODE_TEMPERATURE} has no numeric value: {prop}"
        raise MissingSensorDataError(error_message)
    if not isinstance(observed_at, int):
        error_message = f"Property {CODE_TEMPERATURE} has no timestamp: {prop}"
        raise MissingSensorDataError(error_message)

    return TemperatureReading(
        celsius=value / TEMPERATURE_SCALE,
        observed_at=observed_at,
    )


async def async_read_indoor_temperature(
    session: httpx.AsyncClient,
    credentials: TuyaCredentials,
    token: str,
    device_id: str,
) -> TemperatureReading:
    """Read the indoor temperature from the measuring device.

    Raises:
        QueryError: If the properties cannot be fetched.
        MissingSensorDataError: If the temperature property is absent.

    """
    properties = await api.async_get_properties(session, credentials, token, device_id)
    reading = extract_temperature(properties)
    _LOGGER.debug("Indoor temperature of %s: %s", device_id, reading)
    return reading


async def async_read_switch_state(
    session: httpx.AsyncClient,
    credentials: TuyaCredentials,
    token: str,
    device_id: str,
) -> bool:
    """Read the switch state reported by the switching device.

    Raises:
        QueryError: If the properties cannot be fetched.
        MissingSensorDataError: If the switch property is absent or not boolean.

    """
    properties = await api.async_get_properties(session, credentials, token, device_id)
    value = find_property(properties, CODE_SWITCH).get("value")
    if not isinstance(value, bool):
        error_message = f"Property {CODE_SWITCH} has no boolean value: {value!r}"
        raise MissingSensorDataError(error_message)
    return value
