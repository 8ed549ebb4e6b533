"""Outdoor temperature reader backed by WeatherAPI.com."""

import logging
from typing import Any

import httpx

from .const import WEATHER_URL
from .models import TemperatureReading

_LOGGER = logging.getLogger(__name__)


class WeatherUnavailableError(Exception):
    """Exception raised when no usable weather observation is available."""


def extract_reading(data: Any) -> TemperatureReading:  # noqa: ANN401
    """Extract the current outdoor reading from a weather payload.

    Args:
        data: Decoded ``current.json`` response.

    Returns:
        TemperatureReading with the observation time in epoch milliseconds.

    Raises:
        WeatherUnavailableError: If the payload is malformed.

    """
    current = data.get("current") if isinstance(data, dict) else None
    if not isinstance(current, dict):
        error = data.get("error") if isinstance(data, dict) else None
        message = error.get("message") if isinstance(error, dict) else None
        error_message = f"No current weather in response: {message or data}"
        raise WeatherUnavailableError(error_message)

    temp_c = current.get("temp_c")
    updated = current.get("last_updated_epoch")
    for field, value in (("temp_c", temp_c), ("last_updated_epoch", updated)):
        if isinstance(value, bool) or not isinstance(value, int | float):
            error_message = f"Weather field {field} missing or invalid: {current}"
            raise WeatherUnavailableError(error_message)

    return TemperatureReading(celsius=float(temp_c), observed_at=int(updated * 1000))


async def async_read_outdoor_temperature(
    session: httpx.AsyncClient,
    api_key: str,
    location: str,
) -> TemperatureReading:
    """Read the current outdoor temperature for a location.

    Args:
        session: HTTP client session.
        api_key: WeatherAPI.com key.
        location: Location query, e.g. a city name or "lat,lon".

    Returns:
        TemperatureReading of the latest observation.

    Raises:
        WeatherUnavailableError: If the provider is unreachable or the
            payload is malformed.

    """
    params = {"key": api_key, "q": location, "aqi": "no"}

    _LOGGER.debug("Fetching current weather for %s", location)
    try:
        response = await session.get(WEATHER_URL, params=params)
    except httpx.HTTPError as err:
        error_message = f"Weather provider unreachable: {err!r}"
        raise WeatherUnavailableError(error_message) from err

    try:
        data = response.json()
    except ValueError as err:
        error_message = f"Invalid weather response {response.status_code}: {response.text}"
        raise WeatherUnavailableError(error_message) from err

    if response.is_error:
        error = data.get("error") if isinstance(data, dict) else None
        message = error.get("message") if isinstance(error, dict) else response.text
        error_message = f"Weather request failed: {response.status_code}: {message}"
        raise WeatherUnavailableError(error_message)

    reading = extract_reading(data)
    _LOGGER.debug("Outdoor temperature for %s: %s", location, reading)
    return reading
