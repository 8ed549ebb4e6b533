"""Pytest configuration and fixtures for Tuya Free Cooling tests."""

from typing import Any

import pytest

from custom_components.tuya_free_cooling.models import TuyaCredentials

ACCESS_KEY = "ak1234567890"
SECRET_KEY = "sk_secret_0123456789"
ACCESS_TOKEN = "tok_0123456789"
TIMESTAMP = "1700000000000"
SWITCH_DEVICE_ID = "dev123"
MEASURER_DEVICE_ID = "meter456"

# Observation time of the sample temperature property, epoch milliseconds
INDOOR_OBSERVED_AT = 1_700_000_000_000
# Observation time of the sample weather payload, epoch seconds
OUTDOOR_OBSERVED_AT = 1_699_999_500


@pytest.fixture
def credentials() -> TuyaCredentials:
    """Fixture providing Tuya project credentials."""
    return TuyaCredentials(access_key=ACCESS_KEY, secret_key=SECRET_KEY)


@pytest.fixture
def sample_token_response() -> dict[str, Any]:
    """Fixture providing a sample token API response.

    Returns:
        A dictionary representing a successful token response.

    """
    return {
        "success": True,
        "t": 1_700_000_000_123,
        "result": {
            "access_token": ACCESS_TOKEN,
            "expire_time": 7200,
            "refresh_token": "refresh_0123456789",
            "uid": "uid_01",
        },
    }


@pytest.fixture
def sample_properties_response() -> dict[str, Any]:
    """Fixture providing a sample shadow properties API response.

    Returns:
        A dictionary representing the properties of a thermometer plug.

    """
    return {
        "success": True,
        "t": 1_700_000_000_456,
        "result": {
            "properties": [
                {"code": "switch_1", "value": True, "time": INDOOR_OBSERVED_AT},
                {"code": "temp_current", "value": 253, "time": INDOOR_OBSERVED_AT},
                {"code": "humidity_value", "value": 48, "time": INDOOR_OBSERVED_AT},
            ],
        },
    }


@pytest.fixture
def sample_command_response() -> dict[str, Any]:
    """Fixture providing a sample command API response."""
    return {"success": True, "t": 1_700_000_000_789, "result": True}


@pytest.fixture
def sample_weather_response() -> dict[str, Any]:
    """Fixture providing a sample WeatherAPI.com current weather response."""
    return {
        "location": {"name": "Paris", "country": "France"},
        "current": {
            "last_updated_epoch": OUTDOOR_OBSERVED_AT,
            "last_updated": "2023-11-14 22:45",
            "temp_c": 11.0,
            "temp_f": 51.8,
        },
    }
