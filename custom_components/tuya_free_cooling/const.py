"""Constants for Tuya Free Cooling integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and device property codes.
"""

DOMAIN = "tuya_free_cooling"

TUYA_ENDPOINTS = {
    "eu": "https://openapi.tuyaeu.com",
    "us": "https://openapi.tuyaus.com",
    "cn": "https://openapi.tuyacn.com",
    "in": "https://openapi.tuyain.com",
}
DEFAULT_REGION = "eu"

WEATHER_URL = "https://api.weatherapi.com/v1/current.json"

TOKEN_PATH = "/v1.0/token?grant_type=1"
PROPERTIES_PATH = "/v2.0/cloud/thing/{device_id}/shadow/properties"
ISSUE_PROPERTIES_PATH = "/v2.0/cloud/thing/{device_id}/shadow/properties/issue"

SIGN_METHOD = "HMAC-SHA256"
REQUEST_TIMEOUT = 5.0  # Seconds per remote call

# Device property codes
CODE_TEMPERATURE = "temp_current"
CODE_SWITCH = "switch_1"
TEMPERATURE_SCALE = 10  # temp_current is reported in tenths of a degree

DEFAULT_POLL_INTERVAL = 300
MIN_POLL_INTERVAL = 30
DEFAULT_MIN_INSIDE_TEMPERATURE = 18.0

CONF_ACCESS_KEY = "access_key"
CONF_SECRET_KEY = "secret_key"
CONF_REGION = "region"
CONF_SWITCH_DEVICE_ID = "switch_device_id"
CONF_MEASURER_DEVICE_ID = "measurer_device_id"
CONF_WEATHER_API_KEY = "weather_api_key"
CONF_WEATHER_LOCATION = "weather_location"
CONF_MIN_INSIDE_TEMPERATURE = "min_inside_temperature"

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_UNKNOWN = "unknown_error"

SERVICE_CHECK = "check"
SERVICE_GET_STATUS = "get_status"
