"""API client for the Tuya cloud.

This module provides functions to interact with the Tuya OpenAPI,
including token acquisition, request signing, property queries and
property commands.
"""

import json
import logging
import time
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client

from .const import (
    CODE_SWITCH,
    ISSUE_PROPERTIES_PATH,
    PROPERTIES_PATH,
    REQUEST_TIMEOUT,
    SIGN_METHOD,
    TOKEN_PATH,
)
from .models import SignedRequest, Token, TuyaCredentials
from .sign import canonicalize_path, encrypt_str, sign_message, string_to_sign

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400


class TuyaApiClientError(Exception):
    """Base exception for Tuya API client errors."""


class AuthenticationError(TuyaApiClientError):
    """Exception raised when an access token cannot be acquired."""


class QueryError(TuyaApiClientError):
    """Exception raised when an authenticated query fails."""


class CommandError(TuyaApiClientError):
    """Exception raised when a device command fails."""


def current_timestamp() -> str:
    """Return the current epoch time in milliseconds as a string."""
    return str(int(time.time() * 1000))


def serialize_body(body: dict[str, Any] | None) -> bytes | None:
    """Serialize a request body to the exact bytes that are hashed and sent.

    Args:
        body: JSON-compatible body, or None for bodyless requests.

    Returns:
        Compact UTF-8 JSON, or None.

    """
    if body is None:
        return None
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def build_signed_headers(  # noqa: PLR0913
    credentials: TuyaCredentials,
    token: str | None,
    path: str,
    method: str,
    body: bytes | None = None,
    query: dict[str, Any] | None = None,
    timestamp: str | None = None,
) -> SignedRequest:
    """Sign a Tuya API request.

    Args:
        credentials: Tuya project credentials.
        token: Access token, or None when acquiring one.
        path: Request path, optionally carrying a query string.
        method: HTTP method.
        body: Serialized request body, or None.
        query: Explicit query parameters.
        timestamp: Epoch milliseconds to sign with, defaults to now.

    Returns:
        SignedRequest whose canonical_path must be used as the request target.

    """
    t = timestamp or current_timestamp()
    canonical_path = canonicalize_path(path, query)
    message = sign_message(
        credentials.access_key,
        token,
        t,
        string_to_sign(method, body, canonical_path),
    )
    return SignedRequest(
        timestamp=t,
        canonical_path=canonical_path,
        client_id=credentials.access_key,
        sign=encrypt_str(message, credentials.secret_key),
        sign_method=SIGN_METHOD,
        access_token=token,
    )


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 400 or higher, False otherwise.

    """
    return status >= HTTP_BAD_REQUEST


def is_api_error(data: Any) -> bool:  # noqa: ANN401
    """Check if a decoded payload is absent or reports non-success.

    Args:
        data: Decoded API response.

    Returns:
        True unless the payload is a mapping with a truthy success field.

    """
    return not isinstance(data, dict) or not data.get("success", False)


def validate_response(
    response: httpx.Response,
    error_cls: type[TuyaApiClientError] = TuyaApiClientError,
) -> dict[str, Any]:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.
        error_cls: Exception type raised on failure.

    Returns:
        Parsed JSON data from response.

    Raises:
        TuyaApiClientError: The given subclass, if the call failed.

    """
    if is_http_error(response.status_code):
        error_message = f"Request failed: {response.status_code}: {response.text}"
        raise error_cls(error_message)

    try:
        data = response.json()
    except ValueError as err:
        error_message = f"Invalid response: {response.text}"
        raise error_cls(error_message) from err

    if is_api_error(data):
        message = data.get("msg") if isinstance(data, dict) else None
        error_message = f"{message or 'Unknown API error'}: {response.text}"
        raise error_cls(error_message)

    return data


async def _async_signed_request(  # noqa: PLR0913
    session: httpx.AsyncClient,
    credentials: TuyaCredentials,
    token: str | None,
    method: str,
    path: str,
    error_cls: type[TuyaApiClientError],
    body: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload = serialize_body(body)
    signed = build_signed_headers(credentials, token, path, method, payload)
    headers = signed.headers
    if payload is not None:
        headers["Content-Type"] = "application/json"

    try:
        response = await session.request(
            method,
            signed.canonical_path,
            headers=headers,
            content=payload,
        )
    except httpx.HTTPError as err:
        error_message = f"{method} {signed.canonical_path} unreachable: {err!r}"
        raise error_cls(error_message) from err

    return validate_response(response, error_cls)


def create_session_client(
    hass: HomeAssistant,
    endpoint: str,
    *,
    auto_cleanup: bool = True,
) -> httpx.AsyncClient:
    """Create HTTP client for the regional Tuya endpoint.

    Args:
        hass: Home Assistant instance.
        endpoint: Base URL of the Tuya data center.
        auto_cleanup: Close the client when Home Assistant stops.

    Returns:
        Configured httpx AsyncClient bounded by the request timeout.

    """
    return create_async_httpx_client(
        hass,
        auto_cleanup=auto_cleanup,
        base_url=endpoint,
        timeout=REQUEST_TIMEOUT,
    )


async def async_get_token(
    session: httpx.AsyncClient,
    credentials: TuyaCredentials,
) -> Token:
    """Acquire a fresh access token.

    Args:
        session: HTTP client session.
        credentials: Tuya project credentials.

    Returns:
        Token valid for the current control cycle.

    Raises:
        AuthenticationError: If the token call fails.

    """
    _LOGGER.debug("Requesting Tuya access token")
    data = await _async_signed_request(
        session, credentials, None, "GET", TOKEN_PATH, AuthenticationError
    )

    result = data.get("result")
    access_token = result.get("access_token") if isinstance(result, dict) else None
    if not access_token:
        error_message = f"Token response without access_token: {data}"
        raise AuthenticationError(error_message)

    issued_at = data.get("t")
    if not isinstance(issued_at, int):
        issued_at = int(current_timestamp())
    _LOGGER.debug("Successfully acquired Tuya access token")
    return Token(value=access_token, issued_at=issued_at)


async def async_get_properties(
    session: httpx.AsyncClient,
    credentials: TuyaCredentials,
    token: str,
    device_id: str,
) -> list[dict[str, Any]]:
    """Fetch the shadow properties of a device.

    Args:
        session: HTTP client session.
        credentials: Tuya project credentials.
        token: Access token.
        device_id: Target device identifier.

    Returns:
        List of property mappings with code, value and time.

    Raises:
        QueryError: If the query fails.

    """
    path = PROPERTIES_PATH.format(device_id=device_id)

    _LOGGER.debug("Fetching properties of device %s", device_id)
    data = await _async_signed_request(
        session, credentials, token, "GET", path, QueryError
    )

    result = data.get("result")
    properties = result.get("properties") if isinstance(result, dict) else None
    if not isinstance(properties, list):
        error_message = f"Properties missing in response for {device_id}: {data}"
        raise QueryError(error_message)

    _LOGGER.debug("Retrieved %d properties of device %s", len(properties), device_id)
    return properties


async def async_issue_command(
    session: httpx.AsyncClient,
    credentials: TuyaCredentials,
    token: str,
    device_id: str,
    is_on: bool,  # noqa: FBT001
) -> dict[str, Any]:
    """Switch a device on or off.

    Args:
        session: HTTP client session.
        credentials: Tuya project credentials.
        token: Access token.
        device_id: Target device identifier.
        is_on: Requested switch state.

    Returns:
        The acknowledgment payload.

    Raises:
        CommandError: If the command fails.

    """
    path = ISSUE_PROPERTIES_PATH.format(device_id=device_id)
    body = {"properties": {CODE_SWITCH: is_on}}

    _LOGGER.debug("Sending %s=%s to device %s", CODE_SWITCH, is_on, device_id)
    data = await _async_signed_request(
        session, credentials, token, "POST", path, CommandError, body
    )
    _LOGGER.debug("Command acknowledged by device %s", device_id)
    return data
