from __future__ import annotations

import logging

import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_SCAN_INTERVAL, Platform
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError

from .api import create_session_client
from .const import (
    CONF_ACCESS_KEY,
    CONF_REGION,
    CONF_SECRET_KEY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REGION,
    DOMAIN,
    SERVICE_CHECK,
    SERVICE_GET_STATUS,
    TUYA_ENDPOINTS,
)
from .coordinator import FreeCoolingCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR]

ATTR_ENTRY_ID = "entry_id"

SERVICE_SCHEMA = vol.Schema({vol.Optional(ATTR_ENTRY_ID): str})


def _get_coordinator(hass: HomeAssistant, call: ServiceCall) -> FreeCoolingCoordinator:
    entries = hass.data.get(DOMAIN, {})
    entry_id = call.data.get(ATTR_ENTRY_ID)

    if entry_id is None:
        if len(entries) != 1:
            error_msg = f"Expected exactly 1 entry, found {len(entries)}; set entry_id"
            raise HomeAssistantError(error_msg)
        entry_id = next(iter(entries))

    if entry_id not in entries:
        error_msg = f"Unknown entry {entry_id}"
        raise HomeAssistantError(error_msg)

    return entries[entry_id]["coordinator"]


def _async_register_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_CHECK):
        return

    async def _async_handle_check(call: ServiceCall) -> None:
        coordinator = _get_coordinator(hass, call)
        _LOGGER.debug("Manual control cycle requested")
        await coordinator.async_run_cycle()

    async def _async_handle_get_status(call: ServiceCall) -> ServiceResponse:
        coordinator = _get_coordinator(hass, call)
        return await coordinator.async_get_status()

    hass.services.async_register(
        DOMAIN,
        SERVICE_CHECK,
        _async_handle_check,
        schema=SERVICE_SCHEMA,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_GET_STATUS,
        _async_handle_get_status,
        schema=SERVICE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Tuya Free Cooling integration for entry %s", entry.entry_id)

    if CONF_ACCESS_KEY not in entry.data or CONF_SECRET_KEY not in entry.data:
        _LOGGER.error("Missing credentials in configuration for entry %s", entry.entry_id)
        return False

    region = entry.data.get(CONF_REGION, DEFAULT_REGION)
    session = create_session_client(hass, TUYA_ENDPOINTS[region])

    coordinator = FreeCoolingCoordinator(
        hass,
        session,
        entry,
        update_interval=entry.data.get(CONF_SCAN_INTERVAL, DEFAULT_POLL_INTERVAL),
    )
    # The first cycle validates the credentials; failure raises ConfigEntryNotReady
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "coordinator": coordinator,
    }
    _async_register_services(hass)

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
        _LOGGER.info(
            "Successfully setup Tuya Free Cooling integration for entry %s",
            entry.entry_id,
        )
        return True
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        return False


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Tuya Free Cooling integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    if not hass.data.get(DOMAIN):
        hass.services.async_remove(DOMAIN, SERVICE_CHECK)
        hass.services.async_remove(DOMAIN, SERVICE_GET_STATUS)

    return True
