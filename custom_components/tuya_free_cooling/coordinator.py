"""Coordinator running the free cooling control cycle."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api, telemetry, weather
from .const import (
    CONF_ACCESS_KEY,
    CONF_MEASURER_DEVICE_ID,
    CONF_MIN_INSIDE_TEMPERATURE,
    CONF_SECRET_KEY,
    CONF_SWITCH_DEVICE_ID,
    CONF_WEATHER_API_KEY,
    CONF_WEATHER_LOCATION,
    DEFAULT_MIN_INSIDE_TEMPERATURE,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
)
from .decision import decide
from .models import CycleResult, TemperatureReading, TuyaCredentials

if TYPE_CHECKING:
    from collections.abc import Awaitable

    import httpx
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


def now_ms() -> int:
    """Return the current epoch time in milliseconds."""
    return int(time.time() * 1000)


def format_readings(
    indoor: TemperatureReading,
    outdoor: TemperatureReading,
    now: int,
) -> str:
    """Format both readings with their age in minutes."""
    return (
        f"IN: {indoor.celsius} (-{indoor.age_minutes(now)}m) "
        f"OUT: {outdoor.celsius} (-{outdoor.age_minutes(now)}m)"
    )


async def async_gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently, cancelling the others once one fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class FreeCoolingCoordinator(DataUpdateCoordinator[CycleResult]):
    """Coordinator that keeps the cooling switch in the desired state.

    The last confirmed switch state lives here and nowhere else. Cycles run
    one at a time, so it needs no further synchronization.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        session: httpx.AsyncClient,
        config_entry: ConfigEntry,
        update_interval: int = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=timedelta(seconds=update_interval),
        )
        self.session = session
        self.config_entry = config_entry
        self._is_cooling: bool | None = None
        self._cycle_lock = asyncio.Lock()

    @property
    def credentials(self) -> TuyaCredentials:
        """Get the Tuya credentials from config entry."""
        return TuyaCredentials(
            access_key=self.config_entry.data[CONF_ACCESS_KEY],
            secret_key=self.config_entry.data[CONF_SECRET_KEY],
        )

    @property
    def min_inside_temperature(self) -> float:
        """Get the temperature floor below which cooling stays off."""
        return float(
            self.config_entry.data.get(
                CONF_MIN_INSIDE_TEMPERATURE, DEFAULT_MIN_INSIDE_TEMPERATURE
            )
        )

    @property
    def is_cooling(self) -> bool | None:
        """Return the last confirmed switch state, None until first synced."""
        return self._is_cooling

    async def _async_read_temperatures(
        self, token: str
    ) -> tuple[TemperatureReading, TemperatureReading]:
        data = self.config_entry.data
        return await async_gather_or_cancel(
            telemetry.async_read_indoor_temperature(
                self.session,
                self.credentials,
                token,
                data[CONF_MEASURER_DEVICE_ID],
            ),
            weather.async_read_outdoor_temperature(
                self.session,
                data[CONF_WEATHER_API_KEY],
                data[CONF_WEATHER_LOCATION],
            ),
        )

    async def _async_update_data(self) -> CycleResult:
        """Run one control cycle."""
        async with self._cycle_lock:
            try:
                return await self._async_run_cycle()
            except api.AuthenticationError as err:
                _LOGGER.warning("Cycle aborted, cannot acquire Tuya token: %s", err)
                error_msg = f"Authentication error: {err}"
                raise UpdateFailed(error_msg) from err
            except telemetry.MissingSensorDataError as err:
                error_msg = f"Missing sensor data: {err}"
                raise UpdateFailed(error_msg) from err
            except api.QueryError as err:
                error_msg = f"Query error while reading devices: {err}"
                raise UpdateFailed(error_msg) from err
            except api.CommandError as err:
                error_msg = f"Command error while switching: {err}"
                raise UpdateFailed(error_msg) from err
            except weather.WeatherUnavailableError as err:
                error_msg = f"Weather unavailable: {err}"
                raise UpdateFailed(error_msg) from err

    async def _async_run_cycle(self) -> CycleResult:
        token = await api.async_get_token(self.session, self.credentials)
        indoor, outdoor = await self._async_read_temperatures(token.value)

        decision = decide(
            indoor.celsius,
            outdoor.celsius,
            self.min_inside_temperature,
            self._is_cooling,
        )
        _LOGGER.info(
            "%s ON: %s CHANGED: %s",
            format_readings(indoor, outdoor, now_ms()),
            decision.desired_state,
            decision.changed,
        )

        if decision.changed:
            await api.async_issue_command(
                self.session,
                self.credentials,
                token.value,
                self.config_entry.data[CONF_SWITCH_DEVICE_ID],
                decision.desired_state,
            )
            self._is_cooling = decision.desired_state

        return CycleResult(
            indoor=indoor,
            outdoor=outdoor,
            desired_state=decision.desired_state,
            changed=decision.changed,
            command_sent=decision.changed,
        )

    async def async_run_cycle(self) -> None:
        """Run a control cycle on demand, after any cycle already in progress.

        Raises:
            HomeAssistantError: If the cycle failed.

        """
        await self.async_refresh()
        if not self.last_update_success:
            error_msg = f"Control cycle failed: {self.last_exception}"
            raise HomeAssistantError(error_msg)

    async def async_get_status(self) -> dict[str, Any]:
        """Read the current readings and the switch state reported by the device.

        Raises:
            HomeAssistantError: If any reading fails.

        """
        try:
            token = await api.async_get_token(self.session, self.credentials)
            (indoor, outdoor), switch_on = await async_gather_or_cancel(
                self._async_read_temperatures(token.value),
                telemetry.async_read_switch_state(
                    self.session,
                    self.credentials,
                    token.value,
                    self.config_entry.data[CONF_SWITCH_DEVICE_ID],
                ),
            )
        except (api.TuyaApiClientError, weather.WeatherUnavailableError) as err:
            _LOGGER.warning("Status read failed: %s", err)
            error_msg = f"Status unavailable: {err}"
            raise HomeAssistantError(error_msg) from err

        return {
            "summary": f"{format_readings(indoor, outdoor, now_ms())} ON: {switch_on}",
            "indoor": indoor.celsius,
            "outdoor": outdoor.celsius,
            "switch_on": switch_on,
        }
