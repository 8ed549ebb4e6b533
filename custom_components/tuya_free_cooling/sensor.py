"""Sensor entities for Tuya Free Cooling.

This module exposes the readings and the decision of the last successful
control cycle as Home Assistant sensors.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.const import UnitOfTemperature
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import FreeCoolingCoordinator, now_ms

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .models import TemperatureReading

_LOGGER = logging.getLogger(__name__)

STATE_COOLING = "cooling"
STATE_IDLE = "idle"


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities for a Tuya Free Cooling entry."""
    coordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]

    async_add_entities(
        [
            TemperatureSensor(coordinator, entry.entry_id, "indoor"),
            TemperatureSensor(coordinator, entry.entry_id, "outdoor"),
            CoolingSensor(coordinator, entry.entry_id),
        ]
    )


class FreeCoolingEntity(CoordinatorEntity[FreeCoolingCoordinator], SensorEntity):
    """Base entity fed by the last control cycle."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: FreeCoolingCoordinator,
        entry_id: str,
        key: str,
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry_id}_{key}"
        self._attr_translation_key = key


class TemperatureSensor(FreeCoolingEntity):
    """Indoor or outdoor temperature used by the last cycle."""

    _attr_device_class = SensorDeviceClass.TEMPERATURE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfTemperature.CELSIUS

    def __init__(
        self,
        coordinator: FreeCoolingCoordinator,
        entry_id: str,
        source: str,
    ) -> None:
        """Initialize the sensor for the "indoor" or "outdoor" reading."""
        super().__init__(coordinator, entry_id, f"{source}_temperature")
        self._source = source

    @property
    def _reading(self) -> TemperatureReading | None:
        if self.coordinator.data is None:
            return None
        return getattr(self.coordinator.data, self._source)

    @property
    def native_value(self) -> float | None:
        """Return the temperature in Celsius."""
        reading = self._reading
        return reading.celsius if reading else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return when the reading was observed and how old it is."""
        reading = self._reading
        if reading is None:
            return {}
        return {
            "observed_at": datetime.fromtimestamp(
                reading.observed_at / 1000, tz=UTC
            ).isoformat(),
            "age_minutes": reading.age_minutes(now_ms()),
        }


class CoolingSensor(FreeCoolingEntity):
    """Switch state decided by the last cycle."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [STATE_COOLING, STATE_IDLE]

    def __init__(self, coordinator: FreeCoolingCoordinator, entry_id: str) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry_id, "cooling")

    @property
    def native_value(self) -> str | None:
        """Return whether the last cycle asked for cooling."""
        if self.coordinator.data is None:
            return None
        return STATE_COOLING if self.coordinator.data.desired_state else STATE_IDLE

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return whether the last cycle sent a command."""
        if self.coordinator.data is None:
            return {}
        return {"command_sent": self.coordinator.data.command_sent}
