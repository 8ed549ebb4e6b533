"""Tests for Tuya Free Cooling setup, unload and services."""

from typing import Any
from unittest.mock import AsyncMock, Mock, patch

import pytest
from homeassistant.const import CONF_SCAN_INTERVAL
from homeassistant.core import SupportsResponse
from homeassistant.exceptions import ConfigEntryNotReady, HomeAssistantError

from custom_components.tuya_free_cooling import (
    PLATFORMS,
    async_setup_entry,
    async_unload_entry,
)
from custom_components.tuya_free_cooling.const import (
    CONF_ACCESS_KEY,
    CONF_REGION,
    CONF_SECRET_KEY,
    DOMAIN,
    SERVICE_CHECK,
    SERVICE_GET_STATUS,
    TUYA_ENDPOINTS,
)

from .conftest import ACCESS_KEY, SECRET_KEY

MODULE = "custom_components.tuya_free_cooling"


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    hass = Mock()
    hass.data = {}
    hass.services.has_service = Mock(return_value=False)
    hass.config_entries.async_forward_entry_setups = AsyncMock()
    hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    return hass


@pytest.fixture
def mock_config_entry() -> Mock:
    """Create a mock config entry for testing."""
    entry = Mock()
    entry.entry_id = "test_entry_id"
    entry.data = {
        CONF_ACCESS_KEY: ACCESS_KEY,
        CONF_SECRET_KEY: SECRET_KEY,
        CONF_REGION: "eu",
        CONF_SCAN_INTERVAL: 120,
    }
    return entry


@pytest.fixture
def mock_coordinator() -> Mock:
    """Create a mock coordinator."""
    coordinator = Mock()
    coordinator.async_config_entry_first_refresh = AsyncMock()
    coordinator.async_run_cycle = AsyncMock()
    coordinator.async_get_status = AsyncMock(return_value={"summary": "ok"})
    return coordinator


def registered_handler(hass: Mock, service: str) -> Any:  # noqa: ANN401
    """Return the handler registered for a service."""
    for call in hass.services.async_register.call_args_list:
        if call.args[1] == service:
            return call.args[2]
    msg = f"Service {service} not registered"
    raise AssertionError(msg)


async def setup_entry(
    hass: Mock, entry: Mock, coordinator: Mock
) -> tuple[bool, Mock, Mock]:
    """Set up an entry with remote calls patched."""
    with (
        patch(f"{MODULE}.create_session_client") as mock_create,
        patch(
            f"{MODULE}.FreeCoolingCoordinator", return_value=coordinator
        ) as mock_coordinator_cls,
    ):
        result = await async_setup_entry(hass, entry)
    return result, mock_create, mock_coordinator_cls


class TestAsyncSetupEntry:
    """Tests for async_setup_entry function."""

    @pytest.mark.asyncio
    async def test_async_setup_entry_success(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that setup stores the coordinator and forwards platforms."""
        result, mock_create, mock_coordinator_cls = await setup_entry(
            mock_hass, mock_config_entry, mock_coordinator
        )

        assert result is True
        mock_create.assert_called_once_with(mock_hass, TUYA_ENDPOINTS["eu"])
        mock_coordinator_cls.assert_called_once_with(
            mock_hass,
            mock_create.return_value,
            mock_config_entry,
            update_interval=120,
        )
        mock_coordinator.async_config_entry_first_refresh.assert_awaited_once()
        assert mock_hass.data[DOMAIN]["test_entry_id"] == {
            "session": mock_create.return_value,
            "coordinator": mock_coordinator,
        }
        mock_hass.config_entries.async_forward_entry_setups.assert_awaited_once_with(
            mock_config_entry, PLATFORMS
        )

    @pytest.mark.asyncio
    async def test_async_setup_entry_registers_services(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that both services are registered once."""
        await setup_entry(mock_hass, mock_config_entry, mock_coordinator)

        registered = {
            call.args[1]: call.kwargs
            for call in mock_hass.services.async_register.call_args_list
        }
        assert set(registered) == {SERVICE_CHECK, SERVICE_GET_STATUS}
        assert (
            registered[SERVICE_GET_STATUS]["supports_response"]
            == SupportsResponse.ONLY
        )

    @pytest.mark.asyncio
    async def test_async_setup_entry_skips_registered_services(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that services registered by another entry are kept."""
        mock_hass.services.has_service.return_value = True
        await setup_entry(mock_hass, mock_config_entry, mock_coordinator)
        mock_hass.services.async_register.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_setup_entry_missing_credentials(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
    ) -> None:
        """Test that setup fails without credentials."""
        del mock_config_entry.data[CONF_SECRET_KEY]
        with patch(f"{MODULE}.create_session_client") as mock_create:
            result = await async_setup_entry(mock_hass, mock_config_entry)
        assert result is False
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_setup_entry_not_ready_when_first_cycle_fails(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that a failed first cycle defers setup without storing data."""
        mock_coordinator.async_config_entry_first_refresh.side_effect = (
            ConfigEntryNotReady("Authentication error: sign invalid")
        )
        with pytest.raises(ConfigEntryNotReady, match="sign invalid"):
            await setup_entry(mock_hass, mock_config_entry, mock_coordinator)

        assert DOMAIN not in mock_hass.data
        mock_hass.services.async_register.assert_not_called()
        mock_hass.config_entries.async_forward_entry_setups.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_setup_entry_platform_failure(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that a failing platform setup fails the entry."""
        mock_hass.config_entries.async_forward_entry_setups.side_effect = (
            RuntimeError("platform")
        )
        result, _, _ = await setup_entry(
            mock_hass, mock_config_entry, mock_coordinator
        )
        assert result is False


class TestServices:
    """Tests for the check and get_status services."""

    @pytest.mark.asyncio
    async def test_check_runs_cycle(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that check runs a cycle on the only entry."""
        await setup_entry(mock_hass, mock_config_entry, mock_coordinator)
        handler = registered_handler(mock_hass, SERVICE_CHECK)

        await handler(Mock(data={}))

        mock_coordinator.async_run_cycle.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_status_returns_status(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that get_status returns the coordinator status."""
        await setup_entry(mock_hass, mock_config_entry, mock_coordinator)
        handler = registered_handler(mock_hass, SERVICE_GET_STATUS)

        result = await handler(Mock(data={"entry_id": "test_entry_id"}))

        assert result == {"summary": "ok"}

    @pytest.mark.asyncio
    async def test_service_rejects_unknown_entry(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that an unknown entry id raises HomeAssistantError."""
        await setup_entry(mock_hass, mock_config_entry, mock_coordinator)
        handler = registered_handler(mock_hass, SERVICE_CHECK)

        with pytest.raises(HomeAssistantError, match="Unknown entry"):
            await handler(Mock(data={"entry_id": "other"}))

    @pytest.mark.asyncio
    async def test_service_requires_entry_id_with_several_entries(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_coordinator: Mock,
    ) -> None:
        """Test that an entry id is required when several entries exist."""
        await setup_entry(mock_hass, mock_config_entry, mock_coordinator)
        mock_hass.data[DOMAIN]["second_entry_id"] = {"coordinator": Mock()}
        handler = registered_handler(mock_hass, SERVICE_GET_STATUS)

        with pytest.raises(HomeAssistantError, match="Expected exactly 1 entry"):
            await handler(Mock(data={}))


class TestAsyncUnloadEntry:
    """Tests for async_unload_entry function."""

    @pytest.mark.asyncio
    async def test_async_unload_entry_removes_data_and_services(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
    ) -> None:
        """Test that unloading the last entry removes the services."""
        mock_hass.data[DOMAIN] = {"test_entry_id": {"coordinator": Mock()}}

        result = await async_unload_entry(mock_hass, mock_config_entry)

        assert result is True
        assert mock_hass.data[DOMAIN] == {}
        removed = {call.args[1] for call in mock_hass.services.async_remove.call_args_list}
        assert removed == {SERVICE_CHECK, SERVICE_GET_STATUS}

    @pytest.mark.asyncio
    async def test_async_unload_entry_keeps_services_for_other_entries(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
    ) -> None:
        """Test that services stay while other entries are loaded."""
        mock_hass.data[DOMAIN] = {
            "test_entry_id": {"coordinator": Mock()},
            "second_entry_id": {"coordinator": Mock()},
        }

        result = await async_unload_entry(mock_hass, mock_config_entry)

        assert result is True
        assert list(mock_hass.data[DOMAIN]) == ["second_entry_id"]
        mock_hass.services.async_remove.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_unload_entry_platform_failure(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
    ) -> None:
        """Test that a failed platform unload keeps the entry data."""
        mock_hass.data[DOMAIN] = {"test_entry_id": {"coordinator": Mock()}}
        mock_hass.config_entries.async_unload_platforms.return_value = False

        result = await async_unload_entry(mock_hass, mock_config_entry)

        assert result is False
        assert "test_entry_id" in mock_hass.data[DOMAIN]
