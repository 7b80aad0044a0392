"""Shared fixtures for Bloom tests."""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.bloom import const
from custom_components.bloom.helpers.directory_client import MockDirectoryClient
from tests.helpers import (
    FRIEND_CODE,
    make_boolean_habit,
    make_numeric_habit,
    make_plant,
    make_state,
)

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

ENTRY_ID = "test_entry_id"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry for an onboarded user."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title="Ada",
        data={
            const.CONF_USER_NAME: "Ada",
            const.CONF_FRIEND_CODE: FRIEND_CODE,
        },
        options={},
        entry_id=ENTRY_ID,
        unique_id=const.DOMAIN,
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return stored state with one boolean, one water and one calorie habit.

    The last interaction date is left empty so session start does not decay
    the plant regardless of the test clock.
    """
    return make_state(
        plant=make_plant(last_interaction_date=None),
        habits=[
            make_boolean_habit("h_meditate", title="Meditate"),
            make_numeric_habit("h_water", title="Drink Water", target=8),
            make_numeric_habit(
                "h_calories",
                title="Calorie Goal",
                target=1800,
                max_target=2200,
                unit="kcal",
            ),
        ],
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_storage_data: dict[str, Any],
) -> AsyncGenerator[MockConfigEntry, None]:
    """Set up the integration with stored data and an instant directory."""
    mock_config_entry.add_to_hass(hass)

    with (
        patch(
            "homeassistant.helpers.storage.Store.async_load",
            return_value=mock_storage_data,
        ),
        patch(
            "custom_components.bloom.managers.social_manager.MockDirectoryClient",
            side_effect=lambda: MockDirectoryClient(latency=0),
        ),
    ):
        await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    yield mock_config_entry


@pytest.fixture
def coordinator(hass: HomeAssistant, init_integration: MockConfigEntry):
    """Return the coordinator of the set-up entry."""
    return hass.data[const.DOMAIN][init_integration.entry_id][const.COORDINATOR]
