"""Diagnostics support for Bloom integration.

The diagnostics JSON returns the raw storage data, identical to the
bloom_app_data file, so it can be used directly for troubleshooting.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import BloomDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry.

    Returns the raw storage data directly. The API key lives in the entry
    options and is never part of it.
    """
    coordinator: BloomDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    return coordinator.storage_manager.data
