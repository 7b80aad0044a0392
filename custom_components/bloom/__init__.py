# File: __init__.py
"""Initialization file for the Bloom integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and preparing the coordinator for data handling.

Key Features:
- Config entry setup and unload support.
- Coordinator initialization (onboarding and session start decay).
- Storage management for persistent data handling.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import BloomDataCoordinator
from .services import async_setup_services, async_unload_services
from .storage_manager import BloomStorageManager


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Bloom entry: %s", entry.entry_id)

    const.set_default_timezone(hass)

    storage_manager = BloomStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_initialize()

    coordinator = BloomDataCoordinator(hass, entry, storage_manager)

    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise ConfigEntryNotReady from e

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORAGE_MANAGER: storage_manager,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    const.LOGGER.info("INFO: Bloom setup complete for entry: %s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Bloom entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)

        await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry (deletes the storage file)."""
    const.LOGGER.info("INFO: Removing Bloom entry: %s", entry.entry_id)

    entry_data = hass.data.get(const.DOMAIN, {}).get(entry.entry_id)
    if entry_data is not None:
        storage_manager: BloomStorageManager = entry_data[const.STORAGE_MANAGER]
    else:
        storage_manager = BloomStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_delete_storage()

    const.LOGGER.info("INFO: Bloom entry data cleared: %s", entry.entry_id)
