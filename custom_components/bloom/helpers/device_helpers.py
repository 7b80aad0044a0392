# File: helpers/device_helpers.py
"""Device registry helper functions for Bloom.

Functions that construct DeviceInfo objects for Home Assistant's device registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_plant_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info for the user's plant.

    All Bloom entities of one config entry hang off this single device.
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=f"{config_entry.title} Plant",
        manufacturer=const.BLOOM_TITLE,
        model="Habit Plant",
        entry_type=DeviceEntryType.SERVICE,
    )
