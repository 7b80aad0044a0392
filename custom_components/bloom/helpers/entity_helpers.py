# File: helpers/entity_helpers.py
"""Entity registry and signal helper functions for Bloom.

Functions that build instance-scoped dispatcher signals and interact with
Home Assistant's entity registry.

All functions here require a `hass` object or interact with HA registries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.entity_registry import (
    async_entries_for_config_entry,
    async_get as async_get_entity_registry,
)

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'bloom_{entry_id}_{suffix}'

    Args:
        entry_id: ConfigEntry.entry_id from coordinator
        suffix: Signal suffix constant from const.py (e.g., SIGNAL_SUFFIX_ALL_HABITS_COMPLETED)

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_ALL_HABITS_COMPLETED)
        'bloom_abc123_all_habits_completed'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Entity Registry Cleanup
# ==============================================================================


def remove_entities_by_item_id(
    hass: HomeAssistant,
    entry_id: str,
    item_id: str,
) -> int:
    """Remove all entities whose unique_id references the given item_id.

    Called when deleting habits. Uses delimiter matching so that one id never
    matches a longer id that merely starts with it.

    Args:
        hass: HomeAssistant instance.
        entry_id: Config entry ID prefix for unique_id matching.
        item_id: The id of the deleted item.

    Returns:
        Count of removed entities.
    """
    ent_reg = async_get_entity_registry(hass)
    prefix = f"{entry_id}_"
    item_id_str = str(item_id)
    removed_count = 0

    for entity_entry in async_entries_for_config_entry(ent_reg, entry_id):
        unique_id = str(entity_entry.unique_id)
        if not unique_id.startswith(prefix):
            continue

        if f"_{item_id_str}_" in unique_id or unique_id.endswith(f"_{item_id_str}"):
            ent_reg.async_remove(entity_entry.entity_id)
            removed_count += 1
            const.LOGGER.debug(
                "DEBUG: Removed entity %s (uid: %s) for deleted item %s",
                entity_entry.entity_id,
                unique_id,
                item_id_str,
            )

    return removed_count
