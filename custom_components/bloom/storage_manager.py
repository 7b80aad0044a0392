# File: storage_manager.py
"""Handles persistent data storage for the Bloom integration.

Uses Home Assistant's Storage helper to save and load the single user state
blob (plant, habits, food logs, friends, groups and preferences), ensuring the
state is preserved across restarts.

Load never fails hard: partially shaped records are upgraded with defaults and
an unusable blob is replaced with a freshly initialized state.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from . import const, data_builders as db
from .type_defs import UserState


def normalize_state(raw: Any, today: str | None = None) -> UserState:
    """Upgrade a loaded blob to the current shape.

    Missing fields default: habit kind → boolean, target → 1, progress → {},
    theme → light, last_active_tab → home, friend_code → freshly generated,
    friends/groups/food_logs → []. A missing plant becomes a fresh seed.
    Anything that is not a mapping yields a fresh, not-yet-onboarded state.
    """
    if not isinstance(raw, dict):
        return db.build_user_state(today=today)

    state: dict[str, Any] = dict(raw)
    state[const.DATA_SCHEMA_VERSION] = const.SCHEMA_VERSION_CURRENT
    state[const.DATA_NAME] = str(state.get(const.DATA_NAME) or "")
    if not state.get(const.DATA_FRIEND_CODE):
        state[const.DATA_FRIEND_CODE] = db.generate_friend_code()
    state[const.DATA_ONBOARDING_COMPLETE] = bool(
        state.get(const.DATA_ONBOARDING_COMPLETE, bool(state[const.DATA_NAME]))
    )
    if state.get(const.DATA_THEME) not in const.THEMES:
        state[const.DATA_THEME] = const.DEFAULT_THEME
    if state.get(const.DATA_LAST_ACTIVE_TAB) not in const.TABS:
        state[const.DATA_LAST_ACTIVE_TAB] = const.DEFAULT_LAST_ACTIVE_TAB

    state[const.DATA_PLANT] = db.normalize_plant(state.get(const.DATA_PLANT), today)
    state[const.DATA_HABITS] = [
        db.normalize_habit(habit)
        for habit in state.get(const.DATA_HABITS) or []
        if isinstance(habit, dict)
    ]
    for key in (const.DATA_FOOD_LOGS, const.DATA_FRIENDS, const.DATA_GROUPS):
        value = state.get(key)
        if not isinstance(value, list):
            value = []
        state[key] = [item for item in value if isinstance(item, dict)]

    return state  # type: ignore[return-value]


class BloomStorageManager:
    """Manages loading, saving, and accessing data from Home Assistant's storage."""

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the storage manager.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}  # In-memory data cache for quick access.

    def _get_default_structure(self) -> dict[str, Any]:
        """Get the default, not-yet-onboarded state."""
        return dict(db.build_user_state())

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, or the stored blob is unusable, initializes with a
        fresh structure.
        """
        const.LOGGER.debug("DEBUG: BloomStorageManager: Loading data from storage")
        try:
            existing_data = await self._store.async_load()
        except (HomeAssistantError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to read storage %s: %s. Starting with fresh data",
                self._storage_key,
                err,
            )
            existing_data = None

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = self._get_default_structure()
            return

        if not isinstance(existing_data, dict):
            const.LOGGER.warning(
                "WARNING: Stored data has unexpected type %s. Starting with fresh data",
                type(existing_data).__name__,
            )
            self._data = self._get_default_structure()
            return

        self._data = dict(normalize_state(existing_data))
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "habits": len(self._data[const.DATA_HABITS]),
                "food_logs": len(self._data[const.DATA_FOOD_LOGS]),
                "friends": len(self._data[const.DATA_FRIENDS]),
                "groups": len(self._data[const.DATA_GROUPS]),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def get_data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure (full overwrite)."""
        const.LOGGER.debug(
            "DEBUG: Storage manager set_data called with %s habits",
            len(new_data.get(const.DATA_HABITS, [])),
        )
        self._data = new_data

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Raises:
            No exceptions raised - errors are logged but do not stop execution.
            OSError: Logged when file system issues prevent saving.
            TypeError: Logged when data contains non-serializable types.
            ValueError: Logged when data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_clear_data(self) -> None:
        """Clear all stored data and reset to default structure."""
        const.LOGGER.warning("WARNING: Clearing all Bloom data and resetting storage")
        self._data = self._get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        await self.async_clear_data()

        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
