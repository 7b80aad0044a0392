# File: coordinator.py
"""Coordinator for the Bloom integration.

The coordinator owns the current user state and is its single writer. Every
change goes through async_dispatch(), which runs the pure StateEngine reducer,
swaps the result in, persists it and notifies entities. Asynchronous workflows
(directory lookups, estimation) live in managers and apply their results by
dispatching a new event, never by writing captured state.
"""

from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const, data_builders as db
from .engines import ReduceResult, StateEngine
from .helpers.directory_client import MockDirectoryClient
from .helpers.entity_helpers import get_event_signal
from .managers import InsightManager, SocialManager
from .storage_manager import BloomStorageManager, normalize_state
from .type_defs import (
    FoodLogData,
    FriendProfile,
    GroupData,
    HabitData,
    PlantData,
    UserSnapshot,
)
from .utils.dt_utils import dt_today_iso


class BloomDataCoordinator(DataUpdateCoordinator):
    """Coordinator for Bloom integration.

    Holds the whole UserState dict. Readers use the typed properties; writers
    use async_dispatch().
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        storage_manager: BloomStorageManager,
        directory: MockDirectoryClient | None = None,
    ):
        """Initialize the BloomDataCoordinator."""
        super().__init__(
            hass,
            const.LOGGER,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=None,
        )
        self.config_entry = config_entry
        self.storage_manager = storage_manager
        self._data: dict[str, Any] = {}

        self.social_manager = SocialManager(hass, self, directory)
        self.insight_manager = InsightManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Properties for Easy Access
    # -------------------------------------------------------------------------------------

    @property
    def state(self) -> dict[str, Any]:
        """Return the current user state."""
        return self._data

    @property
    def user_name(self) -> str:
        """Return the user's display name."""
        return self._data.get(const.DATA_NAME, "")

    @property
    def friend_code(self) -> str:
        """Return the user's friend code."""
        return self._data.get(const.DATA_FRIEND_CODE, "")

    @property
    def plant(self) -> PlantData:
        """Return the plant state."""
        return self._data.get(const.DATA_PLANT, {})

    @property
    def habits(self) -> list[HabitData]:
        """Return the habit list (stored order)."""
        return self._data.get(const.DATA_HABITS, [])

    @property
    def food_logs(self) -> list[FoodLogData]:
        """Return the food log list."""
        return self._data.get(const.DATA_FOOD_LOGS, [])

    @property
    def friends(self) -> list[FriendProfile]:
        """Return the friend list."""
        return self._data.get(const.DATA_FRIENDS, [])

    @property
    def groups(self) -> list[GroupData]:
        """Return the joined groups."""
        return self._data.get(const.DATA_GROUPS, [])

    @property
    def snapshot(self) -> UserSnapshot:
        """Return a deep copy of the user's shareable snapshot."""
        return db.build_snapshot(self._data)

    # -------------------------------------------------------------------------------------
    # Setup and Refresh
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self):
        """Return the in-memory state (no polling source)."""
        return self._data

    async def async_config_entry_first_refresh(self):
        """Load from storage, apply onboarding, run session start."""
        today = dt_today_iso()
        self._data = dict(normalize_state(self.storage_manager.get_data(), today))

        if not self._data.get(const.DATA_ONBOARDING_COMPLETE):
            name = str(self.config_entry.data.get(const.CONF_USER_NAME) or "").strip()
            if name:
                const.LOGGER.info("INFO: Completing onboarding for %s", name)
                self._apply(
                    const.EVENT_COMPLETE_ONBOARDING,
                    {
                        const.PAYLOAD_NAME: name,
                        const.PAYLOAD_FRIEND_CODE: self.config_entry.data.get(
                            const.CONF_FRIEND_CODE
                        ),
                    },
                    today,
                )

        # Decay runs once per session, before any user event
        self._apply(const.EVENT_SESSION_START, None, today)

        self._persist()
        await super().async_config_entry_first_refresh()

        await self.social_manager.async_setup()
        await self.insight_manager.async_setup()

    # -------------------------------------------------------------------------------------
    # Single Writer
    # -------------------------------------------------------------------------------------

    def _apply(
        self, event: str, payload: dict[str, Any] | None, today: str
    ) -> ReduceResult:
        result = StateEngine.reduce(self._data, event, payload, today)  # type: ignore[arg-type]
        self._data = dict(result.state)
        const.LOGGER.debug(
            "DEBUG: Applied event '%s' (completed=%s, uncompleted=%s, all_done=%s)",
            event,
            result.ledger.was_just_completed,
            result.ledger.was_just_uncompleted,
            result.all_completed_today,
        )
        return result

    @callback
    def async_dispatch(
        self, event: str, payload: dict[str, Any] | None = None
    ) -> ReduceResult:
        """Apply one event to the current state, persist and notify.

        Raises:
            ValueError: Unknown event type.
        """
        today = dt_today_iso()
        result = self._apply(event, payload, today)
        self._persist()
        self.async_set_updated_data(self._data)
        if result.all_completed_today:
            const.LOGGER.info("INFO: All habits completed for %s", today)
            self._emit(const.SIGNAL_SUFFIX_ALL_HABITS_COMPLETED, date=today)
        return result

    def _emit(self, suffix: str, **payload: Any) -> None:
        signal = get_event_signal(self.config_entry.entry_id, suffix)
        async_dispatcher_send(self.hass, signal, payload)

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    def _persist(self):
        """Save to persistent storage."""
        self.storage_manager.set_data(self._data)
        self.hass.add_job(self.storage_manager.async_save)
