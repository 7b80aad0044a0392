"""Base manager class for Bloom managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import BloomDataCoordinator


class BaseManager(ABC):
    """Base class for all Bloom managers with scoped event support.

    Managers run the asynchronous workflows (directory lookups, estimation)
    and never write coordinator data directly: results go back through
    coordinator.async_dispatch() so the reducer sees the current state.
    """

    def __init__(self, hass: HomeAssistant, coordinator: BloomDataCoordinator) -> None:
        """Bind the manager to its coordinator and config entry."""
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    def emit(self, suffix: str, **payload: Any) -> None:
        """Send a Bloom signal for this config entry (payload as one dict)."""
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "DEBUG: Emitting event '%s' for instance %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Connect a handler to a Bloom signal until the entry unloads.

        Handlers receive the payload dict; sync and async handlers both work.
        """
        signal = get_event_signal(self.entry_id, suffix)
        unsub = async_dispatcher_connect(self.hass, signal, callback)
        self.coordinator.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "DEBUG: Manager %s listening to event '%s' for instance %s",
            self.__class__.__name__,
            suffix,
            self.entry_id,
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager (subscribe to events, initialize state).

        Called once during coordinator first refresh.
        """
