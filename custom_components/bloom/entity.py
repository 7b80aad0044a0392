"""Base entity classes for Bloom integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import BloomDataCoordinator


class BloomCoordinatorEntity(CoordinatorEntity[BloomDataCoordinator]):
    """Base entity class for Bloom sensors with typed coordinator access."""

    @property
    def coordinator(self) -> BloomDataCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to access the private _coordinator attribute
        set by the parent CoordinatorEntity class.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: BloomDataCoordinator) -> None:
        """Set coordinator with proper typing.

        Args:
            value: The BloomDataCoordinator instance to set.
        """
        object.__setattr__(self, "_coordinator", value)
