"""Insight Manager - Estimation and motivation workflows.

Wraps the estimation service for the three AI-assisted features:
- Estimate a numeric value (usually calories) from free text
- Estimate food name and calories from a photo
- Keep a short motivational message from the plant

The motivation message is refreshed at setup and whenever the last habit of
the day is completed (ALL_HABITS_COMPLETED). Estimates are returned to the
caller only; they are never written into state by this manager.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const
from ..helpers.estimation_client import GeminiEstimationClient
from ..utils.dt_utils import dt_today_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import BloomDataCoordinator
    from ..type_defs import FoodEstimate


class InsightManager(BaseManager):
    """Manager for estimation requests and the plant's motivation message."""

    def __init__(self, hass: HomeAssistant, coordinator: BloomDataCoordinator) -> None:
        """Initialize the insight manager."""
        super().__init__(hass, coordinator)
        self.motivation: str | None = None

    @property
    def client(self) -> GeminiEstimationClient:
        """Build a client from the current options so key changes apply at once."""
        entry = self.coordinator.config_entry
        api_key = entry.options.get(const.CONF_API_KEY) or entry.data.get(
            const.CONF_API_KEY
        )
        return GeminiEstimationClient(self.hass, api_key)

    async def async_setup(self) -> None:
        """Subscribe to completion events and fetch the first message."""
        self.listen(
            const.SIGNAL_SUFFIX_ALL_HABITS_COMPLETED, self._on_all_habits_completed
        )
        self.coordinator.config_entry.async_create_task(
            self.hass, self.async_refresh_motivation()
        )

    async def _on_all_habits_completed(self, payload: dict[str, Any]) -> None:
        const.LOGGER.debug(
            "DEBUG: All habits completed for %s, refreshing motivation",
            payload.get(const.PAYLOAD_DATE),
        )
        await self.async_refresh_motivation()

    async def async_refresh_motivation(self) -> str:
        """Fetch a new message from the plant and notify listeners."""
        message = await self.client.get_motivational_message(
            self.coordinator.plant,
            self.coordinator.habits,
            self.coordinator.user_name,
            dt_today_iso(),
        )
        self.motivation = message
        self.emit(const.SIGNAL_SUFFIX_MOTIVATION_UPDATED, message=message)
        return message

    async def estimate_metric(self, description: str, unit: str) -> int | None:
        """Estimate a value for free text in a unit (None when unavailable)."""
        value = await self.client.estimate_metric(description, unit)
        const.LOGGER.debug(
            "DEBUG: Estimated %r in %s -> %s", description, unit, value
        )
        return value

    async def analyze_food_image(self, image_path: str) -> FoodEstimate | None:
        """Estimate the food shown in an image file.

        Raises:
            HomeAssistantError: Image file cannot be read.
        """
        path = Path(image_path)
        try:
            image_bytes = await self.hass.async_add_executor_job(path.read_bytes)
        except OSError as err:
            const.LOGGER.error("ERROR: Failed to read image %s: %s", image_path, err)
            raise HomeAssistantError(
                const.MSG_IMAGE_READ_ERROR.format(path=image_path)
            ) from err
        return await self.client.analyze_image(image_bytes)
