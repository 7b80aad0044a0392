# File: sensor.py
"""Sensors for the Bloom integration.

Sensors Defined in This File (5):

# Plant Sensors (3)
01. PlantStageSensor
02. PlantHealthSensor
03. PlantExperienceSensor

# Tracking Sensors (2)
04. CaloriesTodaySensor
05. HabitStreakSensor (one per habit, added as habits appear)
"""

from __future__ import annotations

import math
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import BloomDataCoordinator
from .engines import FoodEngine, HabitEngine, ProgressionEngine, StatisticsEngine
from .entity import BloomCoordinatorEntity
from .helpers.device_helpers import create_plant_device_info
from .helpers.entity_helpers import get_event_signal
from .utils.dt_utils import dt_today_iso
from .utils.math_utils import round_value


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
):
    """Set up sensors for Bloom integration."""
    coordinator: BloomDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    entities: list[SensorEntity] = [
        PlantStageSensor(coordinator, entry),
        PlantHealthSensor(coordinator, entry),
        PlantExperienceSensor(coordinator, entry),
        CaloriesTodaySensor(coordinator, entry),
    ]

    known_habit_ids: set[str] = set()
    for habit in coordinator.habits:
        habit_id = habit[const.DATA_HABIT_ID]
        known_habit_ids.add(habit_id)
        entities.append(HabitStreakSensor(coordinator, entry, habit_id))

    async_add_entities(entities)

    @callback
    def _async_add_new_habit_sensors() -> None:
        """Add a streak sensor for every habit created since setup."""
        current_ids = {h[const.DATA_HABIT_ID] for h in coordinator.habits}
        known_habit_ids.intersection_update(current_ids)
        new_ids = [i for i in current_ids if i not in known_habit_ids]
        if not new_ids:
            return
        known_habit_ids.update(new_ids)
        const.LOGGER.debug("DEBUG: Adding streak sensors for habits %s", new_ids)
        async_add_entities(
            [HabitStreakSensor(coordinator, entry, habit_id) for habit_id in new_ids]
        )

    entry.async_on_unload(coordinator.async_add_listener(_async_add_new_habit_sensors))


# ------------------------------------------------------------------------------------------
class PlantStageSensor(BloomCoordinatorEntity, SensorEntity):
    """Sensor for the plant's growth stage.

    Carries the full plant picture as attributes (experience, level, health,
    progress toward the next stage) plus the latest motivation message.
    """

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_PLANT_STAGE
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = list(const.PLANT_STAGES)

    def __init__(self, coordinator: BloomDataCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_PLANT_STAGE}"
        self._attr_device_info = create_plant_device_info(entry)

    async def async_added_to_hass(self) -> None:
        """Refresh state when a new motivation message arrives."""
        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                get_event_signal(
                    self._entry.entry_id, const.SIGNAL_SUFFIX_MOTIVATION_UPDATED
                ),
                self._handle_motivation_update,
            )
        )

    @callback
    def _handle_motivation_update(self, _payload: dict[str, Any]) -> None:
        self.async_write_ha_state()

    @property
    def native_value(self) -> str | None:
        """Return the plant stage."""
        return self.coordinator.plant.get(const.DATA_PLANT_STAGE)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return experience, level, health and stage progress."""
        plant = self.coordinator.plant
        stage = plant.get(const.DATA_PLANT_STAGE, const.PLANT_STAGE_SEED)
        experience = plant.get(const.DATA_PLANT_EXPERIENCE, const.DEFAULT_ZERO)
        threshold = ProgressionEngine.get_threshold(stage)
        return {
            const.ATTR_EXPERIENCE: experience,
            const.ATTR_LEVEL: plant.get(const.DATA_PLANT_LEVEL),
            const.ATTR_HEALTH: plant.get(const.DATA_PLANT_HEALTH),
            const.ATTR_STAGE_PROGRESS: ProgressionEngine.stage_progress_percent(
                experience, stage
            ),
            const.ATTR_NEXT_STAGE_THRESHOLD: None
            if math.isinf(threshold)
            else threshold,
            const.ATTR_LAST_INTERACTION_DATE: plant.get(
                const.DATA_PLANT_LAST_INTERACTION_DATE
            ),
            const.ATTR_FRIEND_CODE: self.coordinator.friend_code,
            const.ATTR_MOTIVATION: self.coordinator.insight_manager.motivation,
        }


# ------------------------------------------------------------------------------------------
class PlantHealthSensor(BloomCoordinatorEntity, SensorEntity):
    """Sensor for the plant's health (thriving, wilting, withered, dead)."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_PLANT_HEALTH
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = list(const.PLANT_HEALTH_STATES)

    def __init__(self, coordinator: BloomDataCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_PLANT_HEALTH}"
        self._attr_device_info = create_plant_device_info(entry)

    @property
    def native_value(self) -> str | None:
        """Return the plant health."""
        return self.coordinator.plant.get(const.DATA_PLANT_HEALTH)


# ------------------------------------------------------------------------------------------
class PlantExperienceSensor(BloomCoordinatorEntity, SensorEntity):
    """Sensor for the plant's accumulated experience."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_PLANT_EXPERIENCE
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, coordinator: BloomDataCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_PLANT_EXPERIENCE}"
        )
        self._attr_device_info = create_plant_device_info(entry)

    @property
    def native_value(self) -> float:
        """Return the plant experience."""
        return self.coordinator.plant.get(
            const.DATA_PLANT_EXPERIENCE, const.DEFAULT_ZERO
        )


# ------------------------------------------------------------------------------------------
class CaloriesTodaySensor(BloomCoordinatorEntity, SensorEntity):
    """Sensor for calories logged today.

    The calorie habit (first numeric habit measured in kcal or named after
    calories) is reported as an attribute along with today's food logs.
    """

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_CALORIES_TODAY
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = const.CALORIE_HABIT_UNIT

    def __init__(self, coordinator: BloomDataCoordinator, entry: ConfigEntry):
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = (
            f"{entry.entry_id}{const.SENSOR_UID_SUFFIX_CALORIES_TODAY}"
        )
        self._attr_device_info = create_plant_device_info(entry)

    @property
    def native_value(self) -> float:
        """Return the sum of today's food log calories."""
        return StatisticsEngine.calories_logged(self.coordinator.food_logs, dt_today_iso())

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return today's food logs and the calorie habit status."""
        today = dt_today_iso()
        habit = FoodEngine.find_calorie_habit(self.coordinator.habits)
        attributes: dict[str, Any] = {
            const.ATTR_FOOD_LOGS_TODAY: [
                {
                    const.DATA_FOOD_LOG_NAME: log.get(const.DATA_FOOD_LOG_NAME),
                    const.DATA_FOOD_LOG_CALORIES: log.get(const.DATA_FOOD_LOG_CALORIES),
                }
                for log in StatisticsEngine.food_logs_for_date(
                    self.coordinator.food_logs, today
                )
            ],
            const.ATTR_CALORIE_HABIT_ID: None,
        }
        if habit is not None:
            attributes[const.ATTR_CALORIE_HABIT_ID] = habit[const.DATA_HABIT_ID]
            attributes[const.ATTR_PROGRESS_TODAY] = round_value(
                HabitEngine.progress_on(habit, today)
            )
            attributes[const.ATTR_STATUS_TODAY] = HabitEngine.numeric_status(habit, today)
        return attributes


# ------------------------------------------------------------------------------------------
class HabitStreakSensor(BloomCoordinatorEntity, SensorEntity):
    """Sensor for one habit's streak, with today's progress as attributes."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_HABIT_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self, coordinator: BloomDataCoordinator, entry: ConfigEntry, habit_id: str
    ):
        """Initialize the sensor.

        Args:
            coordinator: BloomDataCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            habit_id: Id of the tracked habit.
        """
        super().__init__(coordinator)
        self._habit_id = habit_id
        habit = HabitEngine.find_habit(coordinator.habits, habit_id) or {}
        self._attr_unique_id = (
            f"{entry.entry_id}_{habit_id}{const.SENSOR_UID_SUFFIX_HABIT_STREAK}"
        )
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_HABIT_TITLE: habit.get(
                const.DATA_HABIT_TITLE, habit_id
            ),
        }
        self._attr_device_info = create_plant_device_info(entry)

    @property
    def available(self) -> bool:
        """Unavailable once the habit is gone."""
        return (
            super().available
            and HabitEngine.find_habit(self.coordinator.habits, self._habit_id)
            is not None
        )

    @property
    def native_value(self) -> int | None:
        """Return the habit streak."""
        habit = HabitEngine.find_habit(self.coordinator.habits, self._habit_id)
        if habit is None:
            return None
        return habit.get(const.DATA_HABIT_STREAK, const.DEFAULT_ZERO)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the habit definition and today's progress."""
        habit = HabitEngine.find_habit(self.coordinator.habits, self._habit_id)
        if habit is None:
            return {const.ATTR_HABIT_ID: self._habit_id}
        today = dt_today_iso()
        completed = HabitEngine.is_completed_on(habit, today)
        if habit.get(const.DATA_HABIT_KIND) == const.HABIT_KIND_NUMERIC:
            status = HabitEngine.numeric_status(habit, today)
        else:
            status = (
                const.HABIT_STATUS_MET if completed else const.HABIT_STATUS_NOT_MET
            )
        return {
            const.ATTR_HABIT_ID: self._habit_id,
            const.ATTR_HABIT_KIND: habit.get(const.DATA_HABIT_KIND),
            const.ATTR_TARGET: habit.get(const.DATA_HABIT_TARGET),
            const.ATTR_MAX_TARGET: habit.get(const.DATA_HABIT_MAX_TARGET),
            const.ATTR_UNIT: habit.get(const.DATA_HABIT_UNIT),
            const.ATTR_PROGRESS_TODAY: round_value(HabitEngine.progress_on(habit, today)),
            const.ATTR_STATUS_TODAY: status,
            const.ATTR_COMPLETED_TODAY: completed,
        }
