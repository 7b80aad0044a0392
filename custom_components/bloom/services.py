# File: services.py
"""Defines custom services for the Bloom integration.

These services are the automation surface: every user action of the app
(toggling habits, posting progress, logging food, managing friends and groups)
is a service call. Estimation, motivation and statistics return response data.

Validation problems (unknown habit, wrong habit kind, blank names, reviving a
live plant, adding yourself) raise ServiceValidationError before anything is
changed. Directory lookups that find nothing raise HomeAssistantError.
"""

from __future__ import annotations

import math
from typing import Any

import voluptuous as vol

from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const, data_builders as db
from .coordinator import BloomDataCoordinator
from .engines import HabitEngine, StatisticsEngine
from .helpers.entity_helpers import remove_entities_by_item_id
from .type_defs import HabitData
from .utils.dt_utils import dt_today_iso


def finite_float(value: Any) -> float:
    """Coerce to float, rejecting NaN and infinity."""
    number = vol.Coerce(float)(value)
    if not math.isfinite(number):
        raise vol.Invalid("Value must be a finite number")
    return number


# --- Service Schemas ---
TOGGLE_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.FIELD_DATE): cv.date,
    }
)

ADD_HABIT_PROGRESS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Required(const.FIELD_AMOUNT): finite_float,
        vol.Optional(const.FIELD_DATE): cv.date,
    }
)

ADD_HABIT_SCHEMA = vol.Schema(
    {
        vol.Exclusive(const.FIELD_PRESET, "habit_source"): vol.In(
            list(const.HABIT_PRESETS)
        ),
        vol.Exclusive(const.FIELD_TITLE, "habit_source"): cv.string,
        vol.Optional(const.FIELD_KIND, default=const.DEFAULT_HABIT_KIND): vol.In(
            const.HABIT_KINDS
        ),
        vol.Optional(const.FIELD_TARGET): finite_float,
        vol.Optional(const.FIELD_MAX_TARGET): vol.Any(None, finite_float),
        vol.Optional(const.FIELD_UNIT): cv.string,
    }
)

DELETE_HABIT_SCHEMA = vol.Schema({vol.Required(const.FIELD_HABIT_ID): cv.string})

LOG_FOOD_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Required(const.FIELD_CALORIES): vol.All(
            finite_float, vol.Range(min=0)
        ),
        vol.Optional(const.FIELD_DATE): cv.date,
    }
)

REVIVE_PLANT_SCHEMA = vol.Schema({})

SET_NAME_SCHEMA = vol.Schema({vol.Required(const.FIELD_NAME): cv.string})

SET_THEME_SCHEMA = vol.Schema({vol.Required(const.FIELD_THEME): vol.In(const.THEMES)})

SET_ACTIVE_TAB_SCHEMA = vol.Schema({vol.Required(const.FIELD_TAB): vol.In(const.TABS)})

ADD_FRIEND_SCHEMA = vol.Schema({vol.Required(const.FIELD_CODE): cv.string})

CREATE_GROUP_SCHEMA = vol.Schema({vol.Required(const.FIELD_NAME): cv.string})

JOIN_GROUP_SCHEMA = vol.Schema({vol.Required(const.FIELD_CODE): cv.string})

ESTIMATE_METRIC_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_UNIT, default=const.CALORIE_HABIT_UNIT): cv.string,
    }
)

ANALYZE_FOOD_IMAGE_SCHEMA = vol.Schema({vol.Required(const.FIELD_IMAGE_PATH): cv.string})

GET_MOTIVATION_SCHEMA = vol.Schema({})

GET_STATISTICS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.FIELD_DAYS, default=const.DEFAULT_WEEKLY_WINDOW_DAYS
        ): vol.All(vol.Coerce(int), vol.Range(min=1, max=31)),
    }
)


def _get_coordinator(hass: HomeAssistant) -> BloomDataCoordinator:
    """Return the coordinator of the (single) Bloom entry."""
    entries = hass.data.get(const.DOMAIN) or {}
    if not entries:
        const.LOGGER.warning("WARNING: %s", const.MSG_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    entry_id = next(iter(entries.keys()))
    return entries[entry_id][const.COORDINATOR]


def _get_habit(
    coordinator: BloomDataCoordinator, habit_id: str, kind: str | None = None
) -> HabitData:
    """Return a habit or raise a validation error (optionally checking kind)."""
    habit = HabitEngine.find_habit(coordinator.habits, habit_id)
    if habit is None:
        raise ServiceValidationError(
            const.MSG_HABIT_NOT_FOUND.format(habit_id=habit_id)
        )
    if kind is not None and habit.get(const.DATA_HABIT_KIND) != kind:
        raise ServiceValidationError(
            const.MSG_HABIT_WRONG_KIND.format(habit_id=habit_id, kind=kind)
        )
    return habit


def _date_or_none(call: ServiceCall) -> str | None:
    value = call.data.get(const.FIELD_DATE)
    return value.isoformat() if value else None


def async_setup_services(hass: HomeAssistant):
    """Register Bloom services."""

    # --- Habits ---

    async def handle_toggle_habit(call: ServiceCall) -> None:
        """Handle toggling a boolean habit for a date (default today)."""
        coordinator = _get_coordinator(hass)
        habit_id = call.data[const.FIELD_HABIT_ID]
        _get_habit(coordinator, habit_id, const.HABIT_KIND_BOOLEAN)

        result = coordinator.async_dispatch(
            const.EVENT_TOGGLE_HABIT,
            {const.PAYLOAD_HABIT_ID: habit_id, const.PAYLOAD_DATE: _date_or_none(call)},
        )
        const.LOGGER.info(
            "INFO: Toggled habit '%s' (completed=%s, uncompleted=%s)",
            habit_id,
            result.ledger.was_just_completed,
            result.ledger.was_just_uncompleted,
        )

    async def handle_add_habit_progress(call: ServiceCall) -> None:
        """Handle adding progress to a numeric habit."""
        coordinator = _get_coordinator(hass)
        habit_id = call.data[const.FIELD_HABIT_ID]
        amount = call.data[const.FIELD_AMOUNT]
        _get_habit(coordinator, habit_id, const.HABIT_KIND_NUMERIC)

        result = coordinator.async_dispatch(
            const.EVENT_ADD_HABIT_PROGRESS,
            {
                const.PAYLOAD_HABIT_ID: habit_id,
                const.PAYLOAD_AMOUNT: amount,
                const.PAYLOAD_DATE: _date_or_none(call),
            },
        )
        const.LOGGER.info(
            "INFO: Added %s to habit '%s' (completed=%s, uncompleted=%s)",
            amount,
            habit_id,
            result.ledger.was_just_completed,
            result.ledger.was_just_uncompleted,
        )

    async def handle_add_habit(call: ServiceCall) -> ServiceResponse:
        """Handle creating a habit from a preset or from custom fields."""
        coordinator = _get_coordinator(hass)
        preset = call.data.get(const.FIELD_PRESET)
        try:
            if preset:
                habit = db.build_habit_from_preset(preset)
            else:
                habit = db.build_habit(
                    {
                        const.DATA_HABIT_TITLE: call.data.get(const.FIELD_TITLE),
                        const.DATA_HABIT_KIND: call.data[const.FIELD_KIND],
                        const.DATA_HABIT_TARGET: call.data.get(const.FIELD_TARGET),
                        const.DATA_HABIT_MAX_TARGET: call.data.get(
                            const.FIELD_MAX_TARGET
                        ),
                        const.DATA_HABIT_UNIT: call.data.get(const.FIELD_UNIT),
                    }
                )
        except db.EntityValidationError as err:
            raise ServiceValidationError(err.message) from err

        coordinator.async_dispatch(const.EVENT_ADD_HABIT, {const.PAYLOAD_HABIT: habit})
        const.LOGGER.info(
            "INFO: Added habit '%s' (%s)",
            habit[const.DATA_HABIT_TITLE],
            habit[const.DATA_HABIT_ID],
        )
        return {const.RESPONSE_HABIT_ID: habit[const.DATA_HABIT_ID]}

    async def handle_delete_habit(call: ServiceCall) -> None:
        """Handle deleting a habit and its entities."""
        coordinator = _get_coordinator(hass)
        habit_id = call.data[const.FIELD_HABIT_ID]
        _get_habit(coordinator, habit_id)

        coordinator.async_dispatch(
            const.EVENT_DELETE_HABIT, {const.PAYLOAD_HABIT_ID: habit_id}
        )
        removed = remove_entities_by_item_id(
            hass, coordinator.config_entry.entry_id, habit_id
        )
        const.LOGGER.info(
            "INFO: Deleted habit '%s' (%s entities removed)", habit_id, removed
        )

    # --- Food ---

    async def handle_log_food(call: ServiceCall) -> None:
        """Handle logging a food entry (feeds the calorie habit, if any)."""
        coordinator = _get_coordinator(hass)
        try:
            entry = db.build_food_log(
                call.data[const.FIELD_NAME],
                call.data[const.FIELD_CALORIES],
                _date_or_none(call),
            )
        except db.EntityValidationError as err:
            raise ServiceValidationError(err.message) from err

        result = coordinator.async_dispatch(
            const.EVENT_LOG_FOOD, {const.PAYLOAD_FOOD_LOG: entry}
        )
        const.LOGGER.info(
            "INFO: Logged food '%s' (%s kcal, calorie habit=%s)",
            entry[const.DATA_FOOD_LOG_NAME],
            entry[const.DATA_FOOD_LOG_CALORIES],
            result.ledger.habit_id,
        )

    # --- Plant and profile ---

    async def handle_revive_plant(_call: ServiceCall) -> None:
        """Handle reviving a dead plant."""
        coordinator = _get_coordinator(hass)
        if coordinator.plant.get(const.DATA_PLANT_HEALTH) != const.PLANT_HEALTH_DEAD:
            raise ServiceValidationError(const.MSG_PLANT_NOT_DEAD)
        coordinator.async_dispatch(const.EVENT_REVIVE_PLANT)
        const.LOGGER.info("INFO: Plant revived")

    async def handle_set_name(call: ServiceCall) -> None:
        """Handle renaming the user."""
        coordinator = _get_coordinator(hass)
        name = call.data[const.FIELD_NAME].strip()
        if not name:
            raise ServiceValidationError(const.MSG_NAME_REQUIRED)
        coordinator.async_dispatch(const.EVENT_SET_NAME, {const.PAYLOAD_NAME: name})

    async def handle_set_theme(call: ServiceCall) -> None:
        """Handle setting the theme preference."""
        coordinator = _get_coordinator(hass)
        coordinator.async_dispatch(
            const.EVENT_SET_THEME, {const.PAYLOAD_THEME: call.data[const.FIELD_THEME]}
        )

    async def handle_set_active_tab(call: ServiceCall) -> None:
        """Handle remembering the last active tab."""
        coordinator = _get_coordinator(hass)
        coordinator.async_dispatch(
            const.EVENT_SET_ACTIVE_TAB, {const.PAYLOAD_TAB: call.data[const.FIELD_TAB]}
        )

    # --- Social ---

    async def handle_add_friend(call: ServiceCall) -> ServiceResponse:
        """Handle adding a friend by code."""
        coordinator = _get_coordinator(hass)
        profile = await coordinator.social_manager.add_friend(call.data[const.FIELD_CODE])
        return {const.RESPONSE_FRIEND: dict(profile)}

    async def handle_create_group(call: ServiceCall) -> ServiceResponse:
        """Handle creating a group."""
        coordinator = _get_coordinator(hass)
        group = await coordinator.social_manager.create_group(call.data[const.FIELD_NAME])
        return {const.RESPONSE_GROUP: dict(group)}

    async def handle_join_group(call: ServiceCall) -> ServiceResponse:
        """Handle joining a group by code."""
        coordinator = _get_coordinator(hass)
        group = await coordinator.social_manager.join_group(call.data[const.FIELD_CODE])
        return {const.RESPONSE_GROUP: dict(group)}

    # --- Insights ---

    async def handle_estimate_metric(call: ServiceCall) -> ServiceResponse:
        """Handle estimating a numeric value from free text."""
        coordinator = _get_coordinator(hass)
        value = await coordinator.insight_manager.estimate_metric(
            call.data[const.FIELD_DESCRIPTION], call.data[const.FIELD_UNIT]
        )
        return {const.RESPONSE_VALUE: value}

    async def handle_analyze_food_image(call: ServiceCall) -> ServiceResponse:
        """Handle estimating food and calories from an image file."""
        coordinator = _get_coordinator(hass)
        image_path = call.data[const.FIELD_IMAGE_PATH]
        if not hass.config.is_allowed_path(image_path):
            raise ServiceValidationError(
                const.MSG_IMAGE_READ_ERROR.format(path=image_path)
            )
        estimate = await coordinator.insight_manager.analyze_food_image(image_path)
        return {const.RESPONSE_FOOD: dict(estimate) if estimate else None}

    async def handle_get_motivation(_call: ServiceCall) -> ServiceResponse:
        """Handle fetching a fresh message from the plant."""
        coordinator = _get_coordinator(hass)
        message = await coordinator.insight_manager.async_refresh_motivation()
        return {const.RESPONSE_MESSAGE: message}

    async def handle_get_statistics(call: ServiceCall) -> ServiceResponse:
        """Handle computing the completion grid and today's totals."""
        coordinator = _get_coordinator(hass)
        today = dt_today_iso()
        habits = coordinator.habits
        weekly: list[Any] = [
            dict(cell)
            for cell in StatisticsEngine.weekly_completion(
                habits, today, call.data[const.FIELD_DAYS]
            )
        ]
        return {
            const.RESPONSE_WEEKLY: weekly,
            const.RESPONSE_COMPLETION_RATIO_TODAY: StatisticsEngine.completion_ratio(
                habits, today
            ),
            const.RESPONSE_CALORIES_TODAY: StatisticsEngine.daily_calories(
                habits, today
            ),
            const.RESPONSE_CALORIES_LOGGED_TODAY: StatisticsEngine.calories_logged(
                coordinator.food_logs, today
            ),
        }

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_TOGGLE_HABIT,
        handle_toggle_habit,
        schema=TOGGLE_HABIT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_HABIT_PROGRESS,
        handle_add_habit_progress,
        schema=ADD_HABIT_PROGRESS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_HABIT,
        handle_add_habit,
        schema=ADD_HABIT_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_HABIT,
        handle_delete_habit,
        schema=DELETE_HABIT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_LOG_FOOD,
        handle_log_food,
        schema=LOG_FOOD_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REVIVE_PLANT,
        handle_revive_plant,
        schema=REVIVE_PLANT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_NAME,
        handle_set_name,
        schema=SET_NAME_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_THEME,
        handle_set_theme,
        schema=SET_THEME_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_ACTIVE_TAB,
        handle_set_active_tab,
        schema=SET_ACTIVE_TAB_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_FRIEND,
        handle_add_friend,
        schema=ADD_FRIEND_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_GROUP,
        handle_create_group,
        schema=CREATE_GROUP_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_JOIN_GROUP,
        handle_join_group,
        schema=JOIN_GROUP_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ESTIMATE_METRIC,
        handle_estimate_metric,
        schema=ESTIMATE_METRIC_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ANALYZE_FOOD_IMAGE,
        handle_analyze_food_image,
        schema=ANALYZE_FOOD_IMAGE_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_MOTIVATION,
        handle_get_motivation,
        schema=GET_MOTIVATION_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_STATISTICS,
        handle_get_statistics,
        schema=GET_STATISTICS_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    const.LOGGER.info("INFO: Bloom services have been registered successfully")


async def async_unload_services(hass: HomeAssistant):
    """Unregister Bloom services when unloading the integration."""
    services = [
        const.SERVICE_TOGGLE_HABIT,
        const.SERVICE_ADD_HABIT_PROGRESS,
        const.SERVICE_ADD_HABIT,
        const.SERVICE_DELETE_HABIT,
        const.SERVICE_LOG_FOOD,
        const.SERVICE_REVIVE_PLANT,
        const.SERVICE_SET_NAME,
        const.SERVICE_SET_THEME,
        const.SERVICE_SET_ACTIVE_TAB,
        const.SERVICE_ADD_FRIEND,
        const.SERVICE_CREATE_GROUP,
        const.SERVICE_JOIN_GROUP,
        const.SERVICE_ESTIMATE_METRIC,
        const.SERVICE_ANALYZE_FOOD_IMAGE,
        const.SERVICE_GET_MOTIVATION,
        const.SERVICE_GET_STATISTICS,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Bloom services have been unregistered")
