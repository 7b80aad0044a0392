"""Tests for Bloom services.

Test Categories:
- Habit services (toggle, progress, add, delete)
- Food and plant services (log food, revive)
- Profile services (name, theme, tab)
- Social services (friend, groups)
- Response services (estimate, image, motivation, statistics)
"""

# pylint: disable=protected-access,redefined-outer-name,unused-argument

from pathlib import Path
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry
import voluptuous as vol

from custom_components.bloom import const
from custom_components.bloom.engines import HabitEngine
from custom_components.bloom.services import async_setup_services
from custom_components.bloom.utils.dt_utils import dt_today_iso

CLIENT = "custom_components.bloom.managers.insight_manager.GeminiEstimationClient"


async def _call(hass: HomeAssistant, service: str, data=None, response=False):
    return await hass.services.async_call(
        const.DOMAIN,
        service,
        data or {},
        blocking=True,
        return_response=response,
    )


# =============================================================================
# HABITS
# =============================================================================


async def test_toggle_habit(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Toggling completes the habit for today and rewards the plant."""
    await _call(hass, const.SERVICE_TOGGLE_HABIT, {const.FIELD_HABIT_ID: "h_meditate"})

    habit = HabitEngine.find_habit(coordinator.habits, "h_meditate")
    assert habit[const.DATA_HABIT_COMPLETED_DATES] == [dt_today_iso()]
    assert habit[const.DATA_HABIT_STREAK] == 1
    assert coordinator.plant[const.DATA_PLANT_EXPERIENCE] == 10


async def test_toggle_habit_past_date(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """An explicit date is recorded as given."""
    await _call(
        hass,
        const.SERVICE_TOGGLE_HABIT,
        {const.FIELD_HABIT_ID: "h_meditate", const.FIELD_DATE: "2020-01-10"},
    )
    habit = HabitEngine.find_habit(coordinator.habits, "h_meditate")
    assert habit[const.DATA_HABIT_COMPLETED_DATES] == ["2020-01-10"]


async def test_toggle_numeric_habit_rejected(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Numeric habits cannot be toggled."""
    with pytest.raises(ServiceValidationError):
        await _call(hass, const.SERVICE_TOGGLE_HABIT, {const.FIELD_HABIT_ID: "h_water"})


async def test_toggle_unknown_habit(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unknown habits are rejected."""
    with pytest.raises(ServiceValidationError, match="not found"):
        await _call(hass, const.SERVICE_TOGGLE_HABIT, {const.FIELD_HABIT_ID: "nope"})


async def test_add_habit_progress(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Progress accumulates and completes at the target."""
    for _ in range(2):
        await _call(
            hass,
            const.SERVICE_ADD_HABIT_PROGRESS,
            {const.FIELD_HABIT_ID: "h_water", const.FIELD_AMOUNT: 4},
        )

    habit = HabitEngine.find_habit(coordinator.habits, "h_water")
    today = dt_today_iso()
    assert habit[const.DATA_HABIT_PROGRESS][today] == 8
    assert habit[const.DATA_HABIT_COMPLETED_DATES] == [today]


async def test_add_habit_progress_fractional(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Fractional amounts, including corrections, are summed as given."""
    for amount in (2.5, 5.75, -0.25):
        await _call(
            hass,
            const.SERVICE_ADD_HABIT_PROGRESS,
            {const.FIELD_HABIT_ID: "h_water", const.FIELD_AMOUNT: amount},
        )

    habit = HabitEngine.find_habit(coordinator.habits, "h_water")
    today = dt_today_iso()
    assert habit[const.DATA_HABIT_PROGRESS][today] == 8
    assert habit[const.DATA_HABIT_COMPLETED_DATES] == [today]


@pytest.mark.parametrize("amount", ["nan", "inf", "-inf", "1e400", float("nan")])
async def test_add_habit_progress_rejects_non_finite(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, amount
) -> None:
    """NaN and infinite amounts fail validation and change nothing."""
    with pytest.raises(vol.Invalid):
        await _call(
            hass,
            const.SERVICE_ADD_HABIT_PROGRESS,
            {const.FIELD_HABIT_ID: "h_water", const.FIELD_AMOUNT: amount},
        )

    habit = HabitEngine.find_habit(coordinator.habits, "h_water")
    assert habit[const.DATA_HABIT_PROGRESS] == {}
    assert habit[const.DATA_HABIT_COMPLETED_DATES] == []
    assert coordinator.plant[const.DATA_PLANT_EXPERIENCE] == 0


async def test_add_progress_to_boolean_rejected(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Boolean habits do not take progress."""
    with pytest.raises(ServiceValidationError):
        await _call(
            hass,
            const.SERVICE_ADD_HABIT_PROGRESS,
            {const.FIELD_HABIT_ID: "h_meditate", const.FIELD_AMOUNT: 1},
        )


async def test_add_habit_from_preset(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Presets create a habit and return its id."""
    response = await _call(
        hass,
        const.SERVICE_ADD_HABIT,
        {const.FIELD_PRESET: const.HABIT_PRESET_READ},
        response=True,
    )

    habit = HabitEngine.find_habit(coordinator.habits, response[const.RESPONSE_HABIT_ID])
    assert habit[const.DATA_HABIT_TITLE] == "Read"
    assert habit[const.DATA_HABIT_UNIT] == "mins"


async def test_add_custom_habit_adds_sensor(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A custom habit gets its own streak sensor."""
    response = await _call(
        hass,
        const.SERVICE_ADD_HABIT,
        {
            const.FIELD_TITLE: "Steps",
            const.FIELD_KIND: const.HABIT_KIND_NUMERIC,
            const.FIELD_TARGET: 10000,
            const.FIELD_UNIT: "steps",
        },
        response=True,
    )
    await hass.async_block_till_done()

    habit_id = response[const.RESPONSE_HABIT_ID]
    ent_reg = er.async_get(hass)
    assert ent_reg.async_get_entity_id(
        "sensor",
        const.DOMAIN,
        f"{init_integration.entry_id}_{habit_id}{const.SENSOR_UID_SUFFIX_HABIT_STREAK}",
    )


async def test_add_habit_invalid_range(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A max target below the target is rejected."""
    with pytest.raises(ServiceValidationError, match="Maximum target"):
        await _call(
            hass,
            const.SERVICE_ADD_HABIT,
            {
                const.FIELD_TITLE: "Calories",
                const.FIELD_KIND: const.HABIT_KIND_NUMERIC,
                const.FIELD_TARGET: 2000,
                const.FIELD_MAX_TARGET: 1500,
            },
        )


async def test_add_habit_preset_and_title_exclusive(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Preset and title cannot be combined."""
    with pytest.raises(vol.Invalid):
        await _call(
            hass,
            const.SERVICE_ADD_HABIT,
            {const.FIELD_PRESET: const.HABIT_PRESET_READ, const.FIELD_TITLE: "Read"},
        )


async def test_delete_habit_removes_sensor(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Deleting a habit drops it and its streak sensor."""
    ent_reg = er.async_get(hass)
    unique_id = (
        f"{init_integration.entry_id}_h_water{const.SENSOR_UID_SUFFIX_HABIT_STREAK}"
    )
    assert ent_reg.async_get_entity_id("sensor", const.DOMAIN, unique_id)

    await _call(hass, const.SERVICE_DELETE_HABIT, {const.FIELD_HABIT_ID: "h_water"})
    await hass.async_block_till_done()

    assert HabitEngine.find_habit(coordinator.habits, "h_water") is None
    assert ent_reg.async_get_entity_id("sensor", const.DOMAIN, unique_id) is None


# =============================================================================
# FOOD / PLANT
# =============================================================================


async def test_log_food_feeds_calorie_habit(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Food logs count toward the calorie habit; 2300 kcal is over the limit."""
    await _call(
        hass,
        const.SERVICE_LOG_FOOD,
        {const.FIELD_NAME: "Lunch", const.FIELD_CALORIES: 2000},
    )
    habit = HabitEngine.find_habit(coordinator.habits, "h_calories")
    today = dt_today_iso()
    assert today in habit[const.DATA_HABIT_COMPLETED_DATES]

    await _call(
        hass,
        const.SERVICE_LOG_FOOD,
        {const.FIELD_NAME: "Cake", const.FIELD_CALORIES: 300},
    )
    habit = HabitEngine.find_habit(coordinator.habits, "h_calories")
    assert habit[const.DATA_HABIT_PROGRESS][today] == 2300
    assert today not in habit[const.DATA_HABIT_COMPLETED_DATES]
    assert len(coordinator.food_logs) == 2


async def test_log_food_negative_calories(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Negative calories fail schema validation."""
    with pytest.raises(vol.Invalid):
        await _call(
            hass,
            const.SERVICE_LOG_FOOD,
            {const.FIELD_NAME: "Air", const.FIELD_CALORIES: -10},
        )


async def test_log_food_infinite_calories(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Infinite calories fail schema validation."""
    with pytest.raises(vol.Invalid):
        await _call(
            hass,
            const.SERVICE_LOG_FOOD,
            {const.FIELD_NAME: "Cake", const.FIELD_CALORIES: "inf"},
        )
    assert coordinator.food_logs == []


async def test_revive_live_plant_rejected(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Only a dead plant can be revived."""
    with pytest.raises(ServiceValidationError, match=const.MSG_PLANT_NOT_DEAD):
        await _call(hass, const.SERVICE_REVIVE_PLANT)


async def test_revive_dead_plant(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """A dead tree is reset to a thriving seed."""
    coordinator._data[const.DATA_PLANT] = {
        **coordinator.plant,
        const.DATA_PLANT_STAGE: const.PLANT_STAGE_TREE,
        const.DATA_PLANT_HEALTH: const.PLANT_HEALTH_DEAD,
        const.DATA_PLANT_EXPERIENCE: 700,
    }

    await _call(hass, const.SERVICE_REVIVE_PLANT)

    assert coordinator.plant[const.DATA_PLANT_STAGE] == const.PLANT_STAGE_SEED
    assert coordinator.plant[const.DATA_PLANT_HEALTH] == const.PLANT_HEALTH_THRIVING
    assert coordinator.plant[const.DATA_PLANT_EXPERIENCE] == 0


# =============================================================================
# PROFILE
# =============================================================================


async def test_set_name(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Names are trimmed; blank names are rejected."""
    await _call(hass, const.SERVICE_SET_NAME, {const.FIELD_NAME: " Grace "})
    assert coordinator.user_name == "Grace"

    with pytest.raises(ServiceValidationError, match=const.MSG_NAME_REQUIRED):
        await _call(hass, const.SERVICE_SET_NAME, {const.FIELD_NAME: "   "})


async def test_set_theme_and_tab(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """Preferences are stored."""
    await _call(hass, const.SERVICE_SET_THEME, {const.FIELD_THEME: const.THEME_DARK})
    await _call(hass, const.SERVICE_SET_ACTIVE_TAB, {const.FIELD_TAB: const.TAB_SOCIAL})

    assert coordinator.state[const.DATA_THEME] == const.THEME_DARK
    assert coordinator.state[const.DATA_LAST_ACTIVE_TAB] == const.TAB_SOCIAL


# =============================================================================
# SOCIAL
# =============================================================================


async def test_add_friend_service(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """The friend profile is returned."""
    response = await _call(
        hass, const.SERVICE_ADD_FRIEND, {const.FIELD_CODE: "herb42"}, response=True
    )
    assert response[const.RESPONSE_FRIEND][const.DATA_NAME] == "Basil"
    assert len(coordinator.friends) == 1


async def test_join_group_service(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The joined group is returned."""
    response = await _call(
        hass, const.SERVICE_JOIN_GROUP, {const.FIELD_CODE: "WELL24"}, response=True
    )
    assert response[const.RESPONSE_GROUP][const.DATA_GROUP_NAME] == "Wellness Warriors"


async def test_join_unknown_group_service(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unknown codes raise an error."""
    with pytest.raises(HomeAssistantError, match=const.MSG_GROUP_NOT_FOUND):
        await _call(hass, const.SERVICE_JOIN_GROUP, {const.FIELD_CODE: "NOPE77"})


async def test_create_group_service(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator
) -> None:
    """A created group is stored and returned."""
    response = await _call(
        hass, const.SERVICE_CREATE_GROUP, {const.FIELD_NAME: "Crew"}, response=True
    )
    assert response[const.RESPONSE_GROUP][const.DATA_GROUP_NAME] == "Crew"
    assert len(coordinator.groups) == 1


# =============================================================================
# RESPONSES
# =============================================================================


async def test_estimate_metric_service(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Estimates are returned as a value."""
    with patch(f"{CLIENT}.estimate_metric", return_value=140):
        response = await _call(
            hass,
            const.SERVICE_ESTIMATE_METRIC,
            {const.FIELD_DESCRIPTION: "2 eggs"},
            response=True,
        )
    assert response == {const.RESPONSE_VALUE: 140}


async def test_analyze_food_image_disallowed_path(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Paths outside the allowlist are rejected."""
    with pytest.raises(ServiceValidationError):
        await _call(
            hass,
            const.SERVICE_ANALYZE_FOOD_IMAGE,
            {const.FIELD_IMAGE_PATH: "/etc/passwd"},
            response=True,
        )


async def test_analyze_food_image_service(
    hass: HomeAssistant, init_integration: MockConfigEntry, tmp_path: Path
) -> None:
    """Allowed images are analyzed."""
    image = tmp_path / "plate.jpg"
    image.write_bytes(b"jpeg")
    hass.config.allowlist_external_dirs = {str(tmp_path)}

    with patch(
        f"{CLIENT}.analyze_image", return_value={"name": "Toast", "calories": 150}
    ):
        response = await _call(
            hass,
            const.SERVICE_ANALYZE_FOOD_IMAGE,
            {const.FIELD_IMAGE_PATH: str(image)},
            response=True,
        )
    assert response == {const.RESPONSE_FOOD: {"name": "Toast", "calories": 150}}


async def test_get_motivation_service(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """The fallback message is returned without a key."""
    response = await _call(hass, const.SERVICE_GET_MOTIVATION, response=True)
    assert response == {const.RESPONSE_MESSAGE: const.MOTIVATION_FALLBACK_NO_KEY}


async def test_get_statistics_service(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Statistics cover the weekly grid and today's totals."""
    await _call(hass, const.SERVICE_TOGGLE_HABIT, {const.FIELD_HABIT_ID: "h_meditate"})
    await _call(
        hass,
        const.SERVICE_LOG_FOOD,
        {const.FIELD_NAME: "Oats", const.FIELD_CALORIES: 350},
    )

    response = await _call(hass, const.SERVICE_GET_STATISTICS, response=True)

    weekly = response[const.RESPONSE_WEEKLY]
    assert len(weekly) == 7
    assert weekly[-1]["date"] == dt_today_iso()
    assert weekly[-1]["completed"] == 1
    assert weekly[-1]["total"] == 3
    assert response[const.RESPONSE_COMPLETION_RATIO_TODAY] == pytest.approx(1 / 3)
    assert response[const.RESPONSE_CALORIES_TODAY] == 350
    assert response[const.RESPONSE_CALORIES_LOGGED_TODAY] == 350


async def test_services_without_entry(hass: HomeAssistant) -> None:
    """Services registered without a loaded entry report it."""
    async_setup_services(hass)
    with pytest.raises(HomeAssistantError, match=const.MSG_NO_ENTRY_FOUND):
        await _call(hass, const.SERVICE_GET_MOTIVATION, response=True)
