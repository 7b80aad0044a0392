# File: data_builders.py
"""Record lifecycle helpers for Bloom.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults (habits, plants, food logs, groups, user state)
- Business validation of user-supplied habit definitions
- Friend code generation and normalization
- Snapshot projection of the local user

### Build Functions
Each record type has a `build_<record>()` function that:
- Takes user input (DATA_* keys) or explicit arguments
- Generates an id (UUID) for new records
- Sets timestamps where the record carries one
- Applies field defaults
- Returns a complete dict ready for storage

Consumers:
- services.py (habit definitions, food logs)
- storage_manager.py (defaults for partially shaped records)
- engines/state_engine.py (onboarding plant)
- helpers/directory_client.py (seeded profiles, new groups)
- config_flow.py (friend code at onboarding)
"""

from __future__ import annotations

import copy
import math
import re
import secrets
from typing import Any, cast
import uuid

from . import const
from .type_defs import (
    FoodLogData,
    GroupData,
    HabitData,
    PlantData,
    UserSnapshot,
    UserState,
)
from .utils.dt_utils import dt_now_iso, dt_today_iso

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    Handles cases where the value might be:
    - Already a list → return as-is
    - None → return empty list
    - set/tuple → return as list
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (set, tuple)):
        return list(value)
    return []


def _normalize_dict_field(value: Any) -> dict[str, Any]:
    """Normalize a field that should be a dict (None or garbage → {})."""
    if isinstance(value, dict):
        return dict(value)
    return {}


def _coerce_number(value: Any, default: float) -> float:
    """Coerce a stored number, falling back to default for junk or NaN/inf."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Raised when business validation fails while building a record. The field
    attribute identifies which input caused the failure so the service layer
    can report it.

    Attributes:
        field: The DATA_* constant identifying the field that failed
        message: Human readable reason
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.message = message
        super().__init__(message)


# ==============================================================================
# FRIEND CODES
# ==============================================================================


def generate_friend_code(
    length: int = const.FRIEND_CODE_LENGTH,
    alphabet: str = const.FRIEND_CODE_ALPHABET,
) -> str:
    """Generate a public identity code, drawn uniformly from the alphabet.

    The alphabet drops glyphs that are easy to misread (I, O, 0, 1).
    """
    return "".join(secrets.choice(alphabet) for _ in range(length))


def normalize_code(code: str | None) -> str:
    """Normalize a user-typed friend or group code for comparison.

    Codes are case-insensitive; whitespace and separators are ignored.

    Examples:
        normalize_code(" rose-88 ") → "ROSE88"
    """
    if not code:
        return ""
    return re.sub(r"[^A-Z0-9]", "", str(code).upper())


# ==============================================================================
# PLANT
# ==============================================================================


def build_plant(today: str | None = None) -> PlantData:
    """Build a freshly planted seed (onboarding and revive share this shape)."""
    return {
        const.DATA_PLANT_STAGE: const.PLANT_STAGE_SEED,
        const.DATA_PLANT_HEALTH: const.PLANT_HEALTH_THRIVING,
        const.DATA_PLANT_EXPERIENCE: const.DEFAULT_ZERO,
        const.DATA_PLANT_LEVEL: const.DEFAULT_PLANT_LEVEL,
        const.DATA_PLANT_LAST_INTERACTION_DATE: today or dt_today_iso(),
    }  # type: ignore[return-value]


def normalize_plant(raw: Any, today: str | None = None) -> PlantData:
    """Fill defaults on a stored plant; a missing plant becomes a fresh seed."""
    if not isinstance(raw, dict):
        return build_plant(today)

    plant = build_plant(today)
    stage = raw.get(const.DATA_PLANT_STAGE)
    if stage in const.PLANT_STAGES:
        plant[const.DATA_PLANT_STAGE] = stage
    health = raw.get(const.DATA_PLANT_HEALTH)
    if health in const.PLANT_HEALTH_STATES:
        plant[const.DATA_PLANT_HEALTH] = health
    plant[const.DATA_PLANT_EXPERIENCE] = max(
        0, _coerce_number(raw.get(const.DATA_PLANT_EXPERIENCE), const.DEFAULT_ZERO)
    )
    plant[const.DATA_PLANT_LEVEL] = int(
        _coerce_number(raw.get(const.DATA_PLANT_LEVEL), const.DEFAULT_PLANT_LEVEL)
    )
    if raw.get(const.DATA_PLANT_LAST_INTERACTION_DATE):
        plant[const.DATA_PLANT_LAST_INTERACTION_DATE] = raw[
            const.DATA_PLANT_LAST_INTERACTION_DATE
        ]
    return plant


# ==============================================================================
# HABITS
# ==============================================================================


def build_habit(user_input: dict[str, Any]) -> HabitData:
    """Build a new habit from user input.

    Boolean habits always get target 1, no max target and an empty unit.
    New habits start with empty progress and a zero streak.

    Raises:
        EntityValidationError: Blank title, non-positive target, or a
            max target below the target.
    """
    title = str(user_input.get(const.DATA_HABIT_TITLE) or "").strip()
    if not title:
        raise EntityValidationError(
            const.DATA_HABIT_TITLE, const.MSG_HABIT_TITLE_REQUIRED
        )

    kind = user_input.get(const.DATA_HABIT_KIND, const.DEFAULT_HABIT_KIND)
    if kind not in const.HABIT_KINDS:
        raise EntityValidationError(const.DATA_HABIT_KIND, f"Unknown kind '{kind}'")

    if kind == const.HABIT_KIND_NUMERIC:
        target = _coerce_number(
            user_input.get(const.DATA_HABIT_TARGET), const.DEFAULT_HABIT_TARGET
        )
        if target <= 0:
            raise EntityValidationError(
                const.DATA_HABIT_TARGET, "Target must be greater than zero"
            )
        max_target = user_input.get(const.DATA_HABIT_MAX_TARGET)
        if max_target is not None:
            max_target = _coerce_number(max_target, target)
            if max_target < target:
                raise EntityValidationError(
                    const.DATA_HABIT_MAX_TARGET, const.MSG_HABIT_INVALID_RANGE
                )
        unit = str(user_input.get(const.DATA_HABIT_UNIT) or "")
    else:
        target = const.DEFAULT_HABIT_TARGET
        max_target = None
        unit = const.DEFAULT_HABIT_UNIT

    return {
        const.DATA_HABIT_ID: str(uuid.uuid4()),
        const.DATA_HABIT_TITLE: title,
        const.DATA_HABIT_KIND: kind,
        const.DATA_HABIT_TARGET: target,
        const.DATA_HABIT_MAX_TARGET: max_target,
        const.DATA_HABIT_UNIT: unit,
        const.DATA_HABIT_COMPLETED_DATES: [],
        const.DATA_HABIT_STREAK: const.DEFAULT_ZERO,
        const.DATA_HABIT_PROGRESS: {},
    }  # type: ignore[return-value]


def build_habit_from_preset(preset: str) -> HabitData:
    """Build a habit from one of const.HABIT_PRESETS.

    Raises:
        EntityValidationError: Unknown preset name.
    """
    if preset not in const.HABIT_PRESETS:
        raise EntityValidationError("preset", f"Unknown preset '{preset}'")
    return build_habit(dict(const.HABIT_PRESETS[preset]))


def normalize_habit(raw: dict[str, Any]) -> HabitData:
    """Fill defaults on a stored habit without validating it.

    Missing kind → boolean, target → 1, unit → "", progress → {}.
    Junk, NaN or infinite progress entries are read as 0.
    A falsy max target is treated as "no upper bound".
    """
    habit = dict(raw)
    habit.setdefault(const.DATA_HABIT_ID, str(uuid.uuid4()))
    habit.setdefault(const.DATA_HABIT_TITLE, "")
    if habit.get(const.DATA_HABIT_KIND) not in const.HABIT_KINDS:
        habit[const.DATA_HABIT_KIND] = const.DEFAULT_HABIT_KIND
    habit[const.DATA_HABIT_TARGET] = _coerce_number(
        habit.get(const.DATA_HABIT_TARGET), const.DEFAULT_HABIT_TARGET
    )
    max_target = _coerce_number(habit.get(const.DATA_HABIT_MAX_TARGET), 0)
    habit[const.DATA_HABIT_MAX_TARGET] = max_target if max_target else None
    if habit.get(const.DATA_HABIT_UNIT) is None:
        habit[const.DATA_HABIT_UNIT] = const.DEFAULT_HABIT_UNIT
    habit[const.DATA_HABIT_COMPLETED_DATES] = list(
        dict.fromkeys(_normalize_list_field(habit.get(const.DATA_HABIT_COMPLETED_DATES)))
    )
    habit[const.DATA_HABIT_STREAK] = max(
        0, int(_coerce_number(habit.get(const.DATA_HABIT_STREAK), const.DEFAULT_ZERO))
    )
    habit[const.DATA_HABIT_PROGRESS] = {
        date: _coerce_number(value, const.DEFAULT_ZERO)
        for date, value in _normalize_dict_field(
            habit.get(const.DATA_HABIT_PROGRESS)
        ).items()
    }
    return cast("HabitData", habit)


# ==============================================================================
# FOOD LOGS
# ==============================================================================


def build_food_log(
    name: str, calories: float, date: str | None = None
) -> FoodLogData:
    """Build an immutable food log entry.

    Raises:
        EntityValidationError: Blank name, or negative or non-finite calories.
    """
    clean_name = str(name or "").strip()
    if not clean_name:
        raise EntityValidationError(const.DATA_FOOD_LOG_NAME, "Food name is required")
    if not math.isfinite(calories) or calories < 0:
        raise EntityValidationError(
            const.DATA_FOOD_LOG_CALORIES, "Calories must be a non-negative number"
        )
    return {
        const.DATA_FOOD_LOG_ID: str(uuid.uuid4()),
        const.DATA_FOOD_LOG_NAME: clean_name,
        const.DATA_FOOD_LOG_CALORIES: calories,
        const.DATA_FOOD_LOG_DATE: date or dt_today_iso(),
        const.DATA_FOOD_LOG_CREATED_AT: dt_now_iso(),
    }  # type: ignore[return-value]


# ==============================================================================
# SNAPSHOTS / GROUPS
# ==============================================================================


def build_snapshot(state: UserState | dict[str, Any]) -> UserSnapshot:
    """Project the local user's shareable snapshot (deep copied)."""
    return {
        const.DATA_NAME: state.get(const.DATA_NAME, ""),
        const.DATA_FRIEND_CODE: state.get(const.DATA_FRIEND_CODE, ""),
        const.DATA_PLANT: copy.deepcopy(state.get(const.DATA_PLANT) or build_plant()),
        const.DATA_HABITS: copy.deepcopy(state.get(const.DATA_HABITS, [])),
    }  # type: ignore[return-value]


def build_group(name: str, code: str, owner: UserSnapshot) -> GroupData:
    """Build a new group with the owner as the only member.

    Raises:
        EntityValidationError: Blank group name.
    """
    clean_name = str(name or "").strip()
    if not clean_name:
        raise EntityValidationError(const.DATA_GROUP_NAME, const.MSG_GROUP_NAME_REQUIRED)
    return {
        const.DATA_GROUP_ID: str(uuid.uuid4()),
        const.DATA_GROUP_NAME: clean_name,
        const.DATA_GROUP_CODE: code,
        const.DATA_GROUP_MEMBERS: [copy.deepcopy(owner)],
        const.DATA_GROUP_SHARED_PLANT: build_plant(),
    }  # type: ignore[return-value]


# ==============================================================================
# USER STATE
# ==============================================================================


def build_user_state(
    name: str = "",
    friend_code: str | None = None,
    today: str | None = None,
) -> UserState:
    """Build a freshly initialized user state (not yet onboarded when unnamed)."""
    return {
        const.DATA_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
        const.DATA_NAME: name,
        const.DATA_FRIEND_CODE: friend_code or generate_friend_code(),
        const.DATA_ONBOARDING_COMPLETE: bool(name),
        const.DATA_THEME: const.DEFAULT_THEME,
        const.DATA_LAST_ACTIVE_TAB: const.DEFAULT_LAST_ACTIVE_TAB,
        const.DATA_PLANT: build_plant(today),
        const.DATA_HABITS: [],
        const.DATA_FOOD_LOGS: [],
        const.DATA_FRIENDS: [],
        const.DATA_GROUPS: [],
    }  # type: ignore[return-value]
