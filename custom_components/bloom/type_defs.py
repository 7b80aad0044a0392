# File: type_defs.py
"""Type definitions for Bloom data structures.

TypedDict is used for the fixed-shape records (plant, habit, food log,
snapshot, group, user state). Per-date maps keep `dict[str, float]` because
their keys are runtime date keys.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports coordinator, to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime defaults for partially shaped
records are filled by storage_manager.normalize_state().
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

HabitId = str
FriendCode = str  # 6 chars from const.FRIEND_CODE_ALPHABET
DateKey = str  # Local calendar date "2026-01-18"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

HabitKind = Literal["boolean", "numeric"]
PlantStage = Literal["seed", "sprout", "sapling", "tree", "flowering", "mythical"]
PlantHealth = Literal["thriving", "wilting", "withered", "dead"]
Theme = Literal["light", "dark"]


# =============================================================================
# Plant
# =============================================================================


class PlantData(TypedDict):
    """Plant progression state."""

    stage: PlantStage
    health: PlantHealth
    experience: float
    level: int
    last_interaction_date: DateKey


# =============================================================================
# Habits
# =============================================================================


class HabitData(TypedDict):
    """A tracked habit with its per-day ledger.

    completed_dates has set semantics but is stored as a list for JSON.
    max_target is None when the numeric habit has no upper bound.
    """

    id: HabitId
    title: str
    kind: HabitKind
    target: float
    max_target: NotRequired[float | None]
    unit: str
    completed_dates: list[DateKey]
    streak: int
    progress: dict[DateKey, float]


# =============================================================================
# Food Logs
# =============================================================================


class FoodLogData(TypedDict):
    """Immutable food log entry."""

    id: str
    name: str
    calories: float
    date: DateKey
    created_at: ISODatetime


# =============================================================================
# Social
# =============================================================================


class UserSnapshot(TypedDict):
    """Projection of a user embedded in friend lists and group member lists."""

    name: str
    friend_code: FriendCode
    plant: PlantData
    habits: list[HabitData]


FriendProfile = UserSnapshot


class GroupData(TypedDict):
    """A group (party) the local user belongs to."""

    id: str
    name: str
    code: str
    members: list[UserSnapshot]
    shared_plant: PlantData


# =============================================================================
# Root State
# =============================================================================


class UserState(TypedDict):
    """The persisted blob (one per config entry)."""

    schema_version: int
    name: str
    friend_code: FriendCode
    onboarding_complete: bool
    theme: Theme
    last_active_tab: str
    plant: PlantData
    habits: list[HabitData]
    food_logs: list[FoodLogData]
    friends: list[FriendProfile]
    groups: list[GroupData]


# =============================================================================
# Statistics
# =============================================================================


class DailyCompletion(TypedDict):
    """One cell of the weekly completion grid."""

    date: DateKey
    completed: int
    total: int
    ratio: float


class FoodEstimate(TypedDict):
    """Result of analyzing a food photo."""

    name: str
    calories: int
