"""Habit Engine - Pure logic for the habit ledger.

This engine provides stateless, pure Python functions for:
- Completion predicates (boolean toggle state, numeric target/max window)
- Boolean toggles with incremental streak accounting
- Numeric progress entries with threshold-crossing detection
- Structural add/delete of habits

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data. Ledger
operations update the habit dict they are given in place; the StateEngine
always hands them a private copy of the state.

Streaks are stored, not derived: each transition event moves the streak by
exactly one (floor 0). Skipped days never rewrite it retroactively, so it can
drift from the day-adjacency of completed_dates.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from ..type_defs import HabitData


def _near(value: float, bound: float) -> bool:
    return math.isclose(value, bound, rel_tol=1e-9, abs_tol=1e-9)


@dataclass
class LedgerResult:
    """Outcome of a single ledger event.

    Attributes:
        habit_id: The habit that was evaluated (None when nothing matched)
        was_just_completed: The date entered completed_dates on this event
        was_just_uncompleted: The date left completed_dates on this event
        applied: False when the event was a no-op (unknown habit, wrong kind)
    """

    habit_id: str | None = None
    was_just_completed: bool = False
    was_just_uncompleted: bool = False
    applied: bool = False

    @property
    def crossed(self) -> bool:
        """Return True if the completion state changed."""
        return self.was_just_completed or self.was_just_uncompleted


class HabitEngine:
    """Pure logic engine for habit ledger transitions.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.

    Transition table for numeric progress (per date, per event):
        not_met  → met        : completed (+1 streak)
        met      → over_limit : uncompleted (-1 streak, floor 0)
        over_limit → met      : completed (+1 streak), e.g. a negative correction
        met      → not_met    : uncompleted, e.g. a negative correction
        not_met  → over_limit : neither; the habit was never completed
    """

    # =========================================================================
    # LOOKUPS / PREDICATES
    # =========================================================================

    @staticmethod
    def find_habit(habits: list[HabitData], habit_id: str) -> HabitData | None:
        """Return the habit with the given id, or None."""
        for habit in habits:
            if habit.get(const.DATA_HABIT_ID) == habit_id:
                return habit
        return None

    @staticmethod
    def progress_on(habit: HabitData, date: str) -> float:
        """Return the accumulated numeric progress for a date (0 if absent)."""
        return habit.get(const.DATA_HABIT_PROGRESS, {}).get(date, 0)

    @staticmethod
    def numeric_status(habit: HabitData, date: str) -> str:
        """Classify a numeric habit's day as not met, met, or over limit.

        A max target of None (or 0, as older records store it) means the
        habit has no upper bound. Stored progress is an unrounded sum, so
        values within float drift of a bound count as on it.
        """
        value = HabitEngine.progress_on(habit, date)
        target = habit.get(const.DATA_HABIT_TARGET, const.DEFAULT_HABIT_TARGET)
        max_target = habit.get(const.DATA_HABIT_MAX_TARGET)

        if value < target and not _near(value, target):
            return const.HABIT_STATUS_NOT_MET
        if max_target and value > max_target and not _near(value, max_target):
            return const.HABIT_STATUS_OVER_LIMIT
        return const.HABIT_STATUS_MET

    @staticmethod
    def meets_predicate(habit: HabitData, date: str) -> bool:
        """Evaluate the completion predicate for a date.

        Boolean habits: explicit toggle state (membership in completed_dates).
        Numeric habits: target <= progress <= max_target.
        """
        if habit.get(const.DATA_HABIT_KIND) == const.HABIT_KIND_NUMERIC:
            return HabitEngine.numeric_status(habit, date) == const.HABIT_STATUS_MET
        return date in habit.get(const.DATA_HABIT_COMPLETED_DATES, [])

    @staticmethod
    def is_completed_on(habit: HabitData, date: str) -> bool:
        """Return True if the date is recorded in completed_dates."""
        return date in habit.get(const.DATA_HABIT_COMPLETED_DATES, [])

    @staticmethod
    def all_completed_on(habits: list[HabitData], date: str) -> bool:
        """Return True if there is at least one habit and all are done for date."""
        return bool(habits) and all(
            HabitEngine.is_completed_on(habit, date) for habit in habits
        )

    # =========================================================================
    # LEDGER TRANSITIONS
    # =========================================================================

    @staticmethod
    def _mark_completed(habit: HabitData, date: str) -> None:
        """Add date to completed_dates and bump the streak."""
        dates = habit.setdefault(const.DATA_HABIT_COMPLETED_DATES, [])
        if date not in dates:
            dates.append(date)
        habit[const.DATA_HABIT_STREAK] = habit.get(const.DATA_HABIT_STREAK, 0) + 1

    @staticmethod
    def _mark_uncompleted(habit: HabitData, date: str) -> None:
        """Remove date from completed_dates and drop the streak (floor 0)."""
        habit[const.DATA_HABIT_COMPLETED_DATES] = [
            d for d in habit.get(const.DATA_HABIT_COMPLETED_DATES, []) if d != date
        ]
        habit[const.DATA_HABIT_STREAK] = max(
            0, habit.get(const.DATA_HABIT_STREAK, 0) - 1
        )

    @staticmethod
    def toggle_boolean(habit: HabitData | None, date: str) -> LedgerResult:
        """Flip a boolean habit's completion for a date.

        Returns a no-op result when the habit is missing or numeric.
        """
        if habit is None or habit.get(const.DATA_HABIT_KIND) != const.HABIT_KIND_BOOLEAN:
            return LedgerResult(habit_id=habit.get(const.DATA_HABIT_ID) if habit else None)

        habit_id = habit.get(const.DATA_HABIT_ID)
        if HabitEngine.is_completed_on(habit, date):
            HabitEngine._mark_uncompleted(habit, date)
            return LedgerResult(habit_id=habit_id, was_just_uncompleted=True, applied=True)

        HabitEngine._mark_completed(habit, date)
        return LedgerResult(habit_id=habit_id, was_just_completed=True, applied=True)

    @staticmethod
    def add_numeric_progress(
        habit: HabitData | None, date: str, delta: float
    ) -> LedgerResult:
        """Add a progress increment and detect threshold crossings.

        The date is fully re-evaluated before and after the add; only the
        single-event delta moves the streak. Returns a no-op result when the
        habit is missing or boolean, or the delta is NaN or infinite.
        """
        if habit is None or habit.get(const.DATA_HABIT_KIND) != const.HABIT_KIND_NUMERIC:
            return LedgerResult(habit_id=habit.get(const.DATA_HABIT_ID) if habit else None)
        if not math.isfinite(delta):
            return LedgerResult(habit_id=habit.get(const.DATA_HABIT_ID))

        habit_id = habit.get(const.DATA_HABIT_ID)
        before_status = HabitEngine.numeric_status(habit, date)

        progress = habit.setdefault(const.DATA_HABIT_PROGRESS, {})
        progress[date] = progress.get(date, 0) + delta

        after_status = HabitEngine.numeric_status(habit, date)
        was_met = before_status == const.HABIT_STATUS_MET
        is_met = after_status == const.HABIT_STATUS_MET

        if is_met and not was_met:
            HabitEngine._mark_completed(habit, date)
            return LedgerResult(habit_id=habit_id, was_just_completed=True, applied=True)

        if was_met and not is_met:
            HabitEngine._mark_uncompleted(habit, date)
            return LedgerResult(habit_id=habit_id, was_just_uncompleted=True, applied=True)

        return LedgerResult(habit_id=habit_id, applied=True)

    # =========================================================================
    # STRUCTURAL OPERATIONS
    # =========================================================================

    @staticmethod
    def add_habit(habits: list[HabitData], habit: HabitData) -> list[HabitData]:
        """Return a new list with the habit appended."""
        return [*habits, habit]

    @staticmethod
    def delete_habit(habits: list[HabitData], habit_id: str) -> list[HabitData]:
        """Return a new list without the habit (unknown ids are a no-op)."""
        return [h for h in habits if h.get(const.DATA_HABIT_ID) != habit_id]
