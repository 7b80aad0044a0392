"""Food Engine - Pure logic for the food-to-habit bridge.

A logged food item always lands in the food log. Its calories also count as
numeric progress on the calorie habit, if the user tracks one.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from .habit_engine import HabitEngine, LedgerResult

if TYPE_CHECKING:
    from ..type_defs import FoodLogData, HabitData


class FoodEngine:
    """Pure logic engine for the food log and calorie habit."""

    @staticmethod
    def is_calorie_habit(habit: HabitData) -> bool:
        """Return True for a numeric habit that tracks calories.

        Matches when the unit is "kcal" or the title mentions "calorie"
        (both case-insensitive).
        """
        if habit.get(const.DATA_HABIT_KIND) != const.HABIT_KIND_NUMERIC:
            return False
        unit = str(habit.get(const.DATA_HABIT_UNIT) or "").lower()
        title = str(habit.get(const.DATA_HABIT_TITLE) or "").lower()
        return (
            unit == const.CALORIE_HABIT_UNIT
            or const.CALORIE_HABIT_TITLE_KEYWORD in title
        )

    @staticmethod
    def find_calorie_habit(habits: list[HabitData]) -> HabitData | None:
        """Return the calorie habit, or None.

        Order-stable tie-break: when several habits match, the first one in
        stored order wins and is the only one that receives calories.
        """
        return next((h for h in habits if FoodEngine.is_calorie_habit(h)), None)

    @staticmethod
    def log_food(
        food_logs: list[FoodLogData],
        habits: list[HabitData],
        entry: FoodLogData,
    ) -> tuple[list[FoodLogData], LedgerResult]:
        """Append the entry and feed its calories to the calorie habit.

        The calorie habit dict inside `habits` is updated in place. Progress is
        recorded against the entry's own date.

        Returns:
            (new food log list, ledger result). The ledger result is a no-op
            result when no calorie habit exists.
        """
        new_logs = [*food_logs, entry]
        habit = FoodEngine.find_calorie_habit(habits)
        if habit is None:
            return new_logs, LedgerResult()

        result = HabitEngine.add_numeric_progress(
            habit,
            entry[const.DATA_FOOD_LOG_DATE],
            entry[const.DATA_FOOD_LOG_CALORIES],
        )
        return new_logs, result

    @staticmethod
    def logs_for_date(food_logs: list[FoodLogData], date: str) -> list[FoodLogData]:
        """Return the food logs recorded for a date, in logged order."""
        return [log for log in food_logs if log.get(const.DATA_FOOD_LOG_DATE) == date]
