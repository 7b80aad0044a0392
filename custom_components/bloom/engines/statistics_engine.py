"""Statistics Engine - Pure aggregation over habits and food logs.

Feeds the weekly completion grid, the calendar view and the food tab totals.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_trailing_dates
from ..utils.math_utils import calculate_ratio, round_value
from .food_engine import FoodEngine
from .habit_engine import HabitEngine

if TYPE_CHECKING:
    from ..type_defs import DailyCompletion, FoodLogData, HabitData


class StatisticsEngine:
    """Pure aggregation helpers."""

    @staticmethod
    def completion_ratio(habits: list[HabitData], date: str) -> float:
        """Return the share of habits completed on a date (0.0 with no habits)."""
        completed = sum(1 for h in habits if HabitEngine.is_completed_on(h, date))
        return calculate_ratio(completed, len(habits))

    @staticmethod
    def weekly_completion(
        habits: list[HabitData],
        today: str,
        days: int = const.DEFAULT_WEEKLY_WINDOW_DAYS,
    ) -> list[DailyCompletion]:
        """Return one cell per day for the trailing window, oldest first."""
        total = len(habits)
        cells: list[DailyCompletion] = []
        for date in dt_trailing_dates(today, days):
            completed = sum(1 for h in habits if HabitEngine.is_completed_on(h, date))
            cells.append(
                {
                    "date": date,
                    "completed": completed,
                    "total": total,
                    "ratio": round_value(calculate_ratio(completed, total)),
                }
            )
        return cells

    @staticmethod
    def daily_calories(habits: list[HabitData], date: str) -> float:
        """Return the calorie habit's progress for a date (0 without one)."""
        habit = FoodEngine.find_calorie_habit(habits)
        if habit is None:
            return 0
        return HabitEngine.progress_on(habit, date)

    @staticmethod
    def food_logs_for_date(
        food_logs: list[FoodLogData], date: str
    ) -> list[FoodLogData]:
        """Return the food logs recorded on a date, in log order."""
        return FoodEngine.logs_for_date(food_logs, date)

    @staticmethod
    def calories_logged(food_logs: list[FoodLogData], date: str) -> float:
        """Return the sum of calories across food logs for a date."""
        return round_value(
            sum(
                log.get(const.DATA_FOOD_LOG_CALORIES, 0)
                for log in FoodEngine.logs_for_date(food_logs, date)
            )
        )
