"""Engine modules for Bloom integration.

Contains specialized computation engines:
- habit_engine: Habit ledger, completion predicates, streak transitions
- progression_engine: Plant experience, stage advancement, healing, revive
- decay_engine: Session-start health decay
- sync_engine: Group membership snapshot projection
- food_engine: Food log and calorie habit bridge
- statistics_engine: Weekly grid, completion ratios, calorie totals
- state_engine: Single-writer reducer tying the engines together
"""

# Use relative imports within package to avoid mypy module resolution issues
from .decay_engine import DecayEngine
from .food_engine import FoodEngine
from .habit_engine import HabitEngine, LedgerResult
from .progression_engine import ProgressionEngine
from .state_engine import ReduceResult, StateEngine
from .statistics_engine import StatisticsEngine
from .sync_engine import SyncEngine

__all__ = [
    "DecayEngine",
    "FoodEngine",
    "HabitEngine",
    "LedgerResult",
    "ProgressionEngine",
    "ReduceResult",
    "StateEngine",
    "StatisticsEngine",
    "SyncEngine",
]
