"""Progression Engine - Pure logic for plant experience, stage and health.

This engine provides stateless, pure Python functions for:
- Rewarding (or un-rewarding) a habit completion transition
- Single-step healing on completion
- Experience-threshold stage advancement (forward only)
- Progress-within-stage percentage
- Reviving a plant back to a seed

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that return new plant dicts; inputs are
never mutated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..data_builders import build_plant
from ..utils.math_utils import calculate_percentage, clamp

if TYPE_CHECKING:
    from ..type_defs import PlantData


class ProgressionEngine:
    """Pure logic engine for plant progression.

    All methods are static - no instance state.

    Stage thresholds (experience required to leave a stage) live in
    const.PLANT_STAGE_THRESHOLDS. MYTHICAL is terminal.
    """

    @staticmethod
    def get_threshold(stage: str) -> float:
        """Return the experience required to leave a stage."""
        return const.PLANT_STAGE_THRESHOLDS.get(stage, float("inf"))

    @staticmethod
    def next_stage(stage: str) -> str:
        """Return the following stage; MYTHICAL (and unknown stages) stay put."""
        if stage not in const.PLANT_STAGES:
            return stage
        index = const.PLANT_STAGES.index(stage)
        if index + 1 >= len(const.PLANT_STAGES):
            return const.PLANT_STAGE_MYTHICAL
        return const.PLANT_STAGES[index + 1]

    @staticmethod
    def previous_threshold(stage: str) -> float:
        """Return the threshold of the stage before this one (0 for SEED)."""
        if stage not in const.PLANT_STAGES:
            return 0
        index = const.PLANT_STAGES.index(stage)
        if index == 0:
            return 0
        return ProgressionEngine.get_threshold(const.PLANT_STAGES[index - 1])

    @staticmethod
    def advance_stage(stage: str, experience: float) -> str:
        """Advance through as many stages as the experience allows."""
        while (
            stage != const.PLANT_STAGE_MYTHICAL
            and experience >= ProgressionEngine.get_threshold(stage)
        ):
            following = ProgressionEngine.next_stage(stage)
            if following == stage:
                break
            stage = following
        return stage

    @staticmethod
    def heal(health: str) -> str:
        """Apply one healing step (WITHERED → WILTING → THRIVING).

        DEAD and THRIVING are unaffected; only a revive brings back the dead.
        """
        return const.PLANT_HEALING_MAP.get(health, health)

    @staticmethod
    def apply_reward(plant: PlantData, just_completed: bool) -> PlantData:
        """Apply a completion (or undo) transition to the plant.

        Completion: +10 experience and one healing step, then stage advance.
        Undo: -10 experience (floor 0); health untouched. Stages never regress.

        Args:
            plant: Current plant state
            just_completed: True for a completion, False for an undo

        Returns:
            New plant dict.
        """
        result = dict(plant)
        experience = plant.get(const.DATA_PLANT_EXPERIENCE, 0)
        health = plant.get(const.DATA_PLANT_HEALTH, const.PLANT_HEALTH_THRIVING)

        if just_completed:
            experience += const.EXPERIENCE_PER_COMPLETION
            health = ProgressionEngine.heal(health)
        else:
            experience = max(0, experience - const.EXPERIENCE_PER_COMPLETION)

        result[const.DATA_PLANT_EXPERIENCE] = experience
        result[const.DATA_PLANT_HEALTH] = health
        result[const.DATA_PLANT_STAGE] = ProgressionEngine.advance_stage(
            plant.get(const.DATA_PLANT_STAGE, const.PLANT_STAGE_SEED), experience
        )
        return result  # type: ignore[return-value]

    @staticmethod
    def stage_progress_percent(experience: float, stage: str) -> float:
        """Return how far the plant is through its current stage (0-100).

        Rounded to two decimals. MYTHICAL always reports 100.
        """
        threshold = ProgressionEngine.get_threshold(stage)
        if threshold == float("inf"):
            return 100.0
        prev = ProgressionEngine.previous_threshold(stage)
        span = threshold - prev
        if span <= 0:
            return 100.0
        return clamp(calculate_percentage(experience - prev, span), 0.0, 100.0)

    @staticmethod
    def new_plant(today: str) -> PlantData:
        """Return a fresh thriving seed with no experience."""
        return build_plant(today)

    @staticmethod
    def revive(today: str) -> PlantData:
        """Reset the plant to a thriving seed.

        Callers restrict this to DEAD plants; the engine does not.
        """
        return ProgressionEngine.new_plant(today)
