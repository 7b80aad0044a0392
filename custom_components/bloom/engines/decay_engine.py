"""Decay Engine - Pure logic for session-start health decay.

Health decays from elapsed calendar days only; there is no running clock. A
user who returns after ten missed days goes straight to DEAD without passing
through WILTING or WITHERED.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_days_between

if TYPE_CHECKING:
    from ..type_defs import PlantData


class DecayEngine:
    """Pure logic engine for the health decay rule.

    Gap table (whole calendar days since last interaction):
        0-1 → unchanged
        2   → WILTING
        3   → WITHERED
        4+  → DEAD
    """

    @staticmethod
    def health_for_gap(gap: int) -> str | None:
        """Return the decayed health for a gap, or None for no change."""
        if gap >= const.DECAY_GAP_DEAD:
            return const.PLANT_HEALTH_DEAD
        if gap == const.DECAY_GAP_WITHERED:
            return const.PLANT_HEALTH_WITHERED
        if gap == const.DECAY_GAP_WILTING:
            return const.PLANT_HEALTH_WILTING
        return None

    @staticmethod
    def worse_health(current: str, candidate: str) -> str:
        """Return whichever health is more severe."""
        severity = const.PLANT_HEALTH_STATES
        current_rank = severity.index(current) if current in severity else 0
        candidate_rank = severity.index(candidate) if candidate in severity else 0
        return current if current_rank >= candidate_rank else candidate

    @staticmethod
    def apply_decay(plant: PlantData, today: str) -> PlantData:
        """Evaluate decay once at session start.

        Decay never improves health: a withered plant that is two days idle
        stays withered. last_interaction_date is always stamped to today,
        including when the stored date is missing or unparseable (health is
        then left alone).

        Returns:
            New plant dict.
        """
        result = dict(plant)
        gap = dt_days_between(plant.get(const.DATA_PLANT_LAST_INTERACTION_DATE), today)
        current = plant.get(const.DATA_PLANT_HEALTH, const.PLANT_HEALTH_THRIVING)

        if gap is None:
            const.LOGGER.debug(
                "DEBUG: Decay skipped, no usable last interaction date (%s)",
                plant.get(const.DATA_PLANT_LAST_INTERACTION_DATE),
            )
        else:
            decayed = DecayEngine.health_for_gap(gap)
            if decayed is not None:
                result[const.DATA_PLANT_HEALTH] = DecayEngine.worse_health(
                    current, decayed
                )
            const.LOGGER.debug(
                "DEBUG: Decay evaluated: gap=%s days, health %s → %s",
                gap,
                current,
                result.get(const.DATA_PLANT_HEALTH, current),
            )

        result[const.DATA_PLANT_LAST_INTERACTION_DATE] = today
        return result  # type: ignore[return-value]
