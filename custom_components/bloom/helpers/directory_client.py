# File: helpers/directory_client.py
"""Friend and group directory for Bloom.

The directory is an external collaborator with three calls:
    find_profile(code) -> profile or None
    create_group(name, owner) -> group
    join_group(code, joiner) -> group or None

MockDirectoryClient is an in-process stand-in seeded with a few profiles and
one group, with a simulated network latency. Codes are case-insensitive and
separators are ignored, so "petal-8", "PETAL8" and " Petal8 " all match.
"""

from __future__ import annotations

import asyncio
import copy
from typing import TYPE_CHECKING

from homeassistant.exceptions import HomeAssistantError

from .. import const, data_builders as db
from ..utils.dt_utils import dt_today_iso

if TYPE_CHECKING:
    from ..type_defs import FriendProfile, GroupData, HabitData, PlantData, UserSnapshot


class DirectoryError(HomeAssistantError):
    """Raised when the directory service cannot be reached."""


def _plant(stage: str, health: str, experience: int, level: int, date: str) -> PlantData:
    return {
        const.DATA_PLANT_STAGE: stage,
        const.DATA_PLANT_HEALTH: health,
        const.DATA_PLANT_EXPERIENCE: experience,
        const.DATA_PLANT_LEVEL: level,
        const.DATA_PLANT_LAST_INTERACTION_DATE: date,
    }  # type: ignore[return-value]


def _habit(
    habit_id: str,
    title: str,
    kind: str,
    target: float,
    unit: str,
    completed_dates: list[str],
    streak: int,
    progress: dict[str, float],
) -> HabitData:
    return {
        const.DATA_HABIT_ID: habit_id,
        const.DATA_HABIT_TITLE: title,
        const.DATA_HABIT_KIND: kind,
        const.DATA_HABIT_TARGET: target,
        const.DATA_HABIT_MAX_TARGET: None,
        const.DATA_HABIT_UNIT: unit,
        const.DATA_HABIT_COMPLETED_DATES: completed_dates,
        const.DATA_HABIT_STREAK: streak,
        const.DATA_HABIT_PROGRESS: progress,
    }  # type: ignore[return-value]


def build_seed_profiles(today: str) -> list[FriendProfile]:
    """Return the seeded directory profiles."""
    return [
        {
            const.DATA_NAME: "Rose",
            const.DATA_FRIEND_CODE: "PETAL8",
            const.DATA_PLANT: _plant(
                const.PLANT_STAGE_FLOWERING, const.PLANT_HEALTH_THRIVING, 900, 12, today
            ),
            const.DATA_HABITS: [
                _habit("m1", "Morning Yoga", const.HABIT_KIND_BOOLEAN, 1, "", [today], 5, {}),
                _habit("m2", "Water", const.HABIT_KIND_NUMERIC, 8, "cups", [], 2, {today: 4}),
            ],
        },
        {
            const.DATA_NAME: "Sage",
            const.DATA_FRIEND_CODE: "SAGE99",
            const.DATA_PLANT: _plant(
                const.PLANT_STAGE_TREE, const.PLANT_HEALTH_WILTING, 600, 8, "2023-01-01"
            ),
            const.DATA_HABITS: [
                _habit("m3", "Read Book", const.HABIT_KIND_NUMERIC, 30, "mins", [], 0, {}),
            ],
        },
        {
            const.DATA_NAME: "Basil",
            const.DATA_FRIEND_CODE: "HERB42",
            const.DATA_PLANT: _plant(
                const.PLANT_STAGE_SPROUT, const.PLANT_HEALTH_THRIVING, 120, 2, today
            ),
            const.DATA_HABITS: [
                _habit("m4", "Code", const.HABIT_KIND_BOOLEAN, 1, "", [today], 1, {}),
            ],
        },
    ]  # type: ignore[return-value]


def build_seed_groups(profiles: list[FriendProfile], today: str) -> list[GroupData]:
    """Return the seeded directory groups."""
    return [
        {
            const.DATA_GROUP_ID: "p1",
            const.DATA_GROUP_NAME: "Wellness Warriors",
            const.DATA_GROUP_CODE: "WELL24",
            const.DATA_GROUP_MEMBERS: [
                copy.deepcopy(profiles[0]),
                copy.deepcopy(profiles[1]),
            ],
            const.DATA_GROUP_SHARED_PLANT: _plant(
                const.PLANT_STAGE_TREE, const.PLANT_HEALTH_THRIVING, 800, 5, today
            ),
        }
    ]  # type: ignore[return-value]


class MockDirectoryClient:
    """In-process directory seeded with demo profiles and groups.

    Returned records are deep copies; callers never alias directory state.
    """

    def __init__(
        self,
        latency: float = const.DIRECTORY_SIMULATED_LATENCY,
        today: str | None = None,
    ) -> None:
        """Initialize the directory with its seed data."""
        self._latency = latency
        seed_date = today or dt_today_iso()
        self._profiles = build_seed_profiles(seed_date)
        self._groups = build_seed_groups(self._profiles, seed_date)

    async def _simulate_network(self) -> None:
        if self._latency > 0:
            await asyncio.sleep(self._latency)

    async def find_profile(self, code: str) -> FriendProfile | None:
        """Look up a friend profile by code."""
        await self._simulate_network()
        wanted = db.normalize_code(code)
        if not wanted:
            return None
        for profile in self._profiles:
            if db.normalize_code(profile[const.DATA_FRIEND_CODE]) == wanted:
                return copy.deepcopy(profile)
        return None

    async def create_group(self, name: str, owner: UserSnapshot) -> GroupData:
        """Create a group with the owner as its only member.

        Raises:
            EntityValidationError: Blank group name.
        """
        await self._simulate_network()
        group = db.build_group(name, db.generate_friend_code(), owner)
        self._groups.append(copy.deepcopy(group))
        return group

    async def join_group(self, code: str, joiner: UserSnapshot) -> GroupData | None:
        """Return a copy of the group with the joiner appended, or None."""
        await self._simulate_network()
        wanted = db.normalize_code(code)
        for group in self._groups:
            if db.normalize_code(group[const.DATA_GROUP_CODE]) != wanted:
                continue
            joined = copy.deepcopy(group)
            members = joined[const.DATA_GROUP_MEMBERS]
            if not any(
                m.get(const.DATA_FRIEND_CODE) == joiner.get(const.DATA_FRIEND_CODE)
                for m in members
            ):
                members.append(copy.deepcopy(joiner))
            return joined
        return None
