"""Sync Engine - Pure logic for group membership projection.

Each group embeds a snapshot of every member. The local user's slot is derived
state: it must always equal the user's own current snapshot, matched by friend
code (case and separators ignored). Other members are externally supplied and
are never touched.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
The projector is cheap, so the StateEngine runs it after every event.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from .. import const
from ..data_builders import normalize_code

if TYPE_CHECKING:
    from ..type_defs import GroupData, UserSnapshot

# Snapshot fields owned by the local user
SNAPSHOT_FIELDS = (const.DATA_NAME, const.DATA_PLANT, const.DATA_HABITS)


class SyncEngine:
    """Pure logic engine for projecting the user snapshot into groups."""

    @staticmethod
    def project_member(member: UserSnapshot, snapshot: UserSnapshot) -> UserSnapshot:
        """Return the member slot refreshed from the snapshot."""
        refreshed = dict(member)
        for field in SNAPSHOT_FIELDS:
            refreshed[field] = copy.deepcopy(snapshot.get(field))
        return refreshed  # type: ignore[return-value]

    @staticmethod
    def project(
        groups: list[GroupData],
        my_friend_code: str,
        snapshot: UserSnapshot,
    ) -> list[GroupData]:
        """Republish the snapshot into every membership matching my code.

        Idempotent: projecting the same snapshot twice yields equal groups.
        Input groups are not mutated; untouched members are carried over as-is.

        Args:
            groups: Current group list
            my_friend_code: The local user's identity
            snapshot: The local user's latest snapshot

        Returns:
            New group list.
        """
        wanted = normalize_code(my_friend_code)
        if not wanted:
            return list(groups)

        projected: list[GroupData] = []
        for group in groups:
            members = group.get(const.DATA_GROUP_MEMBERS, [])
            new_members = [
                SyncEngine.project_member(member, snapshot)
                if normalize_code(member.get(const.DATA_FRIEND_CODE)) == wanted
                else member
                for member in members
            ]
            new_group = dict(group)
            new_group[const.DATA_GROUP_MEMBERS] = new_members
            projected.append(new_group)  # type: ignore[arg-type]
        return projected
