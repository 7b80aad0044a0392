"""Tests for the SyncEngine - group membership projection."""

from custom_components.bloom import const
from custom_components.bloom.data_builders import build_snapshot
from custom_components.bloom.engines.sync_engine import SyncEngine
from tests.helpers import (
    FRIEND_CODE,
    make_boolean_habit,
    make_group,
    make_member,
    make_plant,
    make_state,
)


class TestProject:
    """Tests for SyncEngine.project."""

    def _state(self):
        return make_state(
            plant=make_plant(stage=const.PLANT_STAGE_TREE, experience=400),
            habits=[make_boolean_habit("h1")],
        )

    def test_my_slot_mirrors_snapshot(self) -> None:
        """The member matching my code is refreshed from my snapshot."""
        state = self._state()
        group = make_group(
            members=[
                make_member("Old Ada", FRIEND_CODE),
                make_member("Rose", "PETAL8"),
            ]
        )
        result = SyncEngine.project([group], FRIEND_CODE, build_snapshot(state))

        mine, other = result[0][const.DATA_GROUP_MEMBERS]
        assert mine[const.DATA_NAME] == "Ada"
        assert mine[const.DATA_PLANT][const.DATA_PLANT_STAGE] == const.PLANT_STAGE_TREE
        assert [h[const.DATA_HABIT_ID] for h in mine[const.DATA_HABITS]] == ["h1"]
        assert other[const.DATA_NAME] == "Rose"

    def test_other_members_untouched(self) -> None:
        """Members with other codes are carried over unchanged."""
        rose = make_member("Rose", "PETAL8")
        group = make_group(members=[rose])
        result = SyncEngine.project([group], FRIEND_CODE, build_snapshot(self._state()))
        assert result[0][const.DATA_GROUP_MEMBERS][0] == rose

    def test_projection_is_idempotent(self) -> None:
        """Projecting twice gives equal groups."""
        snapshot = build_snapshot(self._state())
        group = make_group(members=[make_member("Ada", FRIEND_CODE)])
        once = SyncEngine.project([group], FRIEND_CODE, snapshot)
        twice = SyncEngine.project(once, FRIEND_CODE, snapshot)
        assert once == twice

    def test_input_not_mutated(self) -> None:
        """The input groups keep their old member data."""
        group = make_group(members=[make_member("Old Ada", FRIEND_CODE)])
        SyncEngine.project([group], FRIEND_CODE, build_snapshot(self._state()))
        assert group[const.DATA_GROUP_MEMBERS][0][const.DATA_NAME] == "Old Ada"

    def test_projected_slot_is_a_copy(self) -> None:
        """Later changes to the snapshot do not leak into the group."""
        snapshot = build_snapshot(self._state())
        group = make_group(members=[make_member("Ada", FRIEND_CODE)])
        result = SyncEngine.project([group], FRIEND_CODE, snapshot)

        snapshot[const.DATA_HABITS].clear()
        assert len(result[0][const.DATA_GROUP_MEMBERS][0][const.DATA_HABITS]) == 1

    def test_empty_code_returns_groups(self) -> None:
        """Without an identity nothing is projected."""
        group = make_group(members=[make_member("Ada", "")])
        result = SyncEngine.project([group], "", build_snapshot(self._state()))
        assert result == [group]

    def test_member_code_matched_case_insensitively(self) -> None:
        """A directory record with a lower-cased, hyphenated code is still mine."""
        group = make_group(
            members=[make_member("Old Ada", "ada-234"), make_member("Rose", "PETAL8")]
        )
        result = SyncEngine.project([group], FRIEND_CODE, build_snapshot(self._state()))

        mine, other = result[0][const.DATA_GROUP_MEMBERS]
        assert mine[const.DATA_NAME] == "Ada"
        assert mine[const.DATA_FRIEND_CODE] == "ada-234"
        assert other[const.DATA_NAME] == "Rose"
