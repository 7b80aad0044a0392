"""Tests for SocialManager - friends and groups through the directory.

Test Categories:
- Add friend (found, not found, self, duplicate, connection error)
- Create group
- Join group (found, not found, already joined)
"""

# pylint: disable=protected-access,redefined-outer-name,unused-argument

from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.bloom import const
from custom_components.bloom.helpers.directory_client import DirectoryError
from tests.helpers import FRIEND_CODE


@pytest.fixture
def social_manager(coordinator):
    """Return the social manager of the set-up entry."""
    return coordinator.social_manager


# =============================================================================
# FRIENDS
# =============================================================================


async def test_add_friend(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """A known code adds the profile (codes are case-insensitive)."""
    profile = await social_manager.add_friend(" petal-8 ")

    assert profile[const.DATA_NAME] == "Rose"
    assert [f[const.DATA_FRIEND_CODE] for f in coordinator.friends] == ["PETAL8"]


async def test_add_friend_twice(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """A second add of the same friend is rejected before any lookup."""
    await social_manager.add_friend("PETAL8")

    with (
        patch.object(social_manager.directory, "find_profile") as mock_find,
        pytest.raises(ServiceValidationError, match=const.MSG_ALREADY_FRIENDS),
    ):
        await social_manager.add_friend("petal8")

    mock_find.assert_not_called()
    assert len(coordinator.friends) == 1


async def test_add_self(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """Adding your own code is rejected."""
    with pytest.raises(ServiceValidationError, match=const.MSG_CANNOT_ADD_SELF):
        await social_manager.add_friend(FRIEND_CODE.lower())
    assert coordinator.friends == []


async def test_add_unknown_friend(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """Unknown codes raise 'Friend not found'."""
    with pytest.raises(HomeAssistantError, match=const.MSG_FRIEND_NOT_FOUND):
        await social_manager.add_friend("ZZZZZZ")
    assert coordinator.friends == []


async def test_add_friend_blank(
    hass: HomeAssistant, init_integration: MockConfigEntry, social_manager
) -> None:
    """Blank codes are rejected."""
    with pytest.raises(ServiceValidationError):
        await social_manager.add_friend("  - ")


async def test_add_friend_connection_error(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """Directory failures surface as a connection error."""
    with (
        patch.object(
            social_manager.directory,
            "find_profile",
            side_effect=DirectoryError("offline"),
        ),
        pytest.raises(HomeAssistantError, match=const.MSG_CONNECTION_ERROR),
    ):
        await social_manager.add_friend("PETAL8")
    assert coordinator.friends == []


# =============================================================================
# GROUPS
# =============================================================================


async def test_create_group(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """A new group holds only the user, mirroring current state."""
    group = await social_manager.create_group("  Morning Crew ")

    assert group[const.DATA_GROUP_NAME] == "Morning Crew"
    assert len(group[const.DATA_GROUP_CODE]) == const.FRIEND_CODE_LENGTH
    assert coordinator.groups == [group]
    (member,) = group[const.DATA_GROUP_MEMBERS]
    assert member[const.DATA_FRIEND_CODE] == FRIEND_CODE
    assert member[const.DATA_HABITS] == coordinator.habits


async def test_create_group_blank_name(
    hass: HomeAssistant, init_integration: MockConfigEntry, social_manager
) -> None:
    """Blank group names are rejected."""
    with pytest.raises(ServiceValidationError, match=const.MSG_GROUP_NAME_REQUIRED):
        await social_manager.create_group("   ")


async def test_join_group(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """Joining a seeded group appends the user to its members."""
    group = await social_manager.join_group("well24")

    names = [m[const.DATA_NAME] for m in group[const.DATA_GROUP_MEMBERS]]
    assert names == ["Rose", "Sage", "Ada"]
    assert coordinator.groups[0][const.DATA_GROUP_ID] == "p1"


async def test_join_group_member_slot_stays_current(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """After joining, my member slot follows later plant changes."""
    await social_manager.join_group("WELL24")
    coordinator.async_dispatch(
        const.EVENT_TOGGLE_HABIT, {const.PAYLOAD_HABIT_ID: "h_meditate"}
    )

    members = coordinator.groups[0][const.DATA_GROUP_MEMBERS]
    mine = next(m for m in members if m[const.DATA_FRIEND_CODE] == FRIEND_CODE)
    assert mine[const.DATA_PLANT] == coordinator.plant
    assert mine[const.DATA_PLANT][const.DATA_PLANT_EXPERIENCE] == 10


async def test_join_group_twice(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """Joining an already-joined group is rejected before any lookup."""
    await social_manager.join_group("WELL24")

    with (
        patch.object(social_manager.directory, "join_group") as mock_join,
        pytest.raises(ServiceValidationError, match=const.MSG_ALREADY_IN_GROUP),
    ):
        await social_manager.join_group("well-24")

    mock_join.assert_not_called()
    assert len(coordinator.groups) == 1


async def test_join_unknown_group(
    hass: HomeAssistant, init_integration: MockConfigEntry, coordinator, social_manager
) -> None:
    """Unknown group codes raise 'Group not found'."""
    with pytest.raises(HomeAssistantError, match=const.MSG_GROUP_NOT_FOUND):
        await social_manager.join_group("NOPE77")
    assert coordinator.groups == []
