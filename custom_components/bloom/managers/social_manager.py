"""Social Manager - Friends and group membership workflows.

This manager handles the three directory-backed workflows:
- Add friend: look up a profile by friend code and add it to the friend list
- Create group: register a new group with the user as its only member
- Join group: join an existing group by its code

ARCHITECTURE:
- Self, duplicate and blank-input checks run BEFORE any directory call
- The directory call is awaited without holding any state
- The result is applied by dispatching an event, which re-reads current state
  and repeats the duplicate checks (the reducer is the single writer)

Event Flow:
    SocialManager.add_friend() -> directory.find_profile()
        -> coordinator.async_dispatch(EVENT_ADD_FRIEND)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.exceptions import HomeAssistantError, ServiceValidationError

from .. import const, data_builders as db
from ..helpers.directory_client import DirectoryError, MockDirectoryClient
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import BloomDataCoordinator
    from ..type_defs import FriendProfile, GroupData


class SocialManager(BaseManager):
    """Manager for friend and group workflows.

    Responsibilities:
    - Validate codes and names before contacting the directory
    - Translate directory outcomes into service errors
    - Apply results through the coordinator

    NOT responsible for:
    - Keeping the user's own member slot in sync (the reducer does that)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: BloomDataCoordinator,
        directory: MockDirectoryClient | None = None,
    ) -> None:
        """Initialize the social manager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator
            directory: Directory client (defaults to the seeded mock directory)
        """
        super().__init__(hass, coordinator)
        self.directory = directory or MockDirectoryClient()

    async def async_setup(self) -> None:
        """Nothing to subscribe to; workflows are driven by services."""
        const.LOGGER.debug(
            "DEBUG: SocialManager ready for instance %s (%s friends, %s groups)",
            self.entry_id,
            len(self.coordinator.friends),
            len(self.coordinator.groups),
        )

    # =========================================================================
    # Validation
    # =========================================================================

    def _is_own_code(self, code: str) -> bool:
        return code == db.normalize_code(self.coordinator.friend_code)

    def _is_known_friend(self, code: str) -> bool:
        return any(
            db.normalize_code(friend.get(const.DATA_FRIEND_CODE)) == code
            for friend in self.coordinator.friends
        )

    def _is_joined_group(self, code: str) -> bool:
        return any(
            db.normalize_code(group.get(const.DATA_GROUP_CODE)) == code
            for group in self.coordinator.groups
        )

    # =========================================================================
    # Workflows
    # =========================================================================

    async def add_friend(self, code: str) -> FriendProfile:
        """Look up a friend by code and add them.

        Raises:
            ServiceValidationError: Blank code, own code, or already a friend.
            HomeAssistantError: Friend not found, or directory unreachable.
        """
        wanted = db.normalize_code(code)
        if not wanted:
            raise ServiceValidationError(const.MSG_FRIEND_NOT_FOUND)
        if self._is_own_code(wanted):
            raise ServiceValidationError(const.MSG_CANNOT_ADD_SELF)
        if self._is_known_friend(wanted):
            raise ServiceValidationError(const.MSG_ALREADY_FRIENDS)

        const.LOGGER.debug("DEBUG: Looking up friend code %s", wanted)
        try:
            profile = await self.directory.find_profile(wanted)
        except DirectoryError as err:
            const.LOGGER.warning("WARNING: Friend lookup failed: %s", err)
            raise HomeAssistantError(const.MSG_CONNECTION_ERROR) from err

        if profile is None:
            const.LOGGER.info("INFO: Friend code %s not found", wanted)
            raise HomeAssistantError(const.MSG_FRIEND_NOT_FOUND)

        self.coordinator.async_dispatch(
            const.EVENT_ADD_FRIEND, {const.PAYLOAD_PROFILE: profile}
        )
        const.LOGGER.info(
            "INFO: Added friend %s (%s)",
            profile.get(const.DATA_NAME),
            profile.get(const.DATA_FRIEND_CODE),
        )
        return profile

    async def create_group(self, name: str) -> GroupData:
        """Create a new group owned by the user.

        Raises:
            ServiceValidationError: Blank group name.
            HomeAssistantError: Directory unreachable.
        """
        clean_name = str(name or "").strip()
        if not clean_name:
            raise ServiceValidationError(const.MSG_GROUP_NAME_REQUIRED)

        try:
            group = await self.directory.create_group(
                clean_name, self.coordinator.snapshot
            )
        except db.EntityValidationError as err:
            raise ServiceValidationError(err.message) from err
        except DirectoryError as err:
            const.LOGGER.warning("WARNING: Group creation failed: %s", err)
            raise HomeAssistantError(const.MSG_CONNECTION_ERROR) from err

        return self._apply_group(group)

    async def join_group(self, code: str) -> GroupData:
        """Join an existing group by code.

        Raises:
            ServiceValidationError: Blank code, or group already joined.
            HomeAssistantError: Group not found, or directory unreachable.
        """
        wanted = db.normalize_code(code)
        if not wanted:
            raise ServiceValidationError(const.MSG_GROUP_NOT_FOUND)
        if self._is_joined_group(wanted):
            raise ServiceValidationError(const.MSG_ALREADY_IN_GROUP)

        try:
            group = await self.directory.join_group(wanted, self.coordinator.snapshot)
        except DirectoryError as err:
            const.LOGGER.warning("WARNING: Group join failed: %s", err)
            raise HomeAssistantError(const.MSG_CONNECTION_ERROR) from err

        if group is None:
            const.LOGGER.info("INFO: Group code %s not found", wanted)
            raise HomeAssistantError(const.MSG_GROUP_NOT_FOUND)

        return self._apply_group(group)

    def _apply_group(self, group: GroupData) -> GroupData:
        """Dispatch the group and return the stored (projected) copy."""
        group_id = group.get(const.DATA_GROUP_ID)
        self.coordinator.async_dispatch(
            const.EVENT_ADD_GROUP, {const.PAYLOAD_GROUP: group}
        )
        stored = next(
            (g for g in self.coordinator.groups if g.get(const.DATA_GROUP_ID) == group_id),
            group,
        )
        const.LOGGER.info(
            "INFO: Joined group %s (%s)",
            stored.get(const.DATA_GROUP_NAME),
            stored.get(const.DATA_GROUP_CODE),
        )
        return stored
