"""State Engine - The single-writer reducer `(state, event) -> state'`.

Every user action and session start is expressed as an event applied to an
immutable input state. The reducer:
    1. deep-copies the state,
    2. dispatches to the handler registered for the event type,
    3. feeds any ledger transition into the ProgressionEngine,
    4. re-projects the user's snapshot into every group,
and returns the whole next state for the coordinator to swap in atomically.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
Handlers mutate only the private copy. The coordinator owns the current state
and is the only caller.
"""

from __future__ import annotations

from collections.abc import Callable
import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const
from ..data_builders import build_snapshot, normalize_code
from .decay_engine import DecayEngine
from .food_engine import FoodEngine
from .habit_engine import HabitEngine, LedgerResult
from .progression_engine import ProgressionEngine
from .sync_engine import SyncEngine

if TYPE_CHECKING:
    from ..type_defs import UserState


# =============================================================================
# TYPE ALIASES
# =============================================================================

# Handler signature: (state copy, payload, today) -> ledger result or None
EventHandler = Callable[["UserState", dict[str, Any], str], "LedgerResult | None"]


@dataclass
class ReduceResult:
    """Outcome of reducing one event.

    Attributes:
        state: The complete next state
        event: The event type that produced it
        ledger: Ledger transition, when the event touched a habit
        all_completed_today: Every habit is done today and this event
            completed the last one
    """

    state: UserState
    event: str
    ledger: LedgerResult = field(default_factory=LedgerResult)
    all_completed_today: bool = False


class StateEngine:
    """Pure reducer over the whole user state (no instance state)."""

    # =========================================================================
    # EVENT HANDLER REGISTRY
    # =========================================================================

    _EVENT_HANDLERS: dict[str, EventHandler] = {}

    @classmethod
    def _register_handlers(cls) -> None:
        """Register all event handlers.

        Called lazily on first reduce to populate _EVENT_HANDLERS.
        """
        if cls._EVENT_HANDLERS:
            return

        cls._EVENT_HANDLERS = {
            const.EVENT_SESSION_START: cls._on_session_start,
            const.EVENT_COMPLETE_ONBOARDING: cls._on_complete_onboarding,
            const.EVENT_SET_NAME: cls._on_set_name,
            const.EVENT_TOGGLE_HABIT: cls._on_toggle_habit,
            const.EVENT_ADD_HABIT_PROGRESS: cls._on_add_habit_progress,
            const.EVENT_ADD_HABIT: cls._on_add_habit,
            const.EVENT_DELETE_HABIT: cls._on_delete_habit,
            const.EVENT_LOG_FOOD: cls._on_log_food,
            const.EVENT_REVIVE_PLANT: cls._on_revive_plant,
            const.EVENT_SET_THEME: cls._on_set_theme,
            const.EVENT_SET_ACTIVE_TAB: cls._on_set_active_tab,
            const.EVENT_ADD_FRIEND: cls._on_add_friend,
            const.EVENT_ADD_GROUP: cls._on_add_group,
        }

    # =========================================================================
    # REDUCER
    # =========================================================================

    @classmethod
    def reduce(
        cls,
        state: UserState,
        event: str,
        payload: dict[str, Any] | None,
        today: str,
    ) -> ReduceResult:
        """Apply one event and return the next state.

        Args:
            state: Current state (never mutated)
            event: One of const.EVENT_*
            payload: Event data keyed by const.PAYLOAD_*
            today: Current local date key

        Raises:
            ValueError: Unknown event type.
        """
        cls._register_handlers()

        handler = cls._EVENT_HANDLERS.get(event)
        if handler is None:
            raise ValueError(f"Unknown event type: {event}")

        next_state: UserState = copy.deepcopy(state)
        ledger = handler(next_state, payload or {}, today) or LedgerResult()

        next_state[const.DATA_GROUPS] = SyncEngine.project(
            next_state.get(const.DATA_GROUPS, []),
            next_state.get(const.DATA_FRIEND_CODE, ""),
            build_snapshot(next_state),
        )

        all_done = ledger.was_just_completed and HabitEngine.all_completed_on(
            next_state.get(const.DATA_HABITS, []), today
        )
        return ReduceResult(
            state=next_state,
            event=event,
            ledger=ledger,
            all_completed_today=all_done,
        )

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    @staticmethod
    def _reward(state: UserState, ledger: LedgerResult, today: str) -> LedgerResult:
        """Feed a ledger transition into the plant and stamp the interaction."""
        if not ledger.applied:
            return ledger
        plant = state[const.DATA_PLANT]
        if ledger.crossed:
            plant = ProgressionEngine.apply_reward(plant, ledger.was_just_completed)
        plant = dict(plant)
        plant[const.DATA_PLANT_LAST_INTERACTION_DATE] = today
        state[const.DATA_PLANT] = plant  # type: ignore[typeddict-item]
        return ledger

    # =========================================================================
    # HANDLERS
    # =========================================================================

    @staticmethod
    def _on_session_start(
        state: UserState, payload: dict[str, Any], today: str
    ) -> None:
        state[const.DATA_PLANT] = DecayEngine.apply_decay(state[const.DATA_PLANT], today)

    @staticmethod
    def _on_complete_onboarding(
        state: UserState, payload: dict[str, Any], today: str
    ) -> None:
        state[const.DATA_NAME] = str(payload.get(const.PAYLOAD_NAME, "")).strip()
        if payload.get(const.PAYLOAD_FRIEND_CODE):
            state[const.DATA_FRIEND_CODE] = payload[const.PAYLOAD_FRIEND_CODE]
        state[const.DATA_ONBOARDING_COMPLETE] = True
        state[const.DATA_PLANT] = ProgressionEngine.new_plant(today)

    @staticmethod
    def _on_set_name(state: UserState, payload: dict[str, Any], today: str) -> None:
        state[const.DATA_NAME] = str(payload.get(const.PAYLOAD_NAME, "")).strip()

    @staticmethod
    def _on_toggle_habit(
        state: UserState, payload: dict[str, Any], today: str
    ) -> LedgerResult:
        habit = HabitEngine.find_habit(
            state[const.DATA_HABITS], payload.get(const.PAYLOAD_HABIT_ID, "")
        )
        ledger = HabitEngine.toggle_boolean(habit, payload.get(const.PAYLOAD_DATE) or today)
        return StateEngine._reward(state, ledger, today)

    @staticmethod
    def _on_add_habit_progress(
        state: UserState, payload: dict[str, Any], today: str
    ) -> LedgerResult:
        habit = HabitEngine.find_habit(
            state[const.DATA_HABITS], payload.get(const.PAYLOAD_HABIT_ID, "")
        )
        ledger = HabitEngine.add_numeric_progress(
            habit,
            payload.get(const.PAYLOAD_DATE) or today,
            payload.get(const.PAYLOAD_AMOUNT, 0),
        )
        return StateEngine._reward(state, ledger, today)

    @staticmethod
    def _on_add_habit(state: UserState, payload: dict[str, Any], today: str) -> None:
        state[const.DATA_HABITS] = HabitEngine.add_habit(
            state[const.DATA_HABITS], payload[const.PAYLOAD_HABIT]
        )

    @staticmethod
    def _on_delete_habit(
        state: UserState, payload: dict[str, Any], today: str
    ) -> None:
        state[const.DATA_HABITS] = HabitEngine.delete_habit(
            state[const.DATA_HABITS], payload.get(const.PAYLOAD_HABIT_ID, "")
        )

    @staticmethod
    def _on_log_food(
        state: UserState, payload: dict[str, Any], today: str
    ) -> LedgerResult:
        food_logs, ledger = FoodEngine.log_food(
            state[const.DATA_FOOD_LOGS],
            state[const.DATA_HABITS],
            payload[const.PAYLOAD_FOOD_LOG],
        )
        state[const.DATA_FOOD_LOGS] = food_logs
        return StateEngine._reward(state, ledger, today)

    @staticmethod
    def _on_revive_plant(
        state: UserState, payload: dict[str, Any], today: str
    ) -> None:
        state[const.DATA_PLANT] = ProgressionEngine.revive(today)

    @staticmethod
    def _on_set_theme(state: UserState, payload: dict[str, Any], today: str) -> None:
        theme = payload.get(const.PAYLOAD_THEME)
        if theme in const.THEMES:
            state[const.DATA_THEME] = theme

    @staticmethod
    def _on_set_active_tab(
        state: UserState, payload: dict[str, Any], today: str
    ) -> None:
        tab = payload.get(const.PAYLOAD_TAB)
        if tab in const.TABS:
            state[const.DATA_LAST_ACTIVE_TAB] = tab

    @staticmethod
    def _on_add_friend(
        state: UserState, payload: dict[str, Any], today: str
    ) -> None:
        # Duplicate and self checks are repeated here against current state
        profile = payload[const.PAYLOAD_PROFILE]
        code = normalize_code(profile.get(const.DATA_FRIEND_CODE))
        if code == normalize_code(state.get(const.DATA_FRIEND_CODE)):
            return
        known = {
            normalize_code(f.get(const.DATA_FRIEND_CODE))
            for f in state[const.DATA_FRIENDS]
        }
        if code in known:
            return
        state[const.DATA_FRIENDS] = [*state[const.DATA_FRIENDS], profile]

    @staticmethod
    def _on_add_group(state: UserState, payload: dict[str, Any], today: str) -> None:
        group = payload[const.PAYLOAD_GROUP]
        if any(
            g.get(const.DATA_GROUP_ID) == group.get(const.DATA_GROUP_ID)
            for g in state[const.DATA_GROUPS]
        ):
            return
        state[const.DATA_GROUPS] = [*state[const.DATA_GROUPS], group]

