"""Test helpers for Bloom integration tests.

    from tests.helpers import (
        make_boolean_habit, make_numeric_habit, make_plant, make_state,
        make_member, make_group, TODAY, YESTERDAY,
    )

See builders.py for full documentation.
"""

from tests.helpers.builders import (
    FRIEND_CODE,
    TODAY,
    YESTERDAY,
    make_boolean_habit,
    make_group,
    make_member,
    make_numeric_habit,
    make_plant,
    make_state,
)

__all__ = [
    "FRIEND_CODE",
    "TODAY",
    "YESTERDAY",
    "make_boolean_habit",
    "make_group",
    "make_member",
    "make_numeric_habit",
    "make_plant",
    "make_state",
]
