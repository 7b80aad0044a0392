# File: helpers/__init__.py
"""Home Assistant-bound helper functions for Bloom.

This module contains functions that REQUIRE Home Assistant dependencies.

NOTE: Functions that need `hass` object belong here, NOT in utils/.

Submodules:
    - entity_helpers: Event signals, entity registry cleanup
    - device_helpers: DeviceInfo construction
    - directory_client: Friend and group directory (mock service)
    - estimation_client: Generative estimation service (Gemini REST)

Usage:
    from .helpers.entity_helpers import get_event_signal
    from .helpers.directory_client import MockDirectoryClient
"""

from . import device_helpers, directory_client, entity_helpers, estimation_client

__all__ = [
    "device_helpers",
    "directory_client",
    "entity_helpers",
    "estimation_client",
]
