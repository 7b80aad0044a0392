"""Manager modules for Bloom integration.

Managers orchestrate asynchronous workflows (directory lookups, estimation
requests) around the pure engines. They never write state directly; results
are applied by dispatching an event through the coordinator.
"""

from .base_manager import BaseManager
from .insight_manager import InsightManager
from .social_manager import SocialManager

__all__ = [
    "BaseManager",
    "InsightManager",
    "SocialManager",
]
