"""
Lifecycle subsystem
-------------------

Exports the public API for:
- behaviour units and their state machine
- the reference-counted behaviour controller
- host teardown (shutdown coordinator & handlers)

External code should import from:
    from lifecycle import BehaviourUnit, BehaviourController
    from lifecycle.handlers import ControllerShutdownHandler
"""

from .behaviour import BehaviourUnit
from .controller import BehaviourController, HookedBehaviourController, BehaviourHandler
from .errors import (
    LifecycleError,
    InvalidDependencyError,
    DependencyAssignmentError,
    ManifestError,
)
from .users import UserToken, UserRegistry
from .shutdown_coordinator import ShutdownCoordinator
from .shutdown_protocol import IShutdownHandler
from . import handlers

__all__ = [
    "BehaviourUnit",
    "BehaviourController",
    "HookedBehaviourController",
    "BehaviourHandler",
    "LifecycleError",
    "InvalidDependencyError",
    "DependencyAssignmentError",
    "ManifestError",
    "UserToken",
    "UserRegistry",
    "ShutdownCoordinator",
    "IShutdownHandler",
    "handlers",
]
