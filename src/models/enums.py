"""
Enums for the behaviour lifecycle
"""

from enum import Enum, auto


class BehaviourState(Enum):
    """
    Lifecycle state of a single behaviour unit

    NONE: Not initialized (initial and terminal state)
    INITIALIZING: Setup hook ran, waiting for dependency validation
    INITIALIZED: Dependencies validated and Start hook ran
    """
    NONE = auto()
    INITIALIZING = auto()
    INITIALIZED = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Manifest loading, validation
    LIFECYCLE = auto()   # Register/unregister batches
    BEHAVIOUR = auto()   # Per-unit state transitions
    CONTROLLER = auto()  # Controller queries, dispose sweeps
    SHUTDOWN = auto()    # Host teardown handlers

    GENERAL = auto()     # Default general category
