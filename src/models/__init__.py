"""
Models package - Enums and manifest schemas for the behaviour lifecycle
"""

from .enums import BehaviourState, LogLevel, LogCategory
from .manifest import BehaviourEntry, BehaviourManifest, LoggingSettings

__all__ = [
    'BehaviourState',
    'LogLevel',
    'LogCategory',
    'BehaviourEntry',
    'BehaviourManifest',
    'LoggingSettings',
]
