"""Errors raised by the behaviour lifecycle."""

from __future__ import annotations

from typing import Any, Optional


class LifecycleError(Exception):
    """Base class for every error raised by the lifecycle package."""


class InvalidDependencyError(LifecycleError):
    """
    A behaviour's dependency failed validation while it was completing
    its Initializing -> Initialized transition.
    """

    def __init__(self, message: str, *, behaviour: Any = None, dependency: Any = None):
        super().__init__(message)
        self.behaviour = behaviour
        self.dependency = dependency


class DependencyAssignmentError(LifecycleError):
    """Dependencies were assigned after the behaviour entered its lifecycle."""


class ManifestError(LifecycleError):
    """A behaviour manifest could not be loaded, validated or assembled."""

    def __init__(self, message: str, *, source: Optional[str] = None):
        if source:
            message = f"{source}: {message}"
        super().__init__(message)
        self.source = source
