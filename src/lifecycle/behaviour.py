"""
Behaviour unit
--------------

Base class for shared, stateful units driven by a BehaviourController.

A unit moves through three states:

    NONE --initialize()--> INITIALIZING --initialized()--> INITIALIZED
      ^                                                       |
      +------------------- deinitialize() / dispose() --------+

Each transition method is a no-op when called from the wrong state, so a
controller can replay whole passes over its array without double-running
hooks. Subclasses implement the hooks:

- on_setup()   entering INITIALIZING
- on_start()   entering INITIALIZED, after dependency validation
- on_end()     returning to NONE
- on_dispose() terminal teardown (optional)

Example:
    class AudioBehaviour(BehaviourUnit):
        def on_setup(self):
            self.mixer = Mixer()

        def on_start(self):
            settings = self.get_dependency(SettingsBehaviour)
            self.mixer.volume = settings.volume

        def on_end(self):
            self.mixer.close()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple, Type, TypeVar

from lifecycle.dependencies import Predicate, select_all, select_first, try_select
from lifecycle.errors import DependencyAssignmentError, InvalidDependencyError
from models.enums import BehaviourState
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.BEHAVIOUR)

T = TypeVar("T")


class BehaviourUnit(ABC):
    """
    A shared unit with an explicit three-state lifecycle.

    Only a BehaviourController is expected to call initialize(),
    initialized(), deinitialize() and dispose(). Dependencies are assigned
    once by the host, before the first registration.
    """

    def __init__(self, name: Optional[str] = None, dependencies: Iterable[object] = ()):
        """
        Initialize behaviour unit.

        Args:
            name: Display name used in diagnostics (defaults to class name)
            dependencies: Ordered, non-owning references this unit needs
        """
        self.name = name or type(self).__name__
        self._state = BehaviourState.NONE
        self._dependencies: Tuple[object, ...] = tuple(dependencies)
        self._dependencies_locked = False
        self._disposed = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} {self._state.name}>"

    # -----------------------------
    # Read-only state
    # -----------------------------
    @property
    def state(self) -> BehaviourState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is BehaviourState.INITIALIZED

    @property
    def dependencies(self) -> Tuple[object, ...]:
        return self._dependencies

    def assign_dependencies(self, dependencies: Iterable[object]) -> None:
        """
        Replace the dependency list.

        Raises:
            DependencyAssignmentError: If the unit has already been initialized once
        """
        if self._dependencies_locked:
            raise DependencyAssignmentError(
                f"Dependencies of {self.name} are fixed once it has been initialized"
            )
        self._dependencies = tuple(dependencies)

    # -----------------------------
    # State machine
    # -----------------------------
    def initialize(self) -> None:
        """NONE -> INITIALIZING, then run on_setup()."""
        if self._state is not BehaviourState.NONE:
            return

        self._dependencies_locked = True
        self._disposed = False
        self._state = BehaviourState.INITIALIZING
        log.debug(f"{self.name}: NONE → INITIALIZING")
        self.on_setup()

    def initialized(self) -> None:
        """
        INITIALIZING -> INITIALIZED, then run on_start().

        Raises:
            InvalidDependencyError: If a dependency fails validation; the
                unit stays in INITIALIZING
        """
        if self._state is not BehaviourState.INITIALIZING:
            return

        self._check_dependencies()
        self._state = BehaviourState.INITIALIZED
        log.debug(f"{self.name}: INITIALIZING → INITIALIZED")
        self.on_start()

    def deinitialize(self) -> None:
        """Run on_end(), then return to NONE even if the hook raises."""
        if self._state is BehaviourState.NONE:
            return

        try:
            self.on_end()
        finally:
            previous = self._state
            self._state = BehaviourState.NONE
            log.debug(f"{self.name}: {previous.name} → NONE")

    def dispose(self) -> None:
        """
        Deinitialize, run on_dispose(), and always finish in NONE.

        on_dispose() runs at most once until the next initialize(), so
        repeated dispose calls have no further effect.
        """
        try:
            self.deinitialize()
            if not self._disposed:
                self._disposed = True
                self.on_dispose()
        finally:
            self._state = BehaviourState.NONE

    # -----------------------------
    # Dependency validation
    # -----------------------------
    def check_dependency(self, dependency: object) -> Tuple[bool, Optional[str]]:
        """
        Decide whether a single dependency is usable.

        Override to accept weaker guarantees or to validate non-behaviour
        dependencies. The default only rejects behaviour units that are
        still in NONE.

        Args:
            dependency: One entry of the dependency list

        Returns:
            ``(True, None)`` when valid, ``(False, message)`` otherwise
        """
        if isinstance(dependency, BehaviourUnit) and dependency.state is BehaviourState.NONE:
            return False, f"Dependency {dependency.name} is not initialized (required by {self.name})"
        return True, None

    def _check_dependencies(self) -> None:
        for dependency in self._dependencies:
            ok, message = self.check_dependency(dependency)
            if not ok:
                raise InvalidDependencyError(
                    message or f"Invalid dependency {dependency!r} for {self.name}",
                    behaviour=self,
                    dependency=dependency,
                )

    # -----------------------------
    # Dependency accessor
    # -----------------------------
    def get_dependency(self, kind: Type[T], predicate: Optional[Predicate] = None) -> Optional[T]:
        """Return the first dependency of ``kind`` matching ``predicate``, or None."""
        return select_first(self._dependencies, kind, predicate)

    def try_get_dependency(
        self, kind: Type[T], predicate: Optional[Predicate] = None
    ) -> Tuple[bool, Optional[T]]:
        """Return ``(found, dependency)`` for the first match."""
        return try_select(self._dependencies, kind, predicate)

    def get_dependencies(self, kind: Type[T], predicate: Optional[Predicate] = None) -> List[T]:
        """Return every dependency of ``kind`` matching ``predicate``, in declaration order."""
        return select_all(self._dependencies, kind, predicate)

    # -----------------------------
    # Hooks
    # -----------------------------
    @abstractmethod
    def on_setup(self) -> None:
        ...

    @abstractmethod
    def on_start(self) -> None:
        ...

    @abstractmethod
    def on_end(self) -> None:
        ...

    def on_dispose(self) -> None:
        pass
