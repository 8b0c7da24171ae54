"""
Behaviour controller
--------------------

Reference-counted orchestration of a fixed, ordered array of behaviours.

Use register() when a consumer scope (scene, session, ...) starts needing
the shared behaviours and unregister() when it ends. Behaviours are
deinitialized when the last user leaves. To keep behaviours alive across
scopes, register the next scope before unregistering the previous one.

Call dispose() (or force_deinitialization()) at host teardown so behaviours
release their resources even if some users never unregistered.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Generic, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

from lifecycle.behaviour import BehaviourUnit
from lifecycle.dependencies import Predicate, select_all, select_first, try_select
from lifecycle.users import UserRegistry, UserToken
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.LIFECYCLE)
sweep_log = log.with_category(LogCategory.CONTROLLER)

B = TypeVar("B", bound=BehaviourUnit)
T = TypeVar("T")

BehaviourHandler = Callable[[BehaviourUnit], None]


class BehaviourController(Generic[B]):
    """
    Drives batched lifecycle transitions for a fixed behaviour array.

    Every register() replays the full init passes (units that are already
    initialized ignore them); only the last unregister() runs the deinit
    pass. Passes always follow array order, so the array must list
    dependencies before their dependents.

    Example:
        controller = BehaviourController([settings, audio, input_map])

        controller.register(main_menu)   # settings, audio, input_map initialized
        controller.register(level_1)     # no-op, already initialized
        controller.unregister(main_menu)
        controller.unregister(level_1)   # last user → all deinitialized

        controller.dispose()
    """

    def __init__(self, behaviours: Sequence[B]):
        """
        Initialize controller.

        Args:
            behaviours: Behaviours in lifecycle order (borrowed, never modified)
        """
        self._behaviours: Tuple[B, ...] = tuple(behaviours)
        self._users = UserRegistry()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} behaviours={len(self._behaviours)} users={len(self._users)}>"

    def __enter__(self) -> "BehaviourController[B]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # -----------------------------
    # Properties
    # -----------------------------
    @property
    def behaviours(self) -> Tuple[B, ...]:
        return self._behaviours

    @property
    def user_count(self) -> int:
        return len(self._users)

    def has_user(self, user: object) -> bool:
        return user in self._users

    # -----------------------------
    # Users
    # -----------------------------
    def register(self, user: object) -> None:
        """
        Register a user and make sure every behaviour is initialized.

        If any behaviour (or hook) raises, the whole controller is disposed
        and the original error is re-raised.

        Args:
            user: Any object acting as the user of the behaviours, compared by identity
        """
        added = self._users.add(user)
        log.debug(
            "User registered" if added else "User already registered",
            user=repr(user),
            users=len(self._users),
        )

        try:
            self._perform_init()
        except Exception as e:
            log.error(
                "Behaviour initialization failed, disposing all behaviours",
                error=str(e),
                error_type=type(e).__name__,
            )
            try:
                self.dispose()
            except Exception as dispose_error:
                log.error("Dispose after failed initialization raised", error=str(dispose_error))
            raise

        if added and len(self._users) == 1:
            log.info("First user registered, behaviours initialized", behaviours=len(self._behaviours))

    def unregister(self, user: object) -> None:
        """
        Unregister a user; deinitialize every behaviour once no users remain.

        Unknown users are ignored.
        """
        if not self._users.remove(user):
            log.debug("Unregister ignored, user not registered", user=repr(user))
            return

        log.debug("User unregistered", user=repr(user), users=len(self._users))
        if len(self._users) == 0:
            log.info("Last user unregistered, deinitializing behaviours")
            self._perform_deinit()

    @contextmanager
    def scope(self, user: Optional[object] = None) -> Iterator[object]:
        """
        Register ``user`` (a fresh UserToken if omitted) for the duration of a with-block.

        Example:
            with controller.scope() as token:
                run_scene()
        """
        if user is None:
            user = UserToken()
        self.register(user)
        try:
            yield user
        finally:
            self.unregister(user)

    # -----------------------------
    # Queries
    # -----------------------------
    def get_behaviours(self, kind: Type[T], predicate: Optional[Predicate] = None) -> List[T]:
        """Return every behaviour of ``kind`` matching ``predicate``, in array order."""
        return select_all(self._behaviours, kind, predicate)

    def get_behaviour(self, kind: Type[T], predicate: Optional[Predicate] = None) -> Optional[T]:
        """Return the first behaviour of ``kind`` matching ``predicate``, or None."""
        return select_first(self._behaviours, kind, predicate)

    def try_get_behaviour(
        self, kind: Type[T], predicate: Optional[Predicate] = None
    ) -> Tuple[bool, Optional[T]]:
        """Return ``(found, behaviour)`` for the first match."""
        return try_select(self._behaviours, kind, predicate)

    def for_each(self, action: Callable[[T], None], kind: Optional[Type[T]] = None) -> None:
        """
        Call ``action`` on every behaviour (optionally only those of ``kind``).

        An exception from ``action`` stops iteration and propagates.
        """
        for behaviour in self._behaviours:
            if kind is None or isinstance(behaviour, kind):
                action(behaviour)

    # -----------------------------
    # Teardown
    # -----------------------------
    def force_deinitialization(self) -> None:
        """Clear all users and deinitialize every behaviour."""
        dropped = len(self._users)
        self._users.clear()
        log.info("Forcing deinitialization", dropped_users=dropped)
        self._perform_deinit()

    def dispose(self) -> None:
        """
        Clear all users and dispose every behaviour.

        Every behaviour ends in NONE even when hooks raise; the first error
        is re-raised after the sweep completes.
        """
        errors: List[Exception] = []

        try:
            self.force_deinitialization()
        except Exception as e:
            sweep_log.error("Deinitialization failed during dispose", error=str(e), error_type=type(e).__name__)
            errors.append(e)

        for behaviour in self._behaviours:
            try:
                behaviour.dispose()
            except Exception as e:
                sweep_log.error(
                    f"Error disposing {behaviour.name}",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                errors.append(e)

        self._release_hooks()
        sweep_log.info("Behaviours disposed", behaviours=len(self._behaviours), errors=len(errors))

        if errors:
            raise errors[0]

    # -----------------------------
    # Passes
    # -----------------------------
    def _perform_init(self) -> None:
        for behaviour in self._behaviours:
            self._initialize_behaviour(behaviour)

        for behaviour in self._behaviours:
            behaviour.initialized()

    def _perform_deinit(self) -> None:
        for behaviour in self._behaviours:
            self._deinitialize_behaviour(behaviour)

    def _initialize_behaviour(self, behaviour: B) -> None:
        behaviour.initialize()

    def _deinitialize_behaviour(self, behaviour: B) -> None:
        behaviour.deinitialize()

    def _release_hooks(self) -> None:
        pass


class HookedBehaviourController(BehaviourController[B]):
    """
    BehaviourController with per-behaviour callbacks.

    ``on_init`` runs immediately before each behaviour's initialize();
    ``on_deinit`` runs immediately after each behaviour's deinitialize().
    Both run for every behaviour on every pass, including behaviours whose
    transition is a no-op. Callbacks are dropped on dispose().

    Example:
        controller = HookedBehaviourController(
            behaviours,
            on_init=lambda b: injector.inject(b),
            on_deinit=lambda b: injector.release(b),
        )
    """

    def __init__(
        self,
        behaviours: Sequence[B],
        on_init: Optional[BehaviourHandler] = None,
        on_deinit: Optional[BehaviourHandler] = None,
    ):
        super().__init__(behaviours)
        self._on_init = on_init
        self._on_deinit = on_deinit

    def _initialize_behaviour(self, behaviour: B) -> None:
        if self._on_init is not None:
            self._on_init(behaviour)
        behaviour.initialize()

    def _deinitialize_behaviour(self, behaviour: B) -> None:
        behaviour.deinitialize()
        if self._on_deinit is not None:
            self._on_deinit(behaviour)

    def _release_hooks(self) -> None:
        self._on_init = None
        self._on_deinit = None
