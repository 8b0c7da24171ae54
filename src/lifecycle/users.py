"""
User tracking for shared behaviours.

A user is any object standing for one consumer scope (a scene, a session,
a request handler). Users are tracked by identity: two distinct objects that
compare equal are still two users.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional


@dataclass(frozen=True, eq=False)
class UserToken:
    """Opaque user identity with an optional label for logs."""
    label: Optional[str] = None

    def __repr__(self) -> str:
        return f"<UserToken {self.label or hex(id(self))}>"


class UserRegistry:
    """
    Identity-keyed set of registered users.

    Holds a strong reference to each user so its id() cannot be recycled
    while it is registered.
    """

    def __init__(self) -> None:
        self._users: Dict[int, object] = {}

    def add(self, user: object) -> bool:
        """Add a user. Returns False if it was already registered."""
        key = id(user)
        if key in self._users:
            return False
        self._users[key] = user
        return True

    def remove(self, user: object) -> bool:
        """Remove a user. Returns False if it was not registered."""
        key = id(user)
        if key not in self._users:
            return False
        del self._users[key]
        return True

    def clear(self) -> None:
        self._users.clear()

    def __contains__(self, user: object) -> bool:
        return id(user) in self._users

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[object]:
        return iter(list(self._users.values()))
