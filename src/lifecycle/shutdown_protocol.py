"""
Shutdown handler protocol for host teardown.

Anything that must release resources when the host process stops implements
IShutdownHandler and is registered with a ShutdownCoordinator.
"""

from typing import Protocol


class IShutdownHandler(Protocol):
    """
    Protocol for components that take part in host teardown.

    The ShutdownCoordinator calls shutdown() on each handler in descending
    priority order.

    Example:
        class CacheShutdownHandler:
            @property
            def shutdown_priority(self) -> int:
                return 80

            async def shutdown(self) -> None:
                self.cache.flush()
    """

    @property
    def shutdown_priority(self) -> int:
        """
        Higher priority shuts down earlier.
        """
        ...

    async def shutdown(self) -> None:
        """
        Called during coordinated shutdown.
        """
        ...
