"""
Shutdown coordinator that orchestrates host teardown.

Runs registered shutdown handlers in priority order with per-handler and
total timeouts, and optionally waits for SIGINT/SIGTERM before doing so.
"""

import asyncio
import signal
from typing import List, Optional

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """
    Coordinates teardown of the controllers a host owns.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(ControllerShutdownHandler(controller))

        coordinator.setup_signal_handlers(asyncio.get_running_loop())
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(self, timeout_per_handler: float = 5.0, total_timeout: float = 15.0):
        """
        Args:
            timeout_per_handler: Seconds a single handler may take
            total_timeout: Seconds after which remaining handlers are skipped
        """
        self._handlers: List = []
        self._stop_event: Optional[asyncio.Event] = None
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self.shutdown_reason: Optional[str] = None

    def register(self, handler) -> None:
        """
        Add a handler implementing IShutdownHandler.

        Raises:
            ValueError: If shutdown_priority or shutdown() is missing
        """
        for attribute in ("shutdown_priority", "shutdown"):
            if not hasattr(handler, attribute):
                raise ValueError(f"Handler {handler!r} has no '{attribute}'")

        self._handlers.append(handler)
        log.debug("Shutdown handler registered", handler=type(handler).__name__)

    # -----------------------------
    # Triggers
    # -----------------------------
    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Make SIGINT and SIGTERM request shutdown on ``loop``."""
        for sig in HANDLED_SIGNALS:
            loop.add_signal_handler(sig, self._on_signal, sig)
        log.info("Signal handlers installed", signals="SIGINT, SIGTERM")

    def remove_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Undo setup_signal_handlers()."""
        for sig in HANDLED_SIGNALS:
            loop.remove_signal_handler(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        log.info(f"Received {sig.name}")
        self.request_shutdown(sig.name)

    def request_shutdown(self, reason: str = "requested") -> None:
        """Trigger shutdown programmatically."""
        self.shutdown_reason = reason
        self._event().set()

    async def wait_for_shutdown(self) -> None:
        """Block until a signal arrives or request_shutdown() is called."""
        await self._event().wait()

    # -----------------------------
    # Teardown
    # -----------------------------
    async def shutdown_all(self) -> None:
        """
        Run every handler in descending priority order.

        A failing or timed-out handler is logged and the sequence continues.
        Remaining handlers are skipped once total_timeout is exceeded.
        """
        log.info("Shutdown started", reason=self.shutdown_reason or "UNKNOWN", handlers=len(self._handlers))

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._total_timeout

        for handler in sorted(self._handlers, key=lambda h: h.shutdown_priority, reverse=True):
            name = type(handler).__name__

            if loop.time() > deadline:
                log.error("Total shutdown timeout exceeded, skipping remaining handlers", timeout=self._total_timeout)
                break

            try:
                await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
                log.debug(f"{name} shut down", priority=handler.shutdown_priority)
            except asyncio.TimeoutError:
                log.error(f"{name} shutdown timed out", timeout=self._timeout_per_handler)
            except Exception as e:
                log.error(f"{name} shutdown failed", error=str(e), error_type=type(e).__name__)

        log.info("Shutdown complete")

    def get_handler(self, handler_type: type):
        """Return the first registered handler of ``handler_type``, or None."""
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None

    def _event(self) -> asyncio.Event:
        if self._stop_event is None:
            self._stop_event = asyncio.Event()
        return self._stop_event
