from __future__ import annotations

from lifecycle.controller import BehaviourController
from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ControllerShutdownHandler(IShutdownHandler):
    """
    Shutdown handler for a BehaviourController.

    Disposes the controller so every behaviour releases its resources,
    even if some users never unregistered. With ``dispose=False`` it only
    forces deinitialization, leaving on_dispose() hooks for later.

    Priority: 50 by default
    """

    def __init__(self, controller: BehaviourController, priority: int = 50, dispose: bool = True):
        """
        Initialize controller shutdown handler.

        Args:
            controller: Controller to tear down
            priority: Shutdown priority (higher runs earlier)
            dispose: Dispose behaviours instead of only deinitializing them
        """
        self.controller = controller
        self._priority = priority
        self._dispose = dispose

    @property
    def shutdown_priority(self) -> int:
        return self._priority

    async def shutdown(self) -> None:
        """Tear down the controller's behaviours."""
        count = len(self.controller.behaviours)

        if self._dispose:
            log.info(f"Disposing {count} behaviours...")
            self.controller.dispose()
        else:
            log.info(f"Deinitializing {count} behaviours...")
            self.controller.force_deinitialization()

        log.debug("Behaviour controller released")
