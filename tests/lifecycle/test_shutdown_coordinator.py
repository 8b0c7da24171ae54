"""
Tests for host teardown through the shutdown coordinator.
"""

import asyncio
import os
import signal
import sys

import pytest

from lifecycle.controller import BehaviourController
from lifecycle.handlers import ControllerShutdownHandler
from lifecycle.shutdown_coordinator import ShutdownCoordinator
from lifecycle.users import UserToken
from models.enums import BehaviourState


class RecordingHandler:
    def __init__(self, name, priority, calls, error=None, delay=0.0):
        self.name = name
        self._priority = priority
        self.calls = calls
        self.error = error
        self.delay = delay

    @property
    def shutdown_priority(self):
        return self._priority

    async def shutdown(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.calls.append(self.name)
        if self.error:
            raise self.error


def test_handlers_run_in_descending_priority():
    calls = []
    coordinator = ShutdownCoordinator()
    coordinator.register(RecordingHandler("low", 10, calls))
    coordinator.register(RecordingHandler("high", 100, calls))
    coordinator.register(RecordingHandler("mid", 50, calls))

    asyncio.run(coordinator.shutdown_all())

    assert calls == ["high", "mid", "low"]


def test_failing_handler_does_not_stop_sequence():
    calls = []
    coordinator = ShutdownCoordinator()
    coordinator.register(RecordingHandler("first", 2, calls, error=RuntimeError("boom")))
    coordinator.register(RecordingHandler("second", 1, calls))

    asyncio.run(coordinator.shutdown_all())

    assert calls == ["first", "second"]


def test_slow_handler_times_out_and_sequence_continues():
    calls = []
    coordinator = ShutdownCoordinator(timeout_per_handler=0.05)
    coordinator.register(RecordingHandler("slow", 2, calls, delay=1.0))
    coordinator.register(RecordingHandler("fast", 1, calls))

    asyncio.run(coordinator.shutdown_all())

    assert calls == ["fast"]


def test_register_rejects_objects_without_protocol():
    coordinator = ShutdownCoordinator()
    with pytest.raises(ValueError):
        coordinator.register(object())


def test_request_shutdown_releases_waiter():
    coordinator = ShutdownCoordinator()

    async def run():
        waiter = asyncio.create_task(coordinator.wait_for_shutdown())
        await asyncio.sleep(0)
        coordinator.request_shutdown("test")
        await asyncio.wait_for(waiter, timeout=1.0)

    asyncio.run(run())
    assert coordinator.shutdown_reason == "test"


def test_total_timeout_skips_remaining_handlers():
    calls = []
    coordinator = ShutdownCoordinator(timeout_per_handler=1.0, total_timeout=0.05)
    coordinator.register(RecordingHandler("slow", 2, calls, delay=0.2))
    coordinator.register(RecordingHandler("skipped", 1, calls))

    asyncio.run(coordinator.shutdown_all())

    assert calls == ["slow"]


@pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers need a Unix event loop")
def test_sigterm_releases_waiter():
    coordinator = ShutdownCoordinator()

    async def run():
        loop = asyncio.get_running_loop()
        coordinator.setup_signal_handlers(loop)
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=1.0)
        finally:
            coordinator.remove_signal_handlers(loop)

    asyncio.run(run())
    assert coordinator.shutdown_reason == "SIGTERM"


def test_controller_handler_disposes_controller(make_behaviour, events):
    a = make_behaviour("A")
    b = make_behaviour("B", dependencies=[a])
    controller = BehaviourController([a, b])
    controller.register(UserToken("scene"))

    coordinator = ShutdownCoordinator()
    coordinator.register(ControllerShutdownHandler(controller))
    asyncio.run(coordinator.shutdown_all())

    assert controller.user_count == 0
    assert [u.state for u in controller.behaviours] == [BehaviourState.NONE] * 2
    assert events[-4:] == ["A.end", "B.end", "A.dispose", "B.dispose"]
    assert coordinator.get_handler(ControllerShutdownHandler).controller is controller


def test_controller_handler_can_only_deinitialize(make_behaviour, events):
    controller = BehaviourController([make_behaviour("A")])
    controller.register(UserToken())

    handler = ControllerShutdownHandler(controller, priority=70, dispose=False)
    asyncio.run(handler.shutdown())

    assert handler.shutdown_priority == 70
    assert events == ["A.setup", "A.start", "A.end"]
