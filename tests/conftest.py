import pytest

from lifecycle.behaviour import BehaviourUnit
from utils.logger import configure_logger, LogLevel


class RecordingBehaviour(BehaviourUnit):
    """
    Behaviour that appends "<name>.<hook>" to a shared event list.

    ``fail_on`` names a hook that raises RuntimeError.
    """

    def __init__(self, name=None, dependencies=(), events=None, fail_on=None):
        super().__init__(name=name, dependencies=dependencies)
        self.events = events if events is not None else []
        self.fail_on = fail_on

    def _record(self, hook):
        self.events.append(f"{self.name}.{hook}")
        if self.fail_on == hook:
            raise RuntimeError(f"{self.name} failed in {hook}")

    def on_setup(self):
        self._record("setup")

    def on_start(self):
        self._record("start")

    def on_end(self):
        self._record("end")

    def on_dispose(self):
        self._record("dispose")


class OtherBehaviour(RecordingBehaviour):
    """Distinct subclass for type-filtered queries."""


@pytest.fixture(autouse=True)
def quiet_logger():
    configure_logger(min_level=LogLevel.ERROR, use_colors=False)
    yield
    configure_logger(min_level=LogLevel.INFO, use_colors=True)


@pytest.fixture
def events():
    return []


@pytest.fixture
def make_behaviour(events):
    def factory(name, cls=RecordingBehaviour, **kwargs):
        return cls(name=name, events=events, **kwargs)
    return factory
