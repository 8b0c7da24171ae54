"""
Tests for YAML manifest loading and controller assembly.
"""

import textwrap

import pytest

from conftest import OtherBehaviour, RecordingBehaviour
from lifecycle.controller import BehaviourController, HookedBehaviourController
from lifecycle.errors import InvalidDependencyError, ManifestError
from lifecycle.users import UserToken
from managers.manifest_manager import ManifestManager
from models.enums import BehaviourState, LogLevel
from utils.logger import get_logger


class ConfiguredBehaviour(RecordingBehaviour):
    def __init__(self, name=None, volume=0, **kwargs):
        super().__init__(name=name, **kwargs)
        self.volume = volume


def write(path, content):
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def manifest(tmp_path):
    return write(tmp_path / "behaviours.yaml", """
        logging:
          level: error
          colors: false
        behaviours:
          - name: settings
            class: RecordingBehaviour
          - name: audio
            class: ConfiguredBehaviour
            dependencies: [settings, clock]
            options:
              volume: 7
          - name: input
            class: OtherBehaviour
            dependencies: [audio]
    """)


def manager_for(path):
    return ManifestManager(path, types=[RecordingBehaviour, OtherBehaviour, ConfiguredBehaviour])


def test_load_validates_and_applies_logging(manifest):
    loaded = manager_for(manifest).load()

    assert loaded.names() == ["settings", "audio", "input"]
    assert loaded.behaviours[1].class_path == "ConfiguredBehaviour"
    assert get_logger().min_level is LogLevel.ERROR
    assert get_logger().use_colors is False


def test_build_behaviours_wires_dependencies_in_order(manifest):
    clock = object()
    settings, audio, inp = manager_for(manifest).build_behaviours(externals={"clock": clock})

    assert [b.name for b in (settings, audio, inp)] == ["settings", "audio", "input"]
    assert isinstance(inp, OtherBehaviour)
    assert audio.volume == 7
    assert audio.dependencies == (settings, clock)
    assert inp.get_dependency(ConfiguredBehaviour) is audio


def test_build_controller_runs_full_lifecycle(manifest):
    controller = manager_for(manifest).build_controller(externals={"clock": object()})
    assert type(controller) is BehaviourController

    controller.register(UserToken())
    assert all(b.is_initialized for b in controller.behaviours)

    controller.dispose()
    assert all(b.state is BehaviourState.NONE for b in controller.behaviours)


def test_build_controller_with_hooks(manifest):
    seen = []
    controller = manager_for(manifest).build_controller(
        externals={"clock": object()},
        on_init=lambda b: seen.append(b.name),
    )

    assert isinstance(controller, HookedBehaviourController)
    controller.register(UserToken())
    assert seen == ["settings", "audio", "input"]


def test_external_behaviour_dependency_is_validated(tmp_path):
    path = write(tmp_path / "m.yaml", """
        behaviours:
          - name: late
            class: RecordingBehaviour
            dependencies: [outside]
    """)
    outside = RecordingBehaviour(name="outside")
    controller = manager_for(path).build_controller(externals={"outside": outside})

    with pytest.raises(InvalidDependencyError, match="outside"):
        controller.register(UserToken())


def test_includes_are_merged_before_main_file(tmp_path):
    write(tmp_path / "logging.yaml", """
        logging:
          level: DEBUG
    """)
    write(tmp_path / "units.yaml", """
        behaviours:
          - name: a
            class: RecordingBehaviour
    """)
    main = write(tmp_path / "main.yaml", """
        include: [logging.yaml, units.yaml]
        logging:
          level: WARN
          colors: false
    """)

    loaded = manager_for(main).load()

    assert loaded.names() == ["a"]
    assert loaded.logging.level is LogLevel.WARN


def test_dotted_class_path_is_imported(tmp_path):
    path = write(tmp_path / "m.yaml", """
        behaviours:
          - name: a
            class: conftest:RecordingBehaviour
    """)
    (unit,) = ManifestManager(path).build_behaviours()
    assert type(unit).__name__ == "RecordingBehaviour"


def test_registered_type_alias(tmp_path):
    path = write(tmp_path / "m.yaml", """
        behaviours:
          - name: a
            class: recorder
    """)
    manager = ManifestManager(path)
    manager.register_type(RecordingBehaviour, "recorder")

    (unit,) = manager.build_behaviours()
    assert isinstance(unit, RecordingBehaviour)


@pytest.mark.parametrize(
    "body, message",
    [
        ("""
            behaviours:
              - name: a
                class: RecordingBehaviour
              - name: a
                class: RecordingBehaviour
         """, "Duplicate behaviour name"),
        ("""
            behaviours:
              - name: a
                class: RecordingBehaviour
                dependencies: [a]
         """, "cannot depend on itself"),
        ("""
            behaviours:
              - name: a
         """, "class"),
        ("""
            logging:
              level: LOUD
         """, "Unknown log level"),
        ("""
            services: []
         """, "services"),
        ("""
            - just
            - a list
         """, "Top level must be a mapping"),
    ],
)
def test_invalid_manifest_raises_manifest_error(tmp_path, body, message):
    path = write(tmp_path / "bad.yaml", body)

    with pytest.raises(ManifestError, match=message):
        manager_for(path).load()


@pytest.mark.parametrize(
    "class_path, message",
    [
        ("Missing", "Unknown behaviour type"),
        ("collections:OrderedDict", "not a BehaviourUnit subclass"),
        ("no_such_module_xyz:Thing", "Cannot import"),
    ],
)
def test_unresolvable_class_raises(tmp_path, class_path, message):
    path = write(tmp_path / "m.yaml", f"""
        behaviours:
          - name: a
            class: "{class_path}"
    """)

    with pytest.raises(ManifestError, match=message):
        manager_for(path).build_behaviours()


def test_unknown_dependency_raises(manifest):
    with pytest.raises(ManifestError, match="Unknown dependency 'clock'"):
        manager_for(manifest).build_behaviours()


def test_bad_constructor_options_raise(tmp_path):
    path = write(tmp_path / "m.yaml", """
        behaviours:
          - name: a
            class: RecordingBehaviour
            options:
              colour: blue
    """)

    with pytest.raises(ManifestError, match="Cannot construct RecordingBehaviour"):
        manager_for(path).build_behaviours()


def test_missing_file_raises(tmp_path):
    with pytest.raises(ManifestError, match="File not found"):
        manager_for(tmp_path / "nope.yaml").load()


def test_directory_path_raises(tmp_path):
    with pytest.raises(ManifestError, match="Cannot read file"):
        manager_for(tmp_path).load()


def test_non_utf8_manifest_raises(tmp_path):
    path = tmp_path / "latin.yaml"
    path.write_bytes(b"behaviours: []\n# \xff\xfe\n")

    with pytest.raises(ManifestError, match="Cannot read file"):
        manager_for(path).load()


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("behaviours: [unclosed", encoding="utf-8")

    with pytest.raises(ManifestError, match="YAML error"):
        manager_for(path).load()
