"""
Manifest Manager

Loads a YAML behaviour manifest (with include system support), validates it,
and assembles the ordered behaviour array and its controller.
"""

import importlib
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import yaml
from pydantic import ValidationError

from lifecycle.behaviour import BehaviourUnit
from lifecycle.controller import BehaviourController, BehaviourHandler, HookedBehaviourController
from lifecycle.errors import ManifestError
from models.manifest import BehaviourEntry, BehaviourManifest
from utils.logger import get_logger, configure_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)


class ManifestManager:
    """
    Behaviour manifest loader and assembler

    Loads the manifest file and processes its include: directive (files are
    merged in order, the main file last, relative to the main file's folder).
    The behaviours list defines lifecycle order; dependencies are wired by name.

    Example:
        manager = ManifestManager("config/behaviours.yaml", types=[SettingsBehaviour])
        manager.load()

        controller = manager.build_controller(externals={"clock": clock})
        controller.register(scene)
    """

    def __init__(
        self,
        manifest_path: Union[str, Path],
        types: Optional[List[Type[BehaviourUnit]]] = None,
    ):
        """
        Initialize ManifestManager

        Args:
            manifest_path: Path to the main manifest YAML file
            types: Behaviour classes that may be referenced by bare class name
        """
        self.manifest_path = Path(manifest_path)
        self._types: Dict[str, Type[BehaviourUnit]] = {t.__name__: t for t in (types or [])}
        self.manifest: Optional[BehaviourManifest] = None

    def register_type(self, behaviour_type: Type[BehaviourUnit], name: Optional[str] = None) -> None:
        """Allow ``behaviour_type`` to be referenced by ``name`` (defaults to class name)."""
        self._types[name or behaviour_type.__name__] = behaviour_type

    # -----------------------------
    # Loading
    # -----------------------------
    def load(self) -> BehaviourManifest:
        """
        Load, merge and validate the manifest, then apply its logging settings

        Returns:
            Validated BehaviourManifest

        Raises:
            ManifestError: If a file is missing, unparsable or fails validation
        """
        data = self._read_yaml(self.manifest_path)

        include_list = data.pop("include", None) or []
        if isinstance(include_list, str):
            include_list = [include_list]
        if include_list:
            log.info("Using include-based manifest", files=len(include_list))
            merged = self._load_with_includes(include_list, self.manifest_path.parent)
            merged.update(data)
            data = merged

        try:
            self.manifest = BehaviourManifest.model_validate(data)
        except ValidationError as ex:
            raise ManifestError(f"Invalid manifest: {ex}", source=str(self.manifest_path)) from ex

        configure_logger(
            min_level=self.manifest.logging.level,
            use_colors=self.manifest.logging.colors,
        )

        log.info(
            "Manifest loaded",
            path=str(self.manifest_path),
            behaviours=len(self.manifest.behaviours),
        )
        return self.manifest

    def _load_with_includes(self, include_list: List[str], manifest_dir: Path) -> Dict:
        """
        Load and merge YAML files from include list

        Args:
            include_list: Filenames to load (e.g., ["logging.yaml", "behaviours.yaml"])
            manifest_dir: Directory the filenames are relative to

        Returns:
            Merged dict
        """
        merged: Dict[str, Any] = {}

        for filename in include_list:
            file_data = self._read_yaml(manifest_dir / filename)
            if "include" in file_data:
                raise ManifestError("Nested include is not supported", source=filename)
            merged.update(file_data)
            log.debug(f"Loaded {filename}", keys=str(list(file_data.keys())))

        return merged

    def _read_yaml(self, path: Path) -> Dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as ex:
            log.error(f"File not found: {path}")
            raise ManifestError("File not found", source=str(path)) from ex
        except (OSError, UnicodeDecodeError) as ex:
            log.error(f"Cannot read {path}", error=str(ex), error_type=type(ex).__name__)
            raise ManifestError(f"Cannot read file: {ex}", source=str(path)) from ex
        except yaml.YAMLError as ex:
            log.error(f"Error parsing {path}", error=str(ex))
            raise ManifestError(f"YAML error: {ex}", source=str(path)) from ex

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ManifestError("Top level must be a mapping", source=str(path))
        return data

    # -----------------------------
    # Assembly
    # -----------------------------
    def build_behaviours(self, externals: Optional[Mapping[str, object]] = None) -> List[BehaviourUnit]:
        """
        Instantiate every behaviour in manifest order and wire dependencies

        Dependency names resolve to behaviours of this manifest first, then
        to ``externals``.

        Args:
            externals: Host objects that behaviours may depend on, by name

        Returns:
            Behaviours in lifecycle order

        Raises:
            ManifestError: Unknown class or dependency name, bad constructor options
        """
        manifest = self._require_manifest()
        externals = externals or {}

        built: Dict[str, BehaviourUnit] = {}
        for entry in manifest.behaviours:
            built[entry.name] = self._instantiate(entry)

        for entry in manifest.behaviours:
            resolved = [self._resolve_dependency(entry, dep, built, externals) for dep in entry.dependencies]
            built[entry.name].assign_dependencies(resolved)

        log.debug("Behaviours assembled", order=", ".join(built.keys()))
        return list(built.values())

    def build_controller(
        self,
        externals: Optional[Mapping[str, object]] = None,
        on_init: Optional[BehaviourHandler] = None,
        on_deinit: Optional[BehaviourHandler] = None,
    ) -> BehaviourController:
        """
        Build behaviours and wrap them in a controller

        Returns a HookedBehaviourController when a callback is given,
        a plain BehaviourController otherwise.
        """
        behaviours = self.build_behaviours(externals)
        if on_init is not None or on_deinit is not None:
            return HookedBehaviourController(behaviours, on_init=on_init, on_deinit=on_deinit)
        return BehaviourController(behaviours)

    def _require_manifest(self) -> BehaviourManifest:
        if self.manifest is None:
            self.load()
        return self.manifest

    def _instantiate(self, entry: BehaviourEntry) -> BehaviourUnit:
        behaviour_type = self._resolve_type(entry)
        try:
            return behaviour_type(name=entry.name, **entry.options)
        except TypeError as ex:
            raise ManifestError(
                f"Cannot construct {behaviour_type.__name__}: {ex}", source=entry.name
            ) from ex

    def _resolve_type(self, entry: BehaviourEntry) -> Type[BehaviourUnit]:
        path = entry.class_path

        if path in self._types:
            resolved = self._types[path]
        elif ":" in path or "." in path:
            module_name, _, attr = path.replace(":", ".").rpartition(".")
            try:
                module = importlib.import_module(module_name)
                resolved = getattr(module, attr)
            except (ImportError, AttributeError) as ex:
                raise ManifestError(f"Cannot import '{path}': {ex}", source=entry.name) from ex
        else:
            raise ManifestError(f"Unknown behaviour type '{path}'", source=entry.name)

        if not (isinstance(resolved, type) and issubclass(resolved, BehaviourUnit)):
            raise ManifestError(f"'{path}' is not a BehaviourUnit subclass", source=entry.name)
        return resolved

    def _resolve_dependency(
        self,
        entry: BehaviourEntry,
        dependency: str,
        built: Mapping[str, BehaviourUnit],
        externals: Mapping[str, object],
    ) -> object:
        if dependency in built:
            return built[dependency]
        if dependency in externals:
            return externals[dependency]
        raise ManifestError(f"Unknown dependency '{dependency}'", source=entry.name)
