"""
Manifest schemas - Pydantic models for behaviour manifests

A manifest lists behaviours in lifecycle order and wires their dependencies
by name. See ManifestManager for how it is turned into a controller.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.enums import LogLevel


class LoggingSettings(BaseModel):
    """Logger settings applied when the manifest is loaded"""
    model_config = ConfigDict(extra="forbid")

    level: LogLevel = Field(LogLevel.INFO, description="Minimum level (DEBUG, INFO, WARN, ERROR)")
    colors: bool = Field(True, description="Enable ANSI colors")

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return LogLevel[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value}")
        return value


class BehaviourEntry(BaseModel):
    """One behaviour of the ordered array"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1, description="Unique behaviour name")
    class_path: str = Field(
        alias="class",
        min_length=1,
        description="'module:Class', 'module.Class' or a registered type name",
    )
    dependencies: List[str] = Field(
        default_factory=list,
        description="Names of other behaviours or host-supplied externals",
    )
    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Extra constructor keyword arguments",
    )

    @model_validator(mode="after")
    def check_self_dependency(self) -> "BehaviourEntry":
        if self.name in self.dependencies:
            raise ValueError(f"Behaviour '{self.name}' cannot depend on itself")
        return self


class BehaviourManifest(BaseModel):
    """Complete manifest"""
    model_config = ConfigDict(extra="forbid")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    behaviours: List[BehaviourEntry] = Field(default_factory=list)

    @field_validator("behaviours")
    @classmethod
    def check_unique_names(cls, entries: List[BehaviourEntry]) -> List[BehaviourEntry]:
        seen = set()
        for entry in entries:
            if entry.name in seen:
                raise ValueError(f"Duplicate behaviour name: {entry.name}")
            seen.add(entry.name)
        return entries

    def names(self) -> List[str]:
        return [entry.name for entry in self.behaviours]
