"""
Feature plugin contract.

Plugins add optional features (authentication, storage, ...) to the
generated project. The set of plugin kinds is closed: a configuration can
only enable the kinds listed in `PluginKind`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from ..pipeline.config import NormalizedConfig
    from ..schema import ParsedSchema


class PluginKind(str, Enum):
    """Every plugin kind a configuration may enable."""

    GOOGLE_AUTH = "google_auth"
    S3_STORAGE = "s3_storage"


@dataclass(frozen=True)
class PluginContext:
    """What a plugin can see: the schema, the run configuration and its own settings."""

    schema: ParsedSchema
    config: NormalizedConfig
    settings: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class PluginValidation:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class PluginOutput:
    """Files and project requirements produced by a plugin.

    Attributes:
        files: Relative path -> file content
        env_vars: Environment variable name -> example value
        dependencies: Package name -> version range
    """

    files: dict[str, str] = field(default_factory=dict)
    env_vars: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, str] = field(default_factory=dict)


@dataclass
class HealthCheckSection:
    """A section of the generated health checklist."""

    id: str
    title: str
    checks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "checks": list(self.checks)}


class FeaturePlugin(ABC):
    """Abstract base class for feature plugins."""

    kind: ClassVar[PluginKind]

    def __init__(self, settings: Mapping[str, Any] | None = None, enabled: bool = True):
        self.settings: Mapping[str, Any] = settings or {}
        self.enabled = enabled

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    def validate(self, context: PluginContext) -> PluginValidation:
        """Check that the plugin can generate for this schema and settings."""

    @abstractmethod
    def generate(self, context: PluginContext) -> PluginOutput:
        """Produce the plugin's files, environment variables and dependencies."""

    def health_check(self, context: PluginContext) -> HealthCheckSection | None:
        """Optional checklist section; plugins without one return None."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(enabled={self.enabled})"
