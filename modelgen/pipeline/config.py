"""
Configuration for the generation pipeline.

`GeneratorConfig` is the raw, user-facing configuration. `ConfigNormalizer`
validates it, resolves conflicting options and applies defaults, producing
the immutable `NormalizedConfig` every phase reads.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import ConfigConflictError, ConfigError, MissingProductionFieldError

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "MODELGEN_ENV"
PRODUCTION = "production"

DEVELOPMENT_SCHEMA_HASH = "development"
DEVELOPMENT_TOOL_VERSION = "0.0.0-dev"
DEFAULT_PROJECT_NAME = "Generated Project"


class Framework(str, Enum):
    """Server framework the generated controllers and routes target."""

    EXPRESS = "express"
    FASTIFY = "fastify"


class HookFramework(str, Enum):
    """Frontend framework the generated data hooks target."""

    REACT = "react"
    VUE = "vue"
    ANGULAR = "angular"
    ZUSTAND = "zustand"
    VANILLA = "vanilla"


VALID_HOOK_FRAMEWORKS = tuple(f.value for f in HookFramework)


@dataclass
class GeneratorConfig:
    """Raw configuration options, as given by the user.

    Unset options (None) are filled in by `ConfigNormalizer`.
    """

    framework: str | None = None
    use_enhanced: bool | None = None
    use_registry: bool | None = None

    # Error handling
    fail_fast: bool | None = None
    continue_on_error: bool | None = None
    strict_plugin_validation: bool | None = None

    # Generation options
    generate_checklist: bool | None = None
    auto_open_checklist: bool | None = None
    hook_frameworks: list[str] | None = None

    # Metadata
    project_name: str | None = None
    schema_hash: str | None = None
    tool_version: str | None = None

    # Feature plugins: plugin kind -> plugin settings
    features: dict[str, dict[str, Any]] | None = None

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary, ignoring unknown keys."""
        config = GeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "framework": self.framework,
            "use_enhanced": self.use_enhanced,
            "use_registry": self.use_registry,
            "fail_fast": self.fail_fast,
            "continue_on_error": self.continue_on_error,
            "strict_plugin_validation": self.strict_plugin_validation,
            "generate_checklist": self.generate_checklist,
            "auto_open_checklist": self.auto_open_checklist,
            "hook_frameworks": self.hook_frameworks,
            "project_name": self.project_name,
            "schema_hash": self.schema_hash,
            "tool_version": self.tool_version,
            "features": self.features,
        }


@dataclass(frozen=True)
class ErrorHandlingConfig:
    fail_fast: bool = False
    continue_on_error: bool = True
    strict_plugin_validation: bool = False


@dataclass(frozen=True)
class GenerationOptions:
    checklist: bool = True
    auto_open: bool = False
    hook_frameworks: tuple[HookFramework, ...] = (HookFramework.REACT,)


@dataclass(frozen=True)
class ProjectMetadata:
    project_name: str = DEFAULT_PROJECT_NAME
    schema_hash: str = DEVELOPMENT_SCHEMA_HASH
    tool_version: str = DEVELOPMENT_TOOL_VERSION


@dataclass(frozen=True)
class NormalizedConfig:
    """Validated, immutable configuration. Created once per run."""

    framework: Framework = Framework.EXPRESS
    use_enhanced: bool = True
    use_registry: bool = False
    error_handling: ErrorHandlingConfig = field(default_factory=ErrorHandlingConfig)
    generation: GenerationOptions = field(default_factory=GenerationOptions)
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)

    # None means no feature plugins are configured
    features: Mapping[str, Mapping[str, Any]] | None = None


class ConfigNormalizer:
    """Validates a raw configuration and applies safe defaults."""

    def __init__(self, log: logging.Logger | None = None):
        self.logger = log or logger

    def normalize(self, raw: GeneratorConfig | dict | None, environment: str | None = None) -> NormalizedConfig:
        """
        Normalize a raw configuration.

        Args:
            raw: Raw configuration (a dict is converted with `GeneratorConfig.from_dict`)
            environment: Run environment; defaults to the MODELGEN_ENV variable

        Returns:
            The immutable normalized configuration

        Raises:
            ConfigConflictError: If fail_fast and continue_on_error are both set
            MissingProductionFieldError: If a production run lacks real metadata
            ConfigError: If the framework or a feature name is unknown
        """
        if raw is None:
            raw = GeneratorConfig()
        elif isinstance(raw, dict):
            raw = GeneratorConfig.from_dict(raw)

        if environment is None:
            environment = os.environ.get(ENVIRONMENT_VARIABLE, "development")
        is_production = environment == PRODUCTION

        self._validate_conflicts(raw)
        self._validate_required_fields(raw, is_production)
        self._log_defaults(raw)

        return NormalizedConfig(
            framework=self._normalize_framework(raw.framework),
            use_enhanced=True if raw.use_enhanced is None else raw.use_enhanced,
            use_registry=False if raw.use_registry is None else raw.use_registry,
            error_handling=ErrorHandlingConfig(
                fail_fast=bool(raw.fail_fast),
                continue_on_error=(not raw.fail_fast) if raw.continue_on_error is None else raw.continue_on_error,
                strict_plugin_validation=bool(raw.strict_plugin_validation),
            ),
            generation=GenerationOptions(
                checklist=True if raw.generate_checklist is None else raw.generate_checklist,
                auto_open=bool(raw.auto_open_checklist),
                hook_frameworks=self._normalize_hook_frameworks(raw.hook_frameworks),
            ),
            metadata=ProjectMetadata(
                project_name=raw.project_name or DEFAULT_PROJECT_NAME,
                schema_hash=raw.schema_hash or DEVELOPMENT_SCHEMA_HASH,
                tool_version=raw.tool_version or DEVELOPMENT_TOOL_VERSION,
            ),
            features=self._normalize_features(raw.features),
        )

    def _validate_conflicts(self, raw: GeneratorConfig) -> None:
        if raw.fail_fast and raw.continue_on_error:
            raise ConfigConflictError(
                "Configuration conflict: fail_fast and continue_on_error cannot both be set. "
                "Use fail_fast to stop on the first error, or continue_on_error to keep going."
            )

        if raw.use_registry and raw.strict_plugin_validation:
            self.logger.warning("strict_plugin_validation has limited effect in registry mode")

    def _validate_required_fields(self, raw: GeneratorConfig, is_production: bool) -> None:
        if is_production:
            if not raw.schema_hash or raw.schema_hash == DEVELOPMENT_SCHEMA_HASH:
                raise MissingProductionFieldError("Production builds require a real schema_hash (a hash of the schema file).")
            if not raw.tool_version or raw.tool_version == DEVELOPMENT_TOOL_VERSION:
                raise MissingProductionFieldError("Production builds require a real tool_version (the generator package version).")

        if not raw.project_name:
            self.logger.info('No project_name set, using default: "%s"', DEFAULT_PROJECT_NAME)

    def _log_defaults(self, raw: GeneratorConfig) -> None:
        defaults = []
        if not raw.framework:
            defaults.append("framework=express")
        if raw.use_enhanced is None:
            defaults.append("use_enhanced=true")
        if not raw.hook_frameworks:
            defaults.append("hook_frameworks=[react]")
        if raw.generate_checklist is None:
            defaults.append("checklist=true")

        if defaults:
            self.logger.info("Using defaults: %s", ", ".join(defaults))

    def _normalize_framework(self, framework: str | None) -> Framework:
        if not framework:
            return Framework.EXPRESS
        try:
            return Framework(framework)
        except ValueError:
            valid = ", ".join(f.value for f in Framework)
            raise ConfigError(f"Unknown framework '{framework}'. Valid options: {valid}") from None

    def _normalize_hook_frameworks(self, frameworks: list[str] | None) -> tuple[HookFramework, ...]:
        if not frameworks:
            return (HookFramework.REACT,)

        invalid = [f for f in frameworks if f not in VALID_HOOK_FRAMEWORKS]
        if invalid:
            self.logger.warning(
                "Invalid hook frameworks: %s. Valid options: %s. Using default: react",
                ", ".join(str(f) for f in invalid),
                ", ".join(VALID_HOOK_FRAMEWORKS),
            )
            return (HookFramework.REACT,)

        # Keep first occurrence order, drop duplicates
        return tuple(HookFramework(f) for f in dict.fromkeys(frameworks))

    def _normalize_features(self, features: dict[str, dict[str, Any]] | None) -> Mapping[str, Mapping[str, Any]] | None:
        if features is None:
            return None
        if not isinstance(features, Mapping):
            raise ConfigError(f"features must be an object mapping plugin kinds to settings, got {type(features).__name__}")

        # Imported here: the plugin package depends on the pipeline types
        from ..plugins.base import PluginKind

        known = {kind.value for kind in PluginKind}
        unknown = [name for name in features if name not in known]
        if unknown:
            raise ConfigError(f"Unknown feature(s): {', '.join(unknown)}. Valid options: {', '.join(sorted(known))}")

        for name, settings in features.items():
            if settings is not None and not isinstance(settings, Mapping):
                raise ConfigError(f"Settings of feature '{name}' must be an object, got {type(settings).__name__}")

        return MappingProxyType({name: MappingProxyType(dict(settings or {})) for name, settings in features.items()})
