"""
Plugin manager: validates and runs the enabled feature plugins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .base import FeaturePlugin, HealthCheckSection, PluginContext, PluginKind, PluginOutput, PluginValidation
from .google_auth import GoogleAuthPlugin
from .s3_storage import S3StoragePlugin

logger = logging.getLogger(__name__)

BUILTIN_PLUGINS: dict[PluginKind, type[FeaturePlugin]] = {
    PluginKind.GOOGLE_AUTH: GoogleAuthPlugin,
    PluginKind.S3_STORAGE: S3StoragePlugin,
}


@dataclass
class GenerationReport:
    """Outputs of the plugins that generated, and exceptions of those that failed."""

    outputs: dict[str, PluginOutput] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)


class PluginManager:
    """Holds the plugins of one run."""

    def __init__(self, plugins: Iterable[FeaturePlugin] = ()):
        self._plugins: dict[str, FeaturePlugin] = {}
        for plugin in plugins:
            self.register(plugin)

    @staticmethod
    def from_features(features: Mapping[str, Mapping[str, Any]] | None) -> PluginManager:
        """Instantiate the built-in plugin of every configured feature.

        A feature whose settings contain ``enabled: false`` is registered disabled.
        """
        manager = PluginManager()
        for name, settings in (features or {}).items():
            plugin_class = BUILTIN_PLUGINS[PluginKind(name)]
            settings = dict(settings)
            enabled = settings.pop("enabled", True)
            manager.register(plugin_class(settings, enabled=bool(enabled)))
        return manager

    def register(self, plugin: FeaturePlugin) -> None:
        if plugin.name in self._plugins:
            logger.warning("Replacing already registered plugin: %s", plugin.name)
        self._plugins[plugin.name] = plugin

    @property
    def plugins(self) -> list[FeaturePlugin]:
        return list(self._plugins.values())

    def get_plugin(self, name: str) -> FeaturePlugin | None:
        return self._plugins.get(name)

    def get_enabled_plugins(self) -> list[FeaturePlugin]:
        return [p for p in self._plugins.values() if p.enabled]

    def _context(self, context: PluginContext, plugin: FeaturePlugin) -> PluginContext:
        return PluginContext(schema=context.schema, config=context.config, settings=plugin.settings)

    def validate_all(self, context: PluginContext) -> dict[str, PluginValidation]:
        """Validate every enabled plugin."""
        return {plugin.name: plugin.validate(self._context(context, plugin)) for plugin in self.get_enabled_plugins()}

    def generate_all(self, context: PluginContext, validations: Mapping[str, PluginValidation] | None = None) -> GenerationReport:
        """
        Run every enabled plugin that passed validation.

        Args:
            context: Shared plugin context
            validations: Results of a previous `validate_all`; validated again when omitted

        Returns:
            The outputs and failures, by plugin name
        """
        if validations is None:
            validations = self.validate_all(context)

        report = GenerationReport()
        for plugin in self.get_enabled_plugins():
            validation = validations.get(plugin.name)
            if validation is not None and not validation.valid:
                logger.debug("Skipping invalid plugin: %s", plugin.name)
                continue
            try:
                report.outputs[plugin.name] = plugin.generate(self._context(context, plugin))
            except Exception as e:
                report.failures[plugin.name] = e
        return report

    def health_checks(self, context: PluginContext) -> list[HealthCheckSection]:
        sections = []
        for plugin in self.get_enabled_plugins():
            section = plugin.health_check(self._context(context, plugin))
            if section is not None:
                sections.append(section)
        return sections

    def __len__(self) -> int:
        return len(self._plugins)
