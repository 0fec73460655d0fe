"""
Plugin phase: validates and runs the configured feature plugins.
"""

from __future__ import annotations

from ...generators.renderer import TemplateRenderer
from ...plugins.base import PluginContext
from ...plugins.manager import PluginManager
from ..context import GenerationContext
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


class PluginPhase(Phase):
    name = "plugin"
    order = 10
    requires = frozenset({Capability.VALIDATED_SCHEMA})
    provides = frozenset({Capability.PLUGINS})

    def __init__(self, manager: PluginManager, renderer: TemplateRenderer | None = None):
        super().__init__(renderer)
        self.manager = manager

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        strict = context.config.error_handling.strict_plugin_validation
        plugin_context = PluginContext(schema=context.schema, config=context.config)

        validations = self.manager.validate_all(plugin_context)
        invalid = []
        for name, validation in validations.items():
            for warning in validation.warnings:
                errors.append(self.error(ErrorSeverity.WARNING, f"Plugin {name}: {warning}"))
            if validation.valid:
                continue

            invalid.append(name)
            message = f"Plugin {name} validation failed: {'; '.join(validation.errors)}"
            if strict:
                errors.append(self.error(ErrorSeverity.ERROR, message, blocks_generation=True))
            else:
                errors.append(self.error(ErrorSeverity.WARNING, f"{message}. Skipping plugin"))

        if invalid and strict:
            return PhaseResult.from_errors(errors, {"invalid": invalid})

        report = self.manager.generate_all(plugin_context, validations)
        for name, output in report.outputs.items():
            builder = context.files.get_plugin_builder(name)
            for path, content in output.files.items():
                builder.add_file(path, content)
            context.files.set_plugin_output(name, output.env_vars, output.dependencies)

        for name, exc in report.failures.items():
            errors.append(self.error(ErrorSeverity.ERROR, f"Plugin {name} failed to generate: {exc}", cause=exc))

        context.logger.info("Generated %d plugins", len(report.outputs))
        return PhaseResult.from_errors(errors, {"generated": list(report.outputs), "invalid": invalid})

    async def rollback(self, context: GenerationContext) -> None:
        context.files.clear_plugins()
        context.logger.info("Rolled back plugin outputs")
