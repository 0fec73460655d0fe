"""
Checklist phase: a health dashboard of the generated project.

Failures here never affect the generated code, so everything this phase
reports is a warning.
"""

from __future__ import annotations

import json

from ...generators.renderer import TemplateRenderer
from ...plugins.base import HealthCheckSection, PluginContext
from ...plugins.manager import PluginManager
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase

CHECKLIST_HTML = "index.html"
CHECKLIST_JSON = "checklist.json"


class ChecklistPhase(Phase):
    name = "checklist"
    order = 11
    requires = frozenset({Capability.SDK, Capability.HOOKS})
    provides = frozenset({Capability.CHECKLIST})

    def __init__(self, manager: PluginManager | None = None, renderer: TemplateRenderer | None = None):
        super().__init__(renderer)
        self.manager = manager or PluginManager()

    def should_execute(self, context: GenerationContext) -> bool:
        # A checklist for a broken build would be misleading
        return context.config.generation.checklist and not context.has_critical_errors()

    def _build_sections(self, context: GenerationContext) -> list[HealthCheckSection]:
        files = context.files.build()
        cache = context.cache

        schema_section = HealthCheckSection(
            id="schema",
            title="Schema",
            checks=[
                f"{len(context.schema.models)} models, {len(context.schema.enums)} enums",
                f"{cache.get_analysis_count()}/{cache.get_expected_count(context.schema)} models analyzed",
                f"{len(cache.get_all_service_annotations())} service models",
            ],
        )
        layers_section = HealthCheckSection(
            id="layers",
            title="Generated files",
            checks=[f"{layer}: {count}" for layer, count in files.layer_counts().items() if count],
        )
        sections = [schema_section, layers_section]

        env_vars = sorted({var for output in files.plugin_outputs.values() for var in output["env_vars"]})
        if env_vars:
            sections.append(HealthCheckSection(id="environment", title="Environment", checks=[f"{var} is set" for var in env_vars]))

        plugin_context = PluginContext(schema=context.schema, config=context.config)
        sections.extend(self.manager.health_checks(plugin_context))
        return sections

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        config = context.config

        try:
            sections = self._build_sections(context)
            html = self.renderer.render_checklist(
                metadata=config.metadata,
                framework=config.framework.value,
                use_registry=config.use_registry,
                sections=sections,
            )
            data = {
                "project": config.metadata.project_name,
                "schema_hash": config.metadata.schema_hash,
                "tool_version": config.metadata.tool_version,
                "framework": config.framework.value,
                "mode": "registry" if config.use_registry else "layered",
                "sections": [s.to_dict() for s in sections],
            }
            context.files.checklist.add_file(CHECKLIST_HTML, html)
            context.files.checklist.add_file(CHECKLIST_JSON, json.dumps(data, indent=2))
        except GenerationFailedError:
            raise
        except Exception as e:
            errors.append(self.error(ErrorSeverity.WARNING, f"Failed to generate checklist: {e}", cause=e))
            return PhaseResult.from_errors(errors)

        if config.generation.auto_open:
            context.logger.info("Checklist generated at checklist/%s, open it once the output is written", CHECKLIST_HTML)

        return PhaseResult.from_errors(errors, {"sections": len(sections)})

    async def rollback(self, context: GenerationContext) -> None:
        context.files.checklist.clear()
        context.logger.info("Rolled back checklist")
