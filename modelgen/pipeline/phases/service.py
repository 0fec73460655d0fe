"""
Service phase: one data-access service per model.

Models carrying a `@service` annotation get a service scaffold instead of
the CRUD service.
"""

from __future__ import annotations

from ...utils import to_kebab_case
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


class ServicePhase(Phase):
    name = "service"
    order = 5
    requires = frozenset({Capability.MODEL_ANALYSIS, Capability.NAMING})
    provides = frozenset({Capability.SERVICES})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        services = context.files.services

        for model in self.generatable_models(context):
            annotation = context.cache.try_get_service_annotation(model.name)
            try:
                if annotation is not None:
                    services.add_file(f"{annotation.name}.service.ts", self.renderer.render_service_scaffold(annotation), model.name)
                else:
                    analysis = context.cache.try_get_analysis(model.name)
                    services.add_file(f"{to_kebab_case(model.name)}.service.ts", self.renderer.render_service(model, analysis), model.name)
            except GenerationFailedError:
                raise
            except Exception as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to generate service for {model.name}: {e}", model=model.name, cause=e))

        return PhaseResult.from_errors(errors, {"services": services.get_file_count()})
