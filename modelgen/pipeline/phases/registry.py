"""
Registry phase: consolidated output replacing the per-model layers.

Produces one model registry, the contracts of every model and the service
integrations of annotated models.
"""

from __future__ import annotations

from ..analyzer import ModelAnalysis, analyze_model
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase
from .dto import generate_model_contracts


class RegistryPhase(Phase):
    name = "registry"
    order = 4
    requires = frozenset({Capability.VALIDATED_SCHEMA, Capability.MODEL_ANALYSIS, Capability.NAMING})
    provides = frozenset({Capability.CONTRACTS, Capability.REGISTRY, Capability.SERVICES})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        analyses: list[ModelAnalysis] = []

        for model in self.generatable_models(context):
            try:
                # Without the analysis phase the registry still needs the structure
                analysis = context.cache.try_get_analysis(model.name) or analyze_model(model, context.schema)
                generate_model_contracts(context, self.renderer, model)
            except GenerationFailedError:
                raise
            except Exception as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to register model {model.name}: {e}", model=model.name, cause=e))
                continue
            analyses.append(analysis)

        registry = context.files.registry
        registry.add_file("models.registry.ts", self.renderer.render_registry(analyses))
        registry.add_file("index.ts", self.renderer.render_registry_index())

        for model_name, annotation in context.cache.get_all_service_annotations():
            if context.has_model_errors(model_name):
                continue
            context.files.services.add_file(f"{annotation.name}.service.ts", self.renderer.render_service_scaffold(annotation), model_name)
            context.files.controllers.add_file(f"{annotation.name}.controller.ts", self.renderer.render_service_controller(annotation), model_name)
            context.files.routes.add_file(f"{annotation.name}.routes.ts", self.renderer.render_service_routes(annotation), model_name)

        context.logger.info("Registered %d models", len(analyses))
        return PhaseResult.from_errors(errors, {"models": [a.model_name for a in analyses]})
