"""
Route phase: wires controllers to URL paths.
"""

from __future__ import annotations

from ...utils import to_kebab_case
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


class RoutePhase(Phase):
    name = "route"
    order = 7
    requires = frozenset({Capability.CONTROLLERS})
    provides = frozenset({Capability.ROUTES})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        framework = context.config.framework.value

        for model in self.generatable_models(context):
            annotation = context.cache.try_get_service_annotation(model.name)
            stem = annotation.name if annotation is not None else to_kebab_case(model.name)

            if not context.files.controllers.has_file(f"{stem}.controller.ts"):
                continue

            try:
                if annotation is not None:
                    content = self.renderer.render_service_routes(annotation)
                else:
                    content = self.renderer.render_routes(model, framework)
                context.files.routes.add_file(f"{stem}.routes.ts", content, model.name)
            except GenerationFailedError:
                raise
            except Exception as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to generate routes for {model.name}: {e}", model=model.name, cause=e))

        return PhaseResult.from_errors(errors, {"routes": context.files.routes.get_file_count()})
