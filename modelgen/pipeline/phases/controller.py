"""
Controller phase: HTTP handlers on top of the generated services.
"""

from __future__ import annotations

from ...utils import to_kebab_case
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


class ControllerPhase(Phase):
    name = "controller"
    order = 6
    requires = frozenset({Capability.SERVICES})
    provides = frozenset({Capability.CONTROLLERS})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        framework = context.config.framework.value

        for model in self.generatable_models(context):
            annotation = context.cache.try_get_service_annotation(model.name)
            stem = annotation.name if annotation is not None else to_kebab_case(model.name)

            if not context.files.services.has_file(f"{stem}.service.ts"):
                errors.append(self.error(ErrorSeverity.WARNING, f"No service generated for {model.name}, skipping controller", model=model.name))
                continue

            try:
                if annotation is not None:
                    content = self.renderer.render_service_controller(annotation)
                else:
                    content = self.renderer.render_controller(model, framework)
                context.files.controllers.add_file(f"{stem}.controller.ts", content, model.name)
            except GenerationFailedError:
                raise
            except Exception as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to generate controller for {model.name}: {e}", model=model.name, cause=e))

        return PhaseResult.from_errors(errors, {"framework": framework})
