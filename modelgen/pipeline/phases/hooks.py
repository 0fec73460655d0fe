"""
Hooks phase: frontend data hooks for each configured framework.
"""

from __future__ import annotations

from ...utils import to_kebab_case
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..files import HOOKS_CORE
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


class HooksPhase(Phase):
    name = "hooks"
    order = 9
    requires = frozenset({Capability.MODEL_ANALYSIS, Capability.SDK})
    provides = frozenset({Capability.HOOKS})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        cache = context.cache

        missing = cache.get_missing_analysis(context.schema)
        if missing:
            errors.append(
                self.error(
                    ErrorSeverity.WARNING,
                    f"Analysis cache incomplete ({cache.get_analysis_count()}/{cache.get_expected_count(context.schema)}), "
                    f"hooks may lack relation data for: {', '.join(missing)}",
                )
            )

        models = self.generatable_models(context)
        context.files.get_hooks_builder(HOOKS_CORE).add_file("query-keys.ts", self.renderer.render_hooks_core(models))

        frameworks = [f.value for f in context.config.generation.hook_frameworks]
        for framework in frameworks:
            builder = context.files.get_hooks_builder(framework)
            for model in models:
                try:
                    builder.add_file(f"{to_kebab_case(model.name)}.ts", self.renderer.render_hooks(model, framework), model.name)
                except GenerationFailedError:
                    raise
                except Exception as e:
                    errors.append(
                        self.error(ErrorSeverity.ERROR, f"Failed to generate {framework} hooks for {model.name}: {e}", model=model.name, cause=e)
                    )

        return PhaseResult.from_errors(errors, {"frameworks": frameworks})

    async def rollback(self, context: GenerationContext) -> None:
        context.files.clear_hooks()
        context.logger.info("Rolled back hooks")
