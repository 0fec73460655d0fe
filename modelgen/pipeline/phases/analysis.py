"""
Model analysis phase.

Analyzes every non-junction model exactly once and parses service
annotations; every later phase reads the results from the analysis cache.
"""

from __future__ import annotations

from ..analyzer import AnalysisStats, analyze_model, parse_service_annotation
from ..context import GenerationContext
from ..types import ErrorSeverity, PhaseResult
from .base import Capability, Phase


class AnalysisPhase(Phase):
    """Fills the analysis cache."""

    name = "analysis"
    order = 1
    requires = frozenset({Capability.VALIDATED_SCHEMA})
    provides = frozenset({Capability.MODEL_ANALYSIS})

    def should_execute(self, context: GenerationContext) -> bool:
        return context.config.use_enhanced

    async def execute(self, context: GenerationContext) -> PhaseResult:
        cache = context.cache
        stats = AnalysisStats()
        errors = []

        for model in context.schema.models:
            try:
                annotation = parse_service_annotation(model)
            except ValueError as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Invalid service annotation on {model.name}: {e}", model=model.name, cause=e))
                annotation = None

            if annotation is not None:
                cache.set_service_annotation(model.name, annotation)
                stats.services.append(model.name)

            if cache.is_excluded(model):
                stats.junction_tables.append(model.name)
                continue

            try:
                analysis = analyze_model(model, context.schema)
            except ValueError as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to analyze model {model.name}: {e}", model=model.name, cause=e))
                continue

            cache.set_analysis(model.name, analysis)
            stats.analyzed.append(model.name)
            if analysis.is_junction_table:
                stats.junction_tables.append(model.name)

        missing = cache.get_missing_analysis(context.schema)
        if missing:
            errors.append(
                self.error(
                    ErrorSeverity.ERROR,
                    f"Analysis incomplete: expected {cache.get_expected_count(context.schema)} models, "
                    f"got {cache.get_analysis_count()}. Missing: {', '.join(missing)}",
                )
            )

        context.logger.info(
            "Analyzed %d models (%d junction tables, %d services)",
            len(stats.analyzed),
            len(stats.junction_tables),
            len(stats.services),
        )
        return PhaseResult.from_errors(errors, stats)

    async def rollback(self, context: GenerationContext) -> None:
        # The cache is write-once, a retried run needs it empty
        context.cache.clear()
        await super().rollback(context)
