"""
Analysis cache.

Memoizes per-model structural analysis and service annotations so later
phases never recompute them. Entries are write-once per run.
"""

from __future__ import annotations

from ..schema import ParsedModel, ParsedSchema
from .analyzer import DEFAULT_JUNCTION_HEURISTIC, JunctionHeuristic, ModelAnalysis, ServiceAnnotation
from .errors import AnalysisCacheError


class AnalysisCache:
    """Per-model analysis and service annotation store."""

    def __init__(self, heuristic: JunctionHeuristic = DEFAULT_JUNCTION_HEURISTIC):
        self.heuristic = heuristic
        self._analysis: dict[str, ModelAnalysis] = {}
        self._services: dict[str, ServiceAnnotation] = {}

    # Model analysis

    def set_analysis(self, model_name: str, analysis: ModelAnalysis) -> None:
        """Store the analysis of a model.

        Raises:
            AnalysisCacheError: If the model was already analyzed in this run
        """
        if model_name in self._analysis:
            raise AnalysisCacheError(f"Model {model_name} has already been analyzed")
        self._analysis[model_name] = analysis

    def get_analysis(self, model_name: str) -> ModelAnalysis:
        """Return the analysis of a model.

        Raises:
            AnalysisCacheError: If the model has not been analyzed
        """
        try:
            return self._analysis[model_name]
        except KeyError:
            raise AnalysisCacheError(
                f"No analysis found for model: {model_name}. The analysis phase must complete before analysis is read."
            ) from None

    def try_get_analysis(self, model_name: str) -> ModelAnalysis | None:
        return self._analysis.get(model_name)

    def has_analysis(self, model_name: str) -> bool:
        return model_name in self._analysis

    # Service annotations

    def set_service_annotation(self, model_name: str, annotation: ServiceAnnotation) -> None:
        if model_name in self._services:
            raise AnalysisCacheError(f"Model {model_name} already has a service annotation")
        self._services[model_name] = annotation

    def get_service_annotation(self, model_name: str) -> ServiceAnnotation:
        try:
            return self._services[model_name]
        except KeyError:
            raise AnalysisCacheError(f"No service annotation found for model: {model_name}. Check the @service annotation in the schema.") from None

    def try_get_service_annotation(self, model_name: str) -> ServiceAnnotation | None:
        return self._services.get(model_name)

    def has_service_annotation(self, model_name: str) -> bool:
        return model_name in self._services

    # Iteration

    def get_all_analyzed_models(self) -> list[tuple[str, ModelAnalysis]]:
        return list(self._analysis.items())

    def get_all_service_annotations(self) -> list[tuple[str, ServiceAnnotation]]:
        return list(self._services.items())

    # Statistics & validation

    def get_analysis_count(self) -> int:
        return len(self._analysis)

    def is_excluded(self, model: ParsedModel) -> bool:
        """True if the junction heuristic excludes the model from deep analysis."""
        return self.heuristic.matches(model)

    def is_junction(self, model: ParsedModel) -> bool:
        """True if the model matches the junction heuristic or was analyzed as a junction table."""
        if self.is_excluded(model):
            return True
        analysis = self._analysis.get(model.name)
        return analysis is not None and analysis.is_junction_table

    def get_expected_count(self, schema: ParsedSchema) -> int:
        """Number of models that do not match the junction heuristic."""
        return sum(1 for model in schema.models if not self.is_excluded(model))

    def get_missing_analysis(self, schema: ParsedSchema) -> list[str]:
        """Names of models that should have been analyzed but were not."""
        return [model.name for model in schema.models if not self.is_excluded(model) and model.name not in self._analysis]

    def clear(self) -> None:
        self._analysis.clear()
        self._services.clear()
