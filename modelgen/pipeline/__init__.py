"""
Pipeline - multi-phase code generation with error escalation and rollback.

Phases run strictly one after the other over a shared `GenerationContext`:

1. validation, analysis, naming-conflict
2. dto, service, controller, route (or the registry phase instead)
3. sdk, hooks
4. plugin, checklist (optional)

Each phase runs against a snapshot of the output so a failure can be undone.
"""

from __future__ import annotations

from .analyzer import JunctionHeuristic, ModelAnalysis, ServiceAnnotation, analyze_model, is_likely_junction_table, parse_service_annotation
from .cache import AnalysisCache
from .collector import ErrorCollector
from .config import ConfigNormalizer, Framework, GeneratorConfig, HookFramework, NormalizedConfig
from .context import GenerationContext
from .errors import (
    AnalysisCacheError,
    ConfigConflictError,
    ConfigError,
    GenerationFailedError,
    MissingProductionFieldError,
    ModelgenError,
    PipelineWiringError,
)
from .escalation import ErrorEscalationPolicy
from .files import GeneratedFiles, GeneratedFilesBuilder
from .orchestrator import CodeGenerationPipeline, check_wiring
from .phase_hooks import PhaseHookRegistry
from .types import ErrorSeverity, GenerationError, PhaseResult, PhaseStatus, RunSummary

__all__ = [
    "CodeGenerationPipeline",
    "check_wiring",
    "PhaseHookRegistry",
    "GenerationContext",
    "GeneratorConfig",
    "NormalizedConfig",
    "ConfigNormalizer",
    "Framework",
    "HookFramework",
    "ErrorEscalationPolicy",
    "ErrorCollector",
    "AnalysisCache",
    "JunctionHeuristic",
    "ModelAnalysis",
    "ServiceAnnotation",
    "analyze_model",
    "is_likely_junction_table",
    "parse_service_annotation",
    "GeneratedFiles",
    "GeneratedFilesBuilder",
    "ErrorSeverity",
    "GenerationError",
    "PhaseResult",
    "PhaseStatus",
    "RunSummary",
    "ModelgenError",
    "ConfigError",
    "ConfigConflictError",
    "MissingProductionFieldError",
    "GenerationFailedError",
    "PipelineWiringError",
    "AnalysisCacheError",
]
