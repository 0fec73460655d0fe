"""modelgen

Multi-phase code generation from a parsed data-model schema. Phases run in
a fixed order over a shared context, with strict error escalation and a
rollback of the output when a phase fails.
"""

__version__ = "1.0.0"

from .pipeline import (
    CodeGenerationPipeline,
    ConfigError,
    ErrorSeverity,
    GeneratedFiles,
    GenerationFailedError,
    GeneratorConfig,
    PhaseHookRegistry,
)
from .plugins import FeaturePlugin, PluginKind, PluginManager
from .schema import ParsedField, ParsedModel, ParsedSchema

__all__ = [
    "CodeGenerationPipeline",
    "GeneratorConfig",
    "GeneratedFiles",
    "PhaseHookRegistry",
    "ErrorSeverity",
    "ConfigError",
    "GenerationFailedError",
    "FeaturePlugin",
    "PluginKind",
    "PluginManager",
    "ParsedSchema",
    "ParsedModel",
    "ParsedField",
]
