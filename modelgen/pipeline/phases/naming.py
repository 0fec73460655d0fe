"""
Naming conflict phase.

Generated file names and identifiers are derived from model names. This
phase catches models that would produce the same file or shadow a
generated or reserved identifier. `@service` names are file stems too and
are checked the same way.
"""

from __future__ import annotations

from collections import defaultdict

from ...utils import to_camel_case, to_kebab_case
from ..context import GenerationContext
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase

# File stems used by the generated index, registry, SDK and hooks files
RESERVED_STEMS = frozenset({"index", "core", "http", "version", "registry", "models", "sdk", "query-keys", "checklist"})

JS_RESERVED_WORDS = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger", "default", "delete", "do",
        "else", "enum", "export", "extends", "false", "finally", "for", "function", "if", "import",
        "in", "instanceof", "new", "null", "return", "super", "switch", "this", "throw", "true",
        "try", "typeof", "var", "void", "while", "with", "yield", "let", "static", "implements",
        "interface", "package", "private", "protected", "public", "await",
    }
)  # fmt: skip


class NamingConflictPhase(Phase):
    """Detects file-name collisions and reserved model names."""

    name = "naming-conflict"
    order = 2
    requires = frozenset({Capability.VALIDATED_SCHEMA})
    provides = frozenset({Capability.NAMING})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors = []

        stems: dict[str, list[str]] = defaultdict(list)
        for model in context.schema.models:
            stems[to_kebab_case(model.name)].append(model.name)

        for stem, names in stems.items():
            if len(set(names)) > 1:
                for model_name in names:
                    errors.append(
                        self.error(
                            ErrorSeverity.ERROR,
                            f"Models {', '.join(names)} all map to the file name '{stem}'",
                            model=model_name,
                        )
                    )

        for model in context.schema.models:
            if to_kebab_case(model.name) in RESERVED_STEMS:
                errors.append(self.error(ErrorSeverity.ERROR, f"Model name {model.name} collides with a generated file", model=model.name))
            elif to_camel_case(model.name) in JS_RESERVED_WORDS:
                errors.append(self.error(ErrorSeverity.ERROR, f"Model name {model.name} is a JavaScript reserved word", model=model.name))

        errors.extend(self._check_service_names(context, stems))

        return PhaseResult.from_errors(errors, {"stems": len(stems)})

    def _check_service_names(self, context: GenerationContext, stems: dict[str, list[str]]) -> list[GenerationError]:
        """Service annotation names are file stems too; they must not reuse a model's or another service's."""
        errors = []

        services: dict[str, list[str]] = defaultdict(list)
        for model_name, annotation in context.cache.get_all_service_annotations():
            services[annotation.name].append(model_name)

        for service_name, model_names in services.items():
            other_models = [name for name in stems.get(service_name, []) if name not in model_names]
            for model_name in model_names:
                if len(model_names) > 1:
                    message = f"Models {', '.join(model_names)} all declare @service {service_name}"
                elif other_models:
                    message = f"@service {service_name} of model {model_name} collides with model {', '.join(other_models)}"
                elif service_name in RESERVED_STEMS:
                    message = f"@service {service_name} of model {model_name} collides with a generated file"
                else:
                    continue
                errors.append(self.error(ErrorSeverity.ERROR, message, model=model_name))

        return errors
