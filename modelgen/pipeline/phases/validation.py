"""
Schema validation phase.

Rejects schemas the later phases cannot generate valid output for.
"""

from __future__ import annotations

from collections import Counter

from ..context import GenerationContext
from ..types import ErrorSeverity, PhaseResult
from .base import Capability, Phase


class ValidationPhase(Phase):
    """Checks model names, fields, relations and primary keys."""

    name = "validation"
    order = 0
    provides = frozenset({Capability.VALIDATED_SCHEMA})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        schema = context.schema
        errors = []

        if not schema.models:
            errors.append(self.error(ErrorSeverity.WARNING, "Schema contains no models, nothing will be generated"))
            return PhaseResult.from_errors(errors, {"models": 0})

        # Duplicate names would silently overwrite each other's output
        duplicates = [name for name, count in Counter(schema.model_names).items() if count > 1]
        for name in duplicates:
            errors.append(self.error(ErrorSeverity.VALIDATION, f"Duplicate model name: {name}", model=name))

        for model in schema.models:
            if not model.fields:
                errors.append(self.error(ErrorSeverity.ERROR, f"Model {model.name} has no fields", model=model.name))
                continue

            for f in model.relation_fields:
                if schema.get_model(f.type) is None:
                    errors.append(
                        self.error(
                            ErrorSeverity.ERROR,
                            f"Relation field {model.name}.{f.name} references unknown model {f.type}",
                            model=model.name,
                        )
                    )

            if not model.primary_key:
                errors.append(self.error(ErrorSeverity.WARNING, f"Model {model.name} has no primary key", model=model.name))

        return PhaseResult.from_errors(errors, {"models": len(schema.models)})
