"""
DTO phase: per-model data contracts and validators.
"""

from __future__ import annotations

from ...generators.renderer import DTO_KINDS, TemplateRenderer
from ...schema import ParsedModel
from ...utils import to_kebab_case
from ..context import GenerationContext
from ..errors import GenerationFailedError
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


def generate_model_contracts(context: GenerationContext, renderer: TemplateRenderer, model: ParsedModel) -> int:
    """
    Add the create/update/read/query contracts and the validator of a model.

    Returns:
        Number of files added
    """
    stem = to_kebab_case(model.name)
    contracts = context.files.get_contracts_builder(model.name)
    added = 0
    for kind in DTO_KINDS:
        added += contracts.add_file(f"{stem}.{kind}.dto.ts", renderer.render_dto(model, kind), model.name)

    validators = context.files.get_validators_builder(model.name)
    added += validators.add_file(f"{stem}.validator.ts", renderer.render_validator(model), model.name)
    return added


class DTOPhase(Phase):
    """Generates contracts for every model without errors."""

    name = "dto"
    order = 3
    requires = frozenset({Capability.VALIDATED_SCHEMA, Capability.NAMING})
    provides = frozenset({Capability.CONTRACTS})

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        generated = []

        for model in context.schema.models:
            if context.has_model_errors(model.name):
                context.logger.debug("Skipping DTOs for %s: model has errors", model.name)
                continue
            try:
                generate_model_contracts(context, self.renderer, model)
            except GenerationFailedError:
                raise
            except Exception as e:
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to generate DTOs for {model.name}: {e}", model=model.name, cause=e))
                continue
            generated.append(model.name)

        return PhaseResult.from_errors(errors, {"models": generated})
