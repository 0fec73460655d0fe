"""
Base class for generation phases.

A phase is one ordered step of the pipeline. It reads and writes the shared
`GenerationContext` and declares the capabilities it needs from earlier
phases and the capabilities it makes available to later ones, so a
mis-ordered phase list is rejected when the pipeline is constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from ...generators.renderer import TemplateRenderer, get_renderer
from ...schema import ParsedModel
from ..context import GenerationContext
from ..types import ErrorSeverity, GenerationError, PhaseResult


class Capability(str, Enum):
    """Something a phase makes available to the phases after it."""

    VALIDATED_SCHEMA = "validated-schema"
    MODEL_ANALYSIS = "model-analysis"
    NAMING = "naming"
    CONTRACTS = "contracts"
    SERVICES = "services"
    CONTROLLERS = "controllers"
    ROUTES = "routes"
    REGISTRY = "registry"
    SDK = "sdk"
    HOOKS = "hooks"
    PLUGINS = "plugins"
    CHECKLIST = "checklist"


class Phase(ABC):
    """Abstract base class for pipeline phases."""

    # Unique phase name, also the snapshot key
    name: ClassVar[str] = ""

    # Position in the pipeline, lower runs first
    order: ClassVar[int] = 0

    requires: ClassVar[frozenset[Capability]] = frozenset()
    provides: ClassVar[frozenset[Capability]] = frozenset()

    def __init__(self, renderer: TemplateRenderer | None = None):
        self.renderer = renderer or get_renderer()

    def should_execute(self, context: GenerationContext) -> bool:
        """Guard evaluated right before the phase would run."""
        return True

    @abstractmethod
    async def execute(self, context: GenerationContext) -> PhaseResult:
        """
        Run the phase.

        Args:
            context: The shared generation context

        Returns:
            The phase result; its errors are merged into the context by the pipeline
        """

    async def rollback(self, context: GenerationContext) -> None:
        """Undo the phase's effects. Restores the snapshot taken before the phase by default."""
        context.rollback_to_snapshot(self.name)

    # Helpers

    def error(
        self,
        severity: ErrorSeverity,
        message: str,
        model: str | None = None,
        cause: BaseException | None = None,
        blocks_generation: bool = False,
    ) -> GenerationError:
        """Create an error attributed to this phase."""
        return GenerationError(
            severity=severity,
            message=message,
            model=model,
            phase=self.name,
            cause=cause,
            blocks_generation=blocks_generation,
        )

    def generatable_models(self, context: GenerationContext) -> list[ParsedModel]:
        """Non-junction models with no ERROR or FATAL recorded against them."""
        return [m for m in context.schema.models if not context.cache.is_junction(m) and not context.has_model_errors(m.name)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, order={self.order})"
