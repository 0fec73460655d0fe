"""
Pipeline orchestrator.

Builds the ordered phase list from the configuration, checks that every
phase's requirements are provided by an earlier phase, then runs the
phases one after the other with snapshot and rollback around each.

Flow:

1. Normalize the configuration
2. Build and sort the phase list, check the wiring
3. For each phase: guard, snapshot, hooks, execute, merge errors
4. Roll back and raise on any failure
5. Final blocking check, then build the output
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from ..plugins.base import FeaturePlugin
from ..plugins.manager import PluginManager
from ..schema import ParsedSchema
from .config import ConfigNormalizer, GeneratorConfig, NormalizedConfig
from .context import GenerationContext
from .errors import GenerationFailedError, PipelineWiringError
from .files import GeneratedFiles
from .phase_hooks import PhaseHookRegistry
from .phases import (
    AnalysisPhase,
    ChecklistPhase,
    ControllerPhase,
    DTOPhase,
    HooksPhase,
    NamingConflictPhase,
    Phase,
    PluginPhase,
    RegistryPhase,
    RoutePhase,
    SDKPhase,
    ServicePhase,
    ValidationPhase,
)
from .types import PhaseResult, PhaseStatus

DEFAULT_LOGGER_NAME = "modelgen"


def check_wiring(phases: list[Phase]) -> None:
    """
    Verify that every phase's requirements are provided by an earlier phase.

    Args:
        phases: Phases in execution order

    Raises:
        PipelineWiringError: On a duplicate phase name or an unmet requirement
    """
    available: set = set()
    seen: set[str] = set()
    for phase in phases:
        if phase.name in seen:
            raise PipelineWiringError(f"Duplicate phase name: {phase.name}")
        seen.add(phase.name)

        missing = phase.requires - available
        if missing:
            names = ", ".join(sorted(c.value for c in missing))
            raise PipelineWiringError(f"Phase '{phase.name}' (order {phase.order}) requires {names}, which no earlier phase provides")
        available |= phase.provides


class CodeGenerationPipeline:
    """Runs the generation phases over a schema.

    Example:
        >>> pipeline = CodeGenerationPipeline(schema, {"framework": "fastify"})
        >>> files = pipeline.run()
        >>> files.summary.warning
        0
    """

    def __init__(
        self,
        schema: ParsedSchema,
        config: GeneratorConfig | NormalizedConfig | dict[str, Any] | None = None,
        *,
        plugins: Iterable[FeaturePlugin] | None = None,
        hooks: PhaseHookRegistry | None = None,
        logger: logging.Logger | None = None,
        environment: str | None = None,
        phases: Iterable[Phase] | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            schema: The parsed schema to generate from
            config: Raw or already normalized configuration
            plugins: Feature plugins; built from `config.features` when omitted
            hooks: Phase hooks
            logger: Logger for the run, defaults to the "modelgen" logger
            environment: Run environment, overrides the MODELGEN_ENV variable
            phases: Custom phase list replacing the one derived from the configuration

        Raises:
            ConfigError: If the configuration is invalid
            PipelineWiringError: If a phase depends on a phase that does not run before it
        """
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

        if isinstance(config, NormalizedConfig):
            self.config = config
        else:
            self.config = ConfigNormalizer(self.logger).normalize(config, environment)

        self._context = GenerationContext(self.config, schema, self.logger)
        self.hooks = hooks or PhaseHookRegistry()

        if plugins is not None:
            self.plugin_manager = PluginManager(plugins)
        else:
            self.plugin_manager = PluginManager.from_features(self.config.features)

        phase_list = list(phases) if phases is not None else self._build_phases()
        self._phases = sorted(phase_list, key=lambda p: p.order)
        check_wiring(self._phases)

        self._results: dict[str, PhaseResult] = {}

    def _build_phases(self) -> list[Phase]:
        config = self.config
        phases: list[Phase] = [ValidationPhase(), AnalysisPhase(), NamingConflictPhase()]

        # Registry and per-model layers are mutually exclusive
        if config.use_registry:
            phases.append(RegistryPhase())
        else:
            phases.extend([DTOPhase(), ServicePhase(), ControllerPhase(), RoutePhase()])

        phases.extend([SDKPhase(), HooksPhase()])

        if config.features is not None or len(self.plugin_manager):
            phases.append(PluginPhase(self.plugin_manager))

        if config.generation.checklist:
            phases.append(ChecklistPhase(self.plugin_manager))

        return phases

    @property
    def phases(self) -> list[Phase]:
        return list(self._phases)

    @property
    def context(self) -> GenerationContext:
        return self._context

    def get_phase_results(self) -> Mapping[str, PhaseResult]:
        """Results of the last run, by phase name in execution order."""
        return MappingProxyType(self._results)

    def run(self) -> GeneratedFiles:
        """Run the pipeline to completion from synchronous code."""
        return asyncio.run(self.execute())

    async def execute(self) -> GeneratedFiles:
        """
        Run every phase in order.

        Returns:
            The generated files, annotated with the run summary

        Raises:
            GenerationFailedError: If a phase fails or blocking errors remain at the end
        """
        context = self._context
        self._results.clear()
        mode = "registry" if self.config.use_registry else "layered"
        self.logger.info("Starting generation: %d models, %d phases, %s mode", len(context.schema.models), len(self._phases), mode)

        try:
            for phase in self._phases:
                await self._execute_phase(phase)

            blocking = context.policy.get_blocking_errors(context.get_errors())
            if blocking:
                details = "\n".join(f"  - {e.describe()}" for e in blocking)
                raise GenerationFailedError(f"Generation blocked by {len(blocking)} error(s):\n{details}", blocking[0])

            files = context.files.build().with_summary(context.get_error_summary())
            context.log_error_summary()
            self.logger.info("Generation complete: %d files", files.total_files())
            return files
        finally:
            context.clear_snapshots()

    async def _execute_phase(self, phase: Phase) -> None:
        context = self._context

        if not phase.should_execute(context):
            self.logger.debug("Skipping phase: %s", phase.name)
            self._results[phase.name] = PhaseResult.skipped()
            return

        context.create_snapshot(phase.name)
        self._results[phase.name] = PhaseResult(success=False, status=PhaseStatus.RUNNING)
        self.logger.info("Running phase: %s", phase.name)
        start = time.perf_counter()

        result = None
        try:
            await self.hooks.run_before(phase, context)
            result = await self.hooks.execute(phase, context)
            self._results[phase.name] = result

            for error in result.errors:
                context.add_error(error)

            if not result.success and context.policy.has_blocking_errors(result.errors):
                blocking = context.policy.get_blocking_errors(result.errors)
                raise GenerationFailedError(f"Phase {phase.name} failed with blocking errors", blocking[0])

            await self.hooks.run_after(phase, context, result)
        except Exception as e:
            errors = list(result.errors) if result is not None else []
            self._results[phase.name] = PhaseResult(success=False, status=PhaseStatus.FAILED, errors=errors, data=result.data if result else None)
            self.logger.error("Phase %s failed: %s", phase.name, e)

            try:
                await self.hooks.run_error(phase.name, e, context)
            except Exception:
                self.logger.exception("Error hook failed for phase %s", phase.name)

            await self._rollback(phase)

            if isinstance(e, GenerationFailedError):
                raise
            raise GenerationFailedError(f"Phase {phase.name} failed: {e}", cause=e) from e

        self.logger.debug("Phase %s finished in %.3fs", phase.name, time.perf_counter() - start)

    async def _rollback(self, phase: Phase) -> None:
        """Best-effort undo of a failed phase; failures are logged, never raised."""
        try:
            await phase.rollback(self._context)
        except Exception:
            self.logger.exception("Rollback failed for phase %s", phase.name)
