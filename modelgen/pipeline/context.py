"""
Generation context.

The single shared-state object passed to every phase. It owns the error
collector, the analysis cache, the files builder and the rollback snapshots.
"""

from __future__ import annotations

import logging

from ..schema import ParsedSchema
from .cache import AnalysisCache
from .collector import ErrorCollector
from .config import NormalizedConfig
from .errors import GenerationFailedError
from .escalation import ErrorEscalationPolicy
from .files import GeneratedFiles, GeneratedFilesBuilder
from .types import ErrorSeverity, GenerationError, RunSummary

logger = logging.getLogger(__name__)


class GenerationContext:
    """Central state of one generation run.

    Exclusively owned by the phase currently executing; phases never run
    concurrently, so no locking is needed.
    """

    def __init__(
        self,
        config: NormalizedConfig,
        schema: ParsedSchema,
        log: logging.Logger | None = None,
        cache: AnalysisCache | None = None,
    ):
        self.config = config
        self.schema = schema
        self.logger = log or logger
        self.policy = ErrorEscalationPolicy.from_config(config)
        self.cache = cache or AnalysisCache()
        self.files = GeneratedFilesBuilder(self.add_error)
        self._errors = ErrorCollector(self.policy, self.logger)
        self._snapshots: dict[str, GeneratedFiles] = {}

    # Error management

    def add_error(self, error: GenerationError) -> None:
        """
        Record an error, then escalate it if the policy says so.

        Raises:
            GenerationFailedError: If the escalation policy decides the error must abort the run
        """
        self._errors.add_error(error)

        if self.policy.should_throw(error):
            raise GenerationFailedError(error.message, error, error.cause)

    def create_error(
        self,
        severity: ErrorSeverity,
        message: str,
        *,
        phase: str | None = None,
        model: str | None = None,
        cause: BaseException | None = None,
        blocks_generation: bool = False,
    ) -> GenerationError:
        return GenerationError(
            severity=severity,
            message=message,
            model=model,
            phase=phase or "unknown",
            cause=cause,
            blocks_generation=blocks_generation,
        )

    def get_errors(self) -> tuple[GenerationError, ...]:
        return self._errors.get_errors()

    def get_model_errors(self, model_name: str) -> list[GenerationError]:
        return [e for e in self._errors.get_errors() if e.model == model_name]

    def has_model_errors(self, model_name: str) -> bool:
        """True if an ERROR or FATAL was recorded for the model."""
        return any(e.severity in (ErrorSeverity.ERROR, ErrorSeverity.FATAL) for e in self.get_model_errors(model_name))

    def has_blocking_errors(self) -> bool:
        return self._errors.has_blocking_errors()

    def has_critical_errors(self) -> bool:
        return self._errors.has_critical_errors()

    def get_error_summary(self) -> RunSummary:
        return self._errors.get_summary()

    def log_error_summary(self) -> None:
        self._errors.log_summary()

    # Snapshot & rollback

    def create_snapshot(self, phase_name: str) -> None:
        """Capture the full current output aggregate under the phase name."""
        self._snapshots[phase_name] = self.files.build()

    def rollback_to_snapshot(self, phase_name: str) -> None:
        """Restore the output aggregate to the state captured for the phase.

        Missing snapshots are logged and ignored.
        """
        snapshot = self._snapshots.get(phase_name)
        if snapshot is None:
            self.logger.warning("No snapshot found for phase: %s", phase_name)
            return

        self.files.restore(snapshot)
        self.logger.info("Rolled back to snapshot: %s", phase_name)

    def get_snapshot(self, phase_name: str) -> GeneratedFiles | None:
        return self._snapshots.get(phase_name)

    def has_snapshot(self, phase_name: str) -> bool:
        return phase_name in self._snapshots

    def snapshot_names(self) -> list[str]:
        return list(self._snapshots)

    def clear_snapshots(self) -> None:
        self._snapshots.clear()
