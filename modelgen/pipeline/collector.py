"""
Append-only store of every error seen during a run.
"""

from __future__ import annotations

import logging

from .escalation import ErrorEscalationPolicy
from .types import ErrorSeverity, GenerationError, RunSummary

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.VALIDATION: logging.ERROR,
    ErrorSeverity.FATAL: logging.ERROR,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.WARNING: logging.WARNING,
}

_LOG_PREFIXES = {
    ErrorSeverity.VALIDATION: "VALIDATION FAILURE:",
    ErrorSeverity.FATAL: "FATAL:",
    ErrorSeverity.ERROR: "ERROR:",
    ErrorSeverity.WARNING: "WARNING:",
}

_SUMMARY_SECTIONS = (
    (ErrorSeverity.VALIDATION, "VALIDATION FAILURES (block generation)"),
    (ErrorSeverity.FATAL, "FATAL ERRORS"),
    (ErrorSeverity.ERROR, "ERRORS"),
    (ErrorSeverity.WARNING, "WARNINGS"),
)


class ErrorCollector:
    """Collects generation errors. Errors are never mutated or removed."""

    def __init__(self, policy: ErrorEscalationPolicy | None = None, log: logging.Logger | None = None):
        self.policy = policy or ErrorEscalationPolicy.default()
        self.logger = log or logger
        self._errors: list[GenerationError] = []

    def add_error(self, error: GenerationError) -> None:
        """Record an error and log it at the level matching its severity."""
        self.logger.log(
            _LOG_LEVELS[error.severity],
            "%s %s",
            _LOG_PREFIXES[error.severity],
            error.message,
            extra={
                "severity": error.severity.value,
                "model": error.model,
                "phase": error.phase,
                "blocks_generation": error.blocks_generation,
            },
            exc_info=error.cause if error.cause is not None else None,
        )
        self._errors.append(error)

    def get_errors(self) -> tuple[GenerationError, ...]:
        return tuple(self._errors)

    def get_errors_by_severity(self, severity: ErrorSeverity) -> list[GenerationError]:
        return [e for e in self._errors if e.severity == severity]

    def get_error_count(self) -> int:
        return len(self._errors)

    def has_blocking_errors(self) -> bool:
        return self.policy.has_blocking_errors(self._errors)

    def has_critical_errors(self) -> bool:
        """True once any ERROR or FATAL has been recorded."""
        return any(e.severity in (ErrorSeverity.ERROR, ErrorSeverity.FATAL) for e in self._errors)

    def get_summary(self) -> RunSummary:
        return self.policy.get_summary(self._errors)

    def log_summary(self) -> None:
        """Log every error grouped by severity, followed by the overall outcome."""
        if not self._errors:
            self.logger.info("Generation completed with no errors")
            return

        lines = ["Generation summary", "=" * 60]
        for severity, title in _SUMMARY_SECTIONS:
            errors = self.get_errors_by_severity(severity)
            if not errors:
                continue
            lines.append(f"{title}: {len(errors)}")
            lines.extend(f"  - {e.describe()}" for e in errors)
        lines.append("=" * 60)

        summary = self.get_summary()
        if summary.blocking:
            lines.append("Generation BLOCKED by blocking errors.")
        elif summary.fatal or summary.error:
            lines.append("Generation completed with errors. Some files may be missing or incomplete.")
        else:
            lines.append("Generation completed with warnings only. All files generated.")

        self.logger.info("\n".join(lines))
