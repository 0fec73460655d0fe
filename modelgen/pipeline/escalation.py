"""
Error escalation policy.

The one place that decides whether an error aborts the run or is merely
collected. The collector, the context and the orchestrator all delegate
here; none of them re-derive these rules.

Rules, in priority order:

1. VALIDATION errors always throw (the output would be invalid)
2. FATAL errors always throw (system-level failure)
3. Errors flagged blocks_generation always throw
4. ERROR throws when fail_fast is set or continue_on_error is not
5. WARNING never throws
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .config import ErrorHandlingConfig, NormalizedConfig
from .types import ErrorSeverity, GenerationError, RunSummary

_SEVERITY_RANK = {
    ErrorSeverity.WARNING: 0,
    ErrorSeverity.ERROR: 1,
    ErrorSeverity.FATAL: 2,
    ErrorSeverity.VALIDATION: 3,
}


class ErrorEscalationPolicy:
    """Decides whether an error should throw or be collected."""

    def __init__(self, config: ErrorHandlingConfig):
        self.config = config

    def should_throw(self, error: GenerationError) -> bool:
        """
        Determine if an error must abort the run immediately.

        Args:
            error: The error to check

        Returns:
            True if the error should throw, False if it should be collected
        """
        if error.severity == ErrorSeverity.VALIDATION:
            return True

        if error.severity == ErrorSeverity.FATAL:
            return True

        if error.blocks_generation:
            return True

        if error.severity == ErrorSeverity.ERROR:
            return self.config.fail_fast or not self.config.continue_on_error

        return False

    def is_blocking(self, error: GenerationError) -> bool:
        """True if the error prevents a valid artifact (VALIDATION, FATAL or blocks_generation)."""
        return error.severity in (ErrorSeverity.VALIDATION, ErrorSeverity.FATAL) or error.blocks_generation

    def has_blocking_errors(self, errors: Iterable[GenerationError]) -> bool:
        return any(self.is_blocking(e) for e in errors)

    def get_blocking_errors(self, errors: Iterable[GenerationError]) -> list[GenerationError]:
        return [e for e in errors if self.is_blocking(e)]

    def get_throwable_errors(self, errors: Iterable[GenerationError]) -> list[GenerationError]:
        return [e for e in errors if self.should_throw(e)]

    def get_highest_severity(self, errors: Iterable[GenerationError]) -> ErrorSeverity:
        """Highest severity in the list, VALIDATION > FATAL > ERROR > WARNING.

        An empty list reports WARNING.
        """
        highest = ErrorSeverity.WARNING
        for error in errors:
            if _SEVERITY_RANK[error.severity] > _SEVERITY_RANK[highest]:
                highest = error.severity
        return highest

    def get_summary(self, errors: Iterable[GenerationError]) -> RunSummary:
        """Count errors by severity."""
        errors = list(errors)
        return RunSummary(
            validation=sum(1 for e in errors if e.severity == ErrorSeverity.VALIDATION),
            fatal=sum(1 for e in errors if e.severity == ErrorSeverity.FATAL),
            error=sum(1 for e in errors if e.severity == ErrorSeverity.ERROR),
            warning=sum(1 for e in errors if e.severity == ErrorSeverity.WARNING),
            total=len(errors),
            blocking=sum(1 for e in errors if self.is_blocking(e)),
        )

    @staticmethod
    def default() -> ErrorEscalationPolicy:
        """Collect everything that is not blocking."""
        return ErrorEscalationPolicy(ErrorHandlingConfig(fail_fast=False, continue_on_error=True, strict_plugin_validation=False))

    @staticmethod
    def strict() -> ErrorEscalationPolicy:
        """Fail on any ERROR, but keep reporting until it happens."""
        return ErrorEscalationPolicy(ErrorHandlingConfig(fail_fast=False, continue_on_error=False, strict_plugin_validation=True))

    @staticmethod
    def fail_fast_policy() -> ErrorEscalationPolicy:
        """Stop on the first ERROR (CI builds)."""
        return ErrorEscalationPolicy(ErrorHandlingConfig(fail_fast=True, continue_on_error=False, strict_plugin_validation=True))

    @staticmethod
    def from_config(config: NormalizedConfig | ErrorHandlingConfig | dict[str, Any]) -> ErrorEscalationPolicy:
        """Create a policy from a normalized config, its error-handling record, or a plain dict."""
        if isinstance(config, NormalizedConfig):
            return ErrorEscalationPolicy(config.error_handling)
        if isinstance(config, ErrorHandlingConfig):
            return ErrorEscalationPolicy(config)

        error_config = config.get("error_handling", config)
        return ErrorEscalationPolicy(
            ErrorHandlingConfig(
                fail_fast=error_config.get("fail_fast", False),
                continue_on_error=error_config.get("continue_on_error", True),
                strict_plugin_validation=error_config.get("strict_plugin_validation", False),
            )
        )
