"""
Core value types shared by every pipeline component.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Severity of a generation issue."""

    WARNING = "warning"  # Non-critical, generation continues
    ERROR = "error"  # Affects one model or layer, others may still succeed
    FATAL = "fatal"  # System-level failure, the run cannot succeed
    VALIDATION = "validation"  # Generated output would be invalid, always blocks


class PhaseStatus(str, Enum):
    """Lifecycle status of a phase."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class GenerationError:
    """An issue reported during generation.

    Attributes:
        severity: How serious the issue is
        message: Human-readable description
        model: Name of the model the issue belongs to, if any
        phase: Name of the phase that reported it
        cause: Underlying exception, if the issue wraps one
        blocks_generation: Forces blocking treatment regardless of severity
    """

    severity: ErrorSeverity
    message: str
    model: str | None = None
    phase: str | None = None
    cause: BaseException | None = field(default=None, compare=False)
    blocks_generation: bool = False

    def describe(self) -> str:
        """One-line description used in summaries."""
        if self.model:
            return f"{self.message} (model: {self.model})"
        return self.message


@dataclass
class PhaseResult:
    """Outcome of a single phase execution."""

    success: bool
    status: PhaseStatus
    errors: list[GenerationError] = field(default_factory=list)
    data: Any = None

    @staticmethod
    def from_errors(errors: list[GenerationError], data: Any = None) -> PhaseResult:
        """Build a result whose success depends on whether any ERROR or FATAL was reported."""
        success = not any(e.severity in (ErrorSeverity.ERROR, ErrorSeverity.FATAL) for e in errors)
        return PhaseResult(
            success=success,
            status=PhaseStatus.COMPLETED if success else PhaseStatus.FAILED,
            errors=list(errors),
            data=data,
        )

    @staticmethod
    def skipped() -> PhaseResult:
        return PhaseResult(success=True, status=PhaseStatus.SKIPPED)


@dataclass(frozen=True)
class RunSummary:
    """Error counts of a run, by severity."""

    validation: int = 0
    fatal: int = 0
    error: int = 0
    warning: int = 0
    total: int = 0
    blocking: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "validation": self.validation,
            "fatal": self.fatal,
            "error": self.error,
            "warning": self.warning,
            "total": self.total,
            "blocking": self.blocking,
        }
