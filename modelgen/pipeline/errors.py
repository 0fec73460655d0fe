"""
Exceptions raised by the generation pipeline.
"""

from __future__ import annotations

from .types import GenerationError


class ModelgenError(Exception):
    """Base class for every error raised by modelgen."""

    pass


class ConfigError(ModelgenError):
    """Raised when a configuration cannot be normalized."""

    pass


class ConfigConflictError(ConfigError):
    """Raised when two configuration options contradict each other."""

    pass


class MissingProductionFieldError(ConfigError):
    """Raised when a production run is missing a real schema hash or tool version."""

    pass


class PipelineWiringError(ModelgenError):
    """Raised when a phase is ordered before the phases it depends on.

    Detected when the pipeline is constructed, before any phase runs.
    """

    pass


class AnalysisCacheError(ModelgenError, LookupError):
    """Raised on a missing or duplicated analysis cache entry."""

    pass


class GenerationFailedError(ModelgenError):
    """Raised when generation has to stop.

    Attributes:
        generation_error: The error that triggered the failure, if any
        cause: The wrapped exception, if the failure was unexpected

    Callers that need every diagnostic should read the context's error list
    instead of parsing the message.
    """

    def __init__(
        self,
        message: str,
        generation_error: GenerationError | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.generation_error = generation_error
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
