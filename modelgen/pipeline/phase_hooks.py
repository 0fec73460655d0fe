"""
Phase hooks.

Callers can observe or replace individual phases without subclassing the
pipeline. Hooks may be plain functions or coroutines. Registering a hook
for phase name None applies it to every phase.
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from .context import GenerationContext
from .types import PhaseResult

if TYPE_CHECKING:
    from .phases.base import Phase

BeforeHook = Callable[["Phase", GenerationContext], Any]
AfterHook = Callable[["Phase", GenerationContext, PhaseResult], Any]
ReplaceHook = Callable[["Phase", GenerationContext], Awaitable[PhaseResult] | PhaseResult]
ErrorHook = Callable[[str, BaseException, GenerationContext], Any]

ALL_PHASES = None


async def _call(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class PhaseHookRegistry:
    """Registered before/after/replace/error hooks, by phase name."""

    def __init__(self):
        self._before: dict[str | None, list[BeforeHook]] = defaultdict(list)
        self._after: dict[str | None, list[AfterHook]] = defaultdict(list)
        self._error: dict[str | None, list[ErrorHook]] = defaultdict(list)
        self._replace: dict[str, ReplaceHook] = {}

    def before_phase(self, phase_name: str | None, hook: BeforeHook) -> None:
        """Run `hook(phase, context)` after the snapshot, right before the phase executes."""
        self._before[phase_name].append(hook)

    def after_phase(self, phase_name: str | None, hook: AfterHook) -> None:
        """Run `hook(phase, context, result)` once the phase's errors have been merged."""
        self._after[phase_name].append(hook)

    def replace_phase(self, phase_name: str, hook: ReplaceHook) -> None:
        """Run `hook(phase, context)` instead of `phase.execute`; it must return a PhaseResult."""
        self._replace[phase_name] = hook

    def on_error(self, phase_name: str | None, hook: ErrorHook) -> None:
        """Run `hook(phase_name, exception, context)` before a failed phase is rolled back."""
        self._error[phase_name].append(hook)

    def _hooks_for(self, hooks: dict[str | None, list], phase_name: str) -> list:
        return hooks.get(phase_name, []) + hooks.get(ALL_PHASES, [])

    async def run_before(self, phase: Phase, context: GenerationContext) -> None:
        for hook in self._hooks_for(self._before, phase.name):
            await _call(hook, phase, context)

    async def run_after(self, phase: Phase, context: GenerationContext, result: PhaseResult) -> None:
        for hook in self._hooks_for(self._after, phase.name):
            await _call(hook, phase, context, result)

    async def run_error(self, phase_name: str, error: BaseException, context: GenerationContext) -> None:
        for hook in self._hooks_for(self._error, phase_name):
            await _call(hook, phase_name, error, context)

    async def execute(self, phase: Phase, context: GenerationContext) -> PhaseResult:
        """Execute the phase, or its replacement if one is registered."""
        replacement = self._replace.get(phase.name)
        if replacement is None:
            return await phase.execute(context)
        context.logger.info("Phase %s replaced by hook", phase.name)
        return await _call(replacement, phase, context)

    def has_replacement(self, phase_name: str) -> bool:
        return phase_name in self._replace
