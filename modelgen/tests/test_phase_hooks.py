"""
Tests for phase hooks.
"""

import pytest
from conftest import EmitPhase

from modelgen.pipeline import CodeGenerationPipeline, PhaseHookRegistry
from modelgen.pipeline.errors import GenerationFailedError
from modelgen.pipeline.types import ErrorSeverity, PhaseResult, PhaseStatus


def test_hooks_fire_in_order(blog_schema):
    calls = []
    hooks = PhaseHookRegistry()
    hooks.before_phase("sdk", lambda phase, context: calls.append(("before", phase.name)))
    hooks.after_phase("sdk", lambda phase, context, result: calls.append(("after", phase.name, result.status)))

    CodeGenerationPipeline(blog_schema, {}, hooks=hooks).run()

    assert calls == [("before", "sdk"), ("after", "sdk", PhaseStatus.COMPLETED)]


def test_global_hooks_see_every_executed_phase(blog_schema):
    executed = []
    hooks = PhaseHookRegistry()
    hooks.before_phase(None, lambda phase, context: executed.append(phase.name))

    pipeline = CodeGenerationPipeline(blog_schema, {"use_enhanced": False}, hooks=hooks)
    pipeline.run()

    assert executed == [p.name for p in pipeline.phases if p.name != "analysis"]


def test_async_hooks_are_awaited(blog_schema):
    calls = []

    async def after(phase, context, result):
        calls.append(phase.name)

    hooks = PhaseHookRegistry()
    hooks.after_phase("validation", after)
    CodeGenerationPipeline(blog_schema, {}, hooks=hooks).run()

    assert calls == ["validation"]


def test_replace_phase(blog_schema):
    hooks = PhaseHookRegistry()

    async def no_checklist(phase, context):
        return PhaseResult.from_errors([phase.error(ErrorSeverity.WARNING, "checklist disabled by hook")])

    hooks.replace_phase("checklist", no_checklist)
    pipeline = CodeGenerationPipeline(blog_schema, {}, hooks=hooks)
    files = pipeline.run()

    assert hooks.has_replacement("checklist")
    assert files.checklist is None
    assert files.summary.warning == 1


def test_error_hook_runs_before_rollback(blog_schema):
    seen = {}
    hooks = PhaseHookRegistry()

    def on_error(phase_name, error, context):
        seen["phase"] = phase_name
        seen["error"] = error
        seen["has_injected_file"] = context.files.services.has_file("injected.service.ts")

    hooks.on_error(None, on_error)
    fatal = EmitPhase("emit-fatal", 5.5, ErrorSeverity.FATAL, "fatal", write_file="injected.service.ts")
    phases = CodeGenerationPipeline(blog_schema, {}).phases + [fatal]
    pipeline = CodeGenerationPipeline(blog_schema, {}, phases=phases, hooks=hooks)

    with pytest.raises(GenerationFailedError):
        pipeline.run()

    assert seen["phase"] == "emit-fatal"
    assert isinstance(seen["error"], GenerationFailedError)
    assert seen["has_injected_file"]
    assert not pipeline.context.files.services.has_file("injected.service.ts")


def test_failing_hook_fails_the_phase(blog_schema):
    def explode(phase, context):
        raise RuntimeError("hook exploded")

    hooks = PhaseHookRegistry()
    hooks.before_phase("hooks", explode)
    pipeline = CodeGenerationPipeline(blog_schema, {}, hooks=hooks)

    with pytest.raises(GenerationFailedError, match="Phase hooks failed: hook exploded"):
        pipeline.run()

    assert pipeline.get_phase_results()["hooks"].status == PhaseStatus.FAILED
    assert "checklist" not in pipeline.get_phase_results()


if __name__ == "__main__":
    pytest.main([__file__])
