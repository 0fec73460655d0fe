"""
End-to-end tests of the generation pipeline.
"""

import asyncio

import pytest
from conftest import EmitPhase, entity, junction, relation, scalar

from modelgen.pipeline import CodeGenerationPipeline, PhaseHookRegistry
from modelgen.pipeline.errors import GenerationFailedError, PipelineWiringError
from modelgen.pipeline.escalation import ErrorEscalationPolicy
from modelgen.pipeline.types import ErrorSeverity, PhaseResult, PhaseStatus
from modelgen.schema import ParsedSchema

LAYER_PHASES = {"dto", "service", "controller", "route"}


def phase_names(pipeline):
    return [p.name for p in pipeline.phases]


def pipeline_with(schema, config, *extra_phases, **kwargs):
    """Pipeline running the phases derived from the config plus extra test phases."""
    phases = CodeGenerationPipeline(schema, config).phases + list(extra_phases)
    return CodeGenerationPipeline(schema, config, phases=phases, **kwargs)


class TestPhaseSelection:
    def test_layered_mode(self, blog_schema):
        pipeline = CodeGenerationPipeline(blog_schema, {})
        assert phase_names(pipeline) == [
            "validation",
            "analysis",
            "naming-conflict",
            "dto",
            "service",
            "controller",
            "route",
            "sdk",
            "hooks",
            "checklist",
        ]

    def test_registry_mode(self, blog_schema):
        names = phase_names(CodeGenerationPipeline(blog_schema, {"use_registry": True}))
        assert names.count("registry") == 1
        assert not LAYER_PHASES & set(names)

    @pytest.mark.parametrize("use_registry", [False, True])
    def test_registry_and_layers_are_exclusive(self, blog_schema, use_registry):
        names = set(phase_names(CodeGenerationPipeline(blog_schema, {"use_registry": use_registry})))
        assert ("registry" in names) == use_registry
        assert (LAYER_PHASES <= names) == (not use_registry)

    def test_optional_phases(self, blog_schema):
        names = phase_names(CodeGenerationPipeline(blog_schema, {"generate_checklist": False}))
        assert "checklist" not in names
        assert "plugin" not in names

        names = phase_names(CodeGenerationPipeline(blog_schema, {"features": {"s3_storage": {"bucket": "uploads"}}}))
        assert names[-2:] == ["plugin", "checklist"]

    def test_phases_are_sorted_by_order(self, blog_schema):
        pipeline = CodeGenerationPipeline(blog_schema, {}, phases=list(reversed(CodeGenerationPipeline(blog_schema, {}).phases)))
        orders = [p.order for p in pipeline.phases]
        assert orders == sorted(orders)


class TestWiring:
    def test_missing_requirement_is_rejected_at_construction(self, blog_schema):
        phases = [p for p in CodeGenerationPipeline(blog_schema, {}).phases if p.name != "service"]
        with pytest.raises(PipelineWiringError, match="controller"):
            CodeGenerationPipeline(blog_schema, {}, phases=phases)

    def test_duplicate_phase_names_are_rejected(self, blog_schema):
        with pytest.raises(PipelineWiringError, match="Duplicate"):
            pipeline_with(blog_schema, {}, EmitPhase("sdk", 12))


class TestGeneration:
    def test_layered_output(self, blog_schema):
        files = CodeGenerationPipeline(blog_schema, {}).run()

        assert set(files.contracts) == {"User", "Post", "Tag", "PostTag", "Conversation"}
        assert sorted(files.contracts["User"]) == [
            "user.create.dto.ts",
            "user.query.dto.ts",
            "user.read.dto.ts",
            "user.update.dto.ts",
        ]
        assert set(files.services) == {"user.service.ts", "post.service.ts", "tag.service.ts", "ai-agent.service.ts"}
        assert set(files.controllers) == {"user.controller.ts", "post.controller.ts", "tag.controller.ts", "ai-agent.controller.ts"}
        assert len(files.routes) == 4
        assert files.registry is None
        assert set(files.sdk) >= {"index.ts", "version.ts", "README.md", "models/user.client.ts", "services/ai-agent.client.ts"}
        assert "models/post-tag.client.ts" not in files.sdk
        assert set(files.hooks) == {"core", "react"}
        assert set(files.checklist) == {"index.html", "checklist.json"}
        assert files.summary.total == 0

    def test_registry_output(self, blog_schema):
        files = CodeGenerationPipeline(blog_schema, {"use_registry": True}).run()

        assert set(files.registry) == {"models.registry.ts", "index.ts"}
        assert "postTag" not in files.registry["models.registry.ts"]
        assert set(files.services) == {"ai-agent.service.ts"}
        assert "PostTag" not in files.contracts

    def test_fastify_controllers(self, blog_schema):
        files = CodeGenerationPipeline(blog_schema, {"framework": "fastify"}).run()
        assert "FastifyReply" in files.controllers["user.controller.ts"]

    def test_sdk_version_carries_metadata(self, blog_schema):
        files = CodeGenerationPipeline(blog_schema, {"schema_hash": "abc123", "tool_version": "2.1.0"}).run()
        assert "abc123" in files.sdk["version.ts"]
        assert "2.1.0" in files.sdk["version.ts"]

    def test_hooks_for_each_framework(self, blog_schema):
        files = CodeGenerationPipeline(blog_schema, {"hook_frameworks": ["vue", "vanilla"]}).run()
        assert set(files.hooks) == {"core", "vue", "vanilla"}
        assert "query-keys.ts" in files.hooks["core"]
        assert "post.ts" in files.hooks["vue"]

    def test_execute_coroutine(self, blog_schema):
        pipeline = CodeGenerationPipeline(blog_schema, {})
        files = asyncio.run(pipeline.execute())
        assert files.total_files() > 0

    def test_model_errors_skip_later_layers(self):
        post = entity("Post", scalar("title"), relation("author", "Author", ["authorId"]))
        schema = ParsedSchema(models=(entity("User", scalar("email")), post))

        files = CodeGenerationPipeline(schema, {}).run()

        assert "Post" not in files.contracts
        assert "post.service.ts" not in files.services
        assert "user.service.ts" in files.services
        assert files.summary.error >= 1
        # The checklist refuses to run once a critical error was recorded
        assert files.checklist is None

    def test_service_name_clash_is_reported_not_dropped(self):
        chat = entity("Conversation", documentation="@service ai-agent\n@methods sendMessage")
        schema = ParsedSchema(models=(entity("AiAgent", scalar("label")), chat))

        files = CodeGenerationPipeline(schema, {}).run()

        assert files.summary.error == 1
        assert files.summary.warning == 0
        assert list(files.services) == ["ai-agent.service.ts"]
        assert list(files.controllers) == ["ai-agent.controller.ts"]
        assert "Conversation" not in files.contracts
        assert "services/ai-agent.client.ts" not in files.sdk


class TestScenarios:
    def test_warning_completes_with_summary(self, blog_schema):
        warn = EmitPhase("emit-warning", 5, ErrorSeverity.WARNING, "deprecated field")
        pipeline = pipeline_with(blog_schema, {"fail_fast": False, "continue_on_error": True}, warn)

        files = pipeline.run()

        assert warn.executed
        assert files.summary.warning == 1
        assert files.summary.error == 0
        assert pipeline.get_phase_results()["emit-warning"].status == PhaseStatus.COMPLETED

    def test_fail_fast_error_stops_immediately(self, blog_schema):
        fail = EmitPhase("emit-error", 5, ErrorSeverity.ERROR, "broken service")
        pipeline = pipeline_with(blog_schema, {"fail_fast": True}, fail)

        with pytest.raises(GenerationFailedError, match="broken service"):
            pipeline.run()

        results = pipeline.get_phase_results()
        assert results["emit-error"].status == PhaseStatus.FAILED
        later = [p.name for p in pipeline.phases if p.order > fail.order]
        assert later
        assert not any(name in results for name in later)

    def test_strict_plugin_validation_blocks(self, blog_schema):
        config = {"strict_plugin_validation": True, "features": {"s3_storage": {}}}
        pipeline = CodeGenerationPipeline(blog_schema, config)

        with pytest.raises(GenerationFailedError, match="s3_storage"):
            pipeline.run()

        results = pipeline.get_phase_results()
        assert results["plugin"].status == PhaseStatus.FAILED
        assert "checklist" not in results
        blocking = [e for e in pipeline.context.get_errors() if e.blocks_generation]
        assert [e.phase for e in blocking] == ["plugin"]

    def test_invalid_plugin_only_warns_when_not_strict(self, blog_schema):
        config = {"features": {"s3_storage": {}, "google_auth": {"user_model": "User"}}}
        files = CodeGenerationPipeline(blog_schema, config).run()

        assert "s3_storage" not in files.plugins
        assert "auth/google.strategy.ts" in files.plugins["google_auth"]
        assert "GOOGLE_CLIENT_ID" in files.plugin_outputs["google_auth"]["env_vars"]
        assert files.summary.warning >= 1
        assert files.checklist is not None
        assert "Google OAuth" in files.checklist["index.html"]

    def test_junction_models_skip_analysis(self):
        models = [entity(f"Entity{i}", scalar("label")) for i in range(7)]
        models += [
            junction("LinkA", "Entity0", "Entity1"),
            junction("LinkB", "Entity2", "Entity3"),
            junction("LinkC", "Entity4", "Entity5"),
        ]
        schema = ParsedSchema(models=tuple(models))
        pipeline = CodeGenerationPipeline(schema, {})

        pipeline.run()

        cache = pipeline.context.cache
        assert len(schema.models) == 10
        assert cache.get_analysis_count() == 7
        assert cache.get_expected_count(schema) == cache.get_analysis_count()
        assert cache.get_missing_analysis(schema) == []
        assert pipeline.get_phase_results()["analysis"].data.junction_tables == ["LinkA", "LinkB", "LinkC"]


class CollectingPolicy(ErrorEscalationPolicy):
    """Never throws on add, so blocking errors reach the orchestrator's own checks."""

    def should_throw(self, error):
        return False


class BlockingWarning(EmitPhase):
    async def execute(self, context):
        self.executed = True
        return PhaseResult.from_errors([self.error(ErrorSeverity.WARNING, self.message, blocks_generation=True)])


def collecting_pipeline(schema, *extra_phases):
    pipeline = pipeline_with(schema, {}, *extra_phases)
    pipeline.context.policy = CollectingPolicy(pipeline.config.error_handling)
    return pipeline


class TestBlockingChecks:
    def test_final_check_names_every_blocking_error(self, blog_schema):
        invalid = EmitPhase("emit-validation", 5.5, ErrorSeverity.VALIDATION, "invalid output")
        blocked = BlockingWarning("emit-blocking", 8.5, message="missing secret")
        pipeline = collecting_pipeline(blog_schema, invalid, blocked)

        with pytest.raises(GenerationFailedError) as excinfo:
            pipeline.run()

        message = str(excinfo.value)
        assert message.startswith("Generation blocked by 2 error(s):")
        assert "  - invalid output" in message
        assert "  - missing secret" in message
        assert excinfo.value.generation_error.message == "invalid output"
        # Both phases ran; the check happens once every phase is done
        assert invalid.executed and blocked.executed
        assert pipeline.get_phase_results()["emit-blocking"].status == PhaseStatus.COMPLETED
        assert pipeline.context.snapshot_names() == []

    def test_failed_phase_with_blocking_errors_stops_the_run(self, blog_schema):
        fatal = EmitPhase("emit-fatal", 7.5, ErrorSeverity.FATAL, "disk full", write_file="injected.service.ts")
        pipeline = collecting_pipeline(blog_schema, fatal)

        with pytest.raises(GenerationFailedError, match="Phase emit-fatal failed with blocking errors"):
            pipeline.run()

        results = pipeline.get_phase_results()
        assert results["emit-fatal"].status == PhaseStatus.FAILED
        assert not any(p.name in results for p in pipeline.phases if p.order > fatal.order)
        assert "injected.service.ts" not in pipeline.context.files.build().services

    def test_failed_phase_without_blocking_errors_continues(self, blog_schema):
        error = EmitPhase("emit-error", 7.5, ErrorSeverity.ERROR, "partial output")
        pipeline = collecting_pipeline(blog_schema, error)

        files = pipeline.run()

        assert files.summary.error == 1
        assert pipeline.get_phase_results()["emit-error"].status == PhaseStatus.FAILED


class TestSnapshotsAndRollback:
    def test_skipped_phase_has_no_snapshot(self, blog_schema):
        seen = {}
        hooks = PhaseHookRegistry()
        hooks.before_phase("naming-conflict", lambda phase, context: seen.update(snapshots=context.snapshot_names()))

        pipeline = CodeGenerationPipeline(blog_schema, {"use_enhanced": False}, hooks=hooks)
        pipeline.run()

        assert pipeline.get_phase_results()["analysis"].status == PhaseStatus.SKIPPED
        assert seen["snapshots"] == ["validation", "naming-conflict"]
        assert pipeline.context.snapshot_names() == []

    def test_rollback_restores_state_before_the_phase(self, blog_schema):
        captured = {}
        hooks = PhaseHookRegistry()
        hooks.before_phase("emit-fatal", lambda phase, context: captured.update(before=context.files.build()))

        fatal = EmitPhase("emit-fatal", 7.5, ErrorSeverity.FATAL, "disk full", write_file="injected.service.ts")
        pipeline = pipeline_with(blog_schema, {}, fatal, hooks=hooks)

        with pytest.raises(GenerationFailedError):
            pipeline.run()

        after = pipeline.context.files.build()
        assert "injected.service.ts" not in after.services
        assert after == captured["before"]
        assert after.services  # earlier phases are kept

    def test_mid_execution_validation_error_rolls_back(self, blog_schema):
        class BrokenHooks(EmitPhase):
            async def execute(self, context):
                context.files.get_hooks_builder("react").add_file("ok.ts", "export {}\n")
                context.files.get_hooks_builder("react").add_file("broken.ts", "export const x = {\n")

        hooks_phase = BrokenHooks("broken-hooks", 9.5)
        pipeline = pipeline_with(blog_schema, {}, hooks_phase)

        with pytest.raises(GenerationFailedError, match="Unmatched braces"):
            pipeline.run()

        assert "ok.ts" not in pipeline.context.files.build().hooks.get("react", {})
        assert pipeline.get_phase_results()["broken-hooks"].status == PhaseStatus.FAILED

    def test_unexpected_exception_is_wrapped(self, blog_schema):
        class Crash(EmitPhase):
            async def execute(self, context):
                raise KeyError("missing")

        pipeline = pipeline_with(blog_schema, {}, Crash("crash", 3.5))

        with pytest.raises(GenerationFailedError, match="Phase crash failed") as excinfo:
            pipeline.run()

        assert isinstance(excinfo.value.__cause__, KeyError)
        assert excinfo.value.cause is excinfo.value.__cause__

    def test_rollback_failure_is_not_escalated(self, blog_schema, caplog):
        class BadRollback(EmitPhase):
            async def rollback(self, context):
                raise RuntimeError("rollback exploded")

        pipeline = pipeline_with(blog_schema, {}, BadRollback("bad", 3.5, ErrorSeverity.FATAL, "fatal issue"))

        with pytest.raises(GenerationFailedError, match="fatal issue"):
            pipeline.run()

        assert "Rollback failed for phase bad" in caplog.text


class TestSDKFanOut:
    def test_one_failing_client_does_not_cancel_others(self, blog_schema):
        from modelgen.generators import TemplateRenderer
        from modelgen.pipeline.phases import SDKPhase

        class FlakyRenderer(TemplateRenderer):
            def render_sdk_client(self, model, analysis):
                if model.name == "Post":
                    raise RuntimeError("template exploded")
                return super().render_sdk_client(model, analysis)

        phases = [SDKPhase(FlakyRenderer()) if p.name == "sdk" else p for p in CodeGenerationPipeline(blog_schema, {}).phases]
        pipeline = CodeGenerationPipeline(blog_schema, {}, phases=phases)

        files = pipeline.run()

        assert "models/user.client.ts" in files.sdk
        assert "models/tag.client.ts" in files.sdk
        assert "models/post.client.ts" not in files.sdk
        assert "PostClient" not in files.sdk["index.ts"]
        errors = [e for e in pipeline.context.get_errors() if e.severity == ErrorSeverity.ERROR]
        assert [e.model for e in errors] == ["Post"]
        assert pipeline.get_phase_results()["sdk"].status == PhaseStatus.FAILED


if __name__ == "__main__":
    pytest.main([__file__])
