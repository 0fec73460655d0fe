"""
Output files aggregate.

`GeneratedFilesBuilder` collects generated files layer by layer. It is
additive until `build()` is called; `build()` returns a detached
`GeneratedFiles` copy, which doubles as the snapshot used for rollback.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from .types import ErrorSeverity, GenerationError, RunSummary

CODE_EXTENSIONS = (".ts", ".tsx", ".js", ".mjs")

HOOKS_CORE = "core"

ErrorReporter = Callable[[GenerationError], None]


def validate_generated_code(code: str, filename: str, report: ErrorReporter) -> bool:
    """
    Check generated code for empty output and unbalanced delimiters.

    Problems are reported as VALIDATION errors, which always abort the run.

    Args:
        code: The generated source text
        filename: Path used in error messages
        report: Callback receiving the error (usually `GenerationContext.add_error`)

    Returns:
        True if the code passed every check
    """
    if not code or not code.strip():
        report(
            GenerationError(
                severity=ErrorSeverity.VALIDATION,
                message=f"Generated code is empty for file: {filename}",
                phase="code-validation",
                blocks_generation=True,
            )
        )
        return False

    if not filename.endswith(CODE_EXTENSIONS):
        return True

    for label, opening, closing in (("braces", "{", "}"), ("parentheses", "(", ")"), ("brackets", "[", "]")):
        open_count = code.count(opening)
        close_count = code.count(closing)
        if open_count != close_count:
            report(
                GenerationError(
                    severity=ErrorSeverity.VALIDATION,
                    message=f"Unmatched {label} in {filename}: {open_count} open, {close_count} close",
                    phase="code-validation",
                    blocks_generation=True,
                )
            )
            return False

    return True


class FileBuilder:
    """A collection of files for one layer (or one bucket of a layer)."""

    def __init__(self, report: ErrorReporter):
        self._report = report
        self._files: dict[str, str] = {}

    def add_file(self, path: str, content: str, model_name: str | None = None) -> bool:
        """
        Validate and add a file.

        Returns:
            True if the file was added, False if validation failed or the path is taken
        """
        if not validate_generated_code(content, path, self._report):
            return False

        if path in self._files:
            self._report(
                GenerationError(
                    severity=ErrorSeverity.WARNING,
                    message=f"Duplicate file path: {path}",
                    model=model_name,
                    phase="path-validation",
                )
            )
            return False

        self._files[path] = content
        return True

    def get_file(self, path: str) -> str | None:
        return self._files.get(path)

    def has_file(self, path: str) -> bool:
        return path in self._files

    def get_file_count(self) -> int:
        return len(self._files)

    def get_paths(self) -> list[str]:
        return list(self._files)

    def clear(self) -> None:
        self._files.clear()

    def build(self) -> dict[str, str]:
        return dict(self._files)

    def _restore(self, files: dict[str, str]) -> None:
        self._files = dict(files)


@dataclass(frozen=True)
class GeneratedFiles:
    """The finalized output, organized by layer: filename -> text content.

    Per-model layers (contracts, validators) and per-plugin / per-framework
    layers are nested one level deeper.
    """

    contracts: dict[str, dict[str, str]] = field(default_factory=dict)
    validators: dict[str, dict[str, str]] = field(default_factory=dict)
    services: dict[str, str] = field(default_factory=dict)
    controllers: dict[str, str] = field(default_factory=dict)
    routes: dict[str, str] = field(default_factory=dict)
    sdk: dict[str, str] = field(default_factory=dict)
    registry: dict[str, str] | None = None
    checklist: dict[str, str] | None = None
    plugins: dict[str, dict[str, str]] = field(default_factory=dict)
    plugin_outputs: dict[str, dict[str, dict[str, str]]] = field(default_factory=dict)
    hooks: dict[str, dict[str, str]] = field(default_factory=dict)
    summary: RunSummary | None = None

    def with_summary(self, summary: RunSummary) -> GeneratedFiles:
        return replace(self, summary=summary)

    def layer_counts(self) -> dict[str, int]:
        """Number of files per layer."""
        return {
            "contracts": sum(len(files) for files in self.contracts.values()),
            "validators": sum(len(files) for files in self.validators.values()),
            "services": len(self.services),
            "controllers": len(self.controllers),
            "routes": len(self.routes),
            "sdk": len(self.sdk),
            "registry": len(self.registry or {}),
            "checklist": len(self.checklist or {}),
            "plugins": sum(len(files) for files in self.plugins.values()),
            "hooks": sum(len(files) for files in self.hooks.values()),
        }

    def total_files(self) -> int:
        return sum(self.layer_counts().values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "contracts": self.contracts,
            "validators": self.validators,
            "services": self.services,
            "controllers": self.controllers,
            "routes": self.routes,
            "sdk": self.sdk,
            "registry": self.registry,
            "checklist": self.checklist,
            "plugins": self.plugins,
            "plugin_outputs": self.plugin_outputs,
            "hooks": self.hooks,
            "summary": self.summary.to_dict() if self.summary else None,
        }


class GeneratedFilesBuilder:
    """Coordinates the per-layer file builders."""

    def __init__(self, report: ErrorReporter):
        self._report = report

        self._contracts: dict[str, FileBuilder] = {}
        self._validators: dict[str, FileBuilder] = {}
        self._plugins: dict[str, FileBuilder] = {}
        self._hooks: dict[str, FileBuilder] = {HOOKS_CORE: FileBuilder(report)}

        self.services = FileBuilder(report)
        self.controllers = FileBuilder(report)
        self.routes = FileBuilder(report)
        self.sdk = FileBuilder(report)
        self.registry = FileBuilder(report)
        self.checklist = FileBuilder(report)

        self._plugin_outputs: dict[str, dict[str, dict[str, str]]] = {}

    def get_contracts_builder(self, model_name: str) -> FileBuilder:
        return self._bucket(self._contracts, model_name)

    def get_validators_builder(self, model_name: str) -> FileBuilder:
        return self._bucket(self._validators, model_name)

    def get_plugin_builder(self, plugin_name: str) -> FileBuilder:
        return self._bucket(self._plugins, plugin_name)

    def get_hooks_builder(self, framework: str = HOOKS_CORE) -> FileBuilder:
        return self._bucket(self._hooks, framework)

    def set_plugin_output(self, plugin_name: str, env_vars: dict[str, str], dependencies: dict[str, str]) -> None:
        self._plugin_outputs[plugin_name] = {"env_vars": dict(env_vars), "dependencies": dict(dependencies)}

    def clear_plugins(self) -> None:
        self._plugins.clear()
        self._plugin_outputs.clear()

    def clear_hooks(self) -> None:
        self._hooks = {HOOKS_CORE: FileBuilder(self._report)}

    def _bucket(self, buckets: dict[str, FileBuilder], name: str) -> FileBuilder:
        if name not in buckets:
            buckets[name] = FileBuilder(self._report)
        return buckets[name]

    def build(self) -> GeneratedFiles:
        """Return a detached copy of everything generated so far."""
        return GeneratedFiles(
            contracts=_build_buckets(self._contracts),
            validators=_build_buckets(self._validators),
            services=self.services.build(),
            controllers=self.controllers.build(),
            routes=self.routes.build(),
            sdk=self.sdk.build(),
            registry=self.registry.build() if self.registry.get_file_count() else None,
            checklist=self.checklist.build() if self.checklist.get_file_count() else None,
            plugins=_build_buckets(self._plugins),
            plugin_outputs={name: {k: dict(v) for k, v in output.items()} for name, output in self._plugin_outputs.items()},
            hooks={name: builder.build() for name, builder in self._hooks.items() if name == HOOKS_CORE or builder.get_file_count()},
        )

    def restore(self, snapshot: GeneratedFiles) -> None:
        """Overwrite the whole state with a snapshot."""
        self._contracts = _restore_buckets(snapshot.contracts, self._report)
        self._validators = _restore_buckets(snapshot.validators, self._report)
        self._plugins = _restore_buckets(snapshot.plugins, self._report)
        self._hooks = _restore_buckets(snapshot.hooks, self._report)
        if HOOKS_CORE not in self._hooks:
            self._hooks[HOOKS_CORE] = FileBuilder(self._report)

        self.services._restore(snapshot.services)
        self.controllers._restore(snapshot.controllers)
        self.routes._restore(snapshot.routes)
        self.sdk._restore(snapshot.sdk)
        self.registry._restore(snapshot.registry or {})
        self.checklist._restore(snapshot.checklist or {})

        self._plugin_outputs = {name: {k: dict(v) for k, v in output.items()} for name, output in snapshot.plugin_outputs.items()}


def _build_buckets(buckets: dict[str, FileBuilder]) -> dict[str, dict[str, str]]:
    return {name: builder.build() for name, builder in buckets.items() if builder.get_file_count()}


def _restore_buckets(snapshot: dict[str, dict[str, str]], report: ErrorReporter) -> dict[str, FileBuilder]:
    buckets = {}
    for name, files in snapshot.items():
        builder = FileBuilder(report)
        builder._restore(files)
        buckets[name] = builder
    return buckets
