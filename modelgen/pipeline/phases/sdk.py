"""
SDK phase: typed API clients.

Model clients are rendered as concurrent tasks. Every outcome is collected,
so one failing model never cancels the others.
"""

from __future__ import annotations

import asyncio

from ...schema import ParsedModel
from ...utils import pluralize, snake_to_pascal_case, to_camel_case, to_kebab_case
from ..context import GenerationContext
from ..types import ErrorSeverity, GenerationError, PhaseResult
from .base import Capability, Phase


class SDKPhase(Phase):
    name = "sdk"
    order = 8
    requires = frozenset({Capability.NAMING})
    provides = frozenset({Capability.SDK})

    async def _render_client(self, context: GenerationContext, model: ParsedModel) -> str:
        analysis = context.cache.try_get_analysis(model.name)
        return await asyncio.to_thread(self.renderer.render_sdk_client, model, analysis)

    async def execute(self, context: GenerationContext) -> PhaseResult:
        errors: list[GenerationError] = []
        sdk = context.files.sdk
        clients: list[dict[str, str]] = []

        models = self.generatable_models(context)
        results = await asyncio.gather(*(self._render_client(context, m) for m in models), return_exceptions=True)

        # Files are added in schema order once every task has settled
        for model, result in zip(models, results):
            if isinstance(result, BaseException):
                errors.append(self.error(ErrorSeverity.ERROR, f"Failed to generate SDK client for {model.name}: {result}", model=model.name, cause=result))
                continue
            path = f"models/{to_kebab_case(model.name)}.client"
            if sdk.add_file(f"{path}.ts", result, model.name):
                clients.append({"class_name": f"{model.name}Client", "path": path, "accessor": to_camel_case(pluralize(model.name))})

        for model_name, annotation in context.cache.get_all_service_annotations():
            if context.has_model_errors(model_name):
                continue
            path = f"services/{annotation.name}.client"
            if sdk.add_file(f"{path}.ts", self.renderer.render_sdk_service_client(annotation), model_name):
                clients.append(
                    {"class_name": f"{snake_to_pascal_case(annotation.name)}Client", "path": path, "accessor": to_camel_case(annotation.name)}
                )

        metadata = context.config.metadata
        sdk.add_file("index.ts", self.renderer.render_sdk_index(clients))
        sdk.add_file("version.ts", self.renderer.render_sdk_version(metadata))
        sdk.add_file("README.md", self.renderer.render_sdk_readme(metadata, clients))

        return PhaseResult.from_errors(errors, {"clients": len(clients)})
