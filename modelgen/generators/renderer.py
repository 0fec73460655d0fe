"""
Template renderer for the generated TypeScript layers.

Every generated file goes through a jinja2 template under
``modelgen/templates``. The renderer only turns models and analysis results
into template variables; it never decides which files a phase produces.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import jinja2

from ..schema import ParsedField, ParsedModel
from ..utils import pluralize, snake_to_pascal_case, to_camel_case, to_kebab_case

if TYPE_CHECKING:
    from ..pipeline.analyzer import ModelAnalysis, ServiceAnnotation
    from ..pipeline.config import ProjectMetadata

CURRENT_DIR = Path(__file__).parent.resolve().absolute()
TEMPLATE_DIR = CURRENT_DIR.parent / "templates"

HEADER = "@generated by modelgen - do not edit"

DTO_KINDS = ("create", "update", "read", "query")

CRUD_ACTIONS = ("list", "get", "create", "update", "delete")


class TemplateRenderer:
    """Renders the jinja2 templates shipped with the package."""

    # Type mapping from schema scalar types to TypeScript types
    TYPE_MAP = {
        "String": "string",
        "Int": "number",
        "Float": "number",
        "Decimal": "number",
        "BigInt": "bigint",
        "Boolean": "boolean",
        "DateTime": "Date",
        "Json": "unknown",
        "Bytes": "Uint8Array",
    }

    # Type mapping from schema scalar types to zod validators
    ZOD_MAP = {
        "String": "z.string()",
        "Int": "z.number().int()",
        "Float": "z.number()",
        "Decimal": "z.number()",
        "BigInt": "z.bigint()",
        "Boolean": "z.boolean()",
        "DateTime": "z.coerce.date()",
        "Json": "z.unknown()",
        "Bytes": "z.instanceof(Uint8Array)",
    }

    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        # Add custom filters
        self.jinja_env.filters["snake_to_pascal"] = snake_to_pascal_case
        self.jinja_env.filters["kebab"] = to_kebab_case
        self.jinja_env.filters["camel"] = to_camel_case
        self.jinja_env.filters["pluralize"] = pluralize

    def render(self, template_name: str, **variables: Any) -> str:
        """
        Render a template by name.

        Args:
            template_name: Path of the template relative to the template directory
            **variables: Template variables

        Returns:
            The rendered text
        """
        template = self.jinja_env.get_template(template_name)
        return template.render(header=HEADER, **variables)

    # Type translation

    def translate_type(self, f: ParsedField) -> str:
        base = self.TYPE_MAP.get(f.type, f.type) if f.is_scalar else f.type
        return f"{base}[]" if f.is_list else base

    def translate_zod(self, f: ParsedField) -> str:
        if f.kind == "enum":
            base = f"z.nativeEnum({f.type})"
        else:
            base = self.ZOD_MAP.get(f.type, "z.unknown()")
        return f"z.array({base})" if f.is_list else base

    def _field_context(self, f: ParsedField, required: bool) -> dict[str, Any]:
        return {"name": f.name, "ts_type": self.translate_type(f), "zod": self.translate_zod(f), "required": required}

    # Contracts

    def _dto_fields(self, model: ParsedModel, kind: str) -> list[dict[str, Any]]:
        data_fields = [f for f in model.fields if not f.is_relation]
        if kind == "create":
            return [self._field_context(f, f.is_required and not f.has_default) for f in data_fields if not (f.is_id and f.has_default)]
        if kind == "update":
            return [self._field_context(f, False) for f in data_fields if not f.is_id]
        if kind == "read":
            return [self._field_context(f, f.is_required) for f in data_fields]
        if kind == "query":
            return [self._field_context(f, False) for f in data_fields]
        raise ValueError(f"Unknown DTO kind: {kind}")

    def render_dto(self, model: ParsedModel, kind: str) -> str:
        """Render one of the create/update/read/query contracts of a model."""
        enum_imports = sorted({f.type for f in model.fields if f.kind == "enum"})
        return self.render("dto.ts.jinja2", model=model, kind=kind, fields=self._dto_fields(model, kind), enum_imports=enum_imports)

    def render_validator(self, model: ParsedModel) -> str:
        return self.render("validator.ts.jinja2", model=model, fields=self._dto_fields(model, "create"))

    # Services, controllers & routes

    def _id_context(self, model: ParsedModel, analysis: ModelAnalysis | None) -> dict[str, str]:
        id_name = analysis.id_field if analysis and analysis.id_field else None
        if id_name is None:
            id_name = model.primary_key[0] if model.primary_key else "id"
        id_field = model.get_field(id_name)
        return {"id_field": id_name, "id_type": self.translate_type(id_field) if id_field else "string"}

    def render_service(self, model: ParsedModel, analysis: ModelAnalysis | None) -> str:
        include = [r.field_name for r in analysis.relations if not r.is_list] if analysis else []
        searchable = list(analysis.searchable_fields) if analysis else []
        return self.render(
            "service.ts.jinja2",
            model=model,
            analysis=analysis,
            include=include,
            searchable=searchable,
            **self._id_context(model, analysis),
        )

    def render_service_scaffold(self, annotation: ServiceAnnotation) -> str:
        return self.render("service_scaffold.ts.jinja2", annotation=annotation)

    def render_controller(self, model: ParsedModel, framework: str) -> str:
        action_calls = {
            "list": "list(req.query as Record<string, unknown>)" if framework == "express" else "list(request.query as Record<string, unknown>)",
            "get": "findById((req.params as { id: string }).id)" if framework == "express" else "findById((request.params as { id: string }).id)",
            "create": "create(req.body)" if framework == "express" else "create(request.body as Record<string, unknown>)",
            "update": "update((req.params as { id: string }).id, req.body)"
            if framework == "express"
            else "update((request.params as { id: string }).id, request.body as Record<string, unknown>)",
            "delete": "delete((req.params as { id: string }).id)" if framework == "express" else "delete((request.params as { id: string }).id)",
        }
        return self.render("controller.ts.jinja2", model=model, framework=framework, actions=CRUD_ACTIONS, action_calls=action_calls)

    def render_service_controller(self, annotation: ServiceAnnotation) -> str:
        return self.render("service_controller.ts.jinja2", annotation=annotation)

    def render_routes(self, model: ParsedModel, framework: str) -> str:
        routes = [
            {"method": "get", "path": "", "handler": f"list{model.name}"},
            {"method": "get", "path": "/:id", "handler": f"get{model.name}"},
            {"method": "post", "path": "", "handler": f"create{model.name}"},
            {"method": "put", "path": "/:id", "handler": f"update{model.name}"},
            {"method": "delete", "path": "/:id", "handler": f"delete{model.name}"},
        ]
        return self.render("routes.ts.jinja2", model=model, framework=framework, routes=routes, base_path=base_path(model.name))

    def render_service_routes(self, annotation: ServiceAnnotation) -> str:
        return self.render("service_routes.ts.jinja2", annotation=annotation)

    # Registry

    def render_registry(self, analyses: list[ModelAnalysis]) -> str:
        entries = [
            {
                "name": a.model_name,
                "path": base_path(a.model_name),
                "id_field": a.id_field or "id",
                "searchable": list(a.searchable_fields),
                "relations": [r.field_name for r in a.relations],
            }
            for a in analyses
        ]
        return self.render("registry.ts.jinja2", entries=entries)

    def render_registry_index(self) -> str:
        return self.render("registry_index.ts.jinja2")

    # SDK

    def render_sdk_client(self, model: ParsedModel, analysis: ModelAnalysis | None) -> str:
        return self.render("sdk_client.ts.jinja2", model=model, base_path=base_path(model.name), **self._id_context(model, analysis))

    def render_sdk_service_client(self, annotation: ServiceAnnotation) -> str:
        return self.render("sdk_service_client.ts.jinja2", annotation=annotation)

    def render_sdk_index(self, clients: list[dict[str, str]]) -> str:
        return self.render("sdk_index.ts.jinja2", clients=clients)

    def render_sdk_version(self, metadata: ProjectMetadata) -> str:
        return self.render("sdk_version.ts.jinja2", metadata=metadata)

    def render_sdk_readme(self, metadata: ProjectMetadata, clients: list[dict[str, str]]) -> str:
        return self.render("sdk_readme.md.jinja2", metadata=metadata, clients=clients)

    # Hooks

    def render_hooks_core(self, models: list[ParsedModel]) -> str:
        return self.render("hooks_core.ts.jinja2", models=models)

    def render_hooks(self, model: ParsedModel, framework: str) -> str:
        return self.render("hooks.ts.jinja2", model=model, framework=framework)

    # Checklist

    def render_checklist(self, **variables: Any) -> str:
        return self.render("checklist.html.jinja2", **variables)


def base_path(model_name: str) -> str:
    """URL path segment of a model's resource ("UserProfile" -> "user-profiles")."""
    return pluralize(to_kebab_case(model_name))


_default_renderer: TemplateRenderer | None = None


def get_renderer() -> TemplateRenderer:
    """Shared renderer; templates are compiled once per process."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = TemplateRenderer()
    return _default_renderer
