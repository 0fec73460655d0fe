"""
Structural model analysis.

Analysis runs once per model in the analysis phase; every later phase reads
the result from the `AnalysisCache`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..schema import ParsedField, ParsedModel, ParsedSchema
from ..utils import to_kebab_case

TIMESTAMP_FIELDS = ("createdAt", "updatedAt")
SOFT_DELETE_FIELDS = ("deletedAt",)


@dataclass(frozen=True)
class JunctionHeuristic:
    """Field-shape thresholds for spotting join tables before deep analysis.

    Approximate: only used to decide which models skip deep analysis.
    """

    min_relation_fields: int = 2
    max_scalar_fields: int = 2
    max_total_fields: int = 4

    def matches(self, model: ParsedModel) -> bool:
        return (
            len(model.relation_fields) >= self.min_relation_fields
            and len(model.scalar_fields) <= self.max_scalar_fields
            and len(model.fields) <= self.max_total_fields
        )


DEFAULT_JUNCTION_HEURISTIC = JunctionHeuristic()


def is_likely_junction_table(model: ParsedModel, heuristic: JunctionHeuristic = DEFAULT_JUNCTION_HEURISTIC) -> bool:
    """Cheap pre-filter: ≥2 relation fields, ≤2 scalar fields, ≤4 fields in total."""
    return heuristic.matches(model)


@dataclass(frozen=True)
class RelationInfo:
    field_name: str
    target_model: str
    is_list: bool
    foreign_keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModelAnalysis:
    """Structural analysis of one model."""

    model_name: str
    id_field: str | None
    relations: tuple[RelationInfo, ...] = ()
    scalar_fields: tuple[str, ...] = ()
    enum_fields: tuple[str, ...] = ()
    unique_fields: tuple[str, ...] = ()
    searchable_fields: tuple[str, ...] = ()
    foreign_keys: tuple[str, ...] = ()
    has_timestamps: bool = False
    has_soft_delete: bool = False

    # Stricter than the pre-filter: composite key made only of foreign keys
    is_junction_table: bool = False


@dataclass(frozen=True)
class ServiceMethod:
    name: str
    http_method: str
    path: str


@dataclass(frozen=True)
class ServiceAnnotation:
    """A `@service` annotation parsed from model documentation."""

    name: str
    methods: tuple[ServiceMethod, ...] = ()
    provider: str | None = None
    rate_limit: str | None = None
    description: str | None = None
    auth: bool = True

    @property
    def service_file(self) -> str:
        return f"./services/{self.name}.service.ts"


def analyze_model(model: ParsedModel, schema: ParsedSchema) -> ModelAnalysis:
    """
    Analyze relations, keys and special fields of a model.

    Args:
        model: The model to analyze
        schema: The full schema, used to resolve relation targets

    Returns:
        The model analysis

    Raises:
        ValueError: If a relation points to a model missing from the schema
    """
    relations = []
    foreign_keys: list[str] = []
    for f in model.relation_fields:
        if schema.get_model(f.type) is None:
            raise ValueError(f"Relation field '{model.name}.{f.name}' targets unknown model '{f.type}'")
        relations.append(RelationInfo(field_name=f.name, target_model=f.type, is_list=f.is_list, foreign_keys=f.relation_from_fields))
        foreign_keys.extend(f.relation_from_fields)

    id_field = next((f.name for f in model.fields if f.is_id), None)
    if id_field is None and len(model.primary_key) == 1:
        id_field = model.primary_key[0]

    names = {f.name for f in model.fields}
    primary_key = set(model.primary_key)
    is_junction = len(primary_key) >= 2 and primary_key <= set(foreign_keys)

    return ModelAnalysis(
        model_name=model.name,
        id_field=id_field,
        relations=tuple(relations),
        scalar_fields=tuple(f.name for f in model.scalar_fields),
        enum_fields=tuple(f.name for f in model.fields if f.kind == "enum"),
        unique_fields=tuple(f.name for f in model.fields if f.is_unique or f.is_id),
        searchable_fields=tuple(f.name for f in model.scalar_fields if _is_searchable(f, foreign_keys)),
        foreign_keys=tuple(dict.fromkeys(foreign_keys)),
        has_timestamps=all(name in names for name in TIMESTAMP_FIELDS),
        has_soft_delete=any(name in names for name in SOFT_DELETE_FIELDS),
        is_junction_table=is_junction,
    )


def _is_searchable(f: ParsedField, foreign_keys: list[str]) -> bool:
    return f.type == "String" and not f.is_id and f.name not in foreign_keys


_SERVICE_PATTERN = re.compile(r"@service\s+(\S+)")
_METHODS_PATTERN = re.compile(r"@methods\s+([^\n]+)")
_PROVIDER_PATTERN = re.compile(r"@provider\s+(\S+)")
_RATE_LIMIT_PATTERN = re.compile(r"@rateLimit\s+([^\n]+)")
_DESCRIPTION_PATTERN = re.compile(r"@description\s+([^\n]+)")
_METHOD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_HTTP_PREFIXES = (
    (("get", "list", "find", "search", "fetch"), "GET"),
    (("delete", "remove"), "DELETE"),
    (("update", "set", "patch"), "PUT"),
)


def infer_http_method(method_name: str) -> str:
    """Guess the HTTP verb for an exposed service method from its name."""
    lowered = method_name.lower()
    for prefixes, verb in _HTTP_PREFIXES:
        if lowered.startswith(prefixes):
            return verb
    return "POST"


def parse_service_annotation(model: ParsedModel) -> ServiceAnnotation | None:
    """
    Parse a `@service` annotation from model documentation.

    Expected format::

        @service ai-agent
        @provider openai
        @methods sendMessage, getHistory
        @rateLimit 20/minute
        @description AI conversation service

    Returns:
        The annotation, or None if the model is not a service model

    Raises:
        ValueError: If a method name is not a valid identifier
    """
    doc = model.documentation or ""
    service_match = _SERVICE_PATTERN.search(doc)
    if not service_match:
        return None

    name = service_match.group(1)
    methods_match = _METHODS_PATTERN.search(doc)
    method_names = [m.strip() for m in methods_match.group(1).split(",")] if methods_match else []
    method_names = [m for m in method_names if m]

    methods = []
    for method_name in method_names:
        if not _METHOD_NAME_PATTERN.match(method_name):
            raise ValueError(f"Invalid method name '{method_name}' in @service {name}")
        methods.append(ServiceMethod(name=method_name, http_method=infer_http_method(method_name), path=f"/{to_kebab_case(method_name)}"))

    provider = _PROVIDER_PATTERN.search(doc)
    rate_limit = _RATE_LIMIT_PATTERN.search(doc)
    description = _DESCRIPTION_PATTERN.search(doc)

    return ServiceAnnotation(
        name=name,
        methods=tuple(methods),
        provider=provider.group(1) if provider else None,
        rate_limit=rate_limit.group(1).strip() if rate_limit else None,
        description=description.group(1).strip() if description else None,
    )


@dataclass
class AnalysisStats:
    """Counts reported by the analysis phase."""

    analyzed: list[str] = field(default_factory=list)
    junction_tables: list[str] = field(default_factory=list)
    services: list[str] = field(default_factory=list)
