"""
Parsed data-model schema.

These nodes are the read-only input of the generation pipeline. They are
produced by an external schema parser; `ParsedSchema.from_dict` only loads a
schema that has already been parsed and serialized to JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SCALAR_KIND = "scalar"
ENUM_KIND = "enum"
RELATION_KIND = "object"


@dataclass(frozen=True)
class ParsedField:
    """A single model field."""

    name: str
    type: str
    kind: str = SCALAR_KIND  # "scalar", "enum" or "object" (relation)
    is_list: bool = False
    is_required: bool = True
    is_id: bool = False
    is_unique: bool = False
    has_default: bool = False

    # Relation metadata, only set for relation fields
    relation_name: str | None = None
    relation_from_fields: tuple[str, ...] = ()

    @property
    def is_relation(self) -> bool:
        return self.kind == RELATION_KIND

    @property
    def is_scalar(self) -> bool:
        return self.kind == SCALAR_KIND

    @staticmethod
    def from_dict(d: dict[str, Any]) -> ParsedField:
        return ParsedField(
            name=d["name"],
            type=d.get("type", "String"),
            kind=d.get("kind", SCALAR_KIND),
            is_list=d.get("isList", False),
            is_required=d.get("isRequired", True),
            is_id=d.get("isId", False),
            is_unique=d.get("isUnique", False),
            has_default=d.get("hasDefault", False),
            relation_name=d.get("relationName"),
            relation_from_fields=tuple(d.get("relationFromFields", ())),
        )


@dataclass(frozen=True)
class ParsedModel:
    """A model with its ordered fields."""

    name: str
    fields: tuple[ParsedField, ...] = ()
    documentation: str | None = None

    # Field names forming the primary key (single id or composite key)
    primary_key: tuple[str, ...] = ()

    @property
    def relation_fields(self) -> list[ParsedField]:
        return [f for f in self.fields if f.is_relation]

    @property
    def scalar_fields(self) -> list[ParsedField]:
        return [f for f in self.fields if f.is_scalar]

    def get_field(self, name: str) -> ParsedField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> ParsedModel:
        fields = tuple(ParsedField.from_dict(f) for f in d.get("fields", []))
        primary_key = d.get("primaryKey")
        if primary_key is None:
            primary_key = [f.name for f in fields if f.is_id]
        return ParsedModel(
            name=d["name"],
            fields=fields,
            documentation=d.get("documentation"),
            primary_key=tuple(primary_key),
        )


@dataclass(frozen=True)
class ParsedEnum:
    name: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedSchema:
    """Root of a parsed schema: ordered models and enums."""

    models: tuple[ParsedModel, ...] = ()
    enums: tuple[ParsedEnum, ...] = field(default_factory=tuple)

    @property
    def model_names(self) -> list[str]:
        return [m.name for m in self.models]

    def get_model(self, name: str) -> ParsedModel | None:
        for model in self.models:
            if model.name == name:
                return model
        return None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> ParsedSchema:
        """Load a schema that was serialized as JSON."""
        return ParsedSchema(
            models=tuple(ParsedModel.from_dict(m) for m in d.get("models", [])),
            enums=tuple(ParsedEnum(name=e["name"], values=tuple(e.get("values", []))) for e in d.get("enums", [])),
        )
