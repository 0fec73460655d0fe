import json
from pathlib import Path

import pytest

from modelgen.pipeline import ConfigNormalizer, GenerationContext
from modelgen.pipeline.phases import Phase
from modelgen.pipeline.types import ErrorSeverity, PhaseResult
from modelgen.schema import ParsedField, ParsedModel, ParsedSchema

TEST_DATA = Path(__file__).parent / "test_data"


def load_schema(name: str) -> ParsedSchema:
    with open(TEST_DATA / name) as f:
        return ParsedSchema.from_dict(json.load(f))


def scalar(name, type="String", **kwargs) -> ParsedField:
    return ParsedField(name=name, type=type, **kwargs)


def relation(name, target, from_fields=(), is_list=False) -> ParsedField:
    return ParsedField(name=name, type=target, kind="object", is_list=is_list, relation_from_fields=tuple(from_fields))


def entity(name, *extra_fields, documentation=None) -> ParsedModel:
    """A model with an id primary key and the given extra fields."""
    return ParsedModel(
        name=name,
        fields=(scalar("id", is_id=True, has_default=True),) + tuple(extra_fields),
        documentation=documentation,
        primary_key=("id",),
    )


def junction(name, left, right) -> ParsedModel:
    """A join table: two foreign keys, two relations, composite key."""
    left_key, right_key = f"{left.lower()}Id", f"{right.lower()}Id"
    return ParsedModel(
        name=name,
        fields=(
            scalar(left_key),
            scalar(right_key),
            relation(left.lower(), left, [left_key]),
            relation(right.lower(), right, [right_key]),
        ),
        primary_key=(left_key, right_key),
    )


def make_context(schema: ParsedSchema | None = None, **config) -> GenerationContext:
    normalized = ConfigNormalizer().normalize(config, environment="development")
    return GenerationContext(normalized, schema or ParsedSchema())


class EmitPhase(Phase):
    """Test phase reporting fixed errors, optionally writing a service file first."""

    requires = frozenset()
    provides = frozenset()

    def __init__(self, name, order, severity=ErrorSeverity.WARNING, message="test issue", count=1, write_file=None):
        super().__init__()
        self.name = name
        self.order = order
        self.severity = severity
        self.message = message
        self.count = count
        self.write_file = write_file
        self.executed = False

    async def execute(self, context):
        self.executed = True
        if self.write_file:
            context.files.services.add_file(self.write_file, "export const injected = {}\n")
        return PhaseResult.from_errors([self.error(self.severity, self.message) for _ in range(self.count)])


@pytest.fixture
def blog_schema() -> ParsedSchema:
    return load_schema("blog.schema.json")
