"""
Tests for the template renderer.
"""

import pytest

from modelgen.generators import TemplateRenderer, base_path
from modelgen.pipeline.analyzer import analyze_model, parse_service_annotation
from modelgen.pipeline.files import validate_generated_code


@pytest.fixture(scope="module")
def renderer():
    return TemplateRenderer()


def assert_valid(code, filename="out.ts"):
    problems = []
    assert validate_generated_code(code, filename, problems.append), problems


@pytest.mark.parametrize("kind", ["create", "update", "read", "query"])
def test_dto(renderer, blog_schema, kind):
    code = renderer.render_dto(blog_schema.get_model("User"), kind)
    assert_valid(code)
    assert f"export interface User{kind.capitalize()}DTO" in code
    assert "import type { Role }" in code


def test_create_dto_fields(renderer, blog_schema):
    code = renderer.render_dto(blog_schema.get_model("User"), "create")
    assert "  email: string" in code
    assert "  name?: string" in code
    # Generated id and relations are not part of the create contract
    assert "  id" not in code
    assert "posts" not in code


def test_validator(renderer, blog_schema):
    code = renderer.render_validator(blog_schema.get_model("User"))
    assert_valid(code)
    assert "role: z.nativeEnum(Role).optional()," in code


def test_service_uses_analysis(renderer, blog_schema):
    post = blog_schema.get_model("Post")
    code = renderer.render_service(post, analyze_model(post, blog_schema))
    assert_valid(code)
    assert "include: { author: true }," in code
    assert "{ title: { contains: term } }," in code
    assert "findById(id: number)" in code


def test_service_without_analysis(renderer, blog_schema):
    code = renderer.render_service(blog_schema.get_model("Tag"), None)
    assert_valid(code)
    assert "search" not in code


@pytest.mark.parametrize("framework", ["express", "fastify"])
def test_controller_and_routes(renderer, blog_schema, framework):
    user = blog_schema.get_model("User")
    assert_valid(renderer.render_controller(user, framework))
    routes = renderer.render_routes(user, framework)
    assert_valid(routes)
    assert "'/users/:id'" in routes


def test_service_annotation_layers(renderer, blog_schema):
    annotation = parse_service_annotation(blog_schema.get_model("Conversation"))
    for code in (
        renderer.render_service_scaffold(annotation),
        renderer.render_service_controller(annotation),
        renderer.render_service_routes(annotation),
        renderer.render_sdk_service_client(annotation),
    ):
        assert_valid(code)
    assert "class AiAgentClient" in renderer.render_sdk_service_client(annotation)


@pytest.mark.parametrize("framework", ["react", "vue", "angular", "zustand", "vanilla"])
def test_hooks(renderer, blog_schema, framework):
    assert_valid(renderer.render_hooks(blog_schema.get_model("Post"), framework))


def test_registry(renderer, blog_schema):
    analyses = [analyze_model(blog_schema.get_model(name), blog_schema) for name in ("User", "Post")]
    code = renderer.render_registry(analyses)
    assert_valid(code)
    assert "searchable: ['email', 'name']," in code
    assert_valid(renderer.render_registry_index())


def test_base_path():
    assert base_path("UserProfile") == "user-profiles"
    assert base_path("Category") == "categories"


if __name__ == "__main__":
    pytest.main([__file__])
