"""
Tests for the Python backend.

Generated modules are imported for real (from a temporary directory) so
the consumer can be exercised against a fake request function.
"""

from __future__ import annotations

import ast
import asyncio
import importlib.util
import json
import sys
from pathlib import Path

import pytest

from rpc_schema_to_code.pipeline import CodeGeneratorConfig, PipelineGenerator
from rpc_schema_to_code.pipeline.backends import PythonBackend, to_runtime_schema
from rpc_schema_to_code.pipeline.schema_ast import load_document

TEST_DATA_DIR = Path(__file__).with_name("test_data")


def load_schema(name: str) -> dict:
    """Load a schema document from the test data directory."""
    with open(TEST_DATA_DIR / name) as f:
        return json.load(f)


def generate(document: dict, name: str = "unit", **options) -> str:
    config = CodeGeneratorConfig(language="python", add_generation_comment=False, **options)
    return PipelineGenerator(name, document, config).generate()


def load_generated(code: str, tmp_path: Path, monkeypatch, module_name: str):
    """Import generated code as a real module."""
    path = tmp_path / f"{module_name}.py"
    path.write_text(code, encoding="utf-8")
    spec = importlib.util.spec_from_file_location(module_name, path)
    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, module_name, module)
    spec.loader.exec_module(module)
    return module


class TestPostService:
    def test_header(self):
        code = generate(load_schema("posts.json"))
        assert code.startswith("# AUTOGENERATED FILE - DO NOT EDIT\n\nfrom __future__ import annotations\n")

    def test_generation_comment(self):
        config = CodeGeneratorConfig(command_line="rpc_schema_to_code posts.json posts.py")
        code = PipelineGenerator("posts", load_schema("posts.json"), config).generate()
        assert code.splitlines()[1] == "# Generated by rpc_schema_to_code posts.json posts.py"

    def test_valid_python(self):
        ast.parse(generate(load_schema("posts.json")))

    def test_struct_fields_in_declared_order(self):
        code = generate(load_schema("posts.json"))
        assert "@dataclass\nclass Post:\n    slug: str\n    title: str\n    body: str\n    author: str\n" in code

    def test_consumer(self):
        code = generate(load_schema("posts.json"))
        assert "class PostServiceConsumer:" in code
        assert (
            "    async def findOne(self, slug: str) -> Post | None:\n"
            '        return await self.request("findOne", {"slug": slug})\n'
        ) in code

    def test_provider(self):
        code = generate(load_schema("posts.json"))
        assert "class PostServiceProvider(Protocol):" in code
        assert "    async def findOne(self, slug: str) -> Post | None: ...\n" in code

    def test_block_order(self):
        code = generate(load_schema("posts.json"))
        positions = [code.index(s) for s in ("class Post:", "class PostServiceConsumer:", "class PostServiceProvider", "SCHEMA:")]
        assert positions == sorted(positions)

    def test_imports(self):
        code = generate(load_schema("posts.json"))
        assert "from collections.abc import Awaitable, Callable\n" in code
        assert "from dataclasses import dataclass\n" in code
        assert "from typing import Any, Final, Protocol\n" in code
        assert "from enum import" not in code

    def test_generated_module_runs(self, tmp_path, monkeypatch):
        document = load_schema("posts.json")
        code = generate(document, "posts")
        module = load_generated(code, tmp_path, monkeypatch, "generated_posts")

        post = module.Post(slug="hello", title="Hello", body="...", author="me")
        assert post.slug == "hello"

        calls = []

        async def request(method, inputs):
            calls.append((method, inputs))
            return post

        consumer = module.PostServiceConsumer(request)
        assert asyncio.run(consumer.findOne("hello")) is post
        assert calls == [("findOne", {"slug": "hello"})]

    def test_schema_constant(self, tmp_path, monkeypatch):
        document = load_schema("posts.json")
        generator = PipelineGenerator("posts", document, CodeGeneratorConfig())
        module = load_generated(generator.generate(), tmp_path, monkeypatch, "generated_posts_schema")

        assert module.SCHEMA == to_runtime_schema(generator.build())
        assert module.SCHEMA["services"]["PostService"]["methods"]["findOne"]["output"] == {
            "type": "nullable",
            "inner": {"type": "reference", "name": "Post"},
        }

    def test_without_future_annotations(self, tmp_path, monkeypatch):
        code = generate(load_schema("posts.json"), use_future_annotations=False)
        assert "from __future__" not in code
        assert '-> "Post | None":' in code
        assert "    slug: str\n" in code
        load_generated(code, tmp_path, monkeypatch, "generated_posts_eager")


class TestTodoService:
    def test_valid_python(self):
        ast.parse(generate(load_schema("todo.json"), "todo"))

    def test_type_mapping(self):
        code = generate(load_schema("todo.json"), "todo")
        assert "    id: UUID\n" in code
        assert "    createdAt: datetime\n" in code
        assert "    checkedAt: Instant | None\n" in code
        assert "    tags: set[str]\n" in code
        assert "    counters: dict[Status, int]\n" in code

    def test_enum(self):
        code = generate(load_schema("todo.json"), "todo")
        assert 'class Status(str, Enum):\n    Pending = "Pending"\n    Running = "Running"\n    Done = "Done"\n' in code

    def test_aliases(self):
        code = generate(load_schema("todo.json"), "todo")
        assert "UUID: TypeAlias = str\n" in code
        assert 'TodoList: TypeAlias = "list[Todo]"\n' in code

    def test_external_import(self):
        code = generate(load_schema("todo.json"), "todo")
        assert "from .todo_external import Instant\n" in code
        assert "class Instant" not in code

    def test_configured_external_module(self):
        code = generate(load_schema("todo.json"), "todo", external_module="app.types")
        assert "from app.types import Instant\n" in code

    def test_stdlib_imports(self):
        code = generate(load_schema("todo.json"), "todo")
        assert "from datetime import datetime\n" in code
        assert "from enum import Enum\n" in code
        assert "from typing import Any, Final, Protocol, TypeAlias\n" in code

    def test_keyword_inputs_keep_their_wire_name(self):
        code = generate(load_schema("todo.json"), "todo")
        assert "    async def create(self, title: str, from_: Instant | None) -> Todo:\n" in code
        assert '        return await self.request("create", {"title": title, "from": from_})\n' in code

    def test_method_without_inputs(self):
        code = generate(load_schema("todo.json"), "todo")
        assert '        return await self.request("list", {})\n' in code

    def test_unit_output(self):
        code = generate(load_schema("todo.json"), "todo")
        assert "    async def remove(self, id: UUID) -> None:\n" in code


class TestEdgeCases:
    def test_reserved_names(self):
        document = {
            "models": {"Flags": {"type": "struct", "fields": {"class": "bool", "from": "string"}}},
            "services": {"S": {"methods": {"request": {"inputs": {"lambda": "int32"}, "output": "unit"}}}},
        }
        code = generate(document)
        ast.parse(code)
        assert "    class_: bool\n    from_: str\n" in code
        assert "    async def request_(self, lambda_: int) -> None:\n" in code
        assert '        return await self.request("request", {"lambda": lambda_})\n' in code

    def test_nested_nullable_collapses(self):
        document = {"models": {"Post": {"type": "struct", "fields": {"parent": "Post??"}}}}
        assert "    parent: Post | None\n" in generate(document)

    def test_empty_declarations(self):
        document = {
            "models": {"Empty": {"type": "struct", "fields": {}}, "Nothing": {"type": "enum", "variants": []}},
            "services": {"Idle": {"methods": {}}},
        }
        code = generate(document)
        ast.parse(code)
        assert "class Empty:\n    pass\n" in code
        assert "class Nothing(str, Enum):\n    pass\n" in code

    def test_inline_alias_and_external(self):
        document = {
            "models": {
                "Event": {
                    "type": "struct",
                    "fields": {
                        "at": {"type": "external", "name": "Timestamp", "inner": "int64", "data": {"unit": "ms"}},
                        "label": {"type": "alias", "name": "Label", "inner": "string"},
                    },
                }
            }
        }
        code = generate(document, "events")
        assert "    at: Timestamp\n" in code
        assert "    label: str\n" in code
        assert "from .events_external import Timestamp\n" in code

    def test_empty_schema(self):
        code = generate({})
        ast.parse(code)
        assert "SCHEMA: Final[dict[str, Any]] = {" in code

    def test_custom_names(self):
        document = load_schema("posts.json")
        code = generate(document, schema_constant_name="POSTS_SCHEMA", consumer_suffix="Client", provider_suffix="Service")
        assert "POSTS_SCHEMA: Final[dict[str, Any]] = {" in code
        assert "class PostServiceClient:" in code
        assert "class PostServiceService(Protocol):" in code


class TestDeterminism:
    @pytest.mark.parametrize("name", ["posts.json", "todo.json"])
    def test_byte_identical_output(self, name):
        document = load_schema(name)
        assert generate(document) == generate(document)

    def test_backend_reuse(self):
        generator = PipelineGenerator("todo", load_schema("todo.json"), CodeGeneratorConfig())
        schema = generator.build()
        backend = PythonBackend(generator.config)
        assert backend.generate(schema) == backend.generate(schema)

    def test_single_trailing_newline(self):
        code = generate(load_schema("todo.json"))
        assert code.endswith("}\n")
        assert not code.endswith("\n\n")

    def test_literal_rendering(self):
        backend = PythonBackend(CodeGeneratorConfig())
        value = {"a": [1, 2.5, None, True], "b": {}, "c": "x\"y"}
        assert ast.literal_eval(backend.render_literal(value)) == value

    def test_non_finite_floats(self):
        document = load_document('{"models": {"Range": {"type": "struct", "fields": {"hi": "float64"}, "metadata": {"max": Infinity, "min": -Infinity, "step": NaN}}}}')
        code = generate(document)
        ast.parse(code)
        assert '"max": float("inf"),' in code
        assert '"min": float("-inf"),' in code
        assert '"step": float("nan"),' in code
