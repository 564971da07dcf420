"""
Tests for the schema document parser.
"""

from __future__ import annotations

import pytest

from rpc_schema_to_code.pipeline.errors import SchemaDocumentError
from rpc_schema_to_code.pipeline.schema_ast import (
    AliasNode,
    EnumNode,
    ExternalExpr,
    ExternalNode,
    ListExpr,
    MapExpr,
    NullableExpr,
    PrimitiveExpr,
    RefExpr,
    SchemaParser,
    StructNode,
    load_document,
)
from rpc_schema_to_code.pipeline.schema_ast.parser import DuplicateKeys


@pytest.fixture
def parser():
    return SchemaParser()


class TestTypeExpressions:
    def test_primitive_shorthand(self, parser):
        expr = parser.parse_type("int32", "#")
        assert isinstance(expr, PrimitiveExpr)
        assert expr.kind == "int32"

    def test_reference_shorthand(self, parser):
        expr = parser.parse_type("Post", "#")
        assert isinstance(expr, RefExpr)
        assert expr.name == "Post"

    def test_nullable_shorthand(self, parser):
        expr = parser.parse_type("Post?", "#")
        assert isinstance(expr, NullableExpr)
        assert isinstance(expr.inner, RefExpr)

    def test_object_form(self, parser):
        expr = parser.parse_type({"type": "map", "key": "string", "value": {"type": "list", "inner": "Post?"}}, "#")
        assert isinstance(expr, MapExpr)
        assert isinstance(expr.key, PrimitiveExpr)
        assert isinstance(expr.value, ListExpr)
        assert isinstance(expr.value.inner, NullableExpr)

    def test_missing_child_is_kept_for_the_builder(self, parser):
        expr = parser.parse_type({"type": "nullable"}, "#")
        assert isinstance(expr, NullableExpr)
        assert expr.inner is None

    def test_external_data(self, parser):
        expr = parser.parse_type({"type": "external", "name": "Instant", "inner": "string", "data": {"format": "iso"}}, "#")
        assert isinstance(expr, ExternalExpr)
        assert expr.metadata == {"format": "iso"}

    def test_type_tag_must_be_a_string(self, parser):
        with pytest.raises(SchemaDocumentError):
            parser.parse_type({"inner": "string"}, "#/x")

    def test_empty_shorthand(self, parser):
        with pytest.raises(SchemaDocumentError):
            parser.parse_type("?", "#")


class TestDocuments:
    def test_models_in_document_order(self, parser):
        ast = parser.parse(
            {
                "models": {
                    "B": {"type": "alias", "inner": "string"},
                    "A": {"type": "enum", "variants": ["X", "Y"]},
                    "C": {"type": "external", "inner": "string"},
                    "D": {"type": "struct", "fields": {"z": "string", "a": "int32"}},
                }
            },
            "unit",
        )
        assert ast.name == "unit"
        assert [m.name for m in ast.models] == ["B", "A", "C", "D"]
        assert isinstance(ast.models[0], AliasNode)
        assert isinstance(ast.models[1], EnumNode)
        assert isinstance(ast.models[2], ExternalNode)
        assert isinstance(ast.models[3], StructNode)
        assert [f.name for f in ast.models[3].fields] == ["z", "a"]

    def test_name_argument_overrides_document(self, parser):
        assert parser.parse({"name": "doc"}).name == "doc"
        assert parser.parse({"name": "doc"}, "cli").name == "cli"

    def test_enum_variants(self, parser):
        ast = parser.parse({"models": {"S": {"type": "enum", "variants": {"Open": "open", "Closed": "", "Unknown": None}}}})
        assert ast.models[0].variants == [("Open", "open"), ("Closed", ""), ("Unknown", None)]

    def test_field_metadata(self, parser):
        ast = parser.parse(
            {"models": {"T": {"type": "struct", "fields": {"id": {"type": "UUID", "metadata": {"format": "uuid"}}}}}}
        )
        field = ast.models[0].fields[0]
        assert field.metadata == {"format": "uuid"}
        assert isinstance(field.type_expr, RefExpr)
        assert field.type_expr.name == "UUID"

    def test_service(self, parser):
        ast = parser.parse(
            {
                "services": {
                    "S": {
                        "method_defaults": {"auth": True},
                        "methods": {"m": {"inputs": {"a": "string", "b": "int32"}, "output": "unit", "metadata": {"x": 1}}},
                    }
                }
            }
        )
        service = ast.services[0]
        assert service.method_defaults == {"auth": True}
        method = service.methods[0]
        assert [name for name, _ in method.inputs] == ["a", "b"]
        assert method.metadata == {"x": 1}

    def test_defaults(self, parser):
        ast = parser.parse({"defaults": {"methods": {"auth": True}}})
        assert ast.defaults == {"methods": {"auth": True}}

    def test_unknown_defaults_site(self, parser):
        with pytest.raises(SchemaDocumentError):
            parser.parse({"defaults": {"enums": {}}})

    def test_unknown_model_type(self, parser):
        with pytest.raises(SchemaDocumentError) as exc_info:
            parser.parse({"models": {"Post": {"type": "table"}}})
        assert "#/models/Post" in str(exc_info.value)

    def test_document_must_be_an_object(self, parser):
        with pytest.raises(SchemaDocumentError):
            parser.parse(["not", "a", "schema"])


class TestLoadDocument:
    def test_invalid_json(self):
        with pytest.raises(SchemaDocumentError):
            load_document("{not json")

    def test_repeated_keys_are_kept(self):
        document = load_document('{"models": {"A": 1, "A": 2}}')
        assert isinstance(document["models"], DuplicateKeys)
        assert list(document["models"]) == [("A", 1), ("A", 2)]

    def test_plain_objects(self):
        assert load_document('{"a": {"b": 1}}') == {"a": {"b": 1}}
