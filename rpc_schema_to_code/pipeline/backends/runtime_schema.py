"""
Runtime schema representation.

The constant embedded in every generated file: a nested mapping with
``version``, ``models`` and ``services`` keys whose ordering follows the
declaration order of the IR. Downstream reflection code depends on this
shape, so any change to it must bump ``SCHEMA_VERSION``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..analyzer.analyzer import SchemaBuilder
from ..analyzer.ir_nodes import (
    AliasDecl,
    EnumDecl,
    ExternalDecl,
    MethodDecl,
    ModelDecl,
    Schema,
    ServiceDecl,
    StructDecl,
)
from ..analyzer.type_nodes import (
    AliasType,
    ExternalType,
    ListType,
    MapType,
    NullableType,
    PrimitiveType,
    ReferenceType,
    SetType,
    TypeNode,
    thaw,
)
from ..errors import EmissionError, SchemaDocumentError, UnsupportedSchemaVersion
from ..schema_ast.parser import SchemaParser

SCHEMA_VERSION = 1


def type_to_dict(node: TypeNode) -> dict[str, Any]:
    """Runtime representation of a type node."""
    if isinstance(node, PrimitiveType):
        return {"type": node.primitive.value}
    if isinstance(node, (NullableType, ListType, SetType)):
        return {"type": node.kind.value, "inner": type_to_dict(node.inner)}
    if isinstance(node, MapType):
        return {"type": "map", "key": type_to_dict(node.key), "value": type_to_dict(node.value)}
    if isinstance(node, ReferenceType):
        return {"type": "reference", "name": node.name}
    if isinstance(node, AliasType):
        return {"type": "alias", "name": node.name, "inner": type_to_dict(node.inner)}
    if isinstance(node, ExternalType):
        return {
            "type": "external",
            "name": node.name,
            "inner": type_to_dict(node.representation),
            "data": thaw(node.metadata),
        }
    raise EmissionError(f"unhandled type node {node!r}")


def model_to_dict(decl: ModelDecl) -> dict[str, Any]:
    """Runtime representation of a model declaration."""
    if isinstance(decl, StructDecl):
        fields = {name: {**type_to_dict(f.type), "metadata": thaw(f.metadata)} for name, f in decl.fields.items()}
        return {"type": "struct", "fields": fields, "metadata": thaw(decl.metadata)}
    if isinstance(decl, EnumDecl):
        return {"type": "enum", "variants": dict(decl.variants), "metadata": thaw(decl.metadata)}
    if isinstance(decl, AliasDecl):
        return {"type": "alias", "inner": type_to_dict(decl.inner), "metadata": thaw(decl.metadata)}
    if isinstance(decl, ExternalDecl):
        return {"type": "external", "inner": type_to_dict(decl.representation), "metadata": thaw(decl.metadata)}
    raise EmissionError(f"unhandled model declaration {decl!r}")


def method_to_dict(method: MethodDecl) -> dict[str, Any]:
    return {
        "inputs": {name: type_to_dict(node) for name, node in method.inputs.items()},
        "output": type_to_dict(method.output),
        "metadata": thaw(method.metadata),
    }


def service_to_dict(service: ServiceDecl) -> dict[str, Any]:
    return {
        "type": "service",
        "methods": {name: method_to_dict(m) for name, m in service.methods.items()},
        "metadata": thaw(service.metadata),
    }


def to_runtime_schema(schema: Schema) -> dict[str, Any]:
    """
    Serialize a schema into its runtime representation.

    Key order follows declaration order, so the result is identical for
    identical input.
    """
    return {
        "version": SCHEMA_VERSION,
        "models": {name: model_to_dict(decl) for name, decl in schema.models.items()},
        "services": {name: service_to_dict(s) for name, s in schema.services.items()},
    }


def from_runtime_schema(data: Mapping[str, Any], name: str = "") -> Schema:
    """
    Rebuild a Schema from its runtime representation.

    The representation is read with the document parser (type nodes and
    schema documents share one shape) and then built and validated like
    any other generation unit.

    Raises:
        UnsupportedSchemaVersion: If ``version`` is not understood
        SchemaError: If the representation does not describe a valid schema
    """
    if not isinstance(data, Mapping):
        raise SchemaDocumentError(f"expected an object, got {type(data).__name__}")
    version = data.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise UnsupportedSchemaVersion(version)

    document = {"models": data.get("models", {}), "services": data.get("services", {})}
    ast = SchemaParser().parse(document, name)
    return SchemaBuilder().build(ast)
