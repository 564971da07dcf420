"""
Schema AST - unresolved declarations parsed from a schema document.
"""

from __future__ import annotations

from .nodes import (
    AliasExpr,
    AliasNode,
    DefinitionNode,
    EnumNode,
    ExternalExpr,
    ExternalNode,
    FieldNode,
    ListExpr,
    MapExpr,
    MethodNode,
    NullableExpr,
    PrimitiveExpr,
    RefExpr,
    SchemaAST,
    SchemaNode,
    ServiceNode,
    SetExpr,
    StructNode,
    TypeExpr,
)
from .parser import SchemaParser, load_document

__all__ = [
    "AliasExpr",
    "AliasNode",
    "DefinitionNode",
    "EnumNode",
    "ExternalExpr",
    "ExternalNode",
    "FieldNode",
    "ListExpr",
    "MapExpr",
    "MethodNode",
    "NullableExpr",
    "PrimitiveExpr",
    "RefExpr",
    "SchemaAST",
    "SchemaNode",
    "ServiceNode",
    "SetExpr",
    "StructNode",
    "TypeExpr",
    "SchemaParser",
    "load_document",
]
