"""
Analyzer - builds the immutable IR from the schema AST.

Type algebra, reference resolution, metadata merging and the schema
builder that ties them together.
"""

from __future__ import annotations

from .analyzer import SchemaBuilder
from .ir_nodes import (
    AliasDecl,
    EnumDecl,
    ExternalDecl,
    FieldDecl,
    MethodDecl,
    ModelDecl,
    Schema,
    ServiceDecl,
    StructDecl,
)
from .metadata_merger import MetadataMerger
from .reference_resolver import ReferenceResolver
from .type_nodes import (
    AliasType,
    ExternalType,
    ListType,
    MapType,
    NullableType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    SetType,
    TypeKind,
    TypeNode,
    build_type,
)

__all__ = [
    "SchemaBuilder",
    "MetadataMerger",
    "ReferenceResolver",
    "Schema",
    "StructDecl",
    "EnumDecl",
    "AliasDecl",
    "ExternalDecl",
    "FieldDecl",
    "MethodDecl",
    "ModelDecl",
    "ServiceDecl",
    "TypeKind",
    "TypeNode",
    "PrimitiveKind",
    "PrimitiveType",
    "NullableType",
    "ListType",
    "SetType",
    "MapType",
    "ReferenceType",
    "AliasType",
    "ExternalType",
    "build_type",
]
