"""
AST (Abstract Syntax Tree) node definitions for schema documents.

These nodes represent the parsed structure of a schema before any
reference resolution, metadata merging or language-specific processing.
Names are kept as plain strings and members as ordered lists, so
duplicates survive until the builder can report them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """Base class for all AST nodes."""

    # Original source location in the document (for error messages)
    source_path: str = ""

    # Free-form annotations attached at this site
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class TypeExpr(SchemaNode):
    """Base class for unresolved type expressions."""


@dataclass
class PrimitiveExpr(TypeExpr):
    """A primitive kind, not yet validated ("string", "int32", ...)."""

    kind: str = ""


@dataclass
class NullableExpr(TypeExpr):
    inner: TypeExpr | None = None


@dataclass
class ListExpr(TypeExpr):
    inner: TypeExpr | None = None


@dataclass
class SetExpr(TypeExpr):
    inner: TypeExpr | None = None


@dataclass
class MapExpr(TypeExpr):
    key: TypeExpr | None = None
    value: TypeExpr | None = None


@dataclass
class RefExpr(TypeExpr):
    """A named reference to another declaration (unresolved)."""

    name: str = ""


@dataclass
class AliasExpr(TypeExpr):
    """An inline named synonym."""

    name: str = ""
    inner: TypeExpr | None = None


@dataclass
class ExternalExpr(TypeExpr):
    """An inline host-supplied type with a declared representation."""

    name: str = ""
    representation: TypeExpr | None = None


@dataclass
class FieldNode(SchemaNode):
    """A struct field."""

    name: str = ""
    type_expr: TypeExpr | None = None


@dataclass
class DefinitionNode(SchemaNode):
    """Base class for top-level model declarations."""

    name: str = ""


@dataclass
class StructNode(DefinitionNode):
    fields: list[FieldNode] = field(default_factory=list)

    # Metadata applied to every field of this struct
    field_defaults: dict[str, Any] = field(default_factory=dict)


@dataclass
class EnumNode(DefinitionNode):
    # (variant name, raw value or None to reuse the name)
    variants: list[tuple[str, str | None]] = field(default_factory=list)


@dataclass
class AliasNode(DefinitionNode):
    inner: TypeExpr | None = None


@dataclass
class ExternalNode(DefinitionNode):
    representation: TypeExpr | None = None


@dataclass
class MethodNode(SchemaNode):
    """A service method signature."""

    name: str = ""
    inputs: list[tuple[str, TypeExpr | None]] = field(default_factory=list)
    output: TypeExpr | None = None


@dataclass
class ServiceNode(SchemaNode):
    """A service declaration."""

    name: str = ""
    methods: list[MethodNode] = field(default_factory=list)

    # Metadata applied to every method of this service
    method_defaults: dict[str, Any] = field(default_factory=dict)


@dataclass
class SchemaAST:
    """Root of the parsed schema AST (one generation unit)."""

    name: str = ""
    models: list[DefinitionNode] = field(default_factory=list)
    services: list[ServiceNode] = field(default_factory=list)

    # Schema-wide metadata defaults by site kind: "fields", "methods",
    # "models", "services"
    defaults: dict[str, dict[str, Any]] = field(default_factory=dict)
