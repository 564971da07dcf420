"""
Type algebra: the closed set of IR type nodes.

Nodes are immutable and compared structurally (kind and children).
Metadata carried by a node never takes part in equality.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar

from ..errors import EmissionError, MalformedType, UnknownPrimitiveKind
from ..schema_ast.nodes import (
    AliasExpr,
    ExternalExpr,
    ListExpr,
    MapExpr,
    NullableExpr,
    PrimitiveExpr,
    RefExpr,
    SetExpr,
    TypeExpr,
)


class TypeKind(Enum):
    """Kind of type node in the IR."""

    PRIMITIVE = "primitive"
    NULLABLE = "nullable"  # T or absence
    LIST = "list"  # ordered sequence
    SET = "set"  # unordered unique collection
    MAP = "map"  # keyed mapping
    REFERENCE = "reference"  # lookup of a named declaration
    ALIAS = "alias"  # named synonym
    EXTERNAL = "external"  # host-supplied implementation


class PrimitiveKind(Enum):
    UNIT = "unit"
    STRING = "string"
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INSTANT = "instant"


# Accepted spellings -> canonical kind. Only lower-case spellings, so that
# capitalized names stay free for declared models.
PRIMITIVE_SPELLINGS: dict[str, PrimitiveKind] = {kind.value: kind for kind in PrimitiveKind}
PRIMITIVE_SPELLINGS["float"] = PrimitiveKind.FLOAT64

# Kinds usable as map keys
SCALAR_KINDS = frozenset({PrimitiveKind.STRING, PrimitiveKind.BOOL, PrimitiveKind.INT32, PrimitiveKind.INT64})


def freeze(value: Any) -> Any:
    """Recursively turn dicts into read-only mappings and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze``: plain dicts and lists, order preserved."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


EMPTY_METADATA: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class TypeNode:
    """Base class for all type nodes."""

    kind: ClassVar[TypeKind]


@dataclass(frozen=True)
class PrimitiveType(TypeNode):
    kind: ClassVar[TypeKind] = TypeKind.PRIMITIVE

    primitive: PrimitiveKind = PrimitiveKind.STRING


@dataclass(frozen=True)
class NullableType(TypeNode):
    kind: ClassVar[TypeKind] = TypeKind.NULLABLE

    inner: TypeNode = field(default_factory=PrimitiveType)


@dataclass(frozen=True)
class ListType(TypeNode):
    kind: ClassVar[TypeKind] = TypeKind.LIST

    inner: TypeNode = field(default_factory=PrimitiveType)


@dataclass(frozen=True)
class SetType(TypeNode):
    kind: ClassVar[TypeKind] = TypeKind.SET

    inner: TypeNode = field(default_factory=PrimitiveType)


@dataclass(frozen=True)
class MapType(TypeNode):
    kind: ClassVar[TypeKind] = TypeKind.MAP

    key: TypeNode = field(default_factory=PrimitiveType)
    value: TypeNode = field(default_factory=PrimitiveType)


@dataclass(frozen=True)
class ReferenceType(TypeNode):
    """A pointer to a named declaration. Resolved by name, never by ownership."""

    kind: ClassVar[TypeKind] = TypeKind.REFERENCE

    name: str = ""


@dataclass(frozen=True)
class AliasType(TypeNode):
    kind: ClassVar[TypeKind] = TypeKind.ALIAS

    name: str = ""
    inner: TypeNode = field(default_factory=PrimitiveType)


@dataclass(frozen=True)
class ExternalType(TypeNode):
    """A type implemented outside the schema, with a declared representation."""

    kind: ClassVar[TypeKind] = TypeKind.EXTERNAL

    name: str = ""
    representation: TypeNode = field(default_factory=PrimitiveType)
    metadata: Mapping[str, Any] = field(default_factory=lambda: EMPTY_METADATA, compare=False, hash=False)


def build_type(expr: TypeExpr | None, declaration: str | None = None) -> TypeNode:
    """
    Build a type node from an unresolved type expression.

    References are kept as opaque names; resolution happens later.

    Args:
        expr: The parsed expression
        declaration: Owning declaration path, for error messages

    Returns:
        The corresponding TypeNode

    Raises:
        UnknownPrimitiveKind: If a primitive kind string is not known
        MalformedType: If a composite is missing a child or a name
    """
    if expr is None:
        raise MalformedType("missing type", declaration)

    if isinstance(expr, PrimitiveExpr):
        kind = PRIMITIVE_SPELLINGS.get(expr.kind)
        if kind is None:
            raise UnknownPrimitiveKind(expr.kind, declaration)
        return PrimitiveType(kind)

    if isinstance(expr, NullableExpr):
        return NullableType(_child(expr.inner, "nullable", declaration))

    if isinstance(expr, ListExpr):
        return ListType(_child(expr.inner, "list", declaration))

    if isinstance(expr, SetExpr):
        return SetType(_child(expr.inner, "set", declaration))

    if isinstance(expr, MapExpr):
        return MapType(
            _child(expr.key, "map key", declaration),
            _child(expr.value, "map value", declaration),
        )

    if isinstance(expr, RefExpr):
        if not expr.name:
            raise MalformedType("reference without a name", declaration)
        return ReferenceType(expr.name)

    if isinstance(expr, AliasExpr):
        if not expr.name:
            raise MalformedType("alias without a name", declaration)
        return AliasType(expr.name, _child(expr.inner, "alias", declaration))

    if isinstance(expr, ExternalExpr):
        if not expr.name:
            raise MalformedType("external type without a name", declaration)
        return ExternalType(
            expr.name,
            _child(expr.representation, "external", declaration),
            freeze(expr.metadata),
        )

    raise MalformedType(f"unsupported type expression {type(expr).__name__}", declaration)


def _child(expr: TypeExpr | None, owner: str, declaration: str | None) -> TypeNode:
    if expr is None:
        raise MalformedType(f"{owner} type is missing its inner type", declaration)
    return build_type(expr, declaration)


def children(node: TypeNode) -> tuple[TypeNode, ...]:
    """Direct children of a node, in a fixed order."""
    if isinstance(node, (PrimitiveType, ReferenceType)):
        return ()
    if isinstance(node, (NullableType, ListType, SetType, AliasType)):
        return (node.inner,)
    if isinstance(node, MapType):
        return (node.key, node.value)
    if isinstance(node, ExternalType):
        return (node.representation,)
    raise EmissionError(f"unhandled type node {node!r}")


def walk(node: TypeNode) -> Iterator[TypeNode]:
    """Pre-order traversal of a type tree."""
    yield node
    for child in children(node):
        yield from walk(child)


def referenced_names(node: TypeNode) -> list[str]:
    """Names of all reference leaves, in traversal order, without repeats."""
    names: list[str] = []
    for sub in walk(node):
        if isinstance(sub, ReferenceType) and sub.name not in names:
            names.append(sub.name)
    return names


def structurally_equal(a: TypeNode, b: TypeNode) -> bool:
    """Deep comparison of shape, ignoring metadata."""
    return a == b
