"""
IR (Intermediate Representation) node definitions.

These nodes represent the built and resolved schema, ready for code
generation. Every reference has been checked against the namespace and
every metadata mapping has been merged. Ordered members are frozen
``MappingProxyType`` views over insertion-ordered dicts: their order drives
emission, while equality ignores it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeAlias

from .type_nodes import EMPTY_METADATA, TypeNode


def _empty() -> Mapping[str, Any]:
    return EMPTY_METADATA


@dataclass(frozen=True)
class FieldDecl:
    """A struct field: its type plus annotations."""

    name: str
    type: TypeNode
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


@dataclass(frozen=True)
class StructDecl:
    model_type: ClassVar[str] = "struct"

    name: str
    fields: Mapping[str, FieldDecl] = field(default_factory=_empty)
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


@dataclass(frozen=True)
class EnumDecl:
    model_type: ClassVar[str] = "enum"

    name: str
    variants: Mapping[str, str] = field(default_factory=_empty)  # variant name -> raw value
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


@dataclass(frozen=True)
class AliasDecl:
    model_type: ClassVar[str] = "alias"

    name: str
    inner: TypeNode
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


@dataclass(frozen=True)
class ExternalDecl:
    model_type: ClassVar[str] = "external"

    name: str
    representation: TypeNode
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


ModelDecl: TypeAlias = StructDecl | EnumDecl | AliasDecl | ExternalDecl


@dataclass(frozen=True)
class MethodDecl:
    name: str
    inputs: Mapping[str, TypeNode] = field(default_factory=_empty)
    output: TypeNode | None = None
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


@dataclass(frozen=True)
class ServiceDecl:
    name: str
    methods: Mapping[str, MethodDecl] = field(default_factory=_empty)
    metadata: Mapping[str, Any] = field(default_factory=_empty, compare=False)


@dataclass(frozen=True)
class Schema:
    """The complete, immutable IR of one generation unit."""

    name: str = ""
    models: Mapping[str, ModelDecl] = field(default_factory=_empty)
    services: Mapping[str, ServiceDecl] = field(default_factory=_empty)

    def model(self, name: str) -> ModelDecl | None:
        return self.models.get(name)
