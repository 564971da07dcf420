"""
TypeScript code generation backend.

Generates exported classes and enums, a consumer class wrapping an injected
``request`` function, a provider interface and the ``$schema`` constant.
"""

from __future__ import annotations

import json
from typing import Any

from ..analyzer.ir_nodes import Schema
from ..analyzer.type_nodes import (
    AliasType,
    ExternalType,
    ListType,
    MapType,
    NullableType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    SetType,
    TypeNode,
)
from ..errors import EmissionError
from .base import CodeBackend

TS_RESERVED = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger", "default", "delete",
        "do", "else", "enum", "export", "extends", "false", "finally", "for", "function", "if",
        "import", "in", "instanceof", "new", "null", "return", "super", "switch", "this", "throw",
        "true", "try", "typeof", "var", "void", "while", "with",
    }
)  # fmt: skip


class TypeScriptBackend(CodeBackend):
    """TypeScript code generation backend."""

    TEMPLATE_LANG = "typescript"
    FILE_EXTENSION = "ts"
    COMMENT_PREFIX = "//"
    BLOCK_SEPARATOR = "\n\n"
    RESERVED_WORDS = TS_RESERVED
    RESERVED_METHODS = frozenset({"request", "constructor"})
    SCHEMA_CONSTANT = "$schema"

    TYPE_MAP: dict[PrimitiveKind, str] = {
        PrimitiveKind.UNIT: "void",
        PrimitiveKind.STRING: "string",
        PrimitiveKind.BOOL: "boolean",
        PrimitiveKind.INT32: "number",
        PrimitiveKind.INT64: "bigint",
        PrimitiveKind.FLOAT32: "number",
        PrimitiveKind.FLOAT64: "number",
        PrimitiveKind.INSTANT: "Date",
    }

    def member_name(self, name: str) -> str:
        # Reserved words are legal property and enum member names
        return name

    def method_name(self, name: str) -> str:
        if name in self.RESERVED_METHODS:
            return f"{name}_"
        return name

    def _reset(self, schema: Schema) -> None:
        super()._reset(schema)
        self.external_imports: set[str] = set()

    def translate_type(self, node: TypeNode) -> str:
        if isinstance(node, PrimitiveType):
            return self.TYPE_MAP[node.primitive]

        if isinstance(node, NullableType):
            inner = self.translate_type(node.inner)
            if inner.endswith(" | null"):
                return inner
            return f"{inner} | null"

        if isinstance(node, ListType):
            inner = self.translate_type(node.inner)
            if " | " in inner:
                inner = f"({inner})"
            return f"{inner}[]"

        if isinstance(node, SetType):
            return f"Set<{self.translate_type(node.inner)}>"

        if isinstance(node, MapType):
            return f"Map<{self.translate_type(node.key)}, {self.translate_type(node.value)}>"

        if isinstance(node, ReferenceType):
            return node.name

        if isinstance(node, AliasType):
            return self.translate_type(node.inner)

        if isinstance(node, ExternalType):
            self.import_external(node.name)
            return node.name

        raise EmissionError(f"unhandled type node {node!r}")

    def input_bag(self, params: list[dict[str, str]]) -> str:
        if not params:
            return "{}"
        entries = []
        for p in params:
            if p["key"] == p["name"]:
                entries.append(p["name"])
            else:
                entries.append(f"{json.dumps(p['key'])}: {p['name']}")
        return "{ " + ", ".join(entries) + " }"

    def import_external(self, name: str) -> None:
        self.external_imports.add(name)

    def _external_module(self) -> str:
        if self.config.external_module:
            return self.config.external_module
        return f"./{self.unit_name or 'schema'}.external"

    def _assemble_imports(self) -> list[str]:
        if not self.external_imports:
            return []
        names = ", ".join(sorted(self.external_imports))
        return [f"import {{ {names} }} from {json.dumps(self._external_module())};"]

    def render_literal(self, value: Any) -> str:
        return json.dumps(value, indent=2, ensure_ascii=False)
