"""
Python code generation backend.

Generates dataclass models, an async consumer adapter, a Protocol provider
contract and the SCHEMA constant.
"""

from __future__ import annotations

import json
import keyword
import math
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
    referenced_names,
)
from ..errors import EmissionError
from .base import CodeBackend


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"
    COMMENT_PREFIX = "#"
    BLOCK_SEPARATOR = "\n\n\n"
    RESERVED_WORDS = frozenset(keyword.kwlist) | frozenset({"self"})
    RESERVED_METHODS = frozenset({"request"})
    SCHEMA_CONSTANT = "SCHEMA"

    TYPE_MAP: dict[PrimitiveKind, str] = {
        PrimitiveKind.UNIT: "None",
        PrimitiveKind.STRING: "str",
        PrimitiveKind.BOOL: "bool",
        PrimitiveKind.INT32: "int",
        PrimitiveKind.INT64: "int",
        PrimitiveKind.FLOAT32: "float",
        PrimitiveKind.FLOAT64: "float",
        PrimitiveKind.INSTANT: "datetime",
    }

    INDENT = "    "

    def _reset(self, schema: Schema) -> None:
        super()._reset(schema)
        self.stdlib_imports: dict[str, set[str]] = {
            "dataclasses": set(),
            "datetime": set(),
            "enum": set(),
            "typing": {"Any", "Final"},
            "collections.abc": set(),
        }
        self.external_imports: set[str] = set()
        if schema.models:
            self._note_models(schema)
        if schema.services:
            self.stdlib_imports["typing"].add("Protocol")
            self.stdlib_imports["collections.abc"].update({"Awaitable", "Callable"})

    def _note_models(self, schema: Schema) -> None:
        for decl in schema.models.values():
            if decl.model_type == "struct":
                self.stdlib_imports["dataclasses"].add("dataclass")
            elif decl.model_type == "enum":
                self.stdlib_imports["enum"].add("Enum")
            elif decl.model_type == "alias":
                self.stdlib_imports["typing"].add("TypeAlias")

    def translate_type(self, node: TypeNode) -> str:
        if isinstance(node, PrimitiveType):
            if node.primitive == PrimitiveKind.INSTANT:
                self.stdlib_imports["datetime"].add("datetime")
            return self.TYPE_MAP[node.primitive]

        if isinstance(node, NullableType):
            inner = self.translate_type(node.inner)
            if inner == "None" or inner.endswith(" | None"):
                return inner
            return f"{inner} | None"

        if isinstance(node, ListType):
            return f"list[{self.translate_type(node.inner)}]"

        if isinstance(node, SetType):
            return f"set[{self.translate_type(node.inner)}]"

        if isinstance(node, MapType):
            return f"dict[{self.translate_type(node.key)}, {self.translate_type(node.value)}]"

        if isinstance(node, ReferenceType):
            return node.name

        if isinstance(node, AliasType):
            # Inline aliases have no declaration of their own
            return self.translate_type(node.inner)

        if isinstance(node, ExternalType):
            self.import_external(node.name)
            return node.name

        raise EmissionError(f"unhandled type node {node!r}")

    def annotation(self, node: TypeNode) -> str:
        type_str = self.translate_type(node)
        if self.config.use_future_annotations or not referenced_names(node):
            return type_str
        return self._quote(type_str)

    def alias_target(self, node: TypeNode) -> str:
        # Evaluated at import time even with postponed annotations
        type_str = self.translate_type(node)
        if referenced_names(node):
            return self._quote(type_str)
        return type_str

    def _quote(self, type_str: str) -> str:
        if type_str == "None":
            return type_str
        return json.dumps(type_str)

    def input_bag(self, params: list[dict[str, str]]) -> str:
        if not params:
            return "{}"
        entries = ", ".join(f"{json.dumps(p['key'])}: {p['name']}" for p in params)
        return "{" + entries + "}"

    def import_external(self, name: str) -> None:
        self.external_imports.add(name)

    def _external_module(self) -> str:
        if self.config.external_module:
            return self.config.external_module
        return f".{self.unit_name or 'schema'}_external"

    def _assemble_imports(self) -> list[str]:
        """Assemble import statements: future, stdlib, then local."""
        lines = []
        if self.config.use_future_annotations:
            lines.append("from __future__ import annotations")
            lines.append("")

        stdlib = []
        for module in sorted(self.stdlib_imports):
            names = self.stdlib_imports[module]
            if names:
                stdlib.append(f"from {module} import {', '.join(sorted(names))}")
        lines.extend(stdlib)

        if self.external_imports:
            lines.append("")
            names = ", ".join(sorted(self.external_imports))
            lines.append(f"from {self._external_module()} import {names}")
        return lines

    def render_literal(self, value: Any, depth: int = 0) -> str:
        """Render a JSON-like value as a Python literal, one entry per line."""
        indent = self.INDENT * (depth + 1)
        closing = self.INDENT * depth
        if isinstance(value, dict):
            if not value:
                return "{}"
            entries = [f"{indent}{json.dumps(str(k))}: {self.render_literal(v, depth + 1)}," for k, v in value.items()]
            return "{\n" + "\n".join(entries) + f"\n{closing}}}"
        if isinstance(value, (list, tuple)):
            if not value:
                return "[]"
            items = [f"{indent}{self.render_literal(v, depth + 1)}," for v in value]
            return "[\n" + "\n".join(items) + f"\n{closing}]"
        if isinstance(value, str):
            return json.dumps(value)
        if isinstance(value, float) and not math.isfinite(value):
            return f"float({json.dumps(repr(value))})"
        if value is None or isinstance(value, (bool, int, float)):
            return repr(value)
        raise EmissionError(f"cannot render metadata value of type {type(value).__name__}")
