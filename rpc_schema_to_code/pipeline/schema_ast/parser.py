"""
Schema document parser that builds an AST.

Phase 1 of the pipeline: turn a JSON schema document (already decoded
into Python values) into an unresolved AST, without validating kinds or
resolving references. Type expressions use the same shape as the runtime
schema type nodes, plus a string shorthand:

    "string"        -> primitive
    "Post"          -> reference
    "Post?"         -> nullable(reference)
"""

from __future__ import annotations

import json
from typing import Any

from ..analyzer.type_nodes import PRIMITIVE_SPELLINGS
from ..errors import SchemaDocumentError
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
    ServiceNode,
    SetExpr,
    StructNode,
    TypeExpr,
)


class DuplicateKeys(list):
    """Key/value pairs of a JSON object that repeats a key.

    Kept as a list so the builder can report the duplicate as a namespace
    error with the owning declaration, instead of silently keeping the
    last value the way a plain ``dict`` would.
    """


def _pairs_hook(pairs: list[tuple[str, Any]]) -> dict[str, Any] | DuplicateKeys:
    keys = [k for k, _ in pairs]
    if len(set(keys)) != len(keys):
        return DuplicateKeys(pairs)
    return dict(pairs)


def load_document(text: str) -> Any:
    """Decode a JSON schema document, preserving repeated member names."""
    try:
        return json.loads(text, object_pairs_hook=_pairs_hook)
    except json.JSONDecodeError as e:
        raise SchemaDocumentError(f"invalid JSON: {e}") from e


class SchemaParser:
    """Parses a schema document into an AST."""

    MODEL_TYPES = {"struct", "enum", "alias", "external"}
    COMPOSITE_TAGS = {"nullable", "list", "set", "map", "reference", "alias", "external"}
    DEFAULT_SITES = {"fields", "methods", "models", "services"}

    def parse(self, document: Any, name: str = "") -> SchemaAST:
        """
        Parse a schema document into an AST.

        Args:
            document: The decoded document (see ``load_document``)
            name: Name of the generation unit; overrides the document's "name"

        Returns:
            SchemaAST with models and services in document order
        """
        document = self._mapping(document, "#")

        ast = SchemaAST(name=name or str(document.get("name", "")))

        defaults = self._mapping(document.get("defaults", {}), "#/defaults")
        for site, values in defaults.items():
            if site not in self.DEFAULT_SITES:
                raise SchemaDocumentError(f"unknown defaults site {site!r}", "#/defaults")
            ast.defaults[site] = dict(self._mapping(values, f"#/defaults/{site}"))

        for model_name, body in self._items(document.get("models", {})):
            ast.models.append(self._parse_model(model_name, body, f"#/models/{model_name}"))

        for service_name, body in self._items(document.get("services", {})):
            ast.services.append(self._parse_service(service_name, body, f"#/services/{service_name}"))

        return ast

    def _parse_model(self, name: str, body: Any, path: str) -> DefinitionNode:
        body = self._mapping(body, path)
        model_type = body.get("type")
        metadata = self._metadata(body, "metadata", path)

        if model_type == "struct":
            node = StructNode(
                name=name,
                source_path=path,
                metadata=metadata,
                field_defaults=self._metadata(body, "field_defaults", path),
            )
            for field_name, value in self._items(body.get("fields", {})):
                node.fields.append(self._parse_field(field_name, value, f"{path}/fields/{field_name}"))
            return node

        if model_type == "enum":
            return EnumNode(
                name=name,
                source_path=path,
                metadata=metadata,
                variants=self._parse_variants(body.get("variants", []), path),
            )

        if model_type == "alias":
            return AliasNode(
                name=name,
                source_path=path,
                metadata=metadata,
                inner=self._child(body, "inner", path),
            )

        if model_type == "external":
            return ExternalNode(
                name=name,
                source_path=path,
                metadata=metadata,
                representation=self._child(body, "inner", path),
            )

        raise SchemaDocumentError(
            f"model type must be one of {sorted(self.MODEL_TYPES)}, got {model_type!r}",
            path,
        )

    def _parse_field(self, name: str, value: Any, path: str) -> FieldNode:
        """Parse a field; a dict value may carry the field's own "metadata"."""
        metadata: dict[str, Any] = {}
        if isinstance(value, (dict, DuplicateKeys)):
            value = dict(self._mapping(value, path))
            metadata = self._metadata(value, "metadata", path)
            value.pop("metadata", None)
            # {"type": <expression>} wraps a shorthand or nested expression
            wrapped = value.get("type")
            if set(value) == {"type"} and not (isinstance(wrapped, str) and wrapped in self.COMPOSITE_TAGS):
                value = wrapped

        return FieldNode(
            name=name,
            source_path=path,
            metadata=metadata,
            type_expr=self.parse_type(value, path),
        )

    def _parse_variants(self, value: Any, path: str) -> list[tuple[str, str | None]]:
        if isinstance(value, list) and not isinstance(value, DuplicateKeys):
            variants = []
            for item in value:
                if not isinstance(item, str):
                    raise SchemaDocumentError(f"enum variant must be a string, got {item!r}", path)
                variants.append((item, None))
            return variants

        variants = []
        for variant_name, raw in self._items(value):
            if raw is not None and not isinstance(raw, str):
                raise SchemaDocumentError(f"enum value must be a string, got {raw!r}", f"{path}/{variant_name}")
            variants.append((variant_name, raw))
        return variants

    def _parse_service(self, name: str, body: Any, path: str) -> ServiceNode:
        body = self._mapping(body, path)
        service = ServiceNode(
            name=name,
            source_path=path,
            metadata=self._metadata(body, "metadata", path),
            method_defaults=self._metadata(body, "method_defaults", path),
        )

        for method_name, method_body in self._items(body.get("methods", {})):
            method_path = f"{path}/methods/{method_name}"
            method_body = self._mapping(method_body, method_path)
            method = MethodNode(
                name=method_name,
                source_path=method_path,
                metadata=self._metadata(method_body, "metadata", method_path),
                output=self._child(method_body, "output", method_path),
            )
            for input_name, input_type in self._items(method_body.get("inputs", {})):
                method.inputs.append((input_name, self.parse_type(input_type, f"{method_path}/inputs/{input_name}")))
            service.methods.append(method)

        return service

    def parse_type(self, value: Any, path: str) -> TypeExpr:
        """
        Parse a type expression.

        Args:
            value: Shorthand string or type-node dict
            path: Current path in the document (for error messages)

        Returns:
            Appropriate TypeExpr subclass; missing children stay None so
            that the type algebra can report them as malformed
        """
        if isinstance(value, str):
            return self._parse_shorthand(value, path)

        node = self._mapping(value, path)
        tag = node.get("type")
        if not isinstance(tag, str):
            raise SchemaDocumentError(f"type expression needs a string 'type', got {tag!r}", path)

        if tag == "nullable":
            return NullableExpr(inner=self._child(node, "inner", path), source_path=path)
        if tag == "list":
            return ListExpr(inner=self._child(node, "inner", path), source_path=path)
        if tag == "set":
            return SetExpr(inner=self._child(node, "inner", path), source_path=path)
        if tag == "map":
            return MapExpr(
                key=self._child(node, "key", path),
                value=self._child(node, "value", path),
                source_path=path,
            )
        if tag == "reference":
            return RefExpr(name=str(node.get("name", "")), source_path=path)
        if tag == "alias":
            return AliasExpr(
                name=str(node.get("name", "")),
                inner=self._child(node, "inner", path),
                source_path=path,
            )
        if tag == "external":
            return ExternalExpr(
                name=str(node.get("name", "")),
                representation=self._child(node, "inner", path),
                metadata=self._metadata(node, "data", path),
                source_path=path,
            )

        # Anything else names a primitive kind, validated by the type algebra
        return PrimitiveExpr(kind=tag, source_path=path)

    def _parse_shorthand(self, text: str, path: str) -> TypeExpr:
        text = text.strip()
        if text.endswith("?"):
            return NullableExpr(inner=self._parse_shorthand(text[:-1], path), source_path=path)
        if not text:
            raise SchemaDocumentError("empty type name", path)
        if text in PRIMITIVE_SPELLINGS:
            return PrimitiveExpr(kind=text, source_path=path)
        return RefExpr(name=text, source_path=path)

    def _child(self, node: dict[str, Any], key: str, path: str) -> TypeExpr | None:
        if node.get(key) is None:
            return None
        return self.parse_type(node[key], f"{path}/{key}")

    def _metadata(self, node: dict[str, Any], key: str, path: str) -> dict[str, Any]:
        value = node.get(key)
        if value is None:
            return {}
        return dict(self._mapping(value, f"{path}/{key}"))

    def _mapping(self, value: Any, path: str) -> dict[str, Any]:
        """Return value as a dict, rejecting repeated keys where members are not expected."""
        if isinstance(value, DuplicateKeys):
            keys = [k for k, _ in value]
            repeated = sorted({k for k in keys if keys.count(k) > 1})
            raise SchemaDocumentError(f"repeated keys {repeated}", path)
        if not isinstance(value, dict):
            raise SchemaDocumentError(f"expected an object, got {type(value).__name__}", path)
        return value

    def _items(self, value: Any) -> list[tuple[str, Any]]:
        """Named members in document order, keeping repeated names."""
        if isinstance(value, DuplicateKeys):
            return list(value)
        if isinstance(value, dict):
            return list(value.items())
        raise SchemaDocumentError(f"expected an object of named members, got {type(value).__name__}")
