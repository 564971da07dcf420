"""
Schema builder that transforms the AST into the IR.

Phase 2 of the pipeline. Build order:

    (a) register every top-level name (allows forward references)
    (b) build every type tree with the type algebra
    (c) resolve references and reject alias cycles
    (d) merge metadata
    (e) freeze

Any failure aborts the build; a partial schema is never returned.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType

from ..config import CodeGeneratorConfig
from ..errors import DuplicateEnumValue, DuplicateField, DuplicateName, NamespaceError, SchemaDocumentError
from ..schema_ast.nodes import (
    AliasNode,
    DefinitionNode,
    EnumNode,
    ExternalNode,
    SchemaAST,
    ServiceNode,
    StructNode,
)
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
from .type_nodes import PRIMITIVE_SPELLINGS, build_type, freeze

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SchemaBuilder:
    """Builds an immutable Schema from a parsed AST."""

    def __init__(self, config: CodeGeneratorConfig | None = None):
        """
        Initialize the builder.

        Args:
            config: Code generation configuration
        """
        self.config = config or CodeGeneratorConfig()

    def build(self, ast: SchemaAST) -> Schema:
        """
        Build and validate the IR of one generation unit.

        Args:
            ast: The parsed schema AST

        Returns:
            The frozen Schema

        Raises:
            SchemaError: On the first structural, namespace or resolution error
        """
        definitions = [d for d in ast.models if d.name not in self.config.ignore_models]
        for ignored in self.config.ignore_models:
            logger.debug("ignoring model %s", ignored)

        # (a)
        self._register(definitions, ast.services)
        logger.debug("registered %d models and %d services for %r", len(definitions), len(ast.services), ast.name)

        # (b)
        models: dict[str, ModelDecl] = {d.name: self._build_model(d) for d in definitions}
        services: dict[str, ServiceDecl] = {s.name: self._build_service(s) for s in ast.services}

        # (c)
        ReferenceResolver(models, services).check()

        # (d)
        merger = MetadataMerger(ast.defaults)
        for d in definitions:
            models[d.name] = self._merge_model(models[d.name], d, merger)
        for s in ast.services:
            services[s.name] = self._merge_service(services[s.name], s, merger)

        # (e)
        return Schema(name=ast.name, models=freeze_members(models), services=freeze_members(services))

    def _register(self, definitions: list[DefinitionNode], services: list[ServiceNode]) -> None:
        """Check every name before any type is built."""
        seen: set[str] = set()
        for node in [*definitions, *services]:
            self._check_name(node.name, node.source_path or None)
            if node.name in PRIMITIVE_SPELLINGS:
                raise NamespaceError(f"name {node.name!r} is a primitive kind", node.source_path or None)
            if node.name in seen:
                raise DuplicateName(node.name, node.source_path or None)
            seen.add(node.name)

        for node in definitions:
            if isinstance(node, StructNode):
                self._check_members([f.name for f in node.fields], node.name)
            elif isinstance(node, EnumNode):
                self._check_members([name for name, _ in node.variants], node.name)
                values: set[str] = set()
                for name, raw in node.variants:
                    value = raw if raw is not None else name
                    if value in values:
                        raise DuplicateEnumValue(value, node.name)
                    values.add(value)
            elif not isinstance(node, (AliasNode, ExternalNode)):
                raise SchemaDocumentError(f"unsupported model declaration {type(node).__name__}", node.name)

        for service in services:
            self._check_members([m.name for m in service.methods], service.name)
            for method in service.methods:
                self._check_members([name for name, _ in method.inputs], f"{service.name}.{method.name}")

    def _check_members(self, names: list[str], owner: str) -> None:
        seen: set[str] = set()
        for name in names:
            self._check_name(name, owner)
            if name in seen:
                raise DuplicateField(name, owner)
            seen.add(name)

    def _check_name(self, name: str, declaration: str | None) -> None:
        if not _NAME_PATTERN.match(name or ""):
            raise NamespaceError(f"invalid name {name!r}", declaration)

    def _build_model(self, node: DefinitionNode) -> ModelDecl:
        if isinstance(node, StructNode):
            fields = {}
            for f in node.fields:
                fields[f.name] = FieldDecl(name=f.name, type=build_type(f.type_expr, f"{node.name}.{f.name}"))
            return StructDecl(name=node.name, fields=freeze_members(fields))

        if isinstance(node, EnumNode):
            variants = {name: raw if raw is not None else name for name, raw in node.variants}
            return EnumDecl(name=node.name, variants=freeze(variants))

        if isinstance(node, AliasNode):
            return AliasDecl(name=node.name, inner=build_type(node.inner, node.name))

        if isinstance(node, ExternalNode):
            return ExternalDecl(name=node.name, representation=build_type(node.representation, node.name))

        raise SchemaDocumentError(f"unsupported model declaration {type(node).__name__}", node.name)

    def _build_service(self, node: ServiceNode) -> ServiceDecl:
        methods = {}
        for method in node.methods:
            site = f"{node.name}.{method.name}"
            inputs = {name: build_type(expr, f"{site}({name})") for name, expr in method.inputs}
            methods[method.name] = MethodDecl(
                name=method.name,
                inputs=freeze_members(inputs),
                output=build_type(method.output, site),
            )
        return ServiceDecl(name=node.name, methods=freeze_members(methods))

    def _merge_model(self, decl: ModelDecl, node: DefinitionNode, merger: MetadataMerger) -> ModelDecl:
        metadata = merger.model(node.metadata)
        if isinstance(decl, StructDecl) and isinstance(node, StructNode):
            fields = {
                f.name: replace(decl.fields[f.name], metadata=merger.field(node.field_defaults, f.metadata))
                for f in node.fields
            }
            return replace(decl, fields=freeze_members(fields), metadata=metadata)
        return replace(decl, metadata=metadata)

    def _merge_service(self, decl: ServiceDecl, node: ServiceNode, merger: MetadataMerger) -> ServiceDecl:
        methods = {
            m.name: replace(decl.methods[m.name], metadata=merger.method(node.method_defaults, m.metadata))
            for m in node.methods
        }
        return replace(decl, methods=freeze_members(methods), metadata=merger.service(node.metadata))


def freeze_members(members: dict) -> Mapping:
    """Freeze an ordered name -> declaration mapping without touching the declarations."""
    return MappingProxyType(dict(members))
