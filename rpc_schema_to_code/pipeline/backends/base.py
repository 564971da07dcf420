"""
Base class for code generation backends.

Defines the interface that all language-specific backends implement and
the fixed emission order shared by all of them:

    header and imports, models, consumers, providers, runtime schema

Every backend is deterministic: the same Schema always renders to the
same text, because iteration follows the IR's ordered mappings and any
collected set (imports) is sorted before rendering.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import AliasDecl, EnumDecl, ExternalDecl, MethodDecl, ModelDecl, Schema, ServiceDecl, StructDecl
from ..analyzer.type_nodes import TypeNode
from ..config import CodeGeneratorConfig
from ..errors import EmissionError
from .runtime_schema import to_runtime_schema

logger = logging.getLogger(__name__)

GENERATED_MARKER = "AUTOGENERATED FILE - DO NOT EDIT"


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Comment prefix for the generated-file marker
    COMMENT_PREFIX: str = "#"

    # Separator between top-level blocks
    BLOCK_SEPARATOR: str = "\n\n"

    # Identifiers that cannot be used as parameter or member names
    RESERVED_WORDS: frozenset[str] = frozenset()

    # Method names that would shadow consumer members
    RESERVED_METHODS: frozenset[str] = frozenset()

    # Default name of the runtime schema constant
    SCHEMA_CONSTANT: str = ""

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            undefined=jinja2.StrictUndefined,
            autoescape=False,
        )
        ext = self.FILE_EXTENSION
        self.prefix_template = self.jinja_env.get_template(f"prefix.{ext}.jinja2")
        self.struct_template = self.jinja_env.get_template(f"struct.{ext}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{ext}.jinja2")
        self.alias_template = self.jinja_env.get_template(f"alias.{ext}.jinja2")
        self.consumer_template = self.jinja_env.get_template(f"consumer.{ext}.jinja2")
        self.provider_template = self.jinja_env.get_template(f"provider.{ext}.jinja2")
        self.schema_template = self.jinja_env.get_template(f"schema.{ext}.jinja2")

    def generate(self, schema: Schema) -> str:
        """
        Generate the source artifact of one generation unit.

        Args:
            schema: The built schema

        Returns:
            Generated code as a string, ending with a single newline
        """
        self._reset(schema)

        models = [self.render_model(decl) for decl in schema.models.values()]
        consumers = [self.render_consumer(service) for service in schema.services.values()]
        providers = [self.render_provider(service) for service in schema.services.values()]
        constant = self.schema_template.render(
            name=self.config.schema_constant_name or self.SCHEMA_CONSTANT,
            literal=self.render_literal(to_runtime_schema(schema)),
        )

        # Rendered last: models and services register the imports they need
        prefix = self.prefix_template.render(
            marker=f"{self.COMMENT_PREFIX} {GENERATED_MARKER}",
            generation_comment=self._generation_comment(),
            imports=self._assemble_imports(),
        )

        blocks = [prefix, *models, *consumers, *providers, constant]
        output = self.BLOCK_SEPARATOR.join(b.strip("\n") for b in blocks if b and b.strip())
        logger.debug("rendered %s unit %r (%d blocks)", self.TEMPLATE_LANG, schema.name, len(blocks))
        return output + "\n"

    def render_model(self, decl: ModelDecl) -> str:
        """Render one model declaration; may return "" when nothing is declared."""
        if isinstance(decl, StructDecl):
            return self.struct_template.render(
                name=decl.name,
                fields=[{"name": self.member_name(name), "type": self.annotation(f.type)} for name, f in decl.fields.items()],
            )
        if isinstance(decl, EnumDecl):
            return self.enum_template.render(
                name=decl.name,
                variants=[{"name": self.member_name(name), "value": self.render_literal(value)} for name, value in decl.variants.items()],
            )
        if isinstance(decl, AliasDecl):
            return self.alias_template.render(name=decl.name, type=self.alias_target(decl.inner))
        if isinstance(decl, ExternalDecl):
            self.import_external(decl.name)
            return ""
        raise EmissionError(f"unhandled model declaration {decl!r}")

    def render_consumer(self, service: ServiceDecl) -> str:
        return self.consumer_template.render(
            service=service.name,
            class_name=f"{service.name}{self.config.consumer_suffix}",
            methods=[self._method_context(m) for m in service.methods.values()],
        )

    def render_provider(self, service: ServiceDecl) -> str:
        return self.provider_template.render(
            service=service.name,
            class_name=f"{service.name}{self.config.provider_suffix}",
            methods=[self._method_context(m) for m in service.methods.values()],
        )

    def _method_context(self, method: MethodDecl) -> dict[str, Any]:
        params = [
            {"name": self.safe_name(name), "key": name, "type": self.annotation(node)}
            for name, node in method.inputs.items()
        ]
        return {
            "name": self.method_name(method.name),
            "wire_name": self.render_literal(method.name),
            "params": params,
            "bag": self.input_bag(params),
            "output": self.annotation(method.output),
        }

    def safe_name(self, name: str, extra: frozenset[str] = frozenset()) -> str:
        """Append an underscore to names that collide with reserved words."""
        if name in self.RESERVED_WORDS or name in extra:
            return f"{name}_"
        return name

    def member_name(self, name: str) -> str:
        """Name of a struct field or enum member in generated code."""
        return self.safe_name(name)

    def method_name(self, name: str) -> str:
        """Name of a service method in generated code."""
        return self.safe_name(name, self.RESERVED_METHODS)

    def _generation_comment(self) -> str:
        if not self.config.add_generation_comment:
            return ""
        command = self.config.command_line or "rpc_schema_to_code"
        return f"{self.COMMENT_PREFIX} Generated by {command}"

    def annotation(self, node: TypeNode) -> str:
        """Type string used in field and signature positions."""
        return self.translate_type(node)

    def alias_target(self, node: TypeNode) -> str:
        """Type string used on the right-hand side of a type alias."""
        return self.translate_type(node)

    def _reset(self, schema: Schema) -> None:
        """Clear per-run state; backends are reused across units."""
        self.unit_name = schema.name

    @abstractmethod
    def translate_type(self, node: TypeNode) -> str:
        """
        Translate an IR type to a language-specific type string.

        Args:
            node: The type node

        Returns:
            Language-specific type string
        """

    @abstractmethod
    def render_literal(self, value: Any) -> str:
        """
        Render a plain value (dict, list, str, number, bool, None) as source.

        Args:
            value: The value to render

        Returns:
            A literal in the target language
        """

    @abstractmethod
    def input_bag(self, params: list[dict[str, str]]) -> str:
        """Render the input-bag record passed to the request primitive."""

    @abstractmethod
    def import_external(self, name: str) -> None:
        """Register the import of an externally implemented type."""

    @abstractmethod
    def _assemble_imports(self) -> list[str]:
        """Assemble import statements, sorted."""
