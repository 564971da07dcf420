"""
Pipeline generator: one generation unit end to end.

    document -> SchemaAST -> Schema -> source text -> (formatted) source text

Each unit is independent: nothing is shared between generators, so
several units may be generated side by side. A failing unit raises before
any text is produced.
"""

from __future__ import annotations

import logging
from typing import Any

from .analyzer import Schema, SchemaBuilder
from .backends import get_backend
from .config import CodeGeneratorConfig
from .formatters import get_formatter
from .schema_ast import SchemaAST, SchemaParser

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates the source artifact of one schema document."""

    def __init__(
        self,
        name: str,
        document: dict[str, Any],
        config: CodeGeneratorConfig | None = None,
        language: str | None = None,
    ):
        """
        Initialize the generator.

        Args:
            name: Name of the generation unit (also used for external imports)
            document: The schema document (see SchemaParser)
            config: Code generation configuration
            language: Target language, overriding ``config.language``
        """
        self.name = name
        self.document = document
        self.config = config or CodeGeneratorConfig()
        if language is not None:
            self.config.language = language
        self._schema: Schema | None = None

    def parse(self) -> SchemaAST:
        return SchemaParser().parse(self.document, self.name)

    def build(self) -> Schema:
        """
        Parse and build the IR, once.

        Raises:
            SchemaError: If the document does not describe a valid schema
        """
        if self._schema is None:
            ast = self.parse()
            self._schema = SchemaBuilder(self.config).build(ast)
            logger.info(
                "built schema %r: %d models, %d services",
                self._schema.name,
                len(self._schema.models),
                len(self._schema.services),
            )
        return self._schema

    def generate(self) -> str:
        """
        Generate source code for the configured language.

        Returns:
            The generated source text
        """
        schema = self.build()
        code = get_backend(self.config).generate(schema)

        formatter_config = self.config.formatter
        if formatter_config.enabled and self.config.language == "python":
            formatter = get_formatter(formatter_config.tool)
            logger.debug("formatting %r with %s", self.name, formatter.name)
            code = formatter.format(code, formatter_config)
        return code
