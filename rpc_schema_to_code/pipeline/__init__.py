"""
Pipeline - schema document to typed RPC code.

Phases of one generation unit:

1. Parser: decode the schema document into an unresolved Schema AST
2. Builder: register names, build types, resolve references, merge metadata
3. Backend: render models, consumer, provider and runtime schema
4. Formatter: optional post-processing (ruff or black, Python only)
5. Writer: atomic full-overwrite of the generated file
"""

from __future__ import annotations

from .config import CodeGeneratorConfig, FormatterConfig, OutputConfig, OutputMode
from .errors import EmissionError, SchemaError, WriteError
from .generator import PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "SchemaError",
    "EmissionError",
    "WriteError",
    "AtomicWriter",
]
