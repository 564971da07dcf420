"""RPC Schema to Code Generator

A Python package for generating typed RPC bindings from schema documents.
Supports Python and TypeScript output: data models, a consumer adapter
around an injected request function, a provider contract and a runtime
schema constant.
"""

__version__ = "0.1.0"

from .pipeline import (
    AtomicWriter,
    CodeGeneratorConfig,
    EmissionError,
    FormatterConfig,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
    SchemaError,
    WriteError,
)

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
