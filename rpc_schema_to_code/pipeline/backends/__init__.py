"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from ..config import CodeGeneratorConfig
from .base import GENERATED_MARKER, CodeBackend
from .python_backend import PythonBackend
from .runtime_schema import SCHEMA_VERSION, from_runtime_schema, to_runtime_schema
from .typescript_backend import TypeScriptBackend

BACKENDS: dict[str, type[CodeBackend]] = {
    "python": PythonBackend,
    "typescript": TypeScriptBackend,
}


def get_backend(config: CodeGeneratorConfig) -> CodeBackend:
    """Instantiate the backend for ``config.language``."""
    try:
        backend_class = BACKENDS[config.language]
    except KeyError:
        raise ValueError(f"Unsupported language: {config.language}") from None
    return backend_class(config)


__all__ = [
    "BACKENDS",
    "CodeBackend",
    "GENERATED_MARKER",
    "PythonBackend",
    "SCHEMA_VERSION",
    "TypeScriptBackend",
    "from_runtime_schema",
    "get_backend",
    "to_runtime_schema",
]
