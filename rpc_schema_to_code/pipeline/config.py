"""
Configuration for the code generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

LANGUAGES = ("python", "typescript")


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists. Generated files
    are machine-owned and are always replaced as a whole, never patched.
    """

    REGENERATE = "regenerate"  # Default: replace files carrying the generated marker
    FORCE = "force"  # Replace whatever is there
    ERROR_IF_EXISTS = "error"  # Refuse to touch an existing file


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to validate code before writing
        atomic_write: Whether to write through a temporary file and rename
    """

    mode: OutputMode = OutputMode.REGENERATE
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters (Python output only)."""

    # Whether formatting is enabled
    enabled: bool = False

    # "ruff" or "black"
    tool: str = "ruff"

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    magic_trailing_comma: bool = True


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Target language: "python" or "typescript"
    language: str = "python"

    # Models to drop before building (references to them then fail)
    ignore_models: list[str] = field(default_factory=list)

    # Add a line naming the generator command below the generated-file marker
    add_generation_comment: bool = True

    # Command line shown by the generation comment
    command_line: str = ""

    # Use from __future__ import annotations (Python)
    use_future_annotations: bool = True

    # Module external types are imported from; empty = derived from the unit name
    external_module: str = ""

    # Name of the runtime schema constant; empty = "SCHEMA" (Python) / "$schema" (TypeScript)
    schema_constant_name: str = ""

    # Class name suffixes for generated service types
    consumer_suffix: str = "Consumer"
    provider_suffix: str = "Provider"

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.REGENERATE)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        if config.language not in LANGUAGES:
            raise ValueError(f"language must be one of {LANGUAGES}, got {config.language!r}")
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "language": self.language,
            "ignore_models": self.ignore_models,
            "add_generation_comment": self.add_generation_comment,
            "command_line": self.command_line,
            "use_future_annotations": self.use_future_annotations,
            "external_module": self.external_module,
            "schema_constant_name": self.schema_constant_name,
            "consumer_suffix": self.consumer_suffix,
            "provider_suffix": self.provider_suffix,
            "formatter": {
                "enabled": self.formatter.enabled,
                "tool": self.formatter.tool,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
                "string_normalization": self.formatter.string_normalization,
                "magic_trailing_comma": self.formatter.magic_trailing_comma,
            },
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
