"""
Post-processing formatters for generated Python code.
"""

from __future__ import annotations

from .base import Formatter
from .black_formatter import BlackFormatter
from .ruff_formatter import RuffFormatter

FORMATTERS: dict[str, type[Formatter]] = {
    "ruff": RuffFormatter,
    "black": BlackFormatter,
}


def get_formatter(tool: str) -> Formatter:
    """Instantiate the formatter named ``tool``."""
    try:
        return FORMATTERS[tool]()
    except KeyError:
        raise ValueError(f"Unknown formatter {tool!r}, expected one of {sorted(FORMATTERS)}") from None


__all__ = [
    "BlackFormatter",
    "FORMATTERS",
    "Formatter",
    "RuffFormatter",
    "get_formatter",
]
