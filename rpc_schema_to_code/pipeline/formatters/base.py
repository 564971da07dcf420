"""
Formatter interface for generated Python code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import FormatterConfig


class Formatter(ABC):
    """Post-processing step applied to a rendered Python unit.

    A formatter never fails a generation unit: when its tool is missing or
    rejects the input, the code is returned unchanged and a warning logged.
    """

    # Value of FormatterConfig.tool selecting this formatter
    name: str = ""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """Return ``code`` reformatted according to ``config``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be used in this environment."""
