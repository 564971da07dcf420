"""
Black formatter for generated Python code.
"""

from __future__ import annotations

import logging

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class BlackFormatter(Formatter):
    """Formatter using black as a library."""

    name = "black"

    def __init__(self):
        self._black = None
        self._available: bool | None = None

    def is_available(self) -> bool:
        """Check if black is installed."""
        if self._available is None:
            try:
                import black

                self._black = black
                self._available = True
            except ImportError:
                self._available = False
        return self._available

    def mode(self, config: FormatterConfig):
        """Build a black.Mode from the formatter configuration."""
        black = self._black
        target_versions = set()
        if config.target_version:
            # Names follow black's TargetVersion members ("py312" -> PY312)
            version = getattr(black.TargetVersion, config.target_version.upper(), None)
            if version is None:
                logger.warning("black does not know target version %s, using its default", config.target_version)
            else:
                target_versions.add(version)

        return black.Mode(
            target_versions=target_versions,
            line_length=config.line_length,
            string_normalization=config.string_normalization,
            magic_trailing_comma=config.magic_trailing_comma,
        )

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            logger.warning("black is not installed, leaving generated code unformatted")
            return code

        try:
            return self._black.format_str(code, mode=self.mode(config))
        except self._black.InvalidInput as e:
            logger.warning("black rejected the generated code: %s", e)
            return code
