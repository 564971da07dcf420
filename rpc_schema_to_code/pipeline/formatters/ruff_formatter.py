"""
Ruff formatter for generated Python code.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class RuffFormatter(Formatter):
    """Formatter running ``ruff format`` over stdin."""

    name = "ruff"

    def __init__(self):
        self._available: bool | None = None

    def is_available(self) -> bool:
        """Check if the ruff executable can be run."""
        if self._available is None:
            try:
                result = subprocess.run(["ruff", "--version"], capture_output=True, text=True, timeout=5)
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
        return self._available

    def command(self, config: FormatterConfig) -> list[str]:
        cmd = ["ruff", "format", "--stdin-filename", "generated.py"]
        if config.line_length:
            cmd.extend(["--line-length", str(config.line_length)])
        if config.target_version:
            cmd.extend(["--target-version", config.target_version])
        if not config.string_normalization:
            cmd.extend(["--config", "format.quote-style='preserve'"])
        if not config.magic_trailing_comma:
            cmd.extend(["--config", "format.skip-magic-trailing-comma=true"])
        return cmd

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            logger.warning("ruff is not installed, leaving generated code unformatted")
            return code

        try:
            result = subprocess.run(self.command(config), input=code, capture_output=True, text=True, timeout=30)
        except subprocess.SubprocessError as e:
            logger.warning("ruff format failed: %s", e)
            return code

        if result.returncode != 0:
            logger.warning("ruff format rejected the generated code: %s", result.stderr.strip())
            return code
        return result.stdout
