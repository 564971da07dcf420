"""
Atomic file writer for generated code.

Generated files are machine-owned: each write replaces the whole file,
never patches it. Writes go through a temporary file in the target
directory so an interrupted run never leaves a half-written artifact.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..backends.base import GENERATED_MARKER
from ..config import OutputConfig, OutputMode
from ..errors import WriteError

logger = logging.getLogger(__name__)

# The marker must appear within the first lines of a file we may replace
MARKER_SCAN_LINES = 5


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(
        self,
        output: OutputConfig | None = None,
        validate_python: Callable[[str], None] | None = None,
        validate_typescript: Callable[[str], None] | None = None,
    ):
        """Initialize the atomic writer.

        Args:
            output: Output configuration (mode, validation, atomicity)
            validate_python: Optional validation function for Python code
            validate_typescript: Optional validation function for TypeScript code
        """
        self.output = output or OutputConfig()
        self._validate_python = validate_python or self._default_validate_python
        self._validate_typescript = validate_typescript or self._default_validate_typescript

    def write(self, path: Path, content: str, language: str) -> None:
        """Write content to file, honoring the output mode.

        Args:
            path: Target file path
            content: Content to write
            language: Language for validation ("python" or "typescript")

        Raises:
            WriteError: If the mode forbids replacing the target or validation fails
            OSError: If file operations fail
        """
        self.check_target(path)

        if self.output.validate_before_write:
            self._validate_content(content, language)

        path.parent.mkdir(parents=True, exist_ok=True)
        if not self.output.atomic_write:
            path.write_text(content, encoding="utf-8")
            logger.info("wrote %s", path)
            return

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        logger.info("wrote %s", path)

    def check_target(self, path: Path) -> None:
        """Refuse to touch ``path`` when the output mode forbids it.

        Raises:
            WriteError: If the target exists and may not be replaced
        """
        if not path.exists():
            return
        mode = self.output.mode
        if mode == OutputMode.FORCE:
            return
        if mode == OutputMode.ERROR_IF_EXISTS:
            raise WriteError(f"Output file already exists: {path}. Use force mode to overwrite.")
        if not self.is_generated(path):
            raise WriteError(
                f"Refusing to overwrite {path}: it does not carry the '{GENERATED_MARKER}' marker. "
                "Use force mode to overwrite."
            )

    @staticmethod
    def is_generated(path: Path) -> bool:
        """Whether ``path`` was produced by the generator."""
        try:
            with open(path, encoding="utf-8") as f:
                head = [f.readline() for _ in range(MARKER_SCAN_LINES)]
        except (OSError, UnicodeDecodeError):
            return False
        return any(GENERATED_MARKER in line for line in head)

    def _validate_content(self, content: str, language: str) -> None:
        if language == "python":
            self._validate_python(content)
        elif language == "typescript":
            self._validate_typescript(content)

    def _default_validate_python(self, content: str) -> None:
        """Default Python validation.

        Raises:
            WriteError: If the code does not parse
        """
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise WriteError(f"Generated Python code is not valid: {e}") from e

    def _default_validate_typescript(self, content: str) -> None:
        """Default TypeScript validation (structural heuristics, no parser).

        Raises:
            WriteError: If braces are unbalanced or the marker is missing
        """
        if GENERATED_MARKER not in content:
            raise WriteError("Generated TypeScript code is missing the generated-file marker")

        open_braces = content.count("{")
        close_braces = content.count("}")
        if open_braces != close_braces:
            raise WriteError(f"Generated TypeScript code has unbalanced braces: {open_braces} open, {close_braces} close")
