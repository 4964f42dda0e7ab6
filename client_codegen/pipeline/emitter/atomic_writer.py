"""
Atomic file writer for generated artifacts.

Ensures that file writes are atomic so an interrupted run never leaves a
partially written artifact behind.
"""

from __future__ import annotations

import ast
import logging
import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from ...errors import EmitError

logger = logging.getLogger(__name__)

_GO_PACKAGE_CLAUSE = re.compile(r"^package \w+$", re.MULTILINE)


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(
        self,
        validate_python: Callable[[str], None] | None = None,
        validate_go: Callable[[str], None] | None = None,
    ):
        """Initialize the atomic writer.

        Args:
            validate_python: Optional validation function for Python code
            validate_go: Optional validation function for Go code
        """
        self._validate_python = validate_python or self._default_validate_python
        self._validate_go = validate_go or self._default_validate_go

    def write(self, path: Path, content: str, language: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            language: Language for validation ("python" or "go")
            validate: Whether to validate before finalizing

        Raises:
            EmitError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", text=True)
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            if validate:
                self._validate_content(content, language)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s", path)

    def write_if_not_exists(self, path: Path, content: str, language: str, validate: bool = True) -> bool:
        """Write content only if the file doesn't exist.

        Returns:
            True once the file is written

        Raises:
            FileExistsError: If the file already exists
            EmitError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")

        self.write(path, content, language, validate)
        return True

    def _validate_content(self, content: str, language: str) -> None:
        if language == "python":
            self._validate_python(content)
        elif language == "go":
            self._validate_go(content)
        else:
            raise EmitError(f"Cannot validate code of unknown language {language!r}")

    def _default_validate_python(self, content: str) -> None:
        """Default Python validation.

        Raises:
            EmitError: If the code does not parse
        """
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise EmitError(f"Generated Python code is not valid: {e}") from e

    def _default_validate_go(self, content: str) -> None:
        """Default Go validation: structural checks only (no Go parser).

        Raises:
            EmitError: If the package clause is missing or braces are unbalanced
        """
        if not _GO_PACKAGE_CLAUSE.search(content):
            raise EmitError("Generated Go code is missing its package clause")

        open_braces = content.count("{")
        close_braces = content.count("}")
        if open_braces != close_braces:
            raise EmitError(f"Generated Go code has unbalanced braces: {open_braces} open, {close_braces} close")
