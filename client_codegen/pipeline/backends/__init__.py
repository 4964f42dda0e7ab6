"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from .base import Assignment, CodeBackend
from .go_backend import GoBackend
from .python_backend import PythonBackend

BACKENDS: dict[str, type[CodeBackend]] = {
    "python": PythonBackend,
    "go": GoBackend,
}


def create_backend(config) -> CodeBackend:
    """Instantiate the backend of the configured language."""
    return BACKENDS[config.language](config)


__all__ = [
    "Assignment",
    "BACKENDS",
    "CodeBackend",
    "GoBackend",
    "PythonBackend",
    "create_backend",
]
