"""
Configuration for the client types generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

LANGUAGES = ("python", "go")


class RegistryScope(str, Enum):
    """Boundary within which a type name is declared at most once."""

    SERVICE = "service"  # Default: one registry per service artifact
    RUN = "run"  # One registry shared by every service of the run


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to validate code before writing
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = False

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    magic_trailing_comma: bool = True


@dataclass
class CodeGeneratorConfig:
    """Configuration options for client types generation."""

    # Target language ("python" or "go")
    language: str = "python"

    # Import path of the generated service packages (header emission only)
    package: str = "gen"

    # Root directory of the logical artifact paths
    output_root: str = "gen"

    # Transport segment of the logical artifact paths
    transport: str = "http"

    # Whether duplicate type names are suppressed per service or across the run
    registry_scope: RegistryScope = RegistryScope.SERVICE

    # Size of the worker pool generating services in parallel
    max_workers: int = 4

    # Add generation comment at top of file
    add_generation_comment: bool = True

    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    output: OutputConfig = field(default_factory=OutputConfig)

    def __post_init__(self):
        if self.language not in LANGUAGES:
            raise ValueError(f"Language not supported: {self.language}")
        if isinstance(self.registry_scope, str):
            self.registry_scope = RegistryScope(self.registry_scope)
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        # Re-run the checks on the loaded values
        config.__post_init__()
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "language": self.language,
            "package": self.package,
            "output_root": self.output_root,
            "transport": self.transport,
            "registry_scope": self.registry_scope.value,
            "max_workers": self.max_workers,
            "add_generation_comment": self.add_generation_comment,
            "formatter": {
                "enabled": self.formatter.enabled,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
                "string_normalization": self.formatter.string_normalization,
                "magic_trailing_comma": self.formatter.magic_trailing_comma,
            },
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
            },
        }
