"""HTTP client types generator

A Python package generating the HTTP client types (request and response
bodies, their constructors, validators and view conversions) of API
services for Python and Go.
"""

__version__ = "0.1.0"

from .errors import (
    EmitError,
    GenerationError,
    RenderFailure,
    SchemaInconsistency,
    SchemaParseError,
    UnexpectedFailure,
    UnsupportedFieldShape,
)
from .pipeline import (
    AtomicWriter,
    ClientTypesGenerator,
    CodeGeneratorConfig,
    FormatterConfig,
    GenerationReport,
    OutputConfig,
    OutputMode,
    RegistryScope,
)
from .schema import SchemaModel, parse_schema

__all__ = [
    "ClientTypesGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "RegistryScope",
    "GenerationReport",
    "AtomicWriter",
    "SchemaModel",
    "parse_schema",
    "GenerationError",
    "SchemaInconsistency",
    "UnexpectedFailure",
    "UnsupportedFieldShape",
    "RenderFailure",
    "SchemaParseError",
    "EmitError",
]
