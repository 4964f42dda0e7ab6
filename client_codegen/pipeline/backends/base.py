"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement:
type references, identifiers, literals, the code fragments building values
and validating fields, the header imports and the section templates.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2

from ...schema.nodes import Kind, TypeExpr
from ...utils import snake_to_pascal_case
from ...validation_rules import FieldAccess
from ..config import CodeGeneratorConfig
from ..descriptors import FieldDescriptor, ImportSpec, Section
from ..pointer_policy import Representation

# Resolves a user type name to the name of the type referenced in generated code
ObjectResolver = Callable[[str], str]


@dataclass(frozen=True)
class Assignment:
    """Assignment of one field of a constructed value."""

    target: str  # Identifier of the target field
    source: str  # Expression of the source value
    type: TypeExpr
    target_type_ref: str
    source_rep: Representation = Representation.OPTIONAL
    target_rep: Representation = Representation.OPTIONAL

    # Conversion function applied to each object value (if any)
    helper: str | None = None

    # Default applied when the optional source is absent
    default_literal: str | None = None


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from primitive kinds to language types
    TYPE_MAP: dict[Kind, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Indentation of function bodies
    INDENT: str = "    "

    # Separator placed between rendered sections
    SECTION_SEPARATOR: str = "\n\n"

    KEYWORDS: frozenset[str] = frozenset()

    # Name of the package the artifact belongs to (if the language declares one)
    PACKAGE_NAME: str = ""

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        # Add custom filters
        self.jinja_env.filters["snake_to_pascal"] = snake_to_pascal_case
        self.jinja_env.filters["comment"] = self._comment
        self.jinja_env.filters["indent_code"] = self._indent_code
        self.jinja_env.filters["import_lines"] = self.format_imports

    def render(self, section: Section) -> str:
        """
        Render one section.

        Args:
            section: The planned section

        Returns:
            Source text of the section

        Raises:
            jinja2.TemplateError: If the template rejects the descriptor
        """
        template = self.jinja_env.get_template(f"{section.kind.value}.{self.FILE_EXTENSION}.jinja2")
        return template.render(section=section, d=section.descriptor).strip("\n")

    def artifact_path(self, slug: str) -> str:
        return f"{self.config.output_root}/{self.config.transport}/{slug}/client/types.{self.FILE_EXTENSION}"

    @abstractmethod
    def translate_type(self, type_expr: TypeExpr, representation: Representation, resolve: ObjectResolver) -> str:
        """
        Translate a type expression to a language-specific type string.

        Args:
            type_expr: The type expression
            representation: Value or optional
            resolve: Resolves user type names to referenced type names

        Returns:
            Language-specific type string
        """

    @abstractmethod
    def format_default_value(self, value: Any, type_expr: TypeExpr) -> str:
        """
        Format a default value for the target language.

        Args:
            value: The default value
            type_expr: The type of the value

        Returns:
            Formatted default value string
        """

    @abstractmethod
    def reference_type(self, type_name: str) -> str:
        """Type string of a reference to a constructed value of the named type."""

    @abstractmethod
    def function_name(self, *parts: str, exported: bool = True) -> str:
        """Name of a generated function built from words."""

    @abstractmethod
    def identifier(self, name: str) -> str:
        """Identifier of a field in generated code."""

    @abstractmethod
    def variable(self, name: str) -> str:
        """Identifier of a local variable or argument in generated code."""

    @abstractmethod
    def build_value(self, var: str, type_name: str, assignments: Iterable[Assignment]) -> str:
        """
        Code constructing a value and assigning it to a variable.

        Args:
            var: Name of the variable holding the constructed value
            type_name: Name of the constructed type
            assignments: Field assignments in declaration order

        Returns:
            Code lines (unindented) joined by newlines
        """

    @abstractmethod
    def field_access(self, var: str, field: FieldDescriptor, label_prefix: str) -> FieldAccess:
        """How validation code reaches a field of a variable."""

    @abstractmethod
    def header_imports(self, texts: Iterable[str], slug: str, renamed_fields: bool) -> tuple[ImportSpec, ...]:
        """Imports required by the given generated code fragments."""

    @abstractmethod
    def format_imports(self, imports: Iterable[ImportSpec]) -> list[str]:
        """Import statement lines of the header."""

    def type_name(self, *parts: str) -> str:
        """Name of a generated type built from words."""
        return "".join(snake_to_pascal_case(part) for part in parts)

    def service_type(self, slug: str, type_name: str) -> str:
        """Reference to a type of the service package."""
        return f"{slug}.{type_name}"

    def escape(self, name: str) -> str:
        if name in self.KEYWORDS:
            return f"{name}_"
        return name

    def _get_comment_prefix(self) -> str:
        """Get the comment prefix for the language."""
        return "#" if self.TEMPLATE_LANG == "python" else "//"

    def _comment(self, text: str) -> str:
        prefix = self._get_comment_prefix()
        return "\n".join(f"{prefix} {line}".rstrip() for line in text.splitlines())

    def _indent_code(self, code: str) -> str:
        return "\n".join(f"{self.INDENT}{line}" if line else line for line in code.splitlines())

    @staticmethod
    def _mentions(texts: Iterable[str], pattern: str) -> bool:
        regex = re.compile(pattern)
        return any(regex.search(text) for text in texts)
