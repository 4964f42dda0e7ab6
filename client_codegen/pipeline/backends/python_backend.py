"""
Python code generation backend.

Generates dataclass_json dataclasses and plain conversion functions.
"""

from __future__ import annotations

import collections
import json
import keyword
import re
from collections.abc import Iterable
from typing import Any

from ...schema.nodes import Kind, TypeExpr
from ...utils import snake_case
from ...validation_rules import FieldAccess
from ..descriptors import FieldDescriptor, ImportSpec
from ..pointer_policy import Representation
from .base import Assignment, CodeBackend, ObjectResolver

# Define standard library modules
STDLIB_MODULES = {"abc", "collections", "dataclasses", "enum", "typing", "re"}


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"
    INDENT = "    "
    SECTION_SEPARATOR = "\n\n\n"

    TYPE_MAP = {
        Kind.STRING: "str",
        Kind.INT: "int",
        Kind.INT64: "int",
        Kind.FLOAT: "float",
        Kind.BOOLEAN: "bool",
        Kind.BYTES: "bytes",
        Kind.ANY: "Any",
    }

    KEYWORDS = frozenset(keyword.kwlist)

    def _setup_templates(self) -> None:
        super()._setup_templates()
        self.jinja_env.filters["field_default"] = self._field_default

    def translate_type(self, type_expr: TypeExpr, representation: Representation, resolve: ObjectResolver) -> str:
        """Translate a type expression to a Python type string."""
        result = self._translate_type_inner(type_expr, resolve)

        # Handle optionality
        if representation == Representation.OPTIONAL:
            result = f"{result} | None"

        return result

    def _translate_type_inner(self, type_expr: TypeExpr, resolve: ObjectResolver) -> str:
        """Inner type translation without optional handling."""
        if type_expr.kind == Kind.OBJECT:
            return resolve(type_expr.ref)

        if type_expr.kind == Kind.ARRAY:
            if type_expr.elem is not None:
                return f"list[{self._translate_type_inner(type_expr.elem, resolve)}]"
            return "list"

        if type_expr.kind == Kind.MAP:
            key = self._translate_type_inner(type_expr.key, resolve) if type_expr.key else "str"
            if type_expr.elem is not None:
                return f"dict[{key}, {self._translate_type_inner(type_expr.elem, resolve)}]"
            return "dict"

        return self.TYPE_MAP.get(type_expr.kind, "Any")

    def format_default_value(self, value: Any, type_expr: TypeExpr) -> str:
        """Format a default value for Python."""
        if type_expr.kind == Kind.FLOAT and isinstance(value, int) and not isinstance(value, bool):
            return repr(float(value))
        return repr(value)

    def reference_type(self, type_name: str) -> str:
        return type_name

    def function_name(self, *parts: str, exported: bool = True) -> str:
        return self.escape("_".join(snake_case(part) for part in parts if part))

    def identifier(self, name: str) -> str:
        return self.escape(snake_case(name))

    def variable(self, name: str) -> str:
        return self.identifier(name)

    def build_value(self, var: str, type_name: str, assignments: Iterable[Assignment]) -> str:
        """Code constructing a value with keyword arguments."""
        assignments = list(assignments)
        if not assignments:
            return f"{var} = {type_name}()"
        code = [f"{var} = {type_name}("]
        for a in assignments:
            code.append(f"    {a.target}={self._value_expr(a)},")
        code.append(")")
        return "\n".join(code)

    def _value_expr(self, a: Assignment) -> str:
        if a.helper and a.type.object_refs():
            expr = self._convert(a.source, a.type, a.helper, 0)
            if a.type.kind != Kind.OBJECT:
                expr = f"{expr} if {a.source} is not None else None"
            return expr
        if a.default_literal is not None and a.source_rep == Representation.OPTIONAL and a.type.is_primitive:
            return f"{a.source} if {a.source} is not None else {a.default_literal}"
        return a.source

    def _convert(self, src: str, type_expr: TypeExpr, helper: str, depth: int) -> str:
        """Conversion expression applying helper to every object value."""
        if type_expr.kind == Kind.OBJECT:
            return f"{helper}({src})"
        var = "e" if depth == 0 else f"e{depth}"
        inner = self._convert(var, type_expr.elem, helper, depth + 1)
        if type_expr.kind == Kind.ARRAY:
            return f"[{inner} for {var} in {src}]"
        key = "k" if depth == 0 else f"k{depth}"
        return f"{{{key}: {inner} for {key}, {var} in {src}.items()}}"

    def field_access(self, var: str, field: FieldDescriptor, label_prefix: str) -> FieldAccess:
        expr = f"{var}.{field.identifier}"
        return FieldAccess(
            expr=expr,
            value=expr,
            label=f"{label_prefix}.{field.wire_name}",
            guard=f"{expr} is not None" if field.is_optional else None,
            is_string=field.type.kind == Kind.STRING,
        )

    def header_imports(self, texts: Iterable[str], slug: str, renamed_fields: bool) -> tuple[ImportSpec, ...]:
        texts = list(texts)
        imports = [
            ImportSpec("__future__", "annotations"),
            ImportSpec("dataclasses", "dataclass"),
            ImportSpec("dataclasses_json", "dataclass_json"),
        ]
        if renamed_fields:
            imports.append(ImportSpec("dataclasses", "field"))
            imports.append(ImportSpec("dataclasses_json", "config"))
        if self._mentions(texts, r"\bAny\b"):
            imports.append(ImportSpec("typing", "Any"))
        if self._mentions(texts, r"\bre\.search\("):
            imports.append(ImportSpec("re"))
        if self._mentions(texts, rf"\b{re.escape(slug)}\."):
            imports.append(ImportSpec(self.config.package, slug))
        return tuple(imports)

    def format_imports(self, imports: Iterable[ImportSpec]) -> list[str]:
        """Assemble Python import statements."""
        # Group imports by module
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        plain_imports: set[str] = set()
        for spec in imports:
            if spec.name is None:
                plain_imports.add(spec.path)
            else:
                import_groups[spec.path].add(spec.name)

        # Separate stdlib, third-party and the service package
        stdlib_groups = {m: import_groups[m] for m in import_groups if m in STDLIB_MODULES}
        local_groups = {m: import_groups[m] for m in import_groups if m == self.config.package}
        third_party_groups = {
            m: import_groups[m] for m in import_groups if m not in STDLIB_MODULES and m not in local_groups and m != "__future__"
        }

        blocks = []

        # __future__ imports first
        if "__future__" in import_groups:
            blocks.append([f"from __future__ import {', '.join(sorted(import_groups['__future__']))}"])

        # Standard library
        stdlib = [f"import {module}" for module in sorted(plain_imports)]
        for module in sorted(stdlib_groups):
            stdlib.append(f"from {module} import {', '.join(sorted(stdlib_groups[module]))}")
        if stdlib:
            blocks.append(stdlib)

        # Third party
        if third_party_groups:
            blocks.append([f"from {module} import {', '.join(sorted(names))}" for module, names in sorted(third_party_groups.items())])

        if local_groups:
            blocks.append([f"from {module} import {', '.join(sorted(names))}" for module, names in sorted(local_groups.items())])

        assembled: list[str] = []
        for block in blocks:
            if assembled:
                assembled.append("")
            assembled.extend(block)
        return assembled

    def _field_default(self, field: FieldDescriptor) -> str:
        """Default assignment of a dataclass field, empty for values without default."""
        if field.is_optional:
            default = "None"
        elif field.has_default:
            default = field.default_literal
        else:
            default = None

        if field.is_renamed:
            metadata = f"metadata=config(field_name={json.dumps(field.wire_name)})"
            if default is None:
                return f" = field({metadata})"
            return f" = field(default={default}, {metadata})"
        if default is None:
            return ""
        return f" = {default}"
