"""
Go code generation backend.

Generates structs with JSON tags and conversion functions. Optional
primitives are held through pointers, objects are always referenced
through pointers, slices and maps are never pointed to.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any

from ...schema.nodes import Kind, TypeExpr
from ...utils import go_identifier
from ...validation_rules import FieldAccess
from ..descriptors import FieldDescriptor, ImportSpec
from ..pointer_policy import Representation
from .base import Assignment, CodeBackend, ObjectResolver

GOA_IMPORT = ImportSpec("goa.design/goa/v3/pkg", "goa")

GO_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)


class GoBackend(CodeBackend):
    """Go code generation backend."""

    TEMPLATE_LANG = "go"
    FILE_EXTENSION = "go"
    INDENT = "\t"
    SECTION_SEPARATOR = "\n\n"

    TYPE_MAP = {
        Kind.STRING: "string",
        Kind.INT: "int",
        Kind.INT64: "int64",
        Kind.FLOAT: "float64",
        Kind.BOOLEAN: "bool",
        Kind.BYTES: "[]byte",
        Kind.ANY: "any",
    }

    KEYWORDS = GO_KEYWORDS

    PACKAGE_NAME = "client"

    @staticmethod
    def is_pointable(type_expr: TypeExpr) -> bool:
        """Whether an optional value of the type is held through a pointer."""
        return type_expr.is_primitive and type_expr.kind not in (Kind.BYTES, Kind.ANY)

    def translate_type(self, type_expr: TypeExpr, representation: Representation, resolve: ObjectResolver) -> str:
        """Translate a type expression to a Go type string."""
        result = self._translate_type_inner(type_expr, resolve)
        if representation == Representation.OPTIONAL and self.is_pointable(type_expr):
            result = f"*{result}"
        return result

    def _translate_type_inner(self, type_expr: TypeExpr, resolve: ObjectResolver) -> str:
        if type_expr.kind == Kind.OBJECT:
            return f"*{resolve(type_expr.ref)}"
        if type_expr.kind == Kind.ARRAY:
            elem = self._translate_type_inner(type_expr.elem, resolve) if type_expr.elem else "any"
            return f"[]{elem}"
        if type_expr.kind == Kind.MAP:
            key = self._translate_type_inner(type_expr.key, resolve) if type_expr.key else "string"
            elem = self._translate_type_inner(type_expr.elem, resolve) if type_expr.elem else "any"
            return f"map[{key}]{elem}"
        return self.TYPE_MAP.get(type_expr.kind, "any")

    def format_default_value(self, value: Any, type_expr: TypeExpr) -> str:
        """Format a default value for Go."""
        if isinstance(value, bool):
            return "true" if value else "false"
        if type_expr.kind == Kind.FLOAT and isinstance(value, int):
            return json.dumps(float(value))
        return json.dumps(value)

    def reference_type(self, type_name: str) -> str:
        return f"*{type_name}"

    def function_name(self, *parts: str, exported: bool = True) -> str:
        name = "".join(go_identifier(part) for part in parts if part)
        if exported:
            return name
        return self.escape(_lower_first(name))

    def identifier(self, name: str) -> str:
        return go_identifier(name)

    def variable(self, name: str) -> str:
        return self.escape(_lower_first(go_identifier(name)))

    def type_name(self, *parts: str) -> str:
        return "".join(go_identifier(part) for part in parts)

    def build_value(self, var: str, type_name: str, assignments: Iterable[Assignment]) -> str:
        """Code constructing a value with a struct literal followed by the statements it needs."""
        fields: list[str] = []
        statements: list[str] = []
        for a in assignments:
            value = self._literal_value(a)
            if value is not None:
                fields.append(f"\t{a.target}: {value},")
            statements.extend(self._statements(var, a))
        if fields:
            code = [f"{var} := &{type_name}{{", *fields, "}"]
        else:
            code = [f"{var} := &{type_name}{{}}"]
        return "\n".join(code + statements)

    def _literal_value(self, a: Assignment) -> str | None:
        """Value set in the struct literal, None when set by statements."""
        if a.type.object_refs():
            if a.helper and a.type.kind == Kind.OBJECT:
                return f"{a.helper}({a.source})"
            if a.helper:
                return None
            return a.source
        if not self.is_pointable(a.type) or a.source_rep == a.target_rep:
            return a.source
        if a.target_rep == Representation.OPTIONAL:
            return f"&{a.source}"
        if a.default_literal is not None:
            return None
        return f"*{a.source}"

    def _statements(self, var: str, a: Assignment) -> list[str]:
        dst = f"{var}.{a.target}"
        if a.helper and a.type.object_refs() and a.type.kind != Kind.OBJECT:
            lines = [f"if {a.source} != nil {{"]
            lines.extend(f"\t{line}" for line in self._convert_block(dst, a.source, a.type, a.target_type_ref, a.helper, 0))
            lines.append("}")
            return lines
        if a.default_literal is None or a.source_rep != Representation.OPTIONAL or not self.is_pointable(a.type):
            return []
        if a.target_rep == Representation.OPTIONAL:
            return [
                f"if {a.source} == nil {{",
                f"\tvar tmp {self.TYPE_MAP[a.type.kind]} = {a.default_literal}",
                f"\t{dst} = &tmp",
                "}",
            ]
        return [
            f"if {a.source} != nil {{",
            f"\t{dst} = *{a.source}",
            "} else {",
            f"\t{dst} = {a.default_literal}",
            "}",
        ]

    def _convert_block(self, dst: str, src: str, type_expr: TypeExpr, target_ref: str, helper: str, depth: int) -> list[str]:
        """Statements converting a collection holding objects."""
        if type_expr.kind == Kind.OBJECT:
            return [f"{dst} = {helper}({src})"]
        suffix = "" if depth == 0 else str(depth)
        val = f"val{suffix}"
        if type_expr.kind == Kind.ARRAY:
            index = f"i{suffix}"
            elem_ref = target_ref[2:]
            lines = [f"{dst} = make({target_ref}, len({src}))", f"for {index}, {val} := range {src} {{"]
            inner = self._convert_block(f"{dst}[{index}]", val, type_expr.elem, elem_ref, helper, depth + 1)
        else:
            key = f"key{suffix}"
            elem_ref = target_ref[target_ref.index("]") + 1 :]
            lines = [f"{dst} = make({target_ref}, len({src}))", f"for {key}, {val} := range {src} {{"]
            if type_expr.elem.kind == Kind.OBJECT:
                inner = [f"{dst}[{key}] = {helper}({val})"]
            else:
                tmp = f"tk{suffix}"
                inner = [f"var {tmp} {elem_ref}"]
                inner.extend(self._convert_block(tmp, val, type_expr.elem, elem_ref, helper, depth + 1))
                inner.append(f"{dst}[{key}] = {tmp}")
        lines.extend(f"\t{line}" for line in inner)
        lines.append("}")
        return lines

    def field_access(self, var: str, field: FieldDescriptor, label_prefix: str) -> FieldAccess:
        expr = f"{var}.{field.identifier}"
        pointer = field.is_optional and self.is_pointable(field.type)
        nilable = pointer or (field.is_optional and field.type.kind in (Kind.OBJECT, Kind.ARRAY, Kind.MAP, Kind.BYTES, Kind.ANY))
        return FieldAccess(
            expr=expr,
            value=f"*{expr}" if pointer else expr,
            label=f"{label_prefix}.{field.wire_name}",
            guard=f"{expr} != nil" if nilable else None,
            is_string=field.type.kind == Kind.STRING,
        )

    def header_imports(self, texts: Iterable[str], slug: str, renamed_fields: bool) -> tuple[ImportSpec, ...]:
        texts = list(texts)
        imports = []
        if self._mentions(texts, r"\butf8\."):
            imports.append(ImportSpec("unicode/utf8"))
        if self._mentions(texts, rf"\b{re.escape(slug)}\."):
            imports.append(ImportSpec(f"{self.config.package}/{slug}", slug))
        if self._mentions(texts, r"\bgoa\."):
            imports.append(GOA_IMPORT)
        return tuple(imports)

    def format_imports(self, imports: Iterable[ImportSpec]) -> list[str]:
        """Assemble the Go import block, standard library first."""
        stdlib, others = [], []
        for spec in imports:
            line = f'\t"{spec.path}"' if spec.name is None else f'\t{spec.name} "{spec.path}"'
            # Standard library import paths have no domain
            if "." in spec.path.split("/")[0]:
                others.append(line)
            elif spec.name is None:
                stdlib.append(line)
            else:
                others.append(line)
        if not stdlib and not others:
            return []
        lines = ["import ("]
        lines.extend(sorted(stdlib))
        if stdlib and others:
            lines.append("")
        lines.extend(sorted(others))
        lines.append(")")
        return lines


def _lower_first(name: str) -> str:
    """Lower the leading word of an identifier, keeping initialisms whole ("IDToken" -> "idToken")."""
    match = re.match(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]+$|[A-Z]", name)
    if not match:
        return name
    return match.group(0).lower() + name[match.end() :]
