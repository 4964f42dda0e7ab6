"""
Validation code generator for field constraints.

This module generates runtime validation code based on the constraints
declared on body fields for both Python and Go targets using validation
rule objects.
"""

from typing import List, Optional

from .schema.nodes import Constraints, Kind, TypeExpr
from .validation_rules import (
    EnumRule,
    FieldAccess,
    FormatRule,
    MaximumRule,
    MaxLengthRule,
    MinimumRule,
    MinLengthRule,
    NestedValidationRule,
    PatternRule,
    RequiredRule,
    ValidationRule,
)

NUMERIC_KINDS = frozenset({Kind.INT, Kind.INT64, Kind.FLOAT})
SIZED_KINDS = frozenset({Kind.STRING, Kind.BYTES, Kind.ARRAY, Kind.MAP})


class ValidationGenerator:
    """Generate validation code from field constraints using rule objects"""

    def __init__(self, language: str):
        """
        Initialize the validation generator.

        Args:
            language: Target language ('python' or 'go')
        """
        self.language = language

    def generate_field_validation(
        self,
        access: FieldAccess,
        type_expr: TypeExpr,
        required: bool,
        constraints: Constraints,
        nested_validator: Optional[str] = None,
    ) -> List[str]:
        """
        Generate validation code for a single field.

        Args:
            access: How generated code reaches the field
            type_expr: Type of the field
            required: Whether the field must be present
            constraints: Constraints declared on the field
            nested_validator: Validation function of the referenced body type, if it validates

        Returns:
            List of validation code lines
        """
        rules = self.create_rules(access, type_expr, required, constraints, nested_validator)

        # Generate code from all rules
        code_lines = []
        for rule in rules:
            code_lines.extend(rule.generate_code())

        return code_lines

    def create_rules(
        self,
        access: FieldAccess,
        type_expr: TypeExpr,
        required: bool,
        constraints: Constraints,
        nested_validator: Optional[str] = None,
    ) -> List[ValidationRule]:
        """Create the validation rules of a field in declaration order"""
        rules: List[ValidationRule] = []

        if required:
            rules.append(RequiredRule(access, self.language))

        kind = type_expr.kind

        if kind == Kind.STRING:
            if constraints.pattern is not None:
                rules.append(PatternRule(access, self.language, constraints.pattern))
            if constraints.format is not None:
                rules.append(FormatRule(access, self.language, constraints.format))

        if kind in SIZED_KINDS:
            if constraints.min_length is not None:
                rules.append(MinLengthRule(access, self.language, constraints.min_length))
            if constraints.max_length is not None:
                rules.append(MaxLengthRule(access, self.language, constraints.max_length))

        if kind in NUMERIC_KINDS:
            if constraints.minimum is not None:
                rules.append(MinimumRule(access, self.language, constraints.minimum))
            if constraints.maximum is not None:
                rules.append(MaximumRule(access, self.language, constraints.maximum))

        if constraints.enum and type_expr.is_primitive:
            rules.append(EnumRule(access, self.language, list(constraints.enum)))

        if nested_validator:
            container = kind.value if kind in (Kind.ARRAY, Kind.MAP) else None
            rules.append(NestedValidationRule(access, self.language, nested_validator, container))

        return rules

    def has_rules(self, type_expr: TypeExpr, required: bool, constraints: Constraints) -> bool:
        """Whether a field carries at least one constraint of its own"""
        return bool(self.create_rules(_ANY_FIELD, type_expr, required, constraints))


_ANY_FIELD = FieldAccess(expr="", value="", label="field")
