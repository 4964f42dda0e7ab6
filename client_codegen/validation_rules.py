"""
Validation rule objects that generate validation code.

Each rule represents a specific constraint declared on a field and knows
how to generate code for the different target languages. Conditions and
messages come from the per-language string templates in
validation_rules_<language>.json.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

# Regular expressions used by the Python target to check string formats
FORMAT_PATTERNS = {
    "uuid": r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
    "email": r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
    "date": r"^\d{4}-\d{2}-\d{2}$",
    "date-time": r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$",
    "ipv4": r"^((25[0-5]|2[0-4]\d|1?\d?\d)\.){3}(25[0-5]|2[0-4]\d|1?\d?\d)$",
    "ipv6": r"^[0-9a-fA-F:.]+$",
    "uri": r"^[a-zA-Z][a-zA-Z0-9+.-]*:\S*$",
    "hostname": r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$",
}

# Format constants of the Go target runtime
GO_FORMAT_CONSTANTS = {
    "uuid": "goa.FormatUUID",
    "email": "goa.FormatEmail",
    "date": "goa.FormatDate",
    "date-time": "goa.FormatDateTime",
    "ipv4": "goa.FormatIPv4",
    "ipv6": "goa.FormatIPv6",
    "uri": "goa.FormatURI",
    "hostname": "goa.FormatHostname",
}

SUPPORTED_FORMATS = frozenset(FORMAT_PATTERNS)


@dataclass(frozen=True)
class FieldAccess:
    """How generated code reaches the value of a field.

    Attributes:
        expr: Expression holding the field (e.g. "body.name" or "body.Name")
        value: Expression of the value itself (e.g. "body.name" or "*body.Name")
        label: Path used in error messages (e.g. "body.name")
        guard: Presence check for optional fields, None for values
        is_string: Whether length rules count string characters
    """

    expr: str
    value: str
    label: str
    guard: Optional[str] = None
    is_string: bool = False


class ValidationRule(ABC):
    """Base class for all validation rules"""

    # Class-level cache for loaded string templates
    _string_templates: Dict[str, Dict[str, Any]] = {}

    def __init__(self, access: FieldAccess, language: str):
        """
        Initialize a validation rule.

        Args:
            access: How generated code reaches the validated field
            language: Target language ('python' or 'go')
        """
        self.access = access
        self.language = language

    @classmethod
    def _load_string_templates(cls, language: str) -> Dict[str, Any]:
        """
        Load string templates from JSON file for the given language.
        Results are cached to avoid repeated file I/O.

        Args:
            language: Target language ('python' or 'go')

        Returns:
            Dictionary of string templates for all validation rules
        """
        if language not in cls._string_templates:
            template_file = Path(__file__).parent / f"validation_rules_{language}.json"
            with open(template_file, "r", encoding="utf-8") as f:
                cls._string_templates[language] = json.load(f)
        return cls._string_templates[language]

    def get_string(self, key: str, **format_params) -> Union[str, List, Dict]:
        """
        Get a string template for this validation rule and format it.

        Args:
            key: The string key to retrieve (e.g., 'condition', 'message')
            **format_params: Parameters to format into the string template

        Returns:
            Formatted string, list, or dict depending on the template structure
        """
        templates = self._load_string_templates(self.language)
        class_name = self.__class__.__name__

        if class_name not in templates:
            raise KeyError(f"No string templates found for {class_name} in {self.language}")

        rule_templates = templates[class_name]

        if key not in rule_templates:
            raise KeyError(f"Key '{key}' not found in templates for {class_name}")

        return self._format_template(rule_templates[key], format_params)

    def has_string(self, key: str) -> bool:
        templates = self._load_string_templates(self.language)
        return key in templates.get(self.__class__.__name__, {})

    def _format_template(self, template, format_params: dict):
        """
        Recursively format a template that can be a string, list, or dict.
        """
        if isinstance(template, str):
            return template.format(**format_params)
        elif isinstance(template, list):
            return [self._format_template(item, format_params) for item in template]
        elif isinstance(template, dict):
            return {k: self._format_template(v, format_params) for k, v in template.items()}
        else:
            return template

    def format_validation_code(self, condition: str, params: Dict[str, Any]) -> List[str]:
        """
        Format validation code using language-specific templates.

        Args:
            condition: The condition to check (empty when the check is unconditional)
            params: Parameters for the error templates

        Returns:
            List of formatted code lines
        """
        template = self._load_string_templates(self.language).get("_template", {})

        guard = self.access.guard if self.apply_guard() else None
        if guard and condition:
            condition = template["guard"].format(guard=guard, condition=condition)
        elif guard:
            condition = guard

        error_params = dict(params)
        if self.has_string("message"):
            error_params["message_literal"] = json.dumps(self.get_string("message", **params))
        if self.has_string("error"):
            error_params["error"] = self.get_string("error", **params)

        if not condition:
            return [template["unconditional_line"].format(**error_params)]

        lines = [
            template["if_line"].format(condition=condition),
            template["raise_line"].format(**error_params),
        ]
        if "end_line" in template:
            lines.append(template["end_line"])
        return lines

    def get_field_params(self) -> Dict[str, Any]:
        """
        Get parameters describing the validated field.

        Returns:
            Dictionary with field-related parameters for the templates
        """
        context, _, name = self.access.label.rpartition(".")
        return {
            "expr": self.access.expr,
            "target": self.access.value,
            "label": self.access.label,
            "label_literal": json.dumps(self.access.label),
            "name_literal": json.dumps(name),
            "context_literal": json.dumps(context),
        }

    @abstractmethod
    def get_template_params(self) -> Dict[str, Any]:
        """
        Get rule-specific parameters for template formatting.
        Should return parameters needed by condition and error templates.

        Returns:
            Dictionary with parameters specific to this validation rule
        """
        pass

    def apply_guard(self) -> bool:
        """
        Override to indicate if the presence guard should wrap the condition.
        Default is True: constraints only apply to present values.
        """
        return True

    def literal(self, value: Any) -> str:
        """Format a value as a literal of the target language."""
        if self.language == "python":
            return repr(value)
        return json.dumps(value)

    def length_expr(self) -> str:
        template = self._load_string_templates(self.language)["_template"]
        key = "string_length" if self.access.is_string else "collection_length"
        return template[key].format(target=self.access.value)

    def generate_code(self) -> List[str]:
        """
        Generate validation code lines for this rule.
        Uses templates from JSON and parameters from get_template_params().
        """
        params = self.get_field_params()
        params.update(self.get_template_params())

        condition = self.get_string("condition", **params)
        if not isinstance(condition, str):
            raise TypeError(f"Expected condition to be a string, got {type(condition)}")

        return self.format_validation_code(condition, params)


class RequiredRule(ValidationRule):
    """Validates that a field is present"""

    def apply_guard(self) -> bool:
        return False

    def get_template_params(self) -> Dict[str, Any]:
        return {}


class PatternRule(ValidationRule):
    """Validates that a string matches a regex pattern"""

    def __init__(self, access: FieldAccess, language: str, pattern: str):
        super().__init__(access, language)
        self.pattern = pattern

    def get_template_params(self) -> Dict[str, Any]:
        return {"pattern": self.pattern, "pattern_literal": json.dumps(self.pattern)}


class FormatRule(ValidationRule):
    """Validates that a string follows a well-known format"""

    def __init__(self, access: FieldAccess, language: str, format_name: str):
        super().__init__(access, language)
        if format_name not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {format_name}")
        self.format_name = format_name

    def get_template_params(self) -> Dict[str, Any]:
        return {
            "format": self.format_name,
            "pattern_literal": json.dumps(FORMAT_PATTERNS[self.format_name]),
            "format_constant": GO_FORMAT_CONSTANTS[self.format_name],
        }


class MinLengthRule(ValidationRule):
    """Validates minimum string or collection length"""

    def __init__(self, access: FieldAccess, language: str, min_length: int):
        super().__init__(access, language)
        self.min_length = min_length

    def get_template_params(self) -> Dict[str, Any]:
        return {"min_length": self.min_length, "length": self.length_expr()}


class MaxLengthRule(ValidationRule):
    """Validates maximum string or collection length"""

    def __init__(self, access: FieldAccess, language: str, max_length: int):
        super().__init__(access, language)
        self.max_length = max_length

    def get_template_params(self) -> Dict[str, Any]:
        return {"max_length": self.max_length, "length": self.length_expr()}


class MinimumRule(ValidationRule):
    """Validates minimum numeric value"""

    def __init__(self, access: FieldAccess, language: str, minimum: float):
        super().__init__(access, language)
        self.minimum = minimum

    def get_template_params(self) -> Dict[str, Any]:
        return {"minimum": self.minimum}


class MaximumRule(ValidationRule):
    """Validates maximum numeric value"""

    def __init__(self, access: FieldAccess, language: str, maximum: float):
        super().__init__(access, language)
        self.maximum = maximum

    def get_template_params(self) -> Dict[str, Any]:
        return {"maximum": self.maximum}


class EnumRule(ValidationRule):
    """Validates that a value is in an enum"""

    def __init__(self, access: FieldAccess, language: str, enum_values: List[Any]):
        super().__init__(access, language)
        self.enum_values = list(enum_values)

    def get_template_params(self) -> Dict[str, Any]:
        values = [self.literal(v) for v in self.enum_values]
        return {
            "values": ", ".join(values),
            "alternatives": " || ".join(f"{self.access.value} == {v}" for v in values),
        }


class NestedValidationRule(ValidationRule):
    """Runs the validation function of a nested body attribute type"""

    def __init__(self, access: FieldAccess, language: str, validator: str, container: Optional[str] = None):
        """
        Args:
            access: How generated code reaches the field
            language: Target language
            validator: Name of the validation function of the nested type
            container: None for a single value, "array" or "map" for collections
        """
        super().__init__(access, language)
        self.validator = validator
        self.container = container

    def get_template_params(self) -> Dict[str, Any]:
        return {"validator": self.validator}

    def generate_code(self) -> List[str]:
        # Nested validation iterates collections, not the standard if/raise pattern
        expr = self.access.expr
        if self.language == "python":
            if self.container == "array":
                return [
                    f"for item in {expr} or []:",
                    "    if item is not None:",
                    f"        {self.validator}(item)",
                ]
            if self.container == "map":
                return [
                    f"for item in ({expr} or {{}}).values():",
                    "    if item is not None:",
                    f"        {self.validator}(item)",
                ]
            return [
                f"if {expr} is not None:",
                f"    {self.validator}({expr})",
            ]
        if self.container in ("array", "map"):
            return [
                f"for _, e := range {expr} {{",
                "\tif e != nil {",
                f"\t\tif err2 := {self.validator}(e); err2 != nil {{",
                "\t\t\terr = goa.MergeErrors(err, err2)",
                "\t\t}",
                "\t}",
                "}",
            ]
        return [
            f"if {expr} != nil {{",
            f"\tif err2 := {self.validator}({expr}); err2 != nil {{",
            "\t\terr = goa.MergeErrors(err, err2)",
            "\t}",
            "}",
        ]
