"""
Value-vs-optional representation policy.

The rules only discriminate values that hold primitive types. Aggregates
(objects, arrays and maps) are always referenced, never inlined, so they are
always optional.

- Payload fields are optional when not required and without default value.
- Request and response body fields are always optional so that the presence
  of each field can be validated explicitly.
- Request header, path and query parameters are optional when not required.
  Parameters with a default value are never required.
- Result fields are optional when not required or when they have a default
  value, so generated code can set the default when the value is absent.
- Response headers are optional when not required and without default value.
"""

from __future__ import annotations

from enum import Enum

from ..errors import UnsupportedFieldShape


class Representation(str, Enum):
    """How a field value is held in generated code."""

    VALUE = "value"
    OPTIONAL = "optional"


class FieldKind(str, Enum):
    PRIMITIVE = "primitive"
    AGGREGATE = "aggregate"


class FieldContext(str, Enum):
    """Where a field appears."""

    PAYLOAD = "payload"
    BODY = "body"
    PARAM = "param"
    REQUEST_HEADER = "header-request"
    RESPONSE_HEADER = "header-response"
    RESULT = "result"


def _optional_if(condition: bool) -> Representation:
    return Representation.OPTIONAL if condition else Representation.VALUE


_PRIMITIVE_RULES = {
    FieldContext.PAYLOAD: lambda required, has_default: _optional_if(not required and not has_default),
    FieldContext.BODY: lambda required, has_default: Representation.OPTIONAL,
    FieldContext.PARAM: lambda required, has_default: _optional_if(not required),
    FieldContext.REQUEST_HEADER: lambda required, has_default: _optional_if(not required),
    FieldContext.RESULT: lambda required, has_default: _optional_if(not required or has_default),
    FieldContext.RESPONSE_HEADER: lambda required, has_default: _optional_if(not required and not has_default),
}


def resolve_representation(
    required: bool,
    has_default: bool,
    kind: FieldKind | str,
    context: FieldContext | str,
    path: str = "",
) -> Representation:
    """
    Resolve the representation of a field.

    Args:
        required: Whether the field is required
        has_default: Whether the field declares a default value
        kind: "primitive" or "aggregate"
        context: Where the field appears (see FieldContext)
        path: Qualified path of the field, used in error messages

    Returns:
        Representation.VALUE or Representation.OPTIONAL

    Raises:
        UnsupportedFieldShape: If the (kind, context) pair is not covered
    """
    try:
        kind = FieldKind(kind)
        context = FieldContext(context)
    except ValueError as e:
        raise UnsupportedFieldShape(f"unsupported field shape ({kind!s}, {context!s})", path=path) from e

    if kind == FieldKind.AGGREGATE:
        return Representation.OPTIONAL

    rule = _PRIMITIVE_RULES.get(context)
    if rule is None:
        raise UnsupportedFieldShape(f"unsupported field shape ({kind.value}, {context.value})", path=path)
    return rule(bool(required), bool(has_default))
