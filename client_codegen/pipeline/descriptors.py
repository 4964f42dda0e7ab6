"""
Descriptor definitions.

Descriptors are the plan objects produced from the service model: each one
describes one unit of code to emit. They are built once per run and are
read-only afterwards, every sequence is a tuple so ordering can never change
after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..schema.nodes import Constraints, TypeExpr
from .pointer_policy import Representation


class BodyContext(str, Enum):
    """Owning context of a body type."""

    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"


class SectionKind(str, Enum):
    """Kind of an emission section."""

    HEADER = "header"
    TYPE_DECLARATION = "type-declaration"
    BODY_CONSTRUCTOR = "body-constructor"
    RESULT_CONSTRUCTOR = "result-constructor"
    EXPANDED_TYPE = "expanded-type"  # One view-conversion function
    TRANSFORM_HELPER = "transform-helper"
    VALIDATOR = "validator"
    EXPANDED_TYPE_VALIDATOR = "expanded-type-validator"


@dataclass(frozen=True)
class ImportSpec:
    """An import of the generated artifact."""

    path: str = ""
    name: str | None = None  # Imported name (Python) or package alias (Go)


@dataclass(frozen=True)
class FieldDescriptor:
    """A field with its resolved representation."""

    name: str = ""  # Attribute name in the service model
    identifier: str = ""  # Identifier in generated code
    wire_name: str = ""  # Name on the wire
    type: TypeExpr | None = None
    type_ref: str = ""  # Rendered type reference, representation applied
    representation: Representation = Representation.OPTIONAL
    required: bool = False
    default: Any = None
    has_default: bool = False
    default_literal: str = ""  # Rendered default value
    constraints: Constraints = field(default_factory=Constraints)
    description: str = ""

    @property
    def is_optional(self) -> bool:
        return self.representation == Representation.OPTIONAL

    @property
    def is_renamed(self) -> bool:
        return self.identifier != self.wire_name


@dataclass(frozen=True)
class ArgumentDescriptor:
    """A constructor argument."""

    name: str = ""
    type_ref: str = ""
    representation: Representation = Representation.VALUE

    # Identifier of the target field the argument is bound to (if any)
    field_name: str | None = None


@dataclass(frozen=True)
class InitDescriptor:
    """A constructor building a body or a result from its arguments."""

    name: str = ""
    description: str = ""
    args: tuple[ArgumentDescriptor, ...] = ()
    return_type_name: str = ""
    return_type_ref: str = ""
    return_var: str = "v"
    code: str = ""

    # Local type names the constructor refers to
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidateDescriptor:
    """A validation function bound to one type."""

    name: str = ""
    type_name: str = ""
    type_ref: str = ""
    var: str = "body"  # Name of the validated argument
    code: str = ""
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class BodyDescriptor:
    """A request, response or error body type (or a shared body attribute type)."""

    context: BodyContext = BodyContext.REQUEST
    type_name: str = ""
    description: str = ""
    fields: tuple[FieldDescriptor, ...] = ()
    init: InitDescriptor | None = None
    validate: ValidateDescriptor | None = None

    # Whether this is a shared body attribute type referenced by nested fields
    is_attribute: bool = False

    # Local type names the declaration refers to
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class PayloadDescriptor:
    type_name: str = ""
    type_ref: str = ""
    fields: tuple[FieldDescriptor, ...] = ()

    # Path, query string and header parameters
    params: tuple[FieldDescriptor, ...] = ()
    body: BodyDescriptor | None = None


@dataclass(frozen=True)
class ResponseDescriptor:
    name: str = ""
    status: int = 200
    body: BodyDescriptor | None = None
    headers: tuple[FieldDescriptor, ...] = ()

    # Constructor of the result (or error) value from the response
    result_init: InitDescriptor | None = None


@dataclass(frozen=True)
class ResultDescriptor:
    type_name: str = ""
    type_ref: str = ""
    fields: tuple[FieldDescriptor, ...] = ()
    view: str | None = None
    responses: tuple[ResponseDescriptor, ...] = ()


@dataclass(frozen=True)
class ErrorDescriptor:
    name: str = ""
    type_name: str = ""
    type_ref: str = ""
    fields: tuple[FieldDescriptor, ...] = ()
    response: ResponseDescriptor = field(default_factory=ResponseDescriptor)


@dataclass(frozen=True)
class EndpointDescriptor:
    name: str = ""
    payload: PayloadDescriptor = field(default_factory=PayloadDescriptor)
    result: ResultDescriptor = field(default_factory=ResultDescriptor)
    errors: tuple[ErrorDescriptor, ...] = ()


@dataclass(frozen=True)
class ViewDescriptor:
    """Conversion of an expanded type to the result type of one view."""

    name: str = ""  # View name
    function_name: str = ""
    expanded_type_ref: str = ""  # Type of the converted argument
    result_type_name: str = ""
    result_type_ref: str = ""
    fields: tuple[str, ...] = ()
    code: str = ""
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExpandedTypeDescriptor:
    """A type rendered with one conversion function per declared view."""

    type_name: str = ""
    base_type: str = ""  # Name of the user type the views project
    description: str = ""
    fields: tuple[FieldDescriptor, ...] = ()
    views: tuple[ViewDescriptor, ...] = ()
    validate: ValidateDescriptor | None = None
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class TransformHelperDescriptor:
    """A conversion routine shared by several constructors and helpers."""

    name: str = ""
    description: str = ""
    source_type_ref: str = ""
    target_type_ref: str = ""
    code: str = ""
    references: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return self.name


@dataclass(frozen=True)
class HeaderDescriptor:
    service_name: str = ""
    title: str = ""
    package_name: str = ""
    generation_comment: str = ""
    imports: tuple[ImportSpec, ...] = ()


@dataclass(frozen=True)
class ServiceDescriptor:
    """Everything needed to emit the client types of one service."""

    name: str = ""
    slug: str = ""
    endpoints: tuple[EndpointDescriptor, ...] = ()
    attribute_types: tuple[BodyDescriptor, ...] = ()
    expanded_types: tuple[ExpandedTypeDescriptor, ...] = ()
    helpers: tuple[TransformHelperDescriptor, ...] = ()
    header: HeaderDescriptor = field(default_factory=HeaderDescriptor)


@dataclass(frozen=True)
class Section:
    """One planned emission section."""

    kind: SectionKind = SectionKind.HEADER
    name: str = ""  # Identity of the descriptor (type or function name)
    descriptor: Any = None


@dataclass(frozen=True)
class Artifact:
    """The generated source text of one service."""

    service: str = ""
    path: str = ""
    text: str = ""
