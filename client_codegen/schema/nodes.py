"""
Service model node definitions.

These nodes describe the services, endpoints and user types of an API as
read from the service description. They are immutable: the generator only
ever consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Kind(str, Enum):
    """Kind of a type expression."""

    STRING = "string"
    INT = "int"
    INT64 = "int64"
    FLOAT = "float"
    BOOLEAN = "boolean"
    BYTES = "bytes"
    ANY = "any"
    OBJECT = "object"  # Reference to a user type
    ARRAY = "array"
    MAP = "map"


PRIMITIVE_KINDS = frozenset(
    {
        Kind.STRING,
        Kind.INT,
        Kind.INT64,
        Kind.FLOAT,
        Kind.BOOLEAN,
        Kind.BYTES,
        Kind.ANY,
    }
)


class ParamLocation(str, Enum):
    """Where a payload field travels when it is not part of the request body."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"


@dataclass(frozen=True)
class TypeExpr:
    """A type expression."""

    kind: Kind = Kind.STRING
    ref: str | None = None  # User type name (OBJECT)
    elem: TypeExpr | None = None  # Element / value type (ARRAY, MAP)
    key: TypeExpr | None = None  # Key type (MAP)

    @property
    def is_primitive(self) -> bool:
        return self.kind in PRIMITIVE_KINDS

    def object_refs(self) -> list[str]:
        """Names of the user types reachable through this expression."""
        if self.kind == Kind.OBJECT and self.ref:
            return [self.ref]
        if self.elem is not None:
            return self.elem.object_refs()
        return []

    def signature(self) -> str:
        """Structural signature of the type expression."""
        if self.kind == Kind.OBJECT:
            return f"object<{self.ref}>"
        if self.kind == Kind.ARRAY:
            return f"array<{self.elem.signature() if self.elem else 'any'}>"
        if self.kind == Kind.MAP:
            key = self.key.signature() if self.key else "string"
            return f"map<{key},{self.elem.signature() if self.elem else 'any'}>"
        return self.kind.value


@dataclass(frozen=True)
class Constraints:
    """Validation constraints attached to a field."""

    pattern: str | None = None
    format: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    enum: tuple[Any, ...] = ()


@dataclass(frozen=True)
class FieldExpr:
    """A field of a user type, payload, result or error."""

    name: str = ""
    type: TypeExpr = field(default_factory=TypeExpr)
    required: bool = False
    default: Any = None
    has_default: bool = False
    constraints: Constraints = field(default_factory=Constraints)
    description: str = ""

    # Name used on the wire when it differs from the attribute name
    wire_name: str | None = None

    @property
    def body_name(self) -> str:
        return self.wire_name or self.name


@dataclass(frozen=True)
class ViewExpr:
    """A named projection of a user type."""

    name: str = ""
    fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class UserTypeExpr:
    """A named object type."""

    name: str = ""
    fields: tuple[FieldExpr, ...] = ()
    views: tuple[ViewExpr, ...] = ()
    description: str = ""

    def field(self, name: str) -> FieldExpr | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def view(self, name: str) -> ViewExpr | None:
        for v in self.views:
            if v.name == name:
                return v
        return None


@dataclass(frozen=True)
class PayloadExpr:
    """The data a caller supplies when invoking an endpoint."""

    type_name: str | None = None
    fields: tuple[FieldExpr, ...] = ()

    # Payload field name -> location, for fields not carried in the body
    params: tuple[tuple[str, ParamLocation], ...] = ()

    def param_location(self, name: str) -> ParamLocation | None:
        for param_name, location in self.params:
            if param_name == name:
                return location
        return None


@dataclass(frozen=True)
class ResponseExpr:
    """One HTTP response of an endpoint."""

    name: str = "OK"
    status: int = 200

    # Result field names carried in the body (None = all non-header fields)
    body: tuple[str, ...] | None = None
    headers: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResultExpr:
    """The data an endpoint returns on success."""

    type_name: str | None = None
    fields: tuple[FieldExpr, ...] = ()
    view: str | None = None
    responses: tuple[ResponseExpr, ...] = ()


@dataclass(frozen=True)
class ErrorExpr:
    """A named error an endpoint may return."""

    name: str = ""
    type_name: str | None = None
    fields: tuple[FieldExpr, ...] = ()
    response: ResponseExpr = field(default_factory=lambda: ResponseExpr(name="", status=400))


@dataclass(frozen=True)
class EndpointExpr:
    """An endpoint of a service."""

    name: str = ""
    payload: PayloadExpr = field(default_factory=PayloadExpr)
    result: ResultExpr = field(default_factory=ResultExpr)
    errors: tuple[ErrorExpr, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class ServiceExpr:
    """A service exposing endpoints over HTTP."""

    name: str = ""
    endpoints: tuple[EndpointExpr, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class SchemaModel:
    """Root of the service model."""

    services: tuple[ServiceExpr, ...] = ()
    types: tuple[UserTypeExpr, ...] = ()

    def user_type(self, name: str) -> UserTypeExpr | None:
        for user_type in self.types:
            if user_type.name == name:
                return user_type
        return None

    def service(self, name: str) -> ServiceExpr | None:
        for service in self.services:
            if service.name == name:
                return service
        return None
