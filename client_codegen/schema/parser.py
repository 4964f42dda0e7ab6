"""
Service description parser.

Parses the JSON service description into the immutable service model.
Only the structure is checked here; references between types, fields and
views are resolved (and reported) by the descriptor builder.
"""

from __future__ import annotations

from typing import Any

from ..errors import SchemaParseError
from .nodes import (
    PRIMITIVE_KINDS,
    Constraints,
    EndpointExpr,
    ErrorExpr,
    FieldExpr,
    Kind,
    ParamLocation,
    PayloadExpr,
    ResponseExpr,
    ResultExpr,
    SchemaModel,
    ServiceExpr,
    TypeExpr,
    UserTypeExpr,
    ViewExpr,
)

# JSON keys -> Constraints attribute
CONSTRAINT_KEYS = {
    "pattern": "pattern",
    "format": "format",
    "minLength": "min_length",
    "maxLength": "max_length",
    "minimum": "minimum",
    "maximum": "maximum",
}

PRIMITIVE_NAMES = {kind.value for kind in PRIMITIVE_KINDS}


class SchemaParser:
    """Parses a JSON service description into a SchemaModel."""

    def parse(self, schema: dict[str, Any]) -> SchemaModel:
        """
        Parse a service description.

        Args:
            schema: The service description as loaded from JSON

        Returns:
            The service model

        Raises:
            SchemaParseError: If the description is structurally malformed
        """
        if not isinstance(schema, dict):
            raise SchemaParseError("service description must be a JSON object")

        types = tuple(self._parse_user_type(name, body) for name, body in self._items(schema.get("types", {}), "types"))
        services = tuple(self._parse_service(s, f"services[{i}]") for i, s in enumerate(self._list(schema.get("services", []), "services")))
        return SchemaModel(services=services, types=types)

    def _parse_service(self, data: Any, path: str) -> ServiceExpr:
        data = self._object(data, path)
        name = self._name(data, path)
        endpoints = tuple(
            self._parse_endpoint(e, f"{path}.endpoints[{i}]") for i, e in enumerate(self._list(data.get("endpoints", []), f"{path}.endpoints"))
        )
        return ServiceExpr(name=name, endpoints=endpoints, description=data.get("description", ""))

    def _parse_endpoint(self, data: Any, path: str) -> EndpointExpr:
        data = self._object(data, path)
        name = self._name(data, path)
        payload = self._parse_payload(data.get("payload", {}), f"{path}.payload")
        result = self._parse_result(data.get("result", {}), f"{path}.result")
        errors = tuple(self._parse_error(e, f"{path}.errors[{i}]") for i, e in enumerate(self._list(data.get("errors", []), f"{path}.errors")))
        return EndpointExpr(
            name=name,
            payload=payload,
            result=result,
            errors=errors,
            description=data.get("description", ""),
        )

    def _parse_payload(self, data: Any, path: str) -> PayloadExpr:
        data = self._object(data, path)
        params = []
        for field_name, location in self._items(data.get("params", {}), f"{path}.params"):
            try:
                params.append((field_name, ParamLocation(location)))
            except ValueError as e:
                raise SchemaParseError(f"{path}.params.{field_name}: unknown location {location!r}") from e
        return PayloadExpr(
            type_name=data.get("type"),
            fields=self._parse_fields(data.get("fields", []), f"{path}.fields"),
            params=tuple(params),
        )

    def _parse_result(self, data: Any, path: str) -> ResultExpr:
        data = self._object(data, path)
        responses = tuple(
            self._parse_response(r, f"{path}.responses[{i}]") for i, r in enumerate(self._list(data.get("responses", []), f"{path}.responses"))
        )
        return ResultExpr(
            type_name=data.get("type"),
            fields=self._parse_fields(data.get("fields", []), f"{path}.fields"),
            view=data.get("view"),
            responses=responses,
        )

    def _parse_error(self, data: Any, path: str) -> ErrorExpr:
        data = self._object(data, path)
        name = self._name(data, path)
        response = self._parse_response(data.get("response", {"name": "", "status": 400}), f"{path}.response")
        return ErrorExpr(
            name=name,
            type_name=data.get("type"),
            fields=self._parse_fields(data.get("fields", []), f"{path}.fields"),
            response=response,
        )

    def _parse_response(self, data: Any, path: str) -> ResponseExpr:
        data = self._object(data, path)
        body = data.get("body")
        if body is not None:
            body = tuple(self._list(body, f"{path}.body"))
        status = data.get("status", 200)
        if not isinstance(status, int):
            raise SchemaParseError(f"{path}.status must be an integer")
        return ResponseExpr(
            name=data.get("name", "OK"),
            status=status,
            body=body,
            headers=tuple(self._list(data.get("headers", []), f"{path}.headers")),
        )

    def _parse_user_type(self, name: str, data: Any) -> UserTypeExpr:
        path = f"types.{name}"
        data = self._object(data, path)
        views = tuple(ViewExpr(name=view_name, fields=tuple(self._list(fields, f"{path}.views.{view_name}"))) for view_name, fields in self._items(data.get("views", {}), f"{path}.views"))
        return UserTypeExpr(
            name=name,
            fields=self._parse_fields(data.get("fields", []), f"{path}.fields"),
            views=views,
            description=data.get("description", ""),
        )

    def _parse_fields(self, data: Any, path: str) -> tuple[FieldExpr, ...]:
        return tuple(self._parse_field(f, f"{path}[{i}]") for i, f in enumerate(self._list(data, path)))

    def _parse_field(self, data: Any, path: str) -> FieldExpr:
        data = self._object(data, path)
        name = self._name(data, path)
        constraints = {attr: data[key] for key, attr in CONSTRAINT_KEYS.items() if key in data}
        if "enum" in data:
            constraints["enum"] = tuple(self._list(data["enum"], f"{path}.enum"))
        return FieldExpr(
            name=name,
            type=self.parse_type(data.get("type", "string"), f"{path}.type"),
            required=bool(data.get("required", False)),
            default=data.get("default"),
            has_default="default" in data,
            constraints=Constraints(**constraints),
            description=data.get("description", ""),
            wire_name=data.get("wireName"),
        )

    def parse_type(self, data: Any, path: str = "type") -> TypeExpr:
        """
        Parse a type expression.

        Accepted forms: a primitive name ("string", "int", ...), a user type
        name, {"array": <type>} or {"map": <type>, "key": <type>}.
        """
        if isinstance(data, str):
            if data in PRIMITIVE_NAMES:
                return TypeExpr(kind=Kind(data))
            return TypeExpr(kind=Kind.OBJECT, ref=data)
        if isinstance(data, dict):
            if "array" in data:
                return TypeExpr(kind=Kind.ARRAY, elem=self.parse_type(data["array"], f"{path}.array"))
            if "map" in data:
                key = self.parse_type(data.get("key", "string"), f"{path}.key")
                return TypeExpr(kind=Kind.MAP, key=key, elem=self.parse_type(data["map"], f"{path}.map"))
            if "object" in data:
                return TypeExpr(kind=Kind.OBJECT, ref=data["object"])
        raise SchemaParseError(f"{path}: cannot parse type expression {data!r}")

    def _name(self, data: dict, path: str) -> str:
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise SchemaParseError(f"{path}: missing name")
        return name

    def _object(self, data: Any, path: str) -> dict:
        if not isinstance(data, dict):
            raise SchemaParseError(f"{path} must be a JSON object")
        return data

    def _list(self, data: Any, path: str) -> list:
        if not isinstance(data, list):
            raise SchemaParseError(f"{path} must be a JSON array")
        return data

    def _items(self, data: Any, path: str) -> list[tuple[str, Any]]:
        return list(self._object(data, path).items())


def parse_schema(schema: dict[str, Any]) -> SchemaModel:
    """Convenience function to parse a JSON service description."""
    return SchemaParser().parse(schema)
