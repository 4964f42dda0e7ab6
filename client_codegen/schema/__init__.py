"""
Service model consumed by the generator, and its JSON loader.
"""

from __future__ import annotations

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
from .parser import SchemaParser, parse_schema

__all__ = [
    "PRIMITIVE_KINDS",
    "Constraints",
    "EndpointExpr",
    "ErrorExpr",
    "FieldExpr",
    "Kind",
    "ParamLocation",
    "PayloadExpr",
    "ResponseExpr",
    "ResultExpr",
    "SchemaModel",
    "SchemaParser",
    "ServiceExpr",
    "TypeExpr",
    "UserTypeExpr",
    "ViewExpr",
    "parse_schema",
]
