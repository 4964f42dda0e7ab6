"""
Body descriptor builder.

Turns the endpoints of one service into emission-ready descriptors: the
request body, the body of every declared response and error response,
the constructors converting between payloads, bodies and results, the
validators of the bodies, the body types shared by nested fields, the
transform helpers converting service types to and from those body types,
and the expanded types of results that declare views.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

from ..errors import GenerationError, SchemaInconsistency, UnsupportedFieldShape
from ..schema.nodes import (
    EndpointExpr,
    ErrorExpr,
    FieldExpr,
    Kind,
    ParamLocation,
    ResponseExpr,
    SchemaModel,
    ServiceExpr,
    TypeExpr,
    UserTypeExpr,
    ViewExpr,
)
from ..utils import snake_case
from ..validation_rules import SUPPORTED_FORMATS
from ..validator import ValidationGenerator
from .backends.base import Assignment, CodeBackend
from .descriptors import (
    ArgumentDescriptor,
    BodyContext,
    BodyDescriptor,
    EndpointDescriptor,
    ErrorDescriptor,
    ExpandedTypeDescriptor,
    FieldDescriptor,
    HeaderDescriptor,
    InitDescriptor,
    PayloadDescriptor,
    ResponseDescriptor,
    ResultDescriptor,
    ServiceDescriptor,
    TransformHelperDescriptor,
    ValidateDescriptor,
    ViewDescriptor,
)
from .pointer_policy import FieldContext, FieldKind, Representation, resolve_representation

logger = logging.getLogger(__name__)

# Contexts in which a field travels outside of a body
_OUT_OF_BODY_CONTEXTS = (FieldContext.PARAM, FieldContext.REQUEST_HEADER, FieldContext.RESPONSE_HEADER)

_BODY_SUFFIX = {
    BodyContext.REQUEST: "RequestBody",
    BodyContext.RESPONSE: "ResponseBody",
}


@dataclass
class _ServiceState:
    """Mutable bookkeeping of the descriptors built for one service."""

    service: ServiceExpr
    slug: str

    # Shared body attribute types by shape key, reserved before they are built
    attributes: dict[tuple, BodyDescriptor | None] = field(default_factory=dict)

    # Transform helpers by name, reserved before they are built
    helpers: dict[str, TransformHelperDescriptor | None] = field(default_factory=dict)

    # Expanded types by user type name
    expanded: dict[str, ExpandedTypeDescriptor] = field(default_factory=dict)

    # Whether the body types of a user type validate, by user type name
    validates: dict[str, bool] = field(default_factory=dict)


def _validated_ref(type_expr: TypeExpr) -> str | None:
    """User type whose validator runs on values of the given type."""
    if type_expr.kind == Kind.OBJECT:
        return type_expr.ref
    if type_expr.kind in (Kind.ARRAY, Kind.MAP) and type_expr.elem is not None and type_expr.elem.kind == Kind.OBJECT:
        return type_expr.elem.ref
    return None


def _shapes_differ(args: Sequence[tuple[str, str, str, Representation]], targets: Sequence[FieldDescriptor]) -> bool:
    """
    Whether constructor arguments differ structurally from the fields they build.

    Args:
        args: (name, wire name, type reference, representation) of each argument
        targets: Fields of the constructed type

    Returns:
        True on differing arity, names, type references or representations
    """
    if len(args) != len(targets):
        return True
    for arg, target in zip(args, targets):
        if arg != (target.name, target.wire_name, target.type_ref, target.representation):
            return True
    return False


def _arg_shape(f: FieldDescriptor) -> tuple[str, str, str, Representation]:
    return (f.name, f.wire_name, f.type_ref, f.representation)


class BodyDescriptorBuilder:
    """Builds the descriptors of the client types of a service."""

    def __init__(self, model: SchemaModel, backend: CodeBackend, generation_comment: str = ""):
        """
        Args:
            model: The service model
            backend: Backend of the target language
            generation_comment: Comment placed at the top of every artifact
        """
        self.model = model
        self.backend = backend
        self.generation_comment = generation_comment
        self.validation = ValidationGenerator(backend.TEMPLATE_LANG)

    def build(self, service: ServiceExpr) -> ServiceDescriptor:
        """
        Build the descriptors of one service.

        Raises:
            SchemaInconsistency: If a referenced type, field or view is absent
            UnsupportedFieldShape: If a field cannot be represented
        """
        state = _ServiceState(service=service, slug=snake_case(service.name))
        endpoints = []
        for endpoint in service.endpoints:
            try:
                endpoints.append(self._build_endpoint(state, endpoint))
            except GenerationError as e:
                raise e.with_context(service.name, endpoint.name)

        attribute_types = tuple(d for d in state.attributes.values() if d is not None)
        helpers = tuple(h for h in state.helpers.values() if h is not None)
        expanded_types = tuple(state.expanded.values())
        header = self._build_header(state, endpoints, attribute_types, expanded_types, helpers)

        logger.debug(
            "Built descriptors of service %s: %d endpoints, %d attribute types, %d helpers, %d expanded types",
            service.name,
            len(endpoints),
            len(attribute_types),
            len(helpers),
            len(expanded_types),
        )
        return ServiceDescriptor(
            name=service.name,
            slug=state.slug,
            endpoints=tuple(endpoints),
            attribute_types=attribute_types,
            expanded_types=expanded_types,
            helpers=helpers,
            header=header,
        )

    # Endpoints

    def _build_endpoint(self, state: _ServiceState, endpoint: EndpointExpr) -> EndpointDescriptor:
        payload = self._payload(state, endpoint)
        result = self._result(state, endpoint)
        errors = tuple(self._error(state, endpoint, e) for e in endpoint.errors)
        return EndpointDescriptor(name=endpoint.name, payload=payload, result=result, errors=errors)

    def _payload(self, state: _ServiceState, endpoint: EndpointExpr) -> PayloadDescriptor:
        payload = endpoint.payload
        path = f"{endpoint.name}.payload"
        field_exprs = self._fields_of(payload.type_name, payload.fields, path)

        names = {f.name for f in field_exprs}
        for param_name, _ in payload.params:
            if param_name not in names:
                raise SchemaInconsistency(f"parameter {param_name!r} names no payload field", path=f"{path}.{param_name}")

        payload_fields = tuple(self._field(state, f, FieldContext.PAYLOAD, None, f"{path}.{f.name}") for f in field_exprs)

        params = []
        body_exprs = []
        for f in field_exprs:
            location = payload.param_location(f.name)
            if location is None:
                body_exprs.append(f)
                continue
            context = FieldContext.REQUEST_HEADER if location == ParamLocation.HEADER else FieldContext.PARAM
            params.append(self._field(state, f, context, None, f"{path}.{f.name}"))

        body = None
        if body_exprs:
            if payload.type_name and not payload.params:
                type_name = self.backend.type_name(payload.type_name, "RequestBody")
            else:
                type_name = self.backend.type_name(endpoint.name, "RequestBody")
            body_names = {f.name for f in body_exprs}
            args = [f for f in payload_fields if f.name in body_names]
            body = self._request_body(state, endpoint, type_name, body_exprs, args, path)

        return PayloadDescriptor(
            type_name=payload.type_name or "",
            type_ref=self._service_ref(state, payload.type_name) if payload.type_name else "",
            fields=payload_fields,
            params=tuple(params),
            body=body,
        )

    def _request_body(
        self,
        state: _ServiceState,
        endpoint: EndpointExpr,
        type_name: str,
        body_exprs: list[FieldExpr],
        args: list[FieldDescriptor],
        path: str,
    ) -> BodyDescriptor:
        # Client request bodies are encoded from the payload and follow its representation rules
        fields = tuple(self._field(state, f, FieldContext.PAYLOAD, BodyContext.REQUEST, f"{path}.{f.name}") for f in body_exprs)
        return BodyDescriptor(
            context=BodyContext.REQUEST,
            type_name=type_name,
            description=(
                f'{type_name} is the type of the "{state.service.name}" service "{endpoint.name}" endpoint HTTP request body.'
            ),
            fields=fields,
            init=self._body_init(state, endpoint, type_name, args, fields),
            validate=self._validator(state, type_name, fields, "body", BodyContext.REQUEST),
            references=self._references(fields, BodyContext.REQUEST),
        )

    def _body_init(
        self,
        state: _ServiceState,
        endpoint: EndpointExpr,
        body_type: str,
        args: list[FieldDescriptor],
        fields: tuple[FieldDescriptor, ...],
    ) -> InitDescriptor:
        """Constructor wrapping the payload arguments into the request body."""
        name = self.backend.function_name("new", endpoint.name, "request", "body")
        arguments = []
        assignments = []
        for arg, target in zip(args, fields):
            var = self.backend.variable(arg.name)
            arguments.append(ArgumentDescriptor(var, arg.type_ref, arg.representation, target.identifier))
            assignments.append(
                Assignment(
                    target=target.identifier,
                    source=var,
                    type=target.type,
                    target_type_ref=target.type_ref,
                    source_rep=arg.representation,
                    target_rep=target.representation,
                    helper=self._marshal_helper_for(state, target.type),
                )
            )
        return InitDescriptor(
            name=name,
            description=(
                f'{name} builds the HTTP request body from the payload of the "{endpoint.name}" endpoint '
                f'of the "{state.service.name}" service.'
            ),
            args=tuple(arguments),
            return_type_name=body_type,
            return_type_ref=self.backend.reference_type(body_type),
            return_var="body",
            code=self.backend.build_value("body", body_type, assignments),
            references=(body_type,),
        )

    def _result(self, state: _ServiceState, endpoint: EndpointExpr) -> ResultDescriptor:
        result = endpoint.result
        path = f"{endpoint.name}.result"
        field_exprs = self._fields_of(result.type_name, result.fields, path)
        user_type = self.model.user_type(result.type_name) if result.type_name else None

        expanded = None
        if user_type is not None and user_type.views:
            if result.view and user_type.view(result.view) is None:
                raise SchemaInconsistency(f"result selects unknown view {result.view!r}", path=f"{path}.view")
            expanded = self._expanded_type(state, user_type)
        elif result.view:
            raise SchemaInconsistency(f"result selects view {result.view!r} of a type without views", path=f"{path}.view")

        result_fields = tuple(self._field(state, f, FieldContext.RESULT, None, f"{path}.{f.name}") for f in field_exprs)
        target_name = result.type_name or self.backend.type_name(endpoint.name, "Result")

        response_exprs = result.responses
        if not response_exprs and field_exprs:
            response_exprs = (ResponseExpr(),)

        responses = []
        for response in response_exprs:
            response_path = f"{path}.responses.{response.name}"
            body_exprs, header_exprs = self._response_layout(field_exprs, response, response_path)
            if result.type_name and not header_exprs and len(body_exprs) == len(field_exprs):
                body_type = self.backend.type_name(result.type_name, "ResponseBody")
            elif len(response_exprs) == 1:
                body_type = self.backend.type_name(endpoint.name, "ResponseBody")
            else:
                body_type = self.backend.type_name(endpoint.name, response.name, "ResponseBody")
            init_name = self.backend.function_name("new", endpoint.name, result.type_name or "result", response.name)
            description = (
                f'{init_name} builds a "{state.service.name}" service "{endpoint.name}" endpoint result '
                f'from a HTTP "{response.name}" response.'
            )
            responses.append(
                self._response(
                    state,
                    response,
                    response_path,
                    body_exprs,
                    header_exprs,
                    body_type,
                    BodyContext.RESPONSE,
                    f'{body_type} is the type of the "{state.service.name}" service "{endpoint.name}" endpoint HTTP response body.',
                    init_name,
                    description,
                    target_name,
                    result_fields,
                    expanded,
                )
            )

        return ResultDescriptor(
            type_name=target_name if field_exprs else "",
            type_ref=self._service_ref(state, target_name) if field_exprs else "",
            fields=result_fields,
            view=result.view,
            responses=tuple(responses),
        )

    def _error(self, state: _ServiceState, endpoint: EndpointExpr, error: ErrorExpr) -> ErrorDescriptor:
        path = f"{endpoint.name}.errors.{error.name}"
        field_exprs = self._fields_of(error.type_name, error.fields, path)
        error_fields = tuple(self._field(state, f, FieldContext.RESULT, None, f"{path}.{f.name}") for f in field_exprs)
        target_name = error.type_name or self.backend.type_name(endpoint.name, error.name, "Error")

        body_exprs, header_exprs = self._response_layout(field_exprs, error.response, path)
        body_type = self.backend.type_name(endpoint.name, error.name, "ResponseBody")
        init_name = self.backend.function_name("new", endpoint.name, error.name)
        response = self._response(
            state,
            error.response,
            path,
            body_exprs,
            header_exprs,
            body_type,
            BodyContext.ERROR,
            (
                f'{body_type} is the type of the "{state.service.name}" service '
                f'"{endpoint.name}" endpoint HTTP response body for the "{error.name}" error.'
            ),
            init_name,
            f'{init_name} builds a "{state.service.name}" service "{endpoint.name}" endpoint "{error.name}" error from a HTTP response.',
            target_name,
            error_fields,
        )
        return ErrorDescriptor(
            name=error.name,
            type_name=target_name,
            type_ref=self._service_ref(state, target_name),
            fields=error_fields,
            response=response,
        )

    def _response_layout(
        self, field_exprs: tuple[FieldExpr, ...], response: ResponseExpr, path: str
    ) -> tuple[list[FieldExpr], list[FieldExpr]]:
        """Split the result fields into the fields of the body and of the headers of a response."""
        by_name = {f.name: f for f in field_exprs}
        for name in response.headers:
            if name not in by_name:
                raise SchemaInconsistency(f"response header {name!r} names no result field", path=f"{path}.headers.{name}")
        if response.body is None:
            body_names = [f.name for f in field_exprs if f.name not in response.headers]
        else:
            body_names = list(response.body)
            for name in body_names:
                if name not in by_name:
                    raise SchemaInconsistency(f"response body names unknown field {name!r}", path=f"{path}.body.{name}")
        return [by_name[name] for name in body_names], [by_name[name] for name in response.headers]

    def _response(
        self,
        state: _ServiceState,
        response: ResponseExpr,
        path: str,
        body_exprs: list[FieldExpr],
        header_exprs: list[FieldExpr],
        body_type: str,
        context: BodyContext,
        body_description: str,
        init_name: str,
        init_description: str,
        target_name: str,
        target_fields: tuple[FieldDescriptor, ...],
        expanded: ExpandedTypeDescriptor | None = None,
    ) -> ResponseDescriptor:
        body = None
        if body_exprs:
            fields = tuple(self._field(state, f, FieldContext.BODY, BodyContext.RESPONSE, f"{path}.{f.name}") for f in body_exprs)
            body = BodyDescriptor(
                context=context,
                type_name=body_type,
                description=body_description,
                fields=fields,
                validate=self._validator(state, body_type, fields, "body", BodyContext.RESPONSE),
                references=self._references(fields, BodyContext.RESPONSE),
            )
        headers = tuple(self._field(state, f, FieldContext.RESPONSE_HEADER, None, f"{path}.{f.name}") for f in header_exprs)

        result_init = None
        if body is not None or headers:
            result_init = self._result_init(
                state, body, headers, init_name, init_description, target_name, target_fields, expanded
            )
        return ResponseDescriptor(
            name=response.name,
            status=response.status,
            body=body,
            headers=headers,
            result_init=result_init,
        )

    def _result_init(
        self,
        state: _ServiceState,
        body: BodyDescriptor | None,
        headers: tuple[FieldDescriptor, ...],
        name: str,
        description: str,
        target_name: str,
        target_fields: tuple[FieldDescriptor, ...],
        expanded: ExpandedTypeDescriptor | None,
    ) -> InitDescriptor | None:
        """Constructor of the result (or error) value from the body and headers of a response."""
        if expanded is not None:
            # Results with views are built as their expanded type, projected later
            target_fields = expanded.fields
            construct = expanded.type_name
        else:
            construct = self.backend.service_type(state.slug, target_name)
        targets = {f.name: f for f in target_fields}

        shape = []
        arguments = []
        assignments = []
        references = []
        if body is not None:
            body_ref = self.backend.reference_type(body.type_name)
            shape.append(("body", "body", body_ref, Representation.VALUE))
            arguments.append(ArgumentDescriptor("body", body_ref, Representation.VALUE))
            references.append(body.type_name)
            for source in body.fields:
                target = targets.get(source.name)
                if target is None:
                    continue
                assignments.append(self._assignment(state, target, f"body.{source.identifier}", source.representation, expanded is None))
        for header in headers:
            var = self.backend.variable(header.name)
            shape.append(_arg_shape(header))
            target = targets.get(header.name)
            arguments.append(ArgumentDescriptor(var, header.type_ref, header.representation, target.identifier if target else None))
            if target is not None:
                assignments.append(self._assignment(state, target, var, header.representation, expanded is None))

        if not _shapes_differ(shape, target_fields):
            return None
        if expanded is not None:
            references.append(expanded.type_name)
        return InitDescriptor(
            name=name,
            description=description,
            args=tuple(arguments),
            return_type_name=construct,
            return_type_ref=self.backend.reference_type(construct),
            return_var="v",
            code=self.backend.build_value("v", construct, assignments),
            references=tuple(references),
        )

    def _assignment(
        self, state: _ServiceState, target: FieldDescriptor, source: str, source_rep: Representation, to_service: bool
    ) -> Assignment:
        """Assignment of a result field from a body value (unmarshaled when building service types)."""
        return Assignment(
            target=target.identifier,
            source=source,
            type=target.type,
            target_type_ref=target.type_ref,
            source_rep=source_rep,
            target_rep=target.representation,
            helper=self._unmarshal_helper_for(state, target.type) if to_service else None,
            default_literal=target.default_literal if to_service and target.has_default else None,
        )

    # Expanded types

    def _expanded_type(self, state: _ServiceState, user_type: UserTypeExpr) -> ExpandedTypeDescriptor:
        if user_type.name in state.expanded:
            return state.expanded[user_type.name]

        type_name = self.backend.type_name(user_type.name, "View")
        for view in user_type.views:
            for field_name in view.fields:
                if user_type.field(field_name) is None:
                    raise SchemaInconsistency(
                        f"view {view.name!r} names unknown field {field_name!r}", path=f"{user_type.name}.views.{view.name}"
                    )

        # A field is only required when every view carries it
        in_all_views = set.intersection(*(set(view.fields) for view in user_type.views))
        fields = []
        for f in user_type.fields:
            descriptor = self._field(state, f, FieldContext.BODY, BodyContext.RESPONSE, f"{user_type.name}.{f.name}")
            fields.append(replace(descriptor, required=f.required and f.name in in_all_views))
        fields = tuple(fields)

        expanded = ExpandedTypeDescriptor(
            type_name=type_name,
            base_type=user_type.name,
            description=f"{type_name} is a type that runs validations on a projected type.",
            fields=fields,
            views=tuple(self._view(state, user_type, type_name, view) for view in user_type.views),
            validate=self._validator(state, type_name, fields, "result", BodyContext.RESPONSE),
            references=self._references(fields, BodyContext.RESPONSE),
        )
        state.expanded[user_type.name] = expanded
        logger.debug("Built expanded type %s with %d views", type_name, len(expanded.views))
        return expanded

    def _view(self, state: _ServiceState, user_type: UserTypeExpr, expanded_name: str, view: ViewExpr) -> ViewDescriptor:
        if view.name == "default":
            result_name = user_type.name
        else:
            result_name = f"{user_type.name}{self.backend.type_name(view.name)}"
        service_ref = self.backend.service_type(state.slug, result_name)

        assignments = []
        for field_name in view.fields:
            f = user_type.field(field_name)
            source = self.backend.identifier(f.name)
            target = self._field(state, f, FieldContext.RESULT, None, f"{user_type.name}.views.{view.name}.{f.name}")
            assignments.append(self._assignment(state, target, f"e.{source}", Representation.OPTIONAL, True))

        return ViewDescriptor(
            name=view.name,
            function_name=self.backend.function_name(expanded_name, "as", view.name),
            expanded_type_ref=self.backend.reference_type(expanded_name),
            result_type_name=result_name,
            result_type_ref=self.backend.reference_type(service_ref),
            fields=view.fields,
            code=self.backend.build_value("res", service_ref, assignments),
            references=(expanded_name,),
        )

    # Fields

    def _fields_of(self, type_name: str | None, fields: tuple[FieldExpr, ...], path: str) -> tuple[FieldExpr, ...]:
        """Explicit fields, or the fields of the named user type."""
        if fields:
            return fields
        if not type_name:
            return ()
        user_type = self.model.user_type(type_name)
        if user_type is None:
            raise SchemaInconsistency(f"unknown type {type_name!r}", path=path)
        return user_type.fields

    def _field(
        self, state: _ServiceState, f: FieldExpr, context: FieldContext, side: BodyContext | None, path: str
    ) -> FieldDescriptor:
        """
        Build the descriptor of a field in a context.

        Args:
            state: Service being built
            f: The field
            context: Where the field appears
            side: Body side whose attribute types nested objects refer to, None for service types
            path: Qualified path of the field
        """
        self._check_shape(f, context, path)
        kind = FieldKind.PRIMITIVE if f.type.is_primitive else FieldKind.AGGREGATE
        representation = resolve_representation(f.required, f.has_default, kind, context, path)
        type_ref = self.backend.translate_type(f.type, representation, lambda name: self._object_ref(state, name, side, path))
        if side is None and context in (FieldContext.PAYLOAD, FieldContext.RESULT):
            wire_name = f.name
        else:
            wire_name = f.body_name
        return FieldDescriptor(
            name=f.name,
            identifier=self.backend.identifier(f.name),
            wire_name=wire_name,
            type=f.type,
            type_ref=type_ref,
            representation=representation,
            required=f.required,
            default=f.default,
            has_default=f.has_default,
            default_literal=self.backend.format_default_value(f.default, f.type) if f.has_default else "",
            constraints=f.constraints,
            description=f.description,
        )

    def _check_shape(self, f: FieldExpr, context: FieldContext, path: str) -> None:
        if f.constraints.format is not None and f.constraints.format not in SUPPORTED_FORMATS:
            raise UnsupportedFieldShape(f"unsupported format {f.constraints.format!r}", path=path)
        if context not in _OUT_OF_BODY_CONTEXTS:
            return
        kind = f.type.kind
        if kind in (Kind.OBJECT, Kind.MAP) or (kind == Kind.ARRAY and (f.type.elem is None or not f.type.elem.is_primitive)):
            raise UnsupportedFieldShape(f"{f.type.signature()} values cannot be carried in {context.value}", path=path)

    def _object_ref(self, state: _ServiceState, type_name: str, side: BodyContext | None, path: str) -> str:
        if self.model.user_type(type_name) is None:
            raise SchemaInconsistency(f"unknown type {type_name!r}", path=path)
        if side is None:
            return self.backend.service_type(state.slug, type_name)
        return self._attribute_type(state, type_name, side)

    def _service_ref(self, state: _ServiceState, type_name: str) -> str:
        return self.backend.reference_type(self.backend.service_type(state.slug, type_name))

    def _attribute_name(self, type_name: str, side: BodyContext) -> str:
        return self.backend.type_name(type_name, _BODY_SUFFIX[side])

    def _attribute_type(self, state: _ServiceState, type_name: str, side: BodyContext) -> str:
        """Name of the body type shared by nested fields of the given user type, built on first use."""
        user_type = self.model.user_type(type_name)
        name = self._attribute_name(type_name, side)
        key = (side, type_name, tuple((f.name, f.type.signature(), f.required) for f in user_type.fields))
        if key in state.attributes:
            return name

        # Reserve the slot first: recursive types refer to themselves by name
        state.attributes[key] = None
        fields = tuple(self._field(state, f, FieldContext.BODY, side, f"{type_name}.{f.name}") for f in user_type.fields)
        state.attributes[key] = BodyDescriptor(
            context=side,
            type_name=name,
            description=f"{name} is used to define fields on {side.value} body types.",
            fields=fields,
            validate=self._validator(state, name, fields, "body", side),
            is_attribute=True,
            references=self._references(fields, side),
        )
        logger.debug("Built body attribute type %s", name)
        return name

    def _references(self, fields: Iterable[FieldDescriptor], side: BodyContext) -> tuple[str, ...]:
        references: list[str] = []
        for f in fields:
            for ref in f.type.object_refs():
                name = self._attribute_name(ref, side)
                if name not in references:
                    references.append(name)
        return tuple(references)

    # Transform helpers

    def _marshal_helper_for(self, state: _ServiceState, type_expr: TypeExpr) -> str | None:
        refs = type_expr.object_refs()
        return self._marshal_helper(state, refs[0]) if refs else None

    def _unmarshal_helper_for(self, state: _ServiceState, type_expr: TypeExpr) -> str | None:
        refs = type_expr.object_refs()
        return self._unmarshal_helper(state, refs[0]) if refs else None

    def _marshal_helper(self, state: _ServiceState, type_name: str) -> str:
        """Helper converting a service type into its request body attribute type."""
        target = self._attribute_name(type_name, BodyContext.REQUEST)
        name = self.backend.function_name("marshal", state.slug, type_name, "to", target, exported=False)
        if name in state.helpers:
            return name

        state.helpers[name] = None
        user_type = self.model.user_type(type_name)
        assignments = []
        for f in user_type.fields:
            path = f"{type_name}.{f.name}"
            source = self._field(state, f, FieldContext.PAYLOAD, None, path)
            target_field = self._field(state, f, FieldContext.BODY, BodyContext.REQUEST, path)
            assignments.append(
                Assignment(
                    target=target_field.identifier,
                    source=f"v.{source.identifier}",
                    type=f.type,
                    target_type_ref=target_field.type_ref,
                    source_rep=source.representation,
                    target_rep=target_field.representation,
                    helper=self._marshal_helper_for(state, f.type),
                )
            )
        state.helpers[name] = self._helper(state, name, type_name, target, assignments, marshal=True)
        return name

    def _unmarshal_helper(self, state: _ServiceState, type_name: str) -> str:
        """Helper converting a response body attribute type into its service type."""
        source = self._attribute_name(type_name, BodyContext.RESPONSE)
        name = self.backend.function_name("unmarshal", source, "to", state.slug, type_name, exported=False)
        if name in state.helpers:
            return name

        state.helpers[name] = None
        user_type = self.model.user_type(type_name)
        assignments = []
        for f in user_type.fields:
            path = f"{type_name}.{f.name}"
            source_field = self._field(state, f, FieldContext.BODY, BodyContext.RESPONSE, path)
            target = self._field(state, f, FieldContext.RESULT, None, path)
            assignments.append(self._assignment(state, target, f"v.{source_field.identifier}", source_field.representation, True))
        state.helpers[name] = self._helper(state, name, type_name, source, assignments, marshal=False)
        return name

    def _helper(
        self, state: _ServiceState, name: str, type_name: str, body_type: str, assignments: list[Assignment], marshal: bool
    ) -> TransformHelperDescriptor:
        object_type = TypeExpr(kind=Kind.OBJECT, ref=type_name)
        service_ref = self.backend.translate_type(
            object_type, Representation.OPTIONAL, lambda ref: self.backend.service_type(state.slug, ref)
        )
        body_ref = self.backend.translate_type(object_type, Representation.OPTIONAL, lambda ref: body_type)
        if marshal:
            source_ref, target_ref, construct = service_ref, body_ref, body_type
        else:
            source_ref, target_ref, construct = body_ref, service_ref, self.backend.service_type(state.slug, type_name)
        logger.debug("Built transform helper %s", name)
        return TransformHelperDescriptor(
            name=name,
            description=f"{name} builds a value of type {target_ref} from a value of type {source_ref}.",
            source_type_ref=source_ref,
            target_type_ref=target_ref,
            code=self.backend.build_value("res", construct, assignments),
            references=(body_type,),
        )

    # Validators

    def _validator(
        self, state: _ServiceState, type_name: str, fields: tuple[FieldDescriptor, ...], var: str, side: BodyContext
    ) -> ValidateDescriptor | None:
        """Validator of a body type, None when none of its fields carries a constraint."""
        lines: list[str] = []
        for f in fields:
            access = self.backend.field_access(var, f, var)
            # Fields held as values are always present
            required = f.required and f.is_optional
            lines.extend(
                self.validation.generate_field_validation(
                    access,
                    f.type,
                    required,
                    f.constraints,
                    self._nested_validator(state, f.type, side),
                )
            )
        if not lines:
            return None
        return ValidateDescriptor(
            name=self.backend.function_name("validate", type_name),
            type_name=type_name,
            type_ref=self.backend.reference_type(type_name),
            var=var,
            code="\n".join(lines),
            references=(type_name,),
        )

    def _nested_validator(self, state: _ServiceState, type_expr: TypeExpr, side: BodyContext) -> str | None:
        ref = _validated_ref(type_expr)
        if ref is None or not self._type_validates(state, ref):
            return None
        return self.backend.function_name("validate", self._attribute_name(ref, side))

    def _type_validates(self, state: _ServiceState, type_name: str, visiting: set[str] | None = None) -> bool:
        """Whether the body types of a user type validate (reachability of a constrained field)."""
        root = visiting is None
        if root and type_name in state.validates:
            return state.validates[type_name]
        visiting = set() if root else visiting
        if type_name in visiting:
            return False
        visiting.add(type_name)

        validates = False
        user_type = self.model.user_type(type_name)
        for f in user_type.fields if user_type else ():
            self._check_shape(f, FieldContext.BODY, f"{type_name}.{f.name}")
            if self.validation.has_rules(f.type, f.required, f.constraints):
                validates = True
                break
            ref = _validated_ref(f.type)
            if ref is not None and self._type_validates(state, ref, visiting):
                validates = True
                break

        # Only complete traversals are cached
        if root:
            state.validates[type_name] = validates
        return validates

    # Header

    def _build_header(
        self,
        state: _ServiceState,
        endpoints: list[EndpointDescriptor],
        attribute_types: tuple[BodyDescriptor, ...],
        expanded_types: tuple[ExpandedTypeDescriptor, ...],
        helpers: tuple[TransformHelperDescriptor, ...],
    ) -> HeaderDescriptor:
        texts: list[str] = []
        declared_fields: list[FieldDescriptor] = []

        def add_body(body: BodyDescriptor | None) -> None:
            if body is None:
                return
            declared_fields.extend(body.fields)
            texts.extend(f.type_ref for f in body.fields)
            add_init(body.init)
            if body.validate is not None:
                texts.extend((body.validate.type_ref, body.validate.code))

        def add_init(init: InitDescriptor | None) -> None:
            if init is None:
                return
            texts.extend(a.type_ref for a in init.args)
            texts.extend((init.return_type_ref, init.code))

        for endpoint in endpoints:
            add_body(endpoint.payload.body)
            for response in endpoint.result.responses:
                add_body(response.body)
                add_init(response.result_init)
            for error in endpoint.errors:
                add_body(error.response.body)
                add_init(error.response.result_init)
        for body in attribute_types:
            add_body(body)
        for expanded in expanded_types:
            declared_fields.extend(expanded.fields)
            texts.extend(f.type_ref for f in expanded.fields)
            for view in expanded.views:
                texts.extend((view.expanded_type_ref, view.result_type_ref, view.code))
            if expanded.validate is not None:
                texts.extend((expanded.validate.type_ref, expanded.validate.code))
        for helper in helpers:
            texts.extend((helper.source_type_ref, helper.target_type_ref, helper.code))

        comment = self.generation_comment if self.backend.config.add_generation_comment else ""
        return HeaderDescriptor(
            service_name=state.service.name,
            title=f"{state.service.name} HTTP client types",
            package_name=self.backend.PACKAGE_NAME,
            generation_comment=comment,
            imports=self.backend.header_imports(texts, state.slug, any(f.is_renamed for f in declared_fields)),
        )
