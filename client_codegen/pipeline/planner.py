"""
Section planner.

Orders the descriptors of one service into emission sections so that every
type is declared before the sections referring to it. The order is driven
by a declarative phase table: each phase is one planning method appending
its sections in schema order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..errors import SchemaInconsistency
from .descriptors import (
    BodyDescriptor,
    InitDescriptor,
    Section,
    SectionKind,
    ServiceDescriptor,
    ValidateDescriptor,
)
from .registry import DeduplicationRegistry

logger = logging.getLogger(__name__)


class SectionPlanner:
    """Plans the emission sections of services against a deduplication registry."""

    # Emission phases in order, each naming the method planning its sections
    PHASES: tuple[tuple[str, str], ...] = (
        ("header", "_plan_header"),
        ("type declarations", "_plan_declarations"),
        ("constructors", "_plan_constructors"),
        ("view conversions", "_plan_view_conversions"),
        ("transform helpers", "_plan_helpers"),
        ("validators", "_plan_validators"),
    )

    def __init__(self, registry: DeduplicationRegistry, transport: str = "http"):
        """
        Args:
            registry: Registry of the type names already claimed in the scope
            transport: Transport qualifying the claimed type names
        """
        self.registry = registry
        self.transport = transport

    def plan(self, service: ServiceDescriptor) -> tuple[Section, ...]:
        """
        Plan the sections of one service.

        Args:
            service: Descriptors of the service

        Returns:
            Sections in emission order

        Raises:
            SchemaInconsistency: If a descriptor references a type the service does not declare
        """
        self._check_references(service)
        sections: list[Section] = []
        for phase, method in self.PHASES:
            before = len(sections)
            sections.extend(getattr(self, method)(service))
            logger.debug("Planned %d %s sections for service %s", len(sections) - before, phase, service.name)
        return tuple(sections)

    # Phases

    def _plan_header(self, service: ServiceDescriptor) -> Iterator[Section]:
        yield Section(SectionKind.HEADER, service.name, service.header)

    def _plan_declarations(self, service: ServiceDescriptor) -> Iterator[Section]:
        for body in _declared_bodies(service):
            if self._claim(service, body.type_name):
                yield Section(SectionKind.TYPE_DECLARATION, body.type_name, body)
        for expanded in service.expanded_types:
            if self._claim(service, expanded.type_name):
                yield Section(SectionKind.TYPE_DECLARATION, expanded.type_name, expanded)

    def _plan_constructors(self, service: ServiceDescriptor) -> Iterator[Section]:
        for endpoint in service.endpoints:
            body = endpoint.payload.body
            if body is not None and body.init is not None:
                yield Section(SectionKind.BODY_CONSTRUCTOR, body.init.name, body.init)
        for endpoint in service.endpoints:
            inits: list[InitDescriptor] = [r.result_init for r in endpoint.result.responses if r.result_init]
            inits.extend(e.response.result_init for e in endpoint.errors if e.response.result_init)
            for init in inits:
                yield Section(SectionKind.RESULT_CONSTRUCTOR, init.name, init)

    def _plan_view_conversions(self, service: ServiceDescriptor) -> Iterator[Section]:
        for expanded in service.expanded_types:
            for view in expanded.views:
                yield Section(SectionKind.EXPANDED_TYPE, view.function_name, view)

    def _plan_helpers(self, service: ServiceDescriptor) -> Iterator[Section]:
        seen: set[str] = set()
        for helper in service.helpers:
            if helper.signature in seen:
                continue
            seen.add(helper.signature)
            yield Section(SectionKind.TRANSFORM_HELPER, helper.name, helper)

    def _plan_validators(self, service: ServiceDescriptor) -> Iterator[Section]:
        # Validators are planned even when their declaration was a duplicate
        seen: set[str] = set()
        for body in _declared_bodies(service):
            validate: ValidateDescriptor | None = body.validate
            if validate is None or validate.type_name in seen:
                continue
            seen.add(validate.type_name)
            yield Section(SectionKind.VALIDATOR, validate.name, validate)
        for expanded in service.expanded_types:
            if expanded.validate is not None:
                yield Section(SectionKind.EXPANDED_TYPE_VALIDATOR, expanded.validate.name, expanded.validate)

    # Helpers

    def _claim(self, service: ServiceDescriptor, type_name: str) -> bool:
        if self.registry.claim_or_skip(f"{self.transport}:{type_name}"):
            return True
        logger.debug("Skipping duplicate declaration of %s in service %s", type_name, service.name)
        return False

    def _check_references(self, service: ServiceDescriptor) -> None:
        declared = {body.type_name for body in _declared_bodies(service)}
        declared.update(expanded.type_name for expanded in service.expanded_types)

        def check(owner: str, references: tuple[str, ...]) -> None:
            for ref in references:
                if ref not in declared:
                    raise SchemaInconsistency(f"{owner} references undeclared type {ref!r}", service=service.name, path=owner)

        for body in _declared_bodies(service):
            check(body.type_name, body.references)
            if body.init is not None:
                check(body.init.name, body.init.references)
            if body.validate is not None:
                check(body.validate.name, body.validate.references)
        for endpoint in service.endpoints:
            for response in (*endpoint.result.responses, *(e.response for e in endpoint.errors)):
                if response.result_init is not None:
                    check(response.result_init.name, response.result_init.references)
        for expanded in service.expanded_types:
            check(expanded.type_name, expanded.references)
            for view in expanded.views:
                check(view.function_name, view.references)
            if expanded.validate is not None:
                check(expanded.validate.name, expanded.validate.references)
        for helper in service.helpers:
            check(helper.name, helper.references)


def _declared_bodies(service: ServiceDescriptor) -> Iterator[BodyDescriptor]:
    """Body types of a service in declaration order."""
    for endpoint in service.endpoints:
        if endpoint.payload.body is not None:
            yield endpoint.payload.body
    for endpoint in service.endpoints:
        for response in endpoint.result.responses:
            if response.body is not None:
                yield response.body
    for endpoint in service.endpoints:
        for error in endpoint.errors:
            if error.response.body is not None:
                yield error.response.body
    yield from service.attribute_types
