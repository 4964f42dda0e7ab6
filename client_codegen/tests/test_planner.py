"""
Tests for the section planner.
"""

import pytest

from client_codegen.errors import SchemaInconsistency
from client_codegen.pipeline.backends import PythonBackend
from client_codegen.pipeline.body_builder import BodyDescriptorBuilder
from client_codegen.pipeline.config import CodeGeneratorConfig
from client_codegen.pipeline.descriptors import (
    BodyDescriptor,
    EndpointDescriptor,
    PayloadDescriptor,
    SectionKind,
    ServiceDescriptor,
    TransformHelperDescriptor,
)
from client_codegen.pipeline.planner import SectionPlanner
from client_codegen.pipeline.registry import DeduplicationRegistry

PHASE_OF = {
    SectionKind.HEADER: 0,
    SectionKind.TYPE_DECLARATION: 1,
    SectionKind.BODY_CONSTRUCTOR: 2,
    SectionKind.RESULT_CONSTRUCTOR: 2,
    SectionKind.EXPANDED_TYPE: 3,
    SectionKind.TRANSFORM_HELPER: 4,
    SectionKind.VALIDATOR: 5,
    SectionKind.EXPANDED_TYPE_VALIDATOR: 5,
}


@pytest.fixture
def descriptors(storage_model):
    builder = BodyDescriptorBuilder(storage_model, PythonBackend(CodeGeneratorConfig()))
    return {s.name: builder.build(s) for s in storage_model.services}


def names_of(sections, *kinds):
    return [s.name for s in sections if s.kind in kinds]


def test_phases_are_in_order(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])
    phases = [PHASE_OF[s.kind] for s in sections]

    assert sections[0].kind == SectionKind.HEADER
    assert phases == sorted(phases)


def test_declaration_order(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])

    assert names_of(sections, SectionKind.TYPE_DECLARATION) == [
        "NewBottleRequestBody",
        "RateRequestBody",
        "ListResponseBody",
        "BottleResponseBody",
        "AddResponseBody",
        "ShowNotFoundResponseBody",
        "WineryResponseBody",
        "WineryRequestBody",
        "ComponentRequestBody",
        "BottleView",
    ]


def test_constructor_order(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])

    assert names_of(sections, SectionKind.BODY_CONSTRUCTOR, SectionKind.RESULT_CONSTRUCTOR) == [
        "new_add_request_body",
        "new_rate_request_body",
        "new_list_result_ok",
        "new_show_bottle_ok",
        "new_show_not_found",
        "new_add_result_created",
    ]


def test_one_conversion_per_view(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])
    views = [s for s in sections if s.kind == SectionKind.EXPANDED_TYPE]

    assert [s.name for s in views] == ["bottle_view_as_default", "bottle_view_as_tiny"]
    assert len(views) == len(descriptors["storage"].expanded_types[0].views)


def test_validators(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])

    assert names_of(sections, SectionKind.VALIDATOR) == [
        "validate_new_bottle_request_body",
        "validate_rate_request_body",
        "validate_list_response_body",
        "validate_bottle_response_body",
        "validate_add_response_body",
        "validate_show_not_found_response_body",
        "validate_winery_response_body",
        "validate_winery_request_body",
        "validate_component_request_body",
    ]
    assert names_of(sections, SectionKind.EXPANDED_TYPE_VALIDATOR) == ["validate_bottle_view"]


def test_references_follow_declarations(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])
    declared_at = {s.name: i for i, s in enumerate(sections) if s.kind == SectionKind.TYPE_DECLARATION}

    for index, section in enumerate(sections):
        if section.kind == SectionKind.TYPE_DECLARATION:
            continue
        for ref in getattr(section.descriptor, "references", ()):
            assert declared_at[ref] < index, f"{section.name} refers to {ref} before its declaration"


def test_no_duplicate_declarations(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["storage"])
    declared = names_of(sections, SectionKind.TYPE_DECLARATION)
    assert len(declared) == len(set(declared))


def test_run_scope_skips_declarations_but_keeps_validators(descriptors):
    planner = SectionPlanner(DeduplicationRegistry("run"))
    planner.plan(descriptors["storage"])
    sections = planner.plan(descriptors["sommelier"])

    assert names_of(sections, SectionKind.TYPE_DECLARATION) == [
        "PickRequestBody",
        "PickResponseBody",
        "PickNoCriteriaResponseBody",
    ]
    assert "validate_winery_response_body" in names_of(sections, SectionKind.VALIDATOR)


def test_service_scope_declares_shared_types_per_service(descriptors):
    sections = SectionPlanner(DeduplicationRegistry()).plan(descriptors["sommelier"])
    assert "WineryResponseBody" in names_of(sections, SectionKind.TYPE_DECLARATION)


def test_claims_are_qualified_by_transport(descriptors):
    registry = DeduplicationRegistry()
    SectionPlanner(registry, transport="grpc").plan(descriptors["sommelier"])

    assert registry.is_claimed("grpc:PickResponseBody")
    assert not registry.is_claimed("http:PickResponseBody")


def test_undeclared_reference_is_inconsistent():
    body = BodyDescriptor(type_name="GetRequestBody", references=("GhostRequestBody",))
    service = ServiceDescriptor(
        name="ghost",
        endpoints=(EndpointDescriptor(name="get", payload=PayloadDescriptor(body=body)),),
    )
    with pytest.raises(SchemaInconsistency) as excinfo:
        SectionPlanner(DeduplicationRegistry()).plan(service)
    assert "GhostRequestBody" in str(excinfo.value)
    assert excinfo.value.service == "ghost"


def test_helpers_are_deduplicated_by_signature():
    helper = TransformHelperDescriptor(name="marshal_a", code="res = A()")
    service = ServiceDescriptor(name="s", helpers=(helper, helper))
    sections = SectionPlanner(DeduplicationRegistry()).plan(service)

    assert names_of(sections, SectionKind.TRANSFORM_HELPER) == ["marshal_a"]
