"""
Tests for the body descriptor builder.
"""

import pytest

from client_codegen.errors import SchemaInconsistency, UnsupportedFieldShape
from client_codegen.pipeline.backends import GoBackend, PythonBackend
from client_codegen.pipeline.body_builder import BodyDescriptorBuilder
from client_codegen.pipeline.config import CodeGeneratorConfig
from client_codegen.pipeline.descriptors import BodyContext
from client_codegen.pipeline.pointer_policy import Representation
from client_codegen.schema import parse_schema


def python_builder(model):
    return BodyDescriptorBuilder(model, PythonBackend(CodeGeneratorConfig()))


def go_builder(model):
    return BodyDescriptorBuilder(model, GoBackend(CodeGeneratorConfig(language="go")))


def single_endpoint(endpoint: dict, types: dict | None = None):
    return parse_schema({"types": types or {}, "services": [{"name": "example", "endpoints": [endpoint]}]})


def endpoint_named(service, name):
    return next(e for e in service.endpoints if e.name == name)


class TestRequestBody:
    def test_required_and_optional_payload_fields(self):
        model = single_endpoint(
            {
                "name": "create",
                "payload": {
                    "fields": [
                        {"name": "id", "type": "string", "required": True},
                        {"name": "name", "type": "string"},
                    ]
                },
            }
        )
        service = python_builder(model).build(model.services[0])
        body = service.endpoints[0].payload.body

        assert body.type_name == "CreateRequestBody"
        assert body.context == BodyContext.REQUEST
        assert [f.representation for f in body.fields] == [Representation.VALUE, Representation.OPTIONAL]
        assert [f.type_ref for f in body.fields] == ["str", "str | None"]

        init = body.init
        assert init.name == "new_create_request_body"
        assert [(a.name, a.type_ref) for a in init.args] == [("id", "str"), ("name", "str | None")]
        assert init.return_type_ref == "CreateRequestBody"
        assert init.return_var == "body"
        assert init.code == "body = CreateRequestBody(\n    id=id,\n    name=name,\n)"

    def test_request_body_always_has_a_constructor(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("sommelier"))
        body = service.endpoints[0].payload.body

        assert body.type_name == "PickRequestBody"
        assert all(f.is_optional for f in body.fields)
        assert body.init.name == "new_pick_request_body"
        assert body.validate is None

    def test_defaulted_fields_are_values(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        body = endpoint_named(service, "rate").payload.body

        assert [(f.name, f.representation, f.type_ref) for f in body.fields] == [
            ("rating", Representation.VALUE, "int"),
            ("comment", Representation.VALUE, "str"),
        ]
        assert "if body.rating is None:" not in body.validate.code
        assert "if body.rating < 1:" in body.validate.code
        assert "if body.rating > 5:" in body.validate.code

    def test_nested_request_types_stay_optional(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        body = endpoint_named(service, "add").payload.body
        winery = next(a for a in service.attribute_types if a.type_name == "WineryRequestBody")

        assert [f.type_ref for f in body.fields][:3] == ["str", "int", "WineryRequestBody | None"]
        assert "if body.winery is None:" in body.validate.code
        assert all(f.is_optional for f in winery.fields)

    def test_renamed_field_needs_a_constructor(self):
        model = single_endpoint(
            {"name": "tag", "payload": {"fields": [{"name": "label", "type": "string", "wireName": "tag_label"}]}}
        )
        body = python_builder(model).build(model.services[0]).endpoints[0].payload.body
        assert body.fields[0].wire_name == "tag_label"
        assert body.init is not None

    def test_params_are_not_in_the_body(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        rate = endpoint_named(service, "rate")

        assert [p.name for p in rate.payload.params] == ["id"]
        assert [f.name for f in rate.payload.body.fields] == ["rating", "comment"]
        assert [(a.name, a.type_ref) for a in rate.payload.body.init.args] == [("rating", "int"), ("comment", "str")]

        show = endpoint_named(service, "show")
        assert show.payload.body is None
        assert [p.type_ref for p in show.payload.params] == ["str", "str | None"]

    def test_payload_type_names_the_body(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        add = endpoint_named(service, "add")
        body = add.payload.body

        assert body.type_name == "NewBottleRequestBody"
        assert add.payload.type_ref == "storage.NewBottle"
        assert [a.type_ref for a in body.init.args] == [
            "str",
            "int",
            "storage.Winery | None",
            "list[storage.Component] | None",
            "str | None",
        ]
        assert "winery=marshal_storage_winery_to_winery_request_body(winery)," in body.init.code
        assert (
            "composition=[marshal_storage_component_to_component_request_body(e) for e in composition] "
            "if composition is not None else None," in body.init.code
        )
        assert body.references == ("WineryRequestBody", "ComponentRequestBody")

    def test_go_request_body_constructor(self):
        model = single_endpoint(
            {
                "name": "create",
                "payload": {
                    "fields": [
                        {"name": "id", "type": "string", "required": True},
                        {"name": "name", "type": "string"},
                    ]
                },
            }
        )
        init = go_builder(model).build(model.services[0]).endpoints[0].payload.body.init

        assert init.name == "NewCreateRequestBody"
        assert [(a.name, a.type_ref) for a in init.args] == [("id", "string"), ("name", "*string")]
        assert init.return_type_ref == "*CreateRequestBody"
        assert init.code == "body := &CreateRequestBody{\n\tID: id,\n\tName: name,\n}"


class TestAttributeTypes:
    def test_nested_types_are_shared(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        names = [a.type_name for a in service.attribute_types]

        assert names == ["WineryResponseBody", "WineryRequestBody", "ComponentRequestBody"]
        assert all(a.is_attribute for a in service.attribute_types)

    def test_recursive_type(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        component = next(a for a in service.attribute_types if a.type_name == "ComponentRequestBody")

        parts = next(f for f in component.fields if f.name == "parts")
        assert parts.type_ref == "list[ComponentRequestBody] | None"
        assert component.references == ("ComponentRequestBody",)
        assert "validate_component_request_body(item)" in component.validate.code

    def test_renamed_attribute_field(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        winery = service.attribute_types[0]
        display = next(f for f in winery.fields if f.name == "display_name")

        assert display.identifier == "display_name"
        assert display.wire_name == "displayName"
        assert display.is_renamed

    def test_helpers_are_built_once(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        names = [h.name for h in service.helpers]

        assert len(names) == len(set(names))
        assert "marshal_storage_component_to_component_request_body" in names
        assert "unmarshal_winery_response_body_to_storage_winery" in names
        helper = next(h for h in service.helpers if h.name == "marshal_storage_component_to_component_request_body")
        assert helper.source_type_ref == "storage.Component | None"
        assert helper.target_type_ref == "ComponentRequestBody | None"
        assert "parts=[marshal_storage_component_to_component_request_body(e) for e in v.parts]" in helper.code


class TestResponses:
    def test_response_with_headers(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        listing = endpoint_named(service, "list")
        response = listing.result.responses[0]

        assert response.body.type_name == "ListResponseBody"
        assert [h.name for h in response.headers] == ["total"]
        assert response.headers[0].representation == Representation.VALUE

        init = response.result_init
        assert init.name == "new_list_result_ok"
        assert [(a.name, a.type_ref) for a in init.args] == [("body", "ListResponseBody"), ("total", "int")]
        assert init.return_type_ref == "storage.ListResult"
        assert init.code.startswith("v = storage.ListResult(\n")
        assert "    total=total," in init.code
        assert init.references == ("ListResponseBody",)

    def test_result_type_names_the_response_body(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        show = endpoint_named(service, "show")
        response = show.result.responses[0]

        assert response.body.type_name == "BottleResponseBody"
        assert response.result_init.name == "new_show_bottle_ok"
        assert response.result_init.return_type_ref == "BottleView"
        assert response.result_init.references == ("BottleResponseBody", "BottleView")

    def test_response_body_validator(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        body = endpoint_named(service, "show").result.responses[0].body
        code = body.validate.code

        assert body.validate.name == "validate_bottle_response_body"
        assert "if body.id is None:" in code
        assert "if body.vintage is not None and body.vintage < 1900:" in code
        assert "if body.rating is not None and body.rating not in [1, 2, 3, 4, 5]:" in code
        assert "    validate_winery_response_body(body.winery)" in code

    def test_result_defaults_are_applied(self):
        model = single_endpoint(
            {
                "name": "count",
                "result": {"fields": [{"name": "total", "type": "int", "default": 10}]},
            }
        )
        response = python_builder(model).build(model.services[0]).endpoints[0].result.responses[0]
        assert "total=body.total if body.total is not None else 10," in response.result_init.code

    def test_errors(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        error = endpoint_named(service, "show").errors[0]

        assert error.type_name == "ShowNotFoundError"
        assert error.response.status == 404
        assert error.response.body.type_name == "ShowNotFoundResponseBody"
        assert error.response.body.context == BodyContext.ERROR
        assert error.response.result_init.name == "new_show_not_found"
        assert error.response.result_init.return_type_ref == "storage.ShowNotFoundError"

    def test_endpoint_without_result(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        assert endpoint_named(service, "rate").result.responses == ()


class TestExpandedTypes:
    def test_one_conversion_per_view(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        (expanded,) = service.expanded_types

        assert expanded.type_name == "BottleView"
        assert [v.name for v in expanded.views] == ["default", "tiny"]
        assert [v.result_type_name for v in expanded.views] == ["Bottle", "BottleTiny"]
        assert [v.function_name for v in expanded.views] == ["bottle_view_as_default", "bottle_view_as_tiny"]
        assert all(f.is_optional for f in expanded.fields)

    def test_view_conversion_code(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        default, tiny = service.expanded_types[0].views

        assert default.code.startswith("res = storage.Bottle(\n")
        assert "vintage=e.vintage if e.vintage is not None else 2000," in default.code
        assert "winery=unmarshal_winery_response_body_to_storage_winery(e.winery)," in default.code
        assert tiny.code == "res = storage.BottleTiny(\n    id=e.id,\n    name=e.name,\n)"

    def test_fields_of_every_view_are_validated_as_required(self, storage_model):
        service = python_builder(storage_model).build(storage_model.service("storage"))
        validate = service.expanded_types[0].validate

        assert validate.var == "result"
        assert "if result.id is None:" in validate.code
        assert "if result.name is None:" in validate.code
        assert "if result.vintage is None:" not in validate.code


class TestSchemaErrors:
    def test_unknown_type(self):
        model = single_endpoint({"name": "get", "result": {"type": "Missing"}})
        with pytest.raises(SchemaInconsistency) as excinfo:
            python_builder(model).build(model.services[0])
        assert excinfo.value.service == "example"
        assert excinfo.value.endpoint == "get"

    def test_unknown_nested_type(self):
        model = single_endpoint({"name": "get", "payload": {"fields": [{"name": "owner", "type": "Person"}]}})
        with pytest.raises(SchemaInconsistency) as excinfo:
            python_builder(model).build(model.services[0])
        assert excinfo.value.path == "get.payload.owner"

    def test_param_naming_absent_field(self):
        model = single_endpoint({"name": "get", "payload": {"fields": [], "params": {"id": "path"}}})
        with pytest.raises(SchemaInconsistency):
            python_builder(model).build(model.services[0])

    def test_header_naming_absent_field(self):
        model = single_endpoint(
            {
                "name": "get",
                "result": {"fields": [{"name": "id", "type": "string"}], "responses": [{"headers": ["etag"]}]},
            }
        )
        with pytest.raises(SchemaInconsistency):
            python_builder(model).build(model.services[0])

    def test_view_naming_absent_field(self):
        model = single_endpoint(
            {"name": "get", "result": {"type": "Item"}},
            types={"Item": {"fields": [{"name": "id", "type": "string"}], "views": {"default": ["id", "color"]}}},
        )
        with pytest.raises(SchemaInconsistency) as excinfo:
            python_builder(model).build(model.services[0])
        assert "color" in str(excinfo.value)

    def test_result_selecting_absent_view(self):
        model = single_endpoint(
            {"name": "get", "result": {"type": "Item", "view": "full"}},
            types={"Item": {"fields": [{"name": "id", "type": "string"}], "views": {"default": ["id"]}}},
        )
        with pytest.raises(SchemaInconsistency):
            python_builder(model).build(model.services[0])

    def test_object_in_header_is_unsupported(self):
        model = single_endpoint(
            {
                "name": "get",
                "payload": {"fields": [{"name": "filter", "type": "Item"}], "params": {"filter": "header"}},
            },
            types={"Item": {"fields": [{"name": "id", "type": "string"}]}},
        )
        with pytest.raises(UnsupportedFieldShape) as excinfo:
            python_builder(model).build(model.services[0])
        assert excinfo.value.path == "get.payload.filter"

    def test_unknown_format_is_unsupported(self):
        model = single_endpoint(
            {"name": "get", "payload": {"fields": [{"name": "card", "type": "string", "format": "credit-card"}]}}
        )
        with pytest.raises(UnsupportedFieldShape):
            python_builder(model).build(model.services[0])


def test_build_is_deterministic(storage_model):
    builder = python_builder(storage_model)
    service = storage_model.service("storage")
    assert builder.build(service) == builder.build(service)


def test_header_imports(storage_model):
    header = python_builder(storage_model).build(storage_model.service("storage")).header
    imports = {(i.path, i.name) for i in header.imports}

    assert ("re", None) in imports
    assert ("gen", "storage") in imports
    assert ("dataclasses", "field") in imports
    assert ("dataclasses_json", "config") in imports
    assert header.title == "storage HTTP client types"
