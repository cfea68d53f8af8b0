import json

import pytest

from openapi2mcp.models import ResponseTemplate
from openapi2mcp.parser import Parser
from openapi2mcp.schema_docs import describe_schema_properties, response_template

PREAMBLE = (
    "# API Response Information\n\n"
    "Below is the response from an API call. To help you understand the data, I've provided:\n\n"
    "1. A detailed description of all fields in the response structure\n"
    "2. The complete API response\n\n"
    "## Response Structure\n\n"
)
EPILOGUE = "\n## Original Response\n\n"


def _operation(schema, code="200", content_type="application/json"):
    return {"responses": {code: {"description": "ok", "content": {content_type: {"schema": schema}}}}}


def test_no_responses_gives_empty_template():
    assert response_template({}) == ResponseTemplate()


def test_no_success_response_gives_empty_template():
    op = _operation({"type": "object", "properties": {"a": {"type": "string"}}}, code="404")
    assert response_template(op) == ResponseTemplate()


def test_success_without_content_gives_empty_template():
    op = {"responses": {"200": {"description": "ok"}}}
    assert response_template(op) == ResponseTemplate()


def test_object_response_lists_properties_sorted():
    schema = {
        "type": "object",
        "properties": {
            "zeta": {"type": "string", "description": "Last"},
            "alpha": {"type": "integer", "description": "First"},
        },
    }
    body = response_template(_operation(schema)).prepend_body
    assert body.startswith(PREAMBLE)
    assert body.endswith(EPILOGUE)
    assert "> Content-Type: application/json\n\n" in body
    assert "- **alpha**: First (Type: integer)\n" in body
    assert "- **zeta**: Last (Type: string)\n" in body
    assert body.index("**alpha**") < body.index("**zeta**")


def test_array_response_describes_items():
    schema = {
        "type": "array",
        "items": {"type": "object", "properties": {"id": {"type": "integer", "description": "Identifier"}}},
    }
    body = response_template(_operation(schema)).prepend_body
    assert "- **items**: Array of items (Type: array)\n" in body
    assert "  - **items.id**: Identifier (Type: integer)\n" in body


def test_only_prepend_body_is_set():
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    template = response_template(_operation(schema))
    assert template.body == ""
    assert template.append_body == ""


def test_nested_object_indentation():
    schema = {
        "type": "object",
        "properties": {
            "x": {"type": "object", "properties": {"y": {"type": "boolean", "description": "Flag"}}},
        },
    }
    text = describe_schema_properties(schema, "data", 1, 10)
    lines = text.splitlines()
    assert lines[0].startswith("  - **data.x**: ")
    assert lines[1] == "    - **data.x.y**: Flag (Type: boolean)"


def test_array_of_primitives():
    schema = {"type": "array", "items": {"type": "string"}}
    assert describe_schema_properties(schema, "tags", 1, 10) == "  - **tags[]**: Items of type string\n"


def test_array_of_untyped_items_is_silent():
    assert describe_schema_properties({"type": "array", "items": {}}, "tags") == ""


def test_array_of_objects_uses_bracket_path():
    schema = {"type": "array", "items": {"type": "object", "properties": {"n": {"type": "number"}}}}
    text = describe_schema_properties(schema, "list", 2, 10)
    assert text.startswith("    - **list[].n**: ")


def test_depth_beyond_limit_is_empty():
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    assert describe_schema_properties(schema, "p", 11, 10) == ""


@pytest.mark.parametrize("max_depth", [1, 3, 5])
def test_depth_limit_bounds_lines(max_depth):
    leaf = {"type": "object", "properties": {}}
    schema = leaf
    for _ in range(20):
        schema = {"type": "object", "properties": {"n": schema}}
    lines = describe_schema_properties(schema, "r", 1, max_depth).splitlines()
    assert len(lines) == max_depth


def test_self_referencing_schema_terminates():
    node = {"type": "object", "properties": {}}
    node["properties"]["self"] = node
    lines = describe_schema_properties(node, "root").splitlines()
    assert len(lines) == 10
    assert lines[-1].startswith("  " * 10 + "- **root.self")


def test_untyped_property_has_no_type_suffix():
    schema = {"type": "object", "properties": {"free": {"description": "Anything"}}}
    text = describe_schema_properties(schema, "o")
    assert "(Type:" not in text
    assert "**o.free**: Anything" in text


def test_non_object_property_values_are_skipped():
    schema = {"type": "object", "properties": {"bad": True, "good": {"type": "string"}}}
    text = describe_schema_properties(schema, "o")
    assert "bad" not in text
    assert "**o.good**" in text


def test_lowest_success_code_wins():
    op = {
        "responses": {
            "201": {"content": {"application/json": {"schema": {"type": "object", "properties": {"b": {}}}}}},
            "200": {"content": {"application/json": {"schema": {"type": "object", "properties": {"a": {}}}}}},
        }
    }
    body = response_template(op).prepend_body
    assert "**a**" in body
    assert "**b**" not in body


def test_media_without_schema_keeps_frame_only():
    op = {"responses": {"200": {"content": {"text/plain": {}}}}}
    assert response_template(op).prepend_body == PREAMBLE + EPILOGUE


def test_with_parsed_document_and_refs():
    doc = {
        "openapi": "3.0.0",
        "info": {"title": "t", "version": "1"},
        "paths": {
            "/pets": {
                "get": {
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {
                                "application/json": {
                                    "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}}
                                }
                            },
                        }
                    }
                }
            }
        },
        "components": {
            "schemas": {"Pet": {"type": "object", "properties": {"name": {"type": "string", "description": "Name"}}}}
        },
    }
    parser = Parser()
    parser.parse(json.dumps(doc))
    operation = parser.paths["/pets"]["get"]
    body = response_template(operation).prepend_body
    assert "  - **items.name**: Name (Type: string)\n" in body