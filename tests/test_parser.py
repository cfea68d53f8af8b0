import json

import pytest

from openapi2mcp.parser import OpenAPIError, Parser, schema_is, schema_types


def _doc(**extra):
    doc = {
        "openapi": "3.0.0",
        "info": {"title": "Pets", "version": "1.0.0"},
        "servers": [{"url": "http://localhost:8080/api/"}],
        "paths": {
            "/pets/{petId}": {
                "get": {
                    "operationId": "getPet",
                    "parameters": [
                        {"name": "petId", "in": "path", "required": True, "schema": {"type": "integer"}}
                    ],
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {
                                "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                            },
                        }
                    },
                }
            }
        },
        "components": {
            "schemas": {
                "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
            }
        },
    }
    doc.update(extra)
    return doc


def _parsed(doc, validate=False):
    parser = Parser(validate=validate)
    parser.parse(json.dumps(doc).encode())
    return parser


def test_parse_json_document():
    parser = _parsed(_doc())
    assert parser.info == {"title": "Pets", "version": "1.0.0"}
    assert parser.servers == [{"url": "http://localhost:8080/api/"}]
    assert list(parser.paths) == ["/pets/{petId}"]


def test_parse_yaml_turns_keys_into_strings():
    text = """
openapi: 3.0.0
info: {title: Pets, version: "1"}
paths:
  /pets:
    get:
      responses:
        200:
          description: ok
"""
    parser = Parser()
    parser.parse(text)
    assert list(parser.paths["/pets"]["get"]["responses"]) == ["200"]


def test_json_with_byte_order_mark():
    parser = Parser()
    parser.parse(b"\xef\xbb\xbf" + json.dumps(_doc()).encode())
    assert parser.document["info"]["title"] == "Pets"


def test_references_are_shared_with_their_target():
    parser = _parsed(_doc())
    doc = parser.document
    schema = doc["paths"]["/pets/{petId}"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]
    assert schema is doc["components"]["schemas"]["Pet"]


def test_recursive_reference_resolves_to_a_cycle():
    node = {
        "type": "object",
        "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}},
    }
    parser = _parsed(_doc(components={"schemas": {"Node": node}}))
    resolved = parser.document["components"]["schemas"]["Node"]
    assert resolved["properties"]["children"]["items"] is resolved


def test_external_reference_is_rejected():
    doc = _doc(components={"schemas": {"Pet": {"$ref": "other.yaml#/Pet"}}})
    with pytest.raises(OpenAPIError, match="failed to parse OpenAPI document"):
        _parsed(doc)


def test_dangling_reference_is_rejected():
    doc = _doc(components={"schemas": {"Pet": {"$ref": "#/components/schemas/Missing"}}})
    with pytest.raises(OpenAPIError, match="Missing"):
        _parsed(doc)


@pytest.mark.parametrize("text", ["{unclosed: [", "just some text", "- a\n- b\n"])
def test_malformed_documents_are_rejected(text):
    with pytest.raises(OpenAPIError, match="failed to parse OpenAPI document"):
        Parser().parse(text)


def test_failed_parse_keeps_previous_document():
    parser = _parsed(_doc())
    with pytest.raises(OpenAPIError):
        parser.parse("{unclosed: [")
    assert parser.info["title"] == "Pets"


def test_empty_parser():
    parser = Parser()
    assert parser.document is None
    assert parser.paths == {}
    assert parser.servers == []
    assert parser.info is None


def test_paths_skip_extensions():
    doc = _doc()
    doc["paths"]["x-internal"] = {"note": "hidden"}
    assert list(_parsed(doc).paths) == ["/pets/{petId}"]


def test_validation_is_off_by_default():
    doc = _doc()
    del doc["openapi"]
    assert _parsed(doc).info["version"] == "1.0.0"


def test_validation_rejects_missing_version_field():
    doc = _doc()
    del doc["openapi"]
    with pytest.raises(OpenAPIError, match="invalid OpenAPI document"):
        _parsed(doc, validate=True)


def test_validation_accepts_valid_document():
    assert _parsed(_doc(), validate=True).document["openapi"] == "3.0.0"


def test_validation_requires_path_parameters_to_be_required():
    doc = _doc()
    doc["paths"]["/pets/{petId}"]["get"]["parameters"][0]["required"] = False
    with pytest.raises(OpenAPIError, match="petId"):
        _parsed(doc, validate=True)


def test_validation_requires_responses():
    doc = _doc()
    doc["paths"]["/pets/{petId}"]["get"]["responses"] = {}
    with pytest.raises(OpenAPIError, match="at least one response code"):
        _parsed(doc, validate=True)


def test_parse_file(tmp_path):
    path = tmp_path / "spec.json"
    path.write_text(json.dumps(_doc()))
    parser = Parser()
    parser.parse_file(path)
    assert parser.info["title"] == "Pets"


def test_parse_missing_file(tmp_path):
    with pytest.raises(OpenAPIError, match="failed to read OpenAPI file"):
        Parser().parse_file(tmp_path / "absent.yaml")


def test_operation_id_given():
    assert Parser().operation_id("/pets", "get", {"operationId": "listPets"}) == "listPets"


def test_operation_id_generated():
    parser = Parser()
    assert parser.operation_id("/pets/{petId}", "GET", {}) == "get_pets_petId"
    generated = parser.operation_id("/a/{b}/c", "Post", {"operationId": ""})
    assert generated.startswith("post")
    assert not set(generated) & set("/{}")


def test_schema_types():
    assert schema_types({"type": "string"}) == ["string"]
    assert schema_types({"type": ["string", "null"]}) == ["string", "null"]
    assert schema_types({}) == []
    assert schema_types(None) == []


def test_schema_is():
    assert schema_is({"type": "array"}, "array") is True
    assert schema_is({"type": ["array", "null"]}, "array") is False
    assert schema_is({"type": "object"}, "array") is False
    assert schema_is(None, "object") is False