"""Human-readable descriptions of response schemas for MCP response templates."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .models import ResponseTemplate
from .parser import schema_is, schema_types

_PREAMBLE = (
    "# API Response Information\n\n"
    "Below is the response from an API call. To help you understand the data, I've provided:\n\n"
    "1. A detailed description of all fields in the response structure\n"
    "2. The complete API response\n\n"
    "## Response Structure\n\n"
)
_EPILOGUE = "\n## Original Response\n\n"
_MAX_DEPTH = 10


def _properties(schema: dict[str, Any]) -> dict[str, Any]:
    props = schema.get("properties")
    return props if isinstance(props, dict) else {}


def _items(schema: dict[str, Any]) -> dict[str, Any] | None:
    items = schema.get("items")
    return items if isinstance(items, dict) else None


def _description(schema: dict[str, Any]) -> str:
    text = schema.get("description")
    return text if isinstance(text, str) else ""


def _first_type(schema: dict[str, Any]) -> str:
    types = schema_types(schema)
    return types[0] if types else ""


def _property_line(indent: str, name: str, schema: dict[str, Any]) -> str:
    line = f"{indent}- **{name}**: {_description(schema)}"
    type_name = _first_type(schema)
    if type_name:
        line += f" (Type: {type_name})"
    return line + "\n"


def _sorted_properties(schema: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    props = _properties(schema)
    for name in sorted(props):
        value = props[name]
        if isinstance(value, dict):
            yield name, value


def _describe(schema: dict[str, Any], path: str, depth: int, max_depth: int) -> Iterator[str]:
    if depth > max_depth:
        return
    indent = "  " * depth

    items = _items(schema)
    if schema_is(schema, "array") and items is not None:
        if schema_is(items, "object") and _properties(items):
            for name, prop in _sorted_properties(items):
                prop_path = f"{path}[].{name}"
                yield _property_line(indent, prop_path, prop)
                yield from _describe(prop, prop_path, depth + 1, max_depth)
        else:
            type_name = _first_type(items)
            if type_name:
                yield f"{indent}- **{path}[]**: Items of type {type_name}\n"
        return

    if schema_is(schema, "object") and _properties(schema):
        for name, prop in _sorted_properties(schema):
            prop_path = f"{path}.{name}"
            yield _property_line(indent, prop_path, prop)
            yield from _describe(prop, prop_path, depth + 1, max_depth)


def describe_schema_properties(
    schema: dict[str, Any], path: str, depth: int = 1, max_depth: int = _MAX_DEPTH
) -> str:
    """Describe the nested fields of a schema as indented Markdown list lines."""
    return "".join(_describe(schema, path, depth, max_depth))


def _success_response(operation: dict[str, Any]) -> dict[str, Any] | None:
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return None
    for code in sorted(responses, key=str):
        response = responses[code]
        if str(code).startswith("2") and isinstance(response, dict):
            return response
    return None


def _describe_content(content_type: str, schema: dict[str, Any]) -> Iterator[str]:
    yield f"> Content-Type: {content_type}\n\n"
    items = _items(schema)
    if schema_is(schema, "array") and items is not None:
        yield "- **items**: Array of items (Type: array)\n"
        yield from _describe(items, "items", 1, _MAX_DEPTH)
    elif schema_is(schema, "object") and _properties(schema):
        for name, prop in _sorted_properties(schema):
            yield _property_line("", name, prop)
            yield from _describe(prop, name, 1, _MAX_DEPTH)


def response_template(operation: dict[str, Any]) -> ResponseTemplate:
    """Build a response template describing the operation's success response."""
    success = _success_response(operation)
    content = success.get("content") if success is not None else None
    if not isinstance(content, dict) or not content:
        return ResponseTemplate()

    parts = [_PREAMBLE]
    for content_type, media in content.items():
        if not isinstance(media, dict):
            continue
        schema = media.get("schema")
        if not isinstance(schema, dict):
            continue
        parts.extend(_describe_content(str(content_type), schema))
    parts.append(_EPILOGUE)
    return ResponseTemplate(prepend_body="".join(parts))