"""Conversion of an OpenAPI document into an MCP server configuration."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import yaml

from .models import (
    Arg,
    ConvertOptions,
    Header,
    MCPConfig,
    MCPConfigTemplate,
    RequestTemplate,
    ServerConfig,
    Tool,
)
from .parser import Parser, schema_is, schema_types
from .schema_docs import response_template

_DEFAULT_SERVER_NAME = "openapi-server"
_OPERATION_METHODS = ("get", "post", "put", "delete", "options", "head", "patch", "trace")
_BODY_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")


class ConversionError(Exception):
    """An OpenAPI document could not be turned into an MCP configuration."""


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _first_type(schema: dict[str, Any]) -> str:
    types = schema_types(schema)
    return types[0] if types else ""


def _type_value(schema: dict[str, Any]) -> Any:
    """The schema's type as it is written out: one name, a list of names, or None."""
    types = schema_types(schema)
    if not types:
        return None
    if len(types) == 1:
        return types[0]
    return list(types)


def _dict(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def _properties(schema: dict[str, Any]) -> dict[str, Any]:
    props = schema.get("properties")
    return props if isinstance(props, dict) else {}


def _describe_shape(arg: Arg, schema: dict[str, Any]) -> None:
    """Fill in enum, items and properties of an argument from its schema."""
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        arg.enum = list(enum)

    items = _dict(schema.get("items"))
    if schema_is(schema, "array") and items is not None:
        arg.items = {"type": _type_value(items)}

    props = _properties(schema)
    if schema_is(schema, "object") and props:
        arg.properties = {}
        for name, prop in props.items():
            if not isinstance(prop, dict):
                continue
            entry: dict[str, Any] = {"type": _type_value(prop)}
            description = _text(prop.get("description"))
            if description:
                entry["description"] = description
            arg.properties[name] = entry


def get_operations(path_item: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Map each HTTP method of a path item to its operation."""
    return {
        method: operation
        for method in _OPERATION_METHODS
        if isinstance(operation := path_item.get(method), dict)
    }


def get_description(operation: dict[str, Any]) -> str:
    """Describe an operation by its summary and description."""
    summary = _text(operation.get("summary"))
    description = _text(operation.get("description"))
    if summary:
        return f"{summary} - {description}" if description else summary
    return description


def convert_parameters(parameters: Any) -> list[Arg]:
    """Turn OpenAPI parameters into tool arguments."""
    if not isinstance(parameters, list):
        return []
    args = []
    for param in parameters:
        if not isinstance(param, dict):
            continue
        arg = Arg(
            name=_text(param.get("name")),
            description=_text(param.get("description")),
            required=param.get("required") is True,
            position=_text(param.get("in")),
        )
        schema = _dict(param.get("schema"))
        if schema is not None:
            arg.type = _first_type(schema)
            _describe_shape(arg, schema)
        args.append(arg)
    return args


def convert_request_body(request_body: Any) -> list[Arg]:
    """Turn the properties of a JSON or form request body into tool arguments."""
    body = _dict(request_body)
    if body is None:
        return []
    content = _dict(body.get("content")) or {}
    args = []
    for content_type, media in content.items():
        if not isinstance(media, dict):
            continue
        schema = _dict(media.get("schema"))
        if schema is None:
            continue
        if not any(kind in str(content_type) for kind in _BODY_CONTENT_TYPES):
            continue
        props = _properties(schema)
        if not (schema_is(schema, "object") and props):
            continue
        required = schema.get("required")
        required = required if isinstance(required, list) else []
        for name, prop in props.items():
            if not isinstance(prop, dict):
                continue
            arg = Arg(
                name=name,
                description=_text(prop.get("description")),
                type=_first_type(prop),
                required=name in required,
                position="body",
            )
            _describe_shape(arg, prop)
            args.append(arg)
    return args


def request_template(
    document: dict[str, Any], path: str, method: str, operation: dict[str, Any]
) -> RequestTemplate:
    """Build the request template of an operation from the document's first server."""
    server_url = ""
    servers = document.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        server_url = _text(servers[0].get("url"))
    server_url = server_url.removesuffix("/")

    template = RequestTemplate(url=server_url + path, method=method.upper())
    body = _dict(operation.get("requestBody"))
    if body is not None:
        content = _dict(body.get("content")) or {}
        for content_type in content:
            template.headers.append(Header(key="Content-Type", value=str(content_type)))
            break
    return template


def apply_template(config: MCPConfig, template_path: str | Path) -> None:
    """Patch a configuration in place with the settings of a YAML template file."""
    try:
        text = Path(template_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConversionError(f"failed to read template file: {exc}") from exc
    try:
        template = MCPConfigTemplate.from_dict(yaml.safe_load(text))
    except (yaml.YAMLError, ValueError) as exc:
        raise ConversionError(f"failed to parse template: {exc}") from exc

    if template.server.config is not None:
        if config.server.config is None:
            config.server.config = {}
        config.server.config.update(template.server.config)

    request = template.tools.request_template
    response = template.tools.response_template
    for tool in config.tools:
        if request is not None:
            target = tool.request_template
            target.headers.extend(Header(key=h.key, value=h.value) for h in request.headers)
            if request.body:
                target.body = request.body
            if request.args_to_json_body:
                target.args_to_json_body = True
            if request.args_to_url_param:
                target.args_to_url_param = True
            if request.args_to_form_body:
                target.args_to_form_body = True
        if response is not None:
            target = tool.response_template
            if response.body:
                target.body = response.body
            if response.prepend_body:
                target.prepend_body = response.prepend_body
            if response.append_body:
                target.append_body = response.append_body


class Converter:
    """Turns the document held by a parser into an MCP configuration."""

    def __init__(self, parser: Parser, options: ConvertOptions | None = None) -> None:
        options = dataclasses.replace(options) if options is not None else ConvertOptions()
        if not options.server_name:
            options.server_name = _DEFAULT_SERVER_NAME
        if options.server_config is None:
            options.server_config = {}
        self.parser = parser
        self.options = options

    def convert(self) -> MCPConfig:
        """Build the configuration, one tool per operation, sorted by tool name."""
        document = self.parser.document
        if document is None:
            raise ConversionError("no OpenAPI document loaded")

        config = MCPConfig(
            server=ServerConfig(name=self.options.server_name, config=self.options.server_config),
            tools=[],
        )
        for path, path_item in self.parser.paths.items():
            for method, operation in get_operations(path_item).items():
                config.tools.append(self._convert_operation(document, path, method, operation))

        if self.options.template_path:
            try:
                apply_template(config, self.options.template_path)
            except ConversionError as exc:
                raise ConversionError(f"failed to apply template: {exc}") from exc

        config.tools.sort(key=lambda tool: tool.name)
        return config

    def _convert_operation(
        self, document: dict[str, Any], path: str, method: str, operation: dict[str, Any]
    ) -> Tool:
        name = self.options.tool_name_prefix + self.parser.operation_id(path, method, operation)
        args = convert_parameters(operation.get("parameters"))
        args.extend(convert_request_body(operation.get("requestBody")))
        args.sort(key=lambda arg: arg.name)
        return Tool(
            name=name,
            description=get_description(operation),
            args=args,
            request_template=request_template(document, path, method, operation),
            response_template=response_template(operation),
        )