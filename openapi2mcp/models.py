"""Data model of an MCP server configuration and its YAML and JSON forms."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any

import yaml

_STR_TAG = "tag:yaml.org,2002:str"


def _text(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{what}: expected a string, got {value!r}")


def _flag(value: Any, what: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ValueError(f"{what}: expected a boolean, got {value!r}")


def _mapping(value: Any, what: str) -> Mapping:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{what}: expected a mapping, got {value!r}")
    return value


def _key_less(a: str, b: str) -> bool:
    """Order map keys the way the YAML emitter does: digit runs compare numerically."""
    digits = False
    for i, (ca, cb) in enumerate(zip(a, b)):
        if ca == cb:
            digits = ca.isdecimal()
            continue
        a_letter, b_letter = ca.isalpha(), cb.isalpha()
        if a_letter and b_letter:
            return ca < cb
        if a_letter or b_letter:
            return a_letter if digits else b_letter
        a_num = b_num = 0
        if ca == "0" or cb == "0":
            for prev in reversed(a[:i]):
                if not prev.isdecimal():
                    break
                if prev != "0":
                    a_num = b_num = 1
                    break
        a_end = b_end = i
        while a_end < len(a) and a[a_end].isdecimal():
            a_num = a_num * 10 + int(a[a_end])
            a_end += 1
        while b_end < len(b) and b[b_end].isdecimal():
            b_num = b_num * 10 + int(b[b_end])
            b_end += 1
        if a_num != b_num:
            return a_num < b_num
        if a_end != b_end:
            return a_end < b_end
        return ca < cb
    return len(a) < len(b)


def _key_cmp(a: Any, b: Any) -> int:
    a, b = str(a), str(b)
    if _key_less(a, b):
        return -1
    if _key_less(b, a):
        return 1
    return 0


def _yaml_sorted(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _yaml_sorted(value[k]) for k in sorted(value, key=cmp_to_key(_key_cmp))}
    if isinstance(value, (list, tuple)):
        return [_yaml_sorted(item) for item in value]
    return value


def _json_sorted(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _json_sorted(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_json_sorted(item) for item in value]
    return value


@dataclass
class Header:
    """An HTTP header sent with a tool's request."""

    key: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}

    def _json(self) -> dict[str, Any]:
        return {"Key": self.key, "Value": self.value}

    @classmethod
    def _from_dict(cls, data: Any) -> Header:
        m = _mapping(data, "header")
        return cls(key=_text(m.get("key"), "key"), value=_text(m.get("value"), "value"))


@dataclass
class Arg:
    """An argument of an MCP tool."""

    name: str
    description: str = ""
    type: str = ""
    required: bool = False
    default: Any = None
    enum: list[Any] | None = None
    items: dict[str, Any] | None = None
    properties: dict[str, Any] | None = None
    position: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.type:
            out["type"] = self.type
        if self.required:
            out["required"] = True
        if self.default is not None:
            out["default"] = _yaml_sorted(self.default)
        if self.enum:
            out["enum"] = _yaml_sorted(self.enum)
        if self.items:
            out["items"] = _yaml_sorted(self.items)
        if self.properties:
            out["properties"] = _yaml_sorted(self.properties)
        if self.position:
            out["position"] = self.position
        return out

    def _json(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "Description": self.description,
            "Type": self.type,
            "Required": self.required,
            "Default": _json_sorted(self.default),
            "Enum": _json_sorted(self.enum),
            "Items": _json_sorted(self.items),
            "Properties": _json_sorted(self.properties),
            "Position": self.position,
        }


@dataclass
class RequestTemplate:
    """How a tool call is turned into an HTTP request."""

    url: str = ""
    method: str = ""
    headers: list[Header] = field(default_factory=list)
    body: str = ""
    args_to_json_body: bool = False
    args_to_url_param: bool = False
    args_to_form_body: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"url": self.url, "method": self.method}
        if self.headers:
            out["headers"] = [h.to_dict() for h in self.headers]
        if self.body:
            out["body"] = self.body
        if self.args_to_json_body:
            out["argsToJsonBody"] = True
        if self.args_to_url_param:
            out["argsToUrlParam"] = True
        if self.args_to_form_body:
            out["argsToFormBody"] = True
        return out

    def _json(self) -> dict[str, Any]:
        return {
            "URL": self.url,
            "Method": self.method,
            "Headers": [h._json() for h in self.headers],
            "Body": self.body,
            "ArgsToJsonBody": self.args_to_json_body,
            "ArgsToUrlParam": self.args_to_url_param,
            "ArgsToFormBody": self.args_to_form_body,
        }

    @classmethod
    def _from_dict(cls, data: Any) -> RequestTemplate:
        m = _mapping(data, "requestTemplate")
        headers = m.get("headers") or []
        if not isinstance(headers, list):
            raise ValueError(f"headers: expected a list, got {headers!r}")
        return cls(
            url=_text(m.get("url"), "url"),
            method=_text(m.get("method"), "method"),
            headers=[Header._from_dict(h) for h in headers],
            body=_text(m.get("body"), "body"),
            args_to_json_body=_flag(m.get("argsToJsonBody"), "argsToJsonBody"),
            args_to_url_param=_flag(m.get("argsToUrlParam"), "argsToUrlParam"),
            args_to_form_body=_flag(m.get("argsToFormBody"), "argsToFormBody"),
        )


@dataclass
class ResponseTemplate:
    """How an HTTP response is shown to the model."""

    body: str = ""
    prepend_body: str = ""
    append_body: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.body:
            out["body"] = self.body
        if self.prepend_body:
            out["prependBody"] = self.prepend_body
        if self.append_body:
            out["appendBody"] = self.append_body
        return out

    def _json(self) -> dict[str, Any]:
        return {"Body": self.body, "PrependBody": self.prepend_body, "AppendBody": self.append_body}

    @classmethod
    def _from_dict(cls, data: Any) -> ResponseTemplate:
        m = _mapping(data, "responseTemplate")
        return cls(
            body=_text(m.get("body"), "body"),
            prepend_body=_text(m.get("prependBody"), "prependBody"),
            append_body=_text(m.get("appendBody"), "appendBody"),
        )


@dataclass
class Tool:
    """An MCP tool backed by one HTTP operation."""

    name: str
    description: str = ""
    args: list[Arg] = field(default_factory=list)
    request_template: RequestTemplate = field(default_factory=RequestTemplate)
    response_template: ResponseTemplate = field(default_factory=ResponseTemplate)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "args": [a.to_dict() for a in self.args],
            "requestTemplate": self.request_template.to_dict(),
            "responseTemplate": self.response_template.to_dict(),
        }

    def _json(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "Description": self.description,
            "Args": [a._json() for a in self.args],
            "RequestTemplate": self.request_template._json(),
            "ResponseTemplate": self.response_template._json(),
        }


@dataclass
class ServerConfig:
    """The server section of an MCP configuration."""

    name: str = ""
    config: dict[str, Any] | None = None
    allow_tools: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.config:
            out["config"] = _yaml_sorted(self.config)
        if self.allow_tools:
            out["allowTools"] = list(self.allow_tools)
        return out

    def _json(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "Config": _json_sorted(self.config),
            "AllowTools": None if self.allow_tools is None else list(self.allow_tools),
        }

    @classmethod
    def _from_dict(cls, data: Any) -> ServerConfig:
        m = _mapping(data, "server")
        config = m.get("config")
        if config is not None:
            config = {str(k): v for k, v in _mapping(config, "config").items()}
        allow = m.get("allowTools")
        if allow is not None:
            if not isinstance(allow, list):
                raise ValueError(f"allowTools: expected a list, got {allow!r}")
            allow = [_text(t, "allowTools") for t in allow]
        return cls(name=_text(m.get("name"), "name"), config=config, allow_tools=allow)


@dataclass
class MCPConfig:
    """A complete MCP server configuration."""

    server: ServerConfig
    tools: list[Tool] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"server": self.server.to_dict()}
        if self.tools:
            out["tools"] = [t.to_dict() for t in self.tools]
        return out

    def _json(self) -> dict[str, Any]:
        return {"Server": self.server._json(), "Tools": [t._json() for t in self.tools]}


@dataclass
class ConvertOptions:
    """Options controlling a conversion."""

    server_name: str = ""
    server_config: dict[str, Any] | None = None
    tool_name_prefix: str = ""
    template_path: str = ""


@dataclass
class ToolTemplate:
    """Request and response settings applied to every tool."""

    request_template: RequestTemplate | None = None
    response_template: ResponseTemplate | None = None


@dataclass
class MCPConfigTemplate:
    """A template that patches a generated configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    tools: ToolTemplate = field(default_factory=ToolTemplate)

    @classmethod
    def from_dict(cls, data: Any) -> MCPConfigTemplate:
        """Build a template from decoded YAML; raises ValueError on a wrong shape."""
        m = _mapping(data, "template")
        tools = _mapping(m.get("tools"), "tools")
        request = tools.get("requestTemplate")
        response = tools.get("responseTemplate")
        return cls(
            server=ServerConfig._from_dict(m.get("server")),
            tools=ToolTemplate(
                request_template=None if request is None else RequestTemplate._from_dict(request),
                response_template=None if response is None else ResponseTemplate._from_dict(response),
            ),
        )


class _Dumper(yaml.SafeDumper):
    """Safe dumper that indents sequences inside mappings."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if "\n" in value:
        style = "|"
    elif dumper.resolve(yaml.ScalarNode, value, (True, False)) != _STR_TAG:
        style = '"'
    else:
        style = None
    return dumper.represent_scalar(_STR_TAG, value, style=style)


_Dumper.add_representer(str, _represent_str)


def dump_yaml(config: MCPConfig) -> str:
    """Render a configuration as YAML with two-space indentation."""
    # to_dict builds fresh containers throughout, so no anchors or aliases arise.
    return yaml.dump(
        config.to_dict(),
        Dumper=_Dumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=2**31 - 1,
    )


_JSON_ESCAPES = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def dump_json(config: MCPConfig) -> str:
    """Render a configuration as indented JSON keyed by field names."""
    text = json.dumps(config._json(), indent=2, ensure_ascii=False, default=str)
    for char, escape in _JSON_ESCAPES:
        text = text.replace(char, escape)
    return text