"""Loading OpenAPI documents and answering questions about them."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml

_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
_PARAMETER_LOCATIONS = {"query", "header", "path", "cookie"}


class OpenAPIError(Exception):
    """An OpenAPI document could not be read, parsed or validated."""


def schema_types(schema: dict[str, Any] | None) -> list[str]:
    """Return the types a schema declares, as a list."""
    if not schema:
        return []
    declared = schema.get("type")
    if isinstance(declared, str):
        return [declared]
    if isinstance(declared, list):
        return [str(t) for t in declared]
    return []


def schema_is(schema: dict[str, Any] | None, type_name: str) -> bool:
    """True when the schema declares exactly the one given type."""
    return schema_types(schema) == [type_name]


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _normalise(value: Any) -> Any:
    if isinstance(value, dict):
        return {_key(k): _normalise(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalise(v) for v in value]
    return value


def _is_ref(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("$ref"), str)


def _resolve_refs(root: dict[str, Any]) -> None:
    """Replace every local $ref with the object it points at, sharing it in place."""

    def target(ref: str, chain: frozenset[str]) -> Any:
        if not ref.startswith("#"):
            raise OpenAPIError(f"encountered disallowed external reference: {ref!r}")
        node: Any = root
        for token in filter(None, ref[1:].split("/")):
            token = unquote(token).replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                raise OpenAPIError(f"failed to resolve reference {ref!r}")
        if _is_ref(node):
            if ref in chain:
                raise OpenAPIError(f"circular reference {ref!r}")
            return target(node["$ref"], chain | {ref})
        return node

    seen: set[int] = set()

    def walk(node: Any) -> None:
        if not isinstance(node, (dict, list)) or id(node) in seen:
            return
        seen.add(id(node))
        entries = list(node.items()) if isinstance(node, dict) else list(enumerate(node))
        for key, value in entries:
            if _is_ref(value):
                value = target(value["$ref"], frozenset())
                node[key] = value
            walk(value)

    walk(root)


def _load(data: bytes | str) -> dict[str, Any]:
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise OpenAPIError(str(exc)) from exc
    else:
        text = data
    try:
        raw = json.loads(text)
    except ValueError:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise OpenAPIError(str(exc)) from exc
    if not isinstance(raw, dict):
        raise OpenAPIError("document must be a mapping")
    doc = _normalise(raw)
    _resolve_refs(doc)
    return doc


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _validate_parameters(parameters: Any, where: str) -> None:
    if parameters is None:
        return
    if not isinstance(parameters, list):
        raise OpenAPIError(f"invalid paths: parameters of {where} must be a list")
    for parameter in parameters:
        if not isinstance(parameter, dict):
            raise OpenAPIError(f"invalid paths: parameter of {where} must be an object")
        name = parameter.get("name")
        if not _non_empty(name):
            raise OpenAPIError(f"invalid paths: parameter of {where} has no name")
        location = parameter.get("in")
        if location not in _PARAMETER_LOCATIONS:
            raise OpenAPIError(f'invalid paths: parameter can\'t have \'in\' value "{location}"')
        if location == "path" and parameter.get("required") is not True:
            raise OpenAPIError(f'invalid paths: path parameter "{name}" must be required')


def _validate(doc: dict[str, Any]) -> None:
    if not _non_empty(doc.get("openapi")):
        raise OpenAPIError("value of openapi must be a non-empty string")
    info = doc.get("info")
    if not isinstance(info, dict):
        raise OpenAPIError("must be an object containing info")
    for key in ("title", "version"):
        if not _non_empty(info.get(key)):
            raise OpenAPIError(f"invalid info: value of {key} must be a non-empty string")
    servers = doc.get("servers") or []
    if not isinstance(servers, list):
        raise OpenAPIError("invalid servers: must be a list")
    for server in servers:
        if not isinstance(server, dict) or not _non_empty(server.get("url")):
            raise OpenAPIError("invalid servers: value of url must be a non-empty string")
    paths = doc.get("paths")
    if not isinstance(paths, dict):
        raise OpenAPIError("invalid paths: must be an object")
    for path, item in paths.items():
        if path.startswith("x-"):
            continue
        if not path.startswith("/"):
            raise OpenAPIError(f'invalid paths: path "{path}" does not start with a forward slash (/)')
        if not isinstance(item, dict):
            raise OpenAPIError(f'invalid paths: path "{path}" must be an object')
        _validate_parameters(item.get("parameters"), path)
        for method in _METHODS:
            operation = item.get(method)
            if operation is None:
                continue
            where = f"{method.upper()} {path}"
            if not isinstance(operation, dict):
                raise OpenAPIError(f"invalid paths: operation {where} must be an object")
            _validate_parameters(operation.get("parameters"), where)
            responses = operation.get("responses")
            if not isinstance(responses, dict) or not responses:
                raise OpenAPIError(
                    f"invalid paths: invalid operation {where}: "
                    "the responses object MUST contain at least one response code"
                )


class Parser:
    """Holds one parsed OpenAPI document, with its local references resolved."""

    def __init__(self, validate: bool = False) -> None:
        self.validate = validate
        self._doc: dict[str, Any] | None = None

    def parse_file(self, file_path: str | Path) -> None:
        """Read and parse an OpenAPI document from a JSON or YAML file."""
        try:
            data = Path(file_path).read_bytes()
        except OSError as exc:
            raise OpenAPIError(f"failed to read OpenAPI file: {exc}") from exc
        self.parse(data)

    def parse(self, data: bytes | str) -> None:
        """Parse an OpenAPI document given as JSON or YAML text."""
        try:
            doc = _load(data)
        except OpenAPIError as exc:
            raise OpenAPIError(f"failed to parse OpenAPI document: {exc}") from exc
        if self.validate:
            try:
                _validate(doc)
            except OpenAPIError as exc:
                raise OpenAPIError(f"invalid OpenAPI document: {exc}") from exc
        self._doc = doc

    @property
    def document(self) -> dict[str, Any] | None:
        """The parsed document, or None before anything was parsed."""
        return self._doc

    @property
    def paths(self) -> dict[str, dict[str, Any]]:
        """Path items keyed by path, without extension entries."""
        if self._doc is None:
            return {}
        paths = self._doc.get("paths")
        if not isinstance(paths, dict):
            return {}
        return {
            path: item
            for path, item in paths.items()
            if not path.startswith("x-") and isinstance(item, dict)
        }

    @property
    def servers(self) -> list[dict[str, Any]]:
        """The servers the document declares."""
        if self._doc is None:
            return []
        servers = self._doc.get("servers")
        if not isinstance(servers, list):
            return []
        return [s for s in servers if isinstance(s, dict)]

    @property
    def info(self) -> dict[str, Any] | None:
        """The info section of the document."""
        if self._doc is None:
            return None
        info = self._doc.get("info")
        return info if isinstance(info, dict) else None

    def operation_id(self, path: str, method: str, operation: dict[str, Any]) -> str:
        """The operation's id, or one made from the method and path."""
        given = operation.get("operationId")
        if _non_empty(given):
            return given
        name = path.replace("/", "_").replace("{", "").replace("}", "")
        return f"{method.lower()}{name}"