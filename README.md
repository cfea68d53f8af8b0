# openapi2mcp

Turn an OpenAPI 3 specification (JSON or YAML) into an MCP server
configuration. Every operation becomes one tool. Each tool has:

- arguments taken from the operation's parameters and the properties of its
  JSON or form (`application/x-www-form-urlencoded`) request body
- a request template with the URL (first server URL plus the path), the
  upper-cased method and a `Content-Type` header when there is a request body
- a response template whose `prependBody` describes the fields of the first
  2xx response, nested up to ten levels deep

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command line

```
openapi-to-mcp --input petstore.json --output petstore-mcp.yaml --server-name petstore
```

Options (each also accepted with a single dash, e.g. `-input`):

| Option          | Default          | Meaning                                              |
|-----------------|------------------|------------------------------------------------------|
| `--input`       | required         | OpenAPI specification file (JSON or YAML)            |
| `--output`      | required         | Where to write the MCP configuration                 |
| `--server-name` | `openapi-server` | Name of the MCP server                               |
| `--tool-prefix` | empty            | Prefix added to every tool name                      |
| `--format`      | `yaml`           | `json` for JSON output; any other value gives YAML   |
| `--validate`    | off              | Check the specification before converting it         |
| `--template`    | none             | YAML template to merge into the generated config     |

The command creates the output directory if it does not exist. On any
error it prints a message and exits with status 1.

YAML output uses the configuration's own key names (`requestTemplate`,
`argsToJsonBody`, ...) and leaves out empty optional fields. JSON output is
keyed by field name (`Name`, `Description`, `RequestTemplate`, ...) and
includes every field.

### Templates

A template can add server settings and patch every tool in the output:

```yaml
server:
  config:
    apiKey: placeholder
tools:
  requestTemplate:
    headers:
      - key: Authorization
        value: "Bearer token"
  responseTemplate:
    appendBody: "End of response."
```

Server config entries from the template are merged into the server config.
Headers from the template are added after each tool's own headers. Non-empty
`body`, `prependBody` and `appendBody` values replace the tool's values.
The flags `argsToJsonBody`, `argsToUrlParam` and `argsToFormBody` are
switched on when the template sets them.

## Library use

```python
from openapi2mcp.parser import Parser
from openapi2mcp.converter import Converter
from openapi2mcp.models import ConvertOptions, dump_yaml

parser = Parser(validate=False)
parser.parse_file("petstore.json")

config = Converter(parser, ConvertOptions(server_name="petstore")).convert()
print(dump_yaml(config))
```

- `openapi2mcp.parser` — `Parser` loads a document (`parse_file`, `parse`),
  resolves its local `$ref` pointers and exposes `document`, `paths`,
  `servers` and `info`. Problems raise `OpenAPIError`.
- `openapi2mcp.converter` — `Converter.convert()` returns an `MCPConfig`;
  helpers `convert_parameters`, `convert_request_body`, `request_template`
  and `apply_template` are usable on their own. Problems raise
  `ConversionError`.
- `openapi2mcp.schema_docs` — `response_template` and
  `describe_schema_properties` build the response field descriptions.
- `openapi2mcp.models` — the configuration dataclasses, plus `dump_yaml`
  and `dump_json`.

The output is deterministic. Tools are sorted by name and each tool's
arguments by name. If an operation has no `operationId`, the tool name is
built from the lower-cased method and the path, for example
`get_pets_petId` for `GET /pets/{petId}`.

## Limitations

- Only references inside the same document (`#/...`) are followed; external
  references are rejected.
- `--validate` makes a set of basic structural checks (`openapi`, `info`,
  `servers`, paths, parameters and responses), not full schema validation.
- The package only writes the configuration; it does not run an MCP server
  or call the described API.