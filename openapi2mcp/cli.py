"""Command line entry point: convert an OpenAPI file into an MCP configuration file."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from .converter import ConversionError, Converter
from .models import ConvertOptions, dump_json, dump_yaml
from .parser import OpenAPIError, Parser


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-to-mcp",
        description="Convert an OpenAPI specification into an MCP server configuration.",
    )
    parser.add_argument(
        "-input",
        "--input",
        dest="input",
        default="",
        help="Path to the OpenAPI specification file (JSON or YAML)",
    )
    parser.add_argument(
        "-output",
        "--output",
        dest="output",
        default="",
        help="Path to the output MCP configuration file (YAML)",
    )
    parser.add_argument(
        "-server-name",
        "--server-name",
        dest="server_name",
        default="openapi-server",
        help="Name of the MCP server",
    )
    parser.add_argument(
        "-tool-prefix",
        "--tool-prefix",
        dest="tool_prefix",
        default="",
        help="Prefix for tool names",
    )
    parser.add_argument(
        "-format",
        "--format",
        dest="format",
        default="yaml",
        help="Output format (yaml or json)",
    )
    parser.add_argument(
        "-validate",
        "--validate",
        dest="validate",
        action="store_true",
        help="Validate the OpenAPI specification",
    )
    parser.add_argument(
        "-template",
        "--template",
        dest="template",
        default="",
        help="Path to a template file to patch the output",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the converter; returns the process exit status."""
    arg_parser = _build_parser()
    args = arg_parser.parse_args(argv)

    if not args.input:
        print("Error: input file is required")
        arg_parser.print_help(sys.stderr)
        return 1
    if not args.output:
        print("Error: output file is required")
        arg_parser.print_help(sys.stderr)
        return 1

    parser = Parser(validate=args.validate)
    try:
        parser.parse_file(args.input)
    except OpenAPIError as exc:
        print(f"Error parsing OpenAPI specification: {exc}")
        return 1

    converter = Converter(
        parser,
        ConvertOptions(
            server_name=args.server_name,
            tool_name_prefix=args.tool_prefix,
            template_path=args.template,
        ),
    )
    try:
        config = converter.convert()
    except ConversionError as exc:
        print(f"Error converting OpenAPI specification: {exc}")
        return 1

    output = Path(args.output)
    output_dir = output.parent
    if str(output_dir) not in ("", "."):
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            print(f"Error creating output directory: {exc}")
            return 1

    try:
        text = dump_json(config) if args.format == "json" else dump_yaml(config)
    except (TypeError, ValueError) as exc:
        print(f"Error marshaling MCP configuration: {exc}")
        return 1

    try:
        output.write_bytes(text.encode("utf-8"))
    except OSError as exc:
        print(f"Error writing MCP configuration: {exc}")
        return 1

    print(f"Successfully converted OpenAPI specification to MCP configuration: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())