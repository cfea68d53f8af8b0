[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "openapi2mcp"
version = "0.1.0"
description = "Convert OpenAPI specifications into MCP server tool configurations"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["openapi", "swagger", "mcp", "code-generation", "yaml"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
openapi-to-mcp = "openapi2mcp.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["openapi2mcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
