"""OpenAPI description compiler.

Turns a description document into an ordered list of ``ToolDefinition``
objects, one per operation. References are not resolved: parameters given
as ``$ref`` are dropped, and the request body is carried as declared.
"""

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import yaml

from ..utils.errors import DocumentParseError
from ..utils.logging import get_logger
from .models import (
    PLACEHOLDER_BASE_URL,
    CompileResult,
    CompileStatus,
    HttpMethod,
    ParameterLocation,
    ParameterSpec,
    ParsedSpec,
    ToolDefinition,
)

logger = get_logger("openapi.parser")

DESCRIPTION_EXTENSIONS = (".json", ".yaml", ".yml")

SKIP_FILES = frozenset(
    {
        "package.json",
        "package-lock.json",
        "tsconfig.json",
        ".eslintrc.json",
        "jest.config.json",
    }
)

_NAME_HINTS = ("openapi", "swagger", "api")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def get_api_name(file_path: Path | str) -> str:
    """Derive the tool namespace from a file name.

    ``my-custom_Api.yaml`` becomes ``mycustomapi``.
    """
    stem = Path(file_path).stem
    return stem.lower().replace("-", "").replace("_", "")


def is_description_file(
    file_path: Path | str,
    extensions: tuple[str, ...] | list[str] = DESCRIPTION_EXTENSIONS,
    skip_files: frozenset[str] | list[str] = SKIP_FILES,
) -> bool:
    """Check whether a file name is a candidate description document."""
    path = Path(file_path)
    if path.suffix.lower() not in extensions:
        return False
    return path.name.lower() not in skip_files


def load_document(file_path: Path) -> Any:
    """Read and parse a JSON or YAML file.

    Args:
        file_path: File to load

    Returns:
        Parsed data, whatever its shape

    Raises:
        DocumentParseError: If the file cannot be read or parsed
    """
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentParseError(file_path, str(e)) from e

    try:
        if file_path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentParseError(file_path, str(e)) from e


def is_openapi_document(data: Any) -> bool:
    """A description document is a mapping declaring its format version."""
    return isinstance(data, dict) and ("openapi" in data or "swagger" in data)


def check_structure(file_path: Path, document: dict[str, Any]) -> None:
    """Check the top-level shape the compiler relies on.

    Raises:
        DocumentParseError: If a required section is missing or malformed
    """
    if not isinstance(document.get("info"), dict):
        raise DocumentParseError(file_path, "missing or invalid 'info' object")

    paths = document.get("paths")
    if paths is not None and not isinstance(paths, dict):
        raise DocumentParseError(file_path, "'paths' must be an object")

    servers = document.get("servers")
    if servers is not None and not isinstance(servers, list):
        raise DocumentParseError(file_path, "'servers' must be an array")


async def parse_openapi_spec(file_path: Path | str) -> CompileResult:
    """Load and compile one candidate file.

    Args:
        file_path: Path to a candidate description document

    Returns:
        Compile result; ``spec`` is set only when the file compiled
    """
    path = Path(file_path)

    try:
        data = await asyncio.to_thread(load_document, path)
        if not is_openapi_document(data):
            logger.debug("Skipping file, not an OpenAPI document", file=path.name)
            return CompileResult(CompileStatus.NOT_APPLICABLE, path)
        check_structure(path, data)
    except DocumentParseError as e:
        _log_parse_failure(path, e)
        return CompileResult(CompileStatus.PARSE_FAILED, path, error=e.reason)

    api_name = get_api_name(path)
    tools = generate_tools(data, api_name)

    logger.debug(
        "Compiled OpenAPI document",
        file=path.name,
        api_name=api_name,
        tool_count=len(tools),
    )
    return CompileResult(
        CompileStatus.COMPILED,
        path,
        spec=ParsedSpec(api_name=api_name, file_path=path, document=data, tools=tools),
    )


def _log_parse_failure(path: Path, error: DocumentParseError) -> None:
    """Log loudly only for files that look like they should be descriptions."""
    name = path.name.lower()
    if any(hint in name for hint in _NAME_HINTS):
        logger.error("Failed to parse OpenAPI document", file=str(path), error=error.reason)
    else:
        logger.info("Skipping file, not a valid OpenAPI document", file=path.name)


def generate_tools(document: dict[str, Any], api_name: str) -> list[ToolDefinition]:
    """Compile every operation of a document into tool definitions.

    Args:
        document: Parsed description document
        api_name: Namespace prefix for tool names

    Returns:
        Tool definitions in path order, then method order
    """
    tools: list[ToolDefinition] = []
    base_url = get_base_url(document)

    paths = document.get("paths")
    if not paths:
        return tools

    for path_template, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        for method in HttpMethod:
            operation = path_item.get(method.lower())
            if not operation:
                continue

            try:
                tool = create_tool(
                    api_name,
                    str(path_template),
                    method,
                    operation,
                    base_url,
                    path_item.get("parameters"),
                )
            except Exception as e:
                logger.error(
                    "Failed to create tool for operation",
                    method=method.value,
                    path=path_template,
                    error=str(e),
                )
                continue

            tools.append(tool)

    return tools


def create_tool(
    api_name: str,
    path_template: str,
    method: HttpMethod,
    operation: dict[str, Any],
    base_url: str,
    path_level_params: list[Any] | None = None,
) -> ToolDefinition:
    """Build the tool definition for a single operation."""
    all_params = [*(path_level_params or []), *(operation.get("parameters") or [])]

    return ToolDefinition(
        name=generate_tool_name(api_name, operation, path_template, method),
        description=(
            operation.get("summary")
            or operation.get("description")
            or f"{method.value} {path_template}"
        ),
        operation_id=_operation_id(operation),
        method=method,
        path=path_template,
        parameters=tuple(extract_parameters(all_params)),
        request_body=operation.get("requestBody"),
        responses=operation.get("responses"),
        security=operation.get("security") or [],
        base_url=base_url,
    )


def generate_tool_name(
    api_name: str,
    operation: dict[str, Any],
    path_template: str,
    method: HttpMethod | str,
) -> str:
    """Build a namespaced tool name.

    ``{api}_{operationId}`` when the operation has an identifier, otherwise
    ``{api}_{method}_{static_path_segments}``.
    """
    operation_id = _operation_id(operation)
    if operation_id:
        return f"{api_name}_{operation_id}"

    parts = [
        _NON_ALNUM.sub("", part)
        for part in path_template.split("/")
        if part and not part.startswith("{")
    ]
    path_name = "_".join(parts) or "root"
    return f"{api_name}_{str(method).lower()}_{path_name}"


def _operation_id(operation: dict[str, Any]) -> str | None:
    """Declared identifier as text; YAML may load it as a number."""
    operation_id = operation.get("operationId")
    if not operation_id:
        return None
    return str(operation_id)


def extract_parameters(raw_params: list[Any]) -> list[ParameterSpec]:
    """Keep inline parameters that carry a location, name and schema."""
    parameters: list[ParameterSpec] = []

    for raw in raw_params:
        if not isinstance(raw, dict) or "$ref" in raw:
            continue

        location, name, schema = raw.get("in"), raw.get("name"), raw.get("schema")
        if not (location and name) or schema is None:
            continue

        try:
            location = ParameterLocation(location)
        except ValueError:
            logger.debug("Skipping parameter with unsupported location", name=name, location=location)
            continue

        parameters.append(
            ParameterSpec(
                name=str(name),
                location=location,
                required=bool(raw.get("required")) or location == ParameterLocation.PATH,
                schema=schema,
                description=raw.get("description"),
            )
        )

    return parameters


def get_base_url(document: dict[str, Any]) -> str:
    """First declared server URL, or the placeholder."""
    servers = document.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return str(servers[0]["url"])
    return PLACEHOLDER_BASE_URL
