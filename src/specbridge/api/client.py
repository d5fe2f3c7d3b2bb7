"""Async HTTP executor for compiled tools."""

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx
from httpx import AsyncClient, Response

from ..config.models import HttpConfig
from ..openapi.models import ParameterLocation, ToolDefinition
from ..utils.logging import get_logger
from .auth import CredentialDescriptor, apply_authentication

logger = get_logger("api.client")

EMPTY_RESPONSE = "(empty response)"


@dataclass(slots=True)
class PreparedRequest:
    """Request reconstructed from a tool call, before it is sent."""

    method: str
    url: str
    headers: dict[str, str]
    params: dict[str, Any] = field(default_factory=dict)
    body: Any = None


def stringify(value: Any) -> str:
    """Render an argument for a path segment or header."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RequestExecutor:
    """Executes tool calls as HTTP requests.

    One attempt per call. Failures of any kind are returned as text, never
    raised, since the MCP host only relays text results.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Outbound HTTP configuration
            transport: Optional transport, used to stub the network in tests
        """
        self.config = config or HttpConfig()
        self.client = AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=self.config.follow_redirects,
            transport=transport,
        )

    async def __aenter__(self) -> "RequestExecutor":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def execute(
        self,
        tool: ToolDefinition,
        arguments: dict[str, Any],
        credentials: CredentialDescriptor | None = None,
    ) -> str:
        """Run a tool call and render the outcome.

        Args:
            tool: Compiled tool definition
            arguments: Validated arguments keyed by parameter name
            credentials: Descriptor for the tool's namespace, if any

        Returns:
            Formatted response or error text
        """
        try:
            request = self.build_request(tool, arguments, credentials)

            logger.debug(
                "Executing tool request",
                tool=tool.name,
                method=request.method,
                url=request.url,
            )

            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params or None,
                json=request.body,
            )
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.info(
                "Tool request returned error status",
                tool=tool.name,
                status_code=e.response.status_code,
            )
            return format_error_response(e.response)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.warning("Tool request failed", tool=tool.name, error=str(e))
            return f"Request failed: {_error_message(e)}"
        except Exception as e:
            logger.error("Unexpected error executing tool", tool=tool.name, error=str(e))
            return f"Request failed: {_error_message(e)}"

        return format_response(response)

    def build_request(
        self,
        tool: ToolDefinition,
        arguments: dict[str, Any],
        credentials: CredentialDescriptor | None = None,
    ) -> PreparedRequest:
        """Reconstruct the HTTP request for a tool call."""
        headers = apply_authentication(
            {
                "Content-Type": "application/json",
                "User-Agent": self.config.user_agent,
            },
            credentials,
        )

        for param in tool.parameters_in(ParameterLocation.HEADER):
            if param.name in arguments:
                headers[param.name] = stringify(arguments[param.name])

        return PreparedRequest(
            method=tool.method.value,
            url=build_url(tool, arguments),
            headers=headers,
            params=build_query_params(tool, arguments),
            body=build_request_body(tool, arguments),
        )


def build_url(tool: ToolDefinition, arguments: dict[str, Any]) -> str:
    """Join base URL and path, substituting supplied path parameters.

    Placeholders without an argument are left in place.
    """
    url = tool.base_url.rstrip("/") + tool.path

    for param in tool.parameters_in(ParameterLocation.PATH):
        if param.name in arguments:
            url = url.replace(
                f"{{{param.name}}}",
                quote(stringify(arguments[param.name]), safe="-_.!~*'()"),
            )

    return url


def build_query_params(tool: ToolDefinition, arguments: dict[str, Any]) -> dict[str, Any]:
    """Collect supplied query parameters. Cookie parameters are never sent."""
    return {
        param.name: arguments[param.name]
        for param in tool.parameters_in(ParameterLocation.QUERY)
        if param.name in arguments
    }


def build_request_body(tool: ToolDefinition, arguments: dict[str, Any]) -> Any:
    """Pick the JSON body for tools that declare one.

    ``body`` wins over ``requestBody``; without either, arguments that are
    not declared parameters are gathered into an object.
    """
    if not tool.has_request_body:
        return None

    if "body" in arguments:
        return arguments["body"]

    if "requestBody" in arguments:
        return arguments["requestBody"]

    declared = tool.parameter_names
    body = {key: value for key, value in arguments.items() if key not in declared}
    return body or None


def _payload(response: Response) -> Any:
    """Decoded JSON payload, raw text when it is not JSON, None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def format_response(response: Response) -> str:
    """Render a successful response as status, headers and body."""
    headers = "\n".join(f"{key}: {value}" for key, value in response.headers.items())

    data = _payload(response)
    if isinstance(data, str):
        body = data
    elif data is None:
        body = EMPTY_RESPONSE
    else:
        body = json.dumps(data, indent=2, ensure_ascii=False)

    return (
        f"Status: {response.status_code} {response.reason_phrase}\n\n"
        f"Headers:\n{headers}\n\n"
        f"Body:\n{body}"
    )


def format_error_response(response: Response) -> str:
    """Render a non-2xx response."""
    message = _payload(response)
    if message is None:
        message = response.reason_phrase
    return f"HTTP Error {response.status_code}: {json.dumps(message, indent=2, ensure_ascii=False)}"


def _error_message(error: Exception) -> str:
    return str(error) or type(error).__name__
