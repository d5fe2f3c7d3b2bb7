"""Static tool definitions for the APIs.guru directory."""

from pathlib import Path

from .models import HttpMethod, ParameterLocation, ParameterSpec, ParsedSpec, ToolDefinition

APIS_GURU_BASE_URL = "https://api.apis.guru/v2"


def apis_guru_spec() -> ParsedSpec:
    """Directory lookup tools, compiled without a backing document."""
    tools = [
        ToolDefinition(
            name="apisguru_getProviders",
            description=(
                "Get a list of all API providers in the APIs.guru directory "
                '(e.g., "googleapis.com", "github.com", "stripe.com"). Start here to '
                "explore what companies and services have APIs available for download."
            ),
            method=HttpMethod.GET,
            path="/providers.json",
            base_url=APIS_GURU_BASE_URL,
        ),
        ToolDefinition(
            name="apisguru_getProvider",
            description=(
                "List all APIs available from a specific provider. Provide a provider "
                "name (from apisguru_getProviders) to see their available API "
                "specifications with download URLs."
            ),
            method=HttpMethod.GET,
            path="/{provider}.json",
            base_url=APIS_GURU_BASE_URL,
            parameters=(
                ParameterSpec(
                    name="provider",
                    location=ParameterLocation.PATH,
                    required=True,
                    schema={"type": "string"},
                    description='Provider name (e.g., "stripe.com", "github.com", "openai.com")',
                ),
            ),
        ),
        ToolDefinition(
            name="apisguru_getMetrics",
            description=(
                "Get basic statistics about the APIs.guru directory, including total "
                "number of APIs, endpoints, and providers. Use this to understand the "
                "scope of available APIs."
            ),
            method=HttpMethod.GET,
            path="/metrics.json",
            base_url=APIS_GURU_BASE_URL,
        ),
    ]

    return ParsedSpec(
        api_name="apisguru",
        file_path=Path("<built-in>"),
        document={},
        tools=tools,
    )
