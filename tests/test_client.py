"""Tests for the HTTP request executor."""

import base64
import json

import httpx
import pytest

from specbridge.api.auth import AuthKind, CredentialDescriptor
from specbridge.api.client import (
    EMPTY_RESPONSE,
    RequestExecutor,
    build_request_body,
    build_url,
    format_error_response,
    format_response,
)
from specbridge.config.models import HttpConfig
from specbridge.openapi.parser import generate_tools


@pytest.fixture
def tools(petstore):
    """Petstore tools keyed by name."""
    return {tool.name: tool for tool in generate_tools(petstore, "petstore")}


@pytest.fixture
def executor(json_transport):
    """Executor wired to the JSON mock transport."""
    return RequestExecutor(HttpConfig(timeout=5), transport=json_transport)


class TestBuildUrl:
    """URL reconstruction."""

    def test_trailing_slash_is_stripped(self, tools):
        url = build_url(tools["petstore_getPetById"], {"petId": 42})
        assert url == "https://petstore.example.com/v1/pet/42"

    def test_path_values_are_encoded(self, tools):
        url = build_url(tools["petstore_getPetById"], {"petId": "a b/c"})
        assert url == "https://petstore.example.com/v1/pet/a%20b%2Fc"

    def test_missing_path_value_keeps_placeholder(self, tools):
        url = build_url(tools["petstore_getPetById"], {})
        assert url == "https://petstore.example.com/v1/pet/{petId}"


class TestBuildRequestBody:
    """Body selection for tools with a request body."""

    def test_body_wins(self, tools):
        body = build_request_body(
            tools["petstore_addPet"], {"body": {"a": 1}, "requestBody": {"b": 2}, "c": 3}
        )
        assert body == {"a": 1}

    def test_request_body_alias(self, tools):
        body = build_request_body(tools["petstore_addPet"], {"requestBody": {"b": 2}, "c": 3})
        assert body == {"b": 2}

    def test_extras_become_body(self, tools):
        body = build_request_body(tools["petstore_addPet"], {"name": "rex", "tag": "dog"})
        assert body == {"name": "rex", "tag": "dog"}

    def test_no_arguments_no_body(self, tools):
        assert build_request_body(tools["petstore_addPet"], {}) is None

    def test_tool_without_request_body(self, tools):
        assert build_request_body(tools["petstore_getPetById"], {"petId": 1, "body": {}}) is None


class TestExecute:
    """End-to-end execution against a mock transport."""

    @pytest.mark.asyncio
    async def test_get_without_credentials(self, executor, json_transport, tools):
        result = await executor.execute(tools["petstore_getPetById"], {"petId": 42})

        request = json_transport.last
        assert request.method == "GET"
        assert str(request.url) == "https://petstore.example.com/v1/pet/42"
        assert "authorization" not in request.headers
        assert request.headers["content-type"] == "application/json"
        assert request.headers["user-agent"].startswith("specbridge/")
        assert result.startswith("Status: 200 OK\n\nHeaders:\n")
        assert result.endswith('Body:\n{\n  "id": 42,\n  "name": "doggie"\n}')

    @pytest.mark.asyncio
    async def test_api_key_header(self, executor, json_transport, tools):
        credentials = CredentialDescriptor(kind=AuthKind.API_KEY, token="secret", header_name="X-API-Key")

        await executor.execute(tools["petstore_getPetById"], {"petId": 1}, credentials)

        assert json_transport.last.headers["x-api-key"] == "secret"

    @pytest.mark.asyncio
    async def test_basic_header(self, executor, json_transport, tools):
        credentials = CredentialDescriptor(kind=AuthKind.BASIC, username="u", password="p")

        await executor.execute(tools["petstore_getPetById"], {"petId": 1}, credentials)

        expected = base64.b64encode(b"u:p").decode()
        assert json_transport.last.headers["authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_query_parameters(self, executor, json_transport, tools):
        await executor.execute(
            tools["petstore_findPetsByStatus"], {"status": "available", "tags": ["a", "b"]}
        )

        url = json_transport.last.url
        assert url.path == "/v1/pet/findByStatus"
        assert url.params["status"] == "available"
        assert url.params.get_list("tags") == ["a", "b"]

    @pytest.mark.asyncio
    async def test_header_parameter_overrides_and_cookie_is_ignored(self, executor, json_transport, tools):
        credentials = CredentialDescriptor(kind=AuthKind.API_KEY, token="k", header_name="api_key")

        await executor.execute(
            tools["petstore_deletePet"],
            {"petId": 7, "api_key": "explicit", "session": "s1"},
            credentials,
        )

        request = json_transport.last
        assert request.method == "DELETE"
        assert request.headers["api_key"] == "explicit"
        assert "cookie" not in request.headers
        assert "session" not in request.url.params

    @pytest.mark.asyncio
    async def test_json_body_is_sent(self, executor, json_transport, tools):
        await executor.execute(tools["petstore_addPet"], {"body": {"name": "rex"}})

        request = json_transport.last
        assert request.method == "POST"
        assert json.loads(request.content) == {"name": "rex"}

    @pytest.mark.asyncio
    async def test_null_payload_renders_empty(self, transport_factory, tools):
        transport = transport_factory(lambda request: httpx.Response(200, content=b"null"))
        async with RequestExecutor(transport=transport) as executor:
            result = await executor.execute(tools["petstore_getPetById"], {"petId": 1})

        assert result.endswith(f"Body:\n{EMPTY_RESPONSE}")

    @pytest.mark.asyncio
    async def test_text_payload_is_verbatim(self, transport_factory, tools):
        transport = transport_factory(lambda request: httpx.Response(200, text="plain words"))
        async with RequestExecutor(transport=transport) as executor:
            result = await executor.execute(tools["petstore_getPetById"], {"petId": 1})

        assert result.endswith("Body:\nplain words")

    @pytest.mark.asyncio
    async def test_error_status(self, transport_factory, tools):
        transport = transport_factory(
            lambda request: httpx.Response(404, json={"message": "Pet not found"})
        )
        async with RequestExecutor(transport=transport) as executor:
            result = await executor.execute(tools["petstore_getPetById"], {"petId": 999})

        assert result == 'HTTP Error 404: {\n  "message": "Pet not found"\n}'

    @pytest.mark.asyncio
    async def test_network_failure_is_returned_as_text(self, transport_factory, tools):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        async with RequestExecutor(transport=transport_factory(refuse)) as executor:
            result = await executor.execute(tools["petstore_getPetById"], {"petId": 1})

        assert result == "Request failed: Connection refused"


class TestFormatting:
    """Response rendering."""

    def test_format_response_layout(self):
        response = httpx.Response(201, headers={"X-Rate": "5"}, json=[1, 2])

        text = format_response(response)

        status, headers, body = text.split("\n\n")
        assert status == "Status: 201 Created"
        assert "x-rate: 5" in headers.lower()
        assert body == "Body:\n[\n  1,\n  2\n]"

    def test_empty_body(self):
        assert format_response(httpx.Response(204)).endswith(f"Body:\n{EMPTY_RESPONSE}")

    def test_error_without_body_uses_reason(self):
        assert format_error_response(httpx.Response(503)) == 'HTTP Error 503: "Service Unavailable"'

    def test_error_with_text_body(self):
        assert format_error_response(httpx.Response(500, text="boom")) == 'HTTP Error 500: "boom"'
