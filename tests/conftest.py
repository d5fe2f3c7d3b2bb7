"""Shared fixtures for SpecBridge tests."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
import yaml

from specbridge.config.models import HttpConfig, SpecBridgeConfig, SpecsConfig

PETSTORE_BASE_URL = "https://petstore.example.com/v1"


def petstore_document() -> dict[str, Any]:
    """A trimmed Petstore document covering every parameter location."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Petstore", "version": "1.0.0"},
        "servers": [{"url": PETSTORE_BASE_URL + "/"}],
        "paths": {
            "/pet": {
                "post": {
                    "operationId": "addPet",
                    "summary": "Add a new pet to the store",
                    "requestBody": {
                        "content": {"application/json": {"schema": {"type": "object"}}}
                    },
                    "responses": {"200": {"description": "ok"}},
                },
            },
            "/pet/findByStatus": {
                "get": {
                    "operationId": "findPetsByStatus",
                    "description": "Multiple status values can be provided",
                    "parameters": [
                        {
                            "name": "status",
                            "in": "query",
                            "schema": {"type": "string", "enum": ["available", "sold"]},
                            "description": "Status values to filter by",
                        },
                        {
                            "name": "tags",
                            "in": "query",
                            "schema": {"type": "array", "items": {"type": "string"}},
                        },
                    ],
                },
            },
            "/pet/{petId}": {
                "parameters": [
                    {
                        "name": "petId",
                        "in": "path",
                        "schema": {"type": "integer"},
                        "description": "ID of pet",
                    },
                ],
                "get": {
                    "operationId": "getPetById",
                    "summary": "Find pet by ID",
                    "security": [{"api_key": []}],
                },
                "delete": {
                    "operationId": "deletePet",
                    "parameters": [
                        {"name": "api_key", "in": "header", "schema": {"type": "string"}},
                        {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                    ],
                },
            },
            "/store/inventory": {
                "get": {"responses": {"200": {"description": "ok"}}},
            },
        },
    }


@pytest.fixture
def petstore() -> dict[str, Any]:
    """Fresh Petstore document."""
    return petstore_document()


@pytest.fixture
def specs_dir(tmp_path: Path) -> Path:
    """Empty specs directory."""
    path = tmp_path / "specs"
    path.mkdir()
    return path


@pytest.fixture
def write_spec(specs_dir: Path) -> Callable[[str, Any], Path]:
    """Write a document into the specs directory as JSON or YAML by extension."""

    def _write(filename: str, document: Any) -> Path:
        path = specs_dir / filename
        if isinstance(document, str):
            path.write_text(document, encoding="utf-8")
        elif path.suffix == ".json":
            path.write_text(json.dumps(document), encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config(specs_dir: Path) -> SpecBridgeConfig:
    """Configuration pointing at the temporary specs directory."""
    return SpecBridgeConfig(specs=SpecsConfig(path=specs_dir), http=HttpConfig(timeout=5))


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def json_transport() -> RecordingTransport:
    """Transport answering every request with a small JSON object."""
    return RecordingTransport(lambda request: httpx.Response(200, json={"id": 42, "name": "doggie"}))


@pytest.fixture
def transport_factory() -> type[RecordingTransport]:
    """Build recording transports with a custom handler."""
    return RecordingTransport
