"""CLI entry point for SpecBridge."""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from .config.models import SpecBridgeConfig, TransportType
from .utils.logging import setup_logging

if TYPE_CHECKING:
    from .server.mcp_server import SpecBridgeServer

app = typer.Typer(
    name="specbridge",
    help="Bridge OpenAPI specifications to MCP tools - automatically generates tools from OpenAPI specs",
    add_completion=False,
)

TOOL_PREVIEW_COUNT = 5


def _load_config(
    config: Path | None,
    specs: Path | None,
    host: str | None = None,
    port: int | None = None,
    transport: str | None = None,
) -> SpecBridgeConfig:
    overrides: dict[str, str | int | Path] = {}
    if specs:
        overrides["specs_path"] = specs.resolve()
    if host:
        overrides["host"] = host
    if port:
        overrides["port"] = port
    if transport:
        overrides["transport"] = transport
    return SpecBridgeConfig.create(config, overrides)


def _report_validation_error(error: ValidationError) -> None:
    typer.echo("Configuration error:", err=True)
    for item in error.errors():
        location = " -> ".join(str(loc) for loc in item["loc"])
        typer.echo(f"  {location}: {item['msg']}", err=True)


@app.command()
def serve(
    specs: Path | None = typer.Option(
        None,
        "--specs",
        "-s",
        help="Path to directory containing OpenAPI spec files (defaults to the current directory)",
        file_okay=False,
        dir_okay=True,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    host: str | None = typer.Option(
        None,
        "--host",
        "-h",
        help="Server host (overrides config)",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port number for network transports (overrides config)",
    ),
    transport: str | None = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport type: stdio, http, sse (overrides config)",
    ),
) -> None:
    """Start the SpecBridge MCP server."""
    try:
        config_obj = _load_config(config, specs, host, port, transport)
    except ValidationError as e:
        _report_validation_error(e)
        raise typer.Exit(1)
    except Exception as e:
        typer.echo(f"Error loading configuration: {e}", err=True)
        raise typer.Exit(1)

    setup_logging(config_obj.logging)

    is_stdio = config_obj.server.transport == TransportType.STDIO
    if not is_stdio:
        typer.echo(f"Starting SpecBridge server: {config_obj.server.name}")
        typer.echo(f"Transport: {config_obj.server.transport.value}")
        typer.echo(f"Address: {config_obj.server.host}:{config_obj.server.port}")
        typer.echo(f"Specs directory: {config_obj.specs.path}")

    from .server.factory import create_mcp_server

    async def run_server() -> None:
        server = await create_mcp_server(config_obj)

        try:
            server_runner = await server.get_server_runner()
            if not is_stdio:
                typer.echo(f"✓ SpecBridge started with {len(server.registry)} API tools")
            await server_runner()
        finally:
            await server.cleanup()

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        typer.echo("\nShutting down...", err=True)
    except Exception as e:
        typer.echo(f"✗ Server failed: {e}", err=True)
        raise typer.Exit(1) from e


@app.command("list")
def list_command(
    specs: Path | None = typer.Option(
        None,
        "--specs",
        "-s",
        help="Path to directory containing OpenAPI spec files",
        file_okay=False,
        dir_okay=True,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """List loaded OpenAPI specifications and their tools."""
    try:
        config_obj = _load_config(config, specs)
    except ValidationError as e:
        _report_validation_error(e)
        raise typer.Exit(1)

    setup_logging(config_obj.logging)

    from .server.factory import create_mcp_server

    async def collect() -> None:
        server = await create_mcp_server(config_obj)
        try:
            await server.load_tools()
            _print_status(config_obj, server)
        finally:
            await server.cleanup()

    try:
        asyncio.run(collect())
    except Exception as e:
        typer.echo(f"Failed to list specs: {e}", err=True)
        raise typer.Exit(1)


def _print_status(config_obj: SpecBridgeConfig, server: "SpecBridgeServer") -> None:
    specs = [spec for spec in server.registry.specs if spec.api_name != "apisguru"]
    credentials = server.credentials

    typer.echo("\n=== SpecBridge Status ===\n")
    typer.echo(f"Specs Directory: {config_obj.specs.path}")
    typer.echo(f"Loaded Specifications: {len(specs)}")

    typer.echo("\n=== Built-in Spec Management Tools ===\n")
    typer.echo("🔧 specbridge_list_specs - List all OpenAPI specification files")
    typer.echo("📄 specbridge_get_spec - Get the content of a specific spec file")
    typer.echo("✏️ specbridge_update_spec - Update the content of a specific spec file")
    typer.echo("⬇️ specbridge_download_spec - Download and save specs from URLs")

    typer.echo("\n=== Built-in APIs.guru Discovery Tools ===\n")
    typer.echo("🏢 apisguru_getProviders - List API providers (Google, GitHub, Stripe, etc.)")
    typer.echo("🔍 apisguru_getProvider - Get all APIs from a specific provider with download URLs")
    typer.echo("📊 apisguru_getMetrics - Get directory statistics (total APIs, endpoints, providers)")

    if not specs:
        typer.echo("\nNo OpenAPI specifications found.")
        typer.echo("Add .json, .yaml, or .yml files to the specs directory.")
    else:
        typer.echo("\n=== Generated API Tools ===\n")
        for spec in specs:
            typer.echo(f"📋 {spec.api_name.upper()}")
            typer.echo(f"   File: {spec.file_path.name}")
            typer.echo(f"   Base URL: {spec.base_url or 'N/A'}")
            typer.echo(f"   Tools: {len(spec.tools)}")

            auth = credentials.get(spec.api_name)
            if auth:
                header = f" ({auth.header_name})" if auth.kind == "apiKey" else ""
                typer.echo(f"   Auth: {auth.kind.value}{header}")
            else:
                typer.echo("   Auth: None configured")

            if spec.tools:
                typer.echo("   Available tools:")
                for tool in spec.tools[:TOOL_PREVIEW_COUNT]:
                    typer.echo(f"     • {tool.name} - {tool.description}")
                if len(spec.tools) > TOOL_PREVIEW_COUNT:
                    typer.echo(f"     ... and {len(spec.tools) - TOOL_PREVIEW_COUNT} more")

    typer.echo("\n=== Authentication Configuration ===\n")
    if not credentials:
        typer.echo("No authentication configured.")
        typer.echo("Add a .env file with credentials like:")
        typer.echo("  PETSTORE_API_KEY=your_key_here")
        typer.echo("  GITHUB_TOKEN=your_token_here")
    else:
        for api_name, auth in credentials.items():
            typer.echo(f"🔐 {api_name.upper()}: {auth.kind.value}")


@app.command("validate-config")
def validate_config_command(
    config: Path = typer.Argument(
        ...,
        help="Path to configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Validate configuration file."""
    try:
        config_obj = SpecBridgeConfig.create(config)

        typer.echo("✓ Configuration is valid")
        server = config_obj.server
        address = "stdio" if server.transport == TransportType.STDIO else f"{server.host}:{server.port}"
        typer.echo(f"  Server: {address} ({server.transport.value})")
        typer.echo(f"  Specs: {config_obj.specs.path}")
        typer.echo(f"  HTTP timeout: {config_obj.http.timeout}s")

    except ValidationError as e:
        typer.echo("✗ Configuration validation failed:", err=True)
        for error in e.errors():
            location = " -> ".join(str(loc) for loc in error["loc"])
            typer.echo(f"  {location}: {error['msg']}", err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.echo(f"Error loading configuration: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    typer.echo(f"SpecBridge version {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
