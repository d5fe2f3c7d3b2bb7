"""Handlers for the built-in spec management tools."""

import asyncio
import json
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path

import httpx

from ..config.models import SpecBridgeConfig
from ..openapi.models import CompileResult
from ..openapi.parser import is_description_file, parse_openapi_spec
from ..utils.logging import get_logger
from .models import SpecFileInfo

logger = get_logger("mcp.handlers")

GENERIC_SPEC_NAMES = frozenset({"openapi.json", "openapi.yaml", "openapi.yml"})

DOWNLOAD_ACCEPT = "application/json, application/x-yaml, text/yaml, text/x-yaml, */*"

RESTART_HINT = "🔄 **Please restart the MCP server to see the {what} tools.**"


class SpecHandlers:
    """List, read, update and download description documents.

    Every handler returns text; errors are reported in the text rather than
    raised to the MCP host.
    """

    def __init__(self, config: SpecBridgeConfig, client: httpx.AsyncClient) -> None:
        """Initialize spec handlers.

        Args:
            config: Server configuration
            client: HTTP client used for downloads
        """
        self.config = config
        self.client = client

    @property
    def specs_path(self) -> Path:
        return self.config.specs.path

    def _is_spec_name(self, filename: str) -> bool:
        return is_description_file(
            filename, self.config.specs.extensions, self.config.specs.skip_files
        )

    def _resolve(self, filename: str) -> Path | None:
        """Resolve a file name inside the specs directory, or None if it escapes."""
        root = self.specs_path.resolve()
        candidate = (root / filename).resolve()
        if not candidate.is_relative_to(root):
            return None
        return candidate

    async def list_specs(self) -> str:
        """Describe every description file in the specs directory."""
        try:
            entries = await asyncio.to_thread(self._scan_specs)
        except OSError as e:
            logger.error("Failed to list specs", error=str(e))
            return f"Error listing specs: {e}"

        lines = [f"Found {len(entries)} OpenAPI specification files:", ""]
        for entry in entries:
            lines.extend(
                [
                    f"📄 {entry.filename}",
                    f"   Path: {entry.path}",
                    f"   Size: {entry.size_kb:.1f} KB",
                    f"   Modified: {entry.modified.isoformat()}",
                    f"   Format: {entry.extension}",
                    "",
                ]
            )
        return "\n".join(lines).rstrip()

    def _scan_specs(self) -> list[SpecFileInfo]:
        if not self.specs_path.exists():
            return []

        entries = []
        for path in sorted(self.specs_path.iterdir()):
            if not path.is_file() or not self._is_spec_name(path.name):
                continue
            stats = path.stat()
            entries.append(
                SpecFileInfo(
                    filename=path.name,
                    path=path,
                    size_kb=stats.st_size / 1024,
                    modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
                    extension=path.suffix,
                )
            )
        return entries

    async def get_spec(self, filename: str) -> str:
        """Return a description file's content in a fenced block."""
        file_path = self._resolve(filename)
        if file_path is None:
            return "Error: Access denied. File must be within the specs directory."

        if not self._is_spec_name(filename):
            return (
                f'Error: "{filename}" is not a valid OpenAPI specification file. '
                "Must be .json, .yaml, or .yml."
            )

        try:
            content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return f'Error: File "{filename}" not found in specs directory.'
        except OSError as e:
            logger.error("Failed to read spec", file=filename, error=str(e))
            return f"Error reading spec: {e}"

        return f"Content of {filename}:\n\n```{file_path.suffix.lstrip('.')}\n{content}\n```"

    async def update_spec(self, filename: str, content: str) -> str:
        """Validate, back up and overwrite a description file."""
        file_path = self._resolve(filename)
        if file_path is None:
            return "Error: Access denied. File must be within the specs directory."

        if not self._is_spec_name(filename):
            return (
                f'Error: "{filename}" is not a valid OpenAPI specification file. '
                "Must be .json, .yaml, or .yml."
            )

        error = validate_spec_content(filename, content)
        if error:
            return error

        try:
            backup_created = await asyncio.to_thread(_write_with_backup, file_path, content)
        except OSError as e:
            logger.error("Failed to update spec", file=filename, error=str(e))
            return f"Error updating spec: {e}"

        logger.info("Spec updated", file=filename, backup=backup_created)

        result = await parse_openapi_spec(file_path)
        if result.ok:
            return (
                f'✅ Successfully updated "{filename}".\n'
                + ("📄 Backup created.\n" if backup_created else "")
                + _tools_report(result)
                + RESTART_HINT.format(what="updated")
            )

        return (
            f'⚠️ File "{filename}" was updated but failed OpenAPI validation. '
            "The file was saved but tools may not work correctly. "
            "Please check the OpenAPI specification format and restart the server."
        )

    async def download_spec(self, url: str, filename: str) -> str:
        """Download a description document and save it under a chosen name."""
        if not self._is_spec_name(filename):
            return (
                f'Error: "{filename}" is not a valid OpenAPI specification filename. '
                "Must end with .json, .yaml, or .yml."
            )

        if filename.lower() in GENERIC_SPEC_NAMES:
            return (
                f'Error: Please choose a more descriptive filename instead of "{filename}". '
                "Consider names like:\n"
                '  • "stripe-payments.json" for Stripe API\n'
                '  • "github-repos.json" for GitHub API\n'
                '  • "twilio-messaging.json" for Twilio Messaging\n'
                '  • "openai-completions.json" for OpenAI API\n\n'
                "This helps identify which API is which when you have multiple specs."
            )

        file_path = self._resolve(filename)
        if file_path is None:
            return "Error: Access denied. File must be within the specs directory."

        if file_path.exists():
            return (
                f'Error: File "{filename}" already exists. Please choose a different '
                "filename or use specbridge_update_spec to modify it."
            )

        try:
            response = await self.client.get(
                url,
                headers={
                    "User-Agent": self.config.http.user_agent,
                    "Accept": DOWNLOAD_ACCEPT,
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return f"Error downloading spec: HTTP {e.response.status_code} - {e}"
        except httpx.HTTPError as e:
            return f"Error downloading spec: {e}"

        content = _downloaded_text(response)

        try:
            await asyncio.to_thread(_write_new, file_path, content)
        except OSError as e:
            logger.error("Failed to save downloaded spec", file=filename, error=str(e))
            return f"Error downloading spec: {e}"

        logger.info("Spec downloaded", url=url, file=filename, size=len(content))

        result = await parse_openapi_spec(file_path)
        if result.ok:
            return (
                f'✅ Successfully downloaded and saved "{filename}".\n'
                f"📁 Saved to: {file_path}\n"
                + _tools_report(result)
                + RESTART_HINT.format(what="new")
            )

        return (
            f'⚠️ Downloaded "{filename}" but it failed OpenAPI validation. '
            "The file was saved but may not generate tools correctly. "
            "Please check the content and restart the server."
        )


def validate_spec_content(filename: str, content: str) -> str | None:
    """Cheap syntax check before a spec file is overwritten.

    Returns:
        Error text, or None when the content is acceptable
    """
    is_json = filename.lower().endswith(".json")
    try:
        if is_json:
            json.loads(content)
        elif not content.strip():
            raise ValueError("Content cannot be empty")
    except ValueError as e:
        return f"Error: Invalid {'JSON' if is_json else 'YAML'} content. {e}"
    return None


def _write_with_backup(file_path: Path, content: str) -> bool:
    backup_created = False
    if file_path.exists():
        backup_path = file_path.with_name(f"{file_path.name}.backup.{int(time.time() * 1000)}")
        shutil.copyfile(file_path, backup_path)
        backup_created = True
    file_path.write_text(content, encoding="utf-8")
    return backup_created


def _write_new(file_path: Path, content: str) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")


def _downloaded_text(response: httpx.Response) -> str:
    """Keep text payloads as-is; re-serialize JSON payloads with indentation."""
    if "json" not in response.headers.get("content-type", ""):
        return response.text
    try:
        return json.dumps(response.json(), indent=2, ensure_ascii=False)
    except ValueError:
        return response.text


def _tools_report(result: CompileResult) -> str:
    tools = result.spec.tools if result.spec else []
    names = "\n".join(f"  • {tool.name}" for tool in tools)
    return (
        f"🔧 Spec validated successfully - found {len(tools)} tools.\n\n"
        f"Tools that will be available after restart:\n{names}\n\n"
    )
