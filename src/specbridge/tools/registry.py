"""Registry of tools compiled from the specs directory."""

import asyncio
from collections.abc import Callable
from pathlib import Path

from ..config.models import SpecsConfig
from ..openapi.models import CompileStatus, ParsedSpec
from ..openapi.parser import is_description_file, parse_openapi_spec
from ..utils.logging import get_logger
from .models import RegisteredTool, ToolCollision

logger = get_logger("tools.registry")

CollisionHook = Callable[[ToolCollision], None]


class ToolRegistry:
    """Holds every compiled tool, keyed by name.

    Tool names are namespaced by file name, so distinct documents only
    collide when their names normalize to the same namespace. Collisions are
    not prevented: the later registration replaces the earlier one, and the
    optional hook is told about it.
    """

    def __init__(
        self,
        config: SpecsConfig,
        on_collision: CollisionHook | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            config: Specs directory configuration
            on_collision: Called whenever a tool name is registered twice
        """
        self.config = config
        self.on_collision = on_collision
        self._tools: dict[str, RegisteredTool] = {}
        self._specs: dict[Path, ParsedSpec] = {}

    @property
    def tools(self) -> list[RegisteredTool]:
        """Registered tools in registration order."""
        return list(self._tools.values())

    @property
    def specs(self) -> list[ParsedSpec]:
        """Compiled documents in load order."""
        return list(self._specs.values())

    @property
    def tool_count(self) -> int:
        return sum(len(spec.tools) for spec in self._specs.values())

    def get(self, name: str) -> RegisteredTool | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def discover_files(self) -> list[Path]:
        """List candidate description files, creating the directory if absent."""
        specs_path = self.config.path

        if not specs_path.exists():
            logger.info("Specs directory missing, creating it", path=str(specs_path))
            specs_path.mkdir(parents=True, exist_ok=True)
            return []

        return sorted(
            path
            for path in specs_path.iterdir()
            if path.is_file()
            and is_description_file(path, self.config.extensions, self.config.skip_files)
        )

    async def load_all(self) -> list[ParsedSpec]:
        """Compile and register every description document in the directory.

        Returns:
            Documents that compiled, in load order
        """
        files = await asyncio.to_thread(self.discover_files)
        logger.info("Loading OpenAPI documents", path=str(self.config.path), count=len(files))

        loaded: list[ParsedSpec] = []
        for file_path in files:
            result = await parse_openapi_spec(file_path)

            match result.status:
                case CompileStatus.COMPILED if result.spec is not None:
                    self.add_spec(result.spec)
                    loaded.append(result.spec)
                case CompileStatus.PARSE_FAILED:
                    logger.debug("Document excluded", file=file_path.name, error=result.error)
                case _:
                    continue

        logger.info(
            "OpenAPI documents loaded",
            specs=len(loaded),
            tools=sum(len(spec.tools) for spec in loaded),
        )
        return loaded

    def add_spec(self, spec: ParsedSpec) -> list[RegisteredTool]:
        """Register a compiled document's tools.

        The tool map is rebuilt and swapped rather than mutated in place.

        Returns:
            The newly registered tools
        """
        tools = dict(self._tools)
        added: list[RegisteredTool] = []

        for definition in spec.tools:
            registered = RegisteredTool(
                api_name=spec.api_name,
                source=spec.file_path,
                definition=definition,
            )

            previous = tools.get(definition.name)
            if previous is not None:
                self._report_collision(ToolCollision(definition.name, previous, registered))

            tools[definition.name] = registered
            added.append(registered)

        self._tools = tools
        self._specs[spec.file_path] = spec
        return added

    def _report_collision(self, collision: ToolCollision) -> None:
        logger.warning(
            "Tool name collision, replacing earlier tool",
            name=collision.name,
            previous=str(collision.previous.source),
            replacement=str(collision.replacement.source),
        )
        if self.on_collision is not None:
            self.on_collision(collision)
