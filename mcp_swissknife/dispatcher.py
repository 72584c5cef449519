from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .schema import ArgsSchema, InvalidArguments

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Text segments returned to the caller, optionally flagged as an error."""

    content: List[str] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, *segments: str) -> "ToolResult":
        return cls(content=list(segments))

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=[f"Error: {message}"], is_error=True)


Handler = Callable[[Dict[str, Any]], Awaitable[ToolResult]]
Initializer = Callable[[Any], Union[bool, Awaitable[bool]]]


@dataclass
class ToolSpec:
    name: str
    description: str
    schema: ArgsSchema
    handler: Handler


@dataclass
class ToolModule:
    """A named group of tools; ``initialize`` decides whether the group is served."""

    name: str
    tools: List[ToolSpec]
    initialize: Optional[Initializer] = None


class Dispatcher:
    """Routes a tool call by name, validates its arguments and never raises."""

    def __init__(self, modules: Iterable[ToolModule]) -> None:
        self.modules = list(modules)
        self._tools: Dict[str, ToolSpec] = {}
        for module in self.modules:
            for spec in module.tools:
                if spec.name in self._tools:
                    raise ValueError(f"Duplicate tool name: {spec.name}")
                self._tools[spec.name] = spec

    def list_tools(self) -> List[ToolSpec]:
        return list(self._tools.values())

    async def call(self, name: str, arguments: Optional[Mapping[str, Any]]) -> ToolResult:
        spec = self._tools.get(name)
        if spec is None:
            return ToolResult.error(f"Unknown tool: {name}")

        try:
            args = spec.schema.validate(arguments)
        except InvalidArguments as exc:
            return ToolResult.error(f"Invalid arguments for {name}: {exc}")

        try:
            return await spec.handler(args)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Tool %s failed: %s", name, exc)
            logger.debug("Tool %s traceback", name, exc_info=True)
            return ToolResult.error(str(exc) or exc.__class__.__name__)


async def load_modules(
    modules: Iterable[ToolModule],
    config: Any,
    disabled: Iterable[str] = (),
) -> List[ToolModule]:
    """Drop disabled modules and keep the ones whose initializer succeeds."""
    skip = set(disabled)
    loaded: List[ToolModule] = []
    for module in modules:
        if module.name in skip:
            logger.info("Module %s disabled", module.name)
            continue
        if module.initialize is not None:
            ready = module.initialize(config)
            if inspect.isawaitable(ready):
                ready = await ready
            if not ready:
                logger.info("Module %s not loaded", module.name)
                continue
        loaded.append(module)

    if loaded:
        logger.info("Loaded modules: %s", ", ".join(m.name for m in loaded))
    else:
        logger.info("No modules loaded.")
    return loaded
