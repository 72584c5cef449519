from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..dispatcher import ToolModule, ToolResult, ToolSpec
from ..schema import schema

MODULE_NAME = "datetime"


def iso_now(now: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision, e.g. ``2025-01-31T09:15:00.123Z``."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def get_current_datetime(args: Dict[str, Any]) -> ToolResult:
    return ToolResult.text(iso_now())


def create_module() -> ToolModule:
    return ToolModule(
        name=MODULE_NAME,
        tools=[
            ToolSpec(
                name="get_current_datetime",
                description="Get the current date and time in ISO 8601 format.",
                schema=schema(),
                handler=get_current_datetime,
            )
        ],
    )
