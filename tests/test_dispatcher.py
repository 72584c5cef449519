from __future__ import annotations

import asyncio
from typing import Any, Dict

import pytest

from mcp_swissknife.dispatcher import Dispatcher, ToolModule, ToolResult, ToolSpec, load_modules
from mcp_swissknife.schema import STRING_LIST, URL, Field, InvalidArguments, schema


async def _echo(args: Dict[str, Any]) -> ToolResult:
    return ToolResult.text(args["text"])


async def _boom(args: Dict[str, Any]) -> ToolResult:
    raise OSError("disk on fire")


def _module(name: str = "demo", initialize=None) -> ToolModule:
    return ToolModule(
        name=name,
        tools=[
            ToolSpec("echo", "Echo text", schema(Field("text", min_length=1)), _echo),
            ToolSpec("boom", "Always fails", schema(), _boom),
        ],
        initialize=initialize,
    )


def test_schema_reports_every_violation() -> None:
    contract = schema(Field("paths", kind=STRING_LIST), Field("query"), Field("url", kind=URL))
    with pytest.raises(InvalidArguments) as exc_info:
        contract.validate({"paths": ["a", 1], "url": "not a url"})
    assert exc_info.value.violations == [
        "paths: expected array of strings",
        "query: required",
        "url: Invalid URL format.",
    ]


def test_schema_accepts_and_drops_unknown_keys() -> None:
    contract = schema(Field("query"), Field("language", required=False))
    assert contract.validate({"query": "x", "extra": 1}) == {"query": "x"}
    assert schema().validate(None) == {}


def test_schema_rejects_non_object() -> None:
    with pytest.raises(InvalidArguments, match="expected object"):
        schema().validate(["not", "a", "dict"])  # type: ignore[arg-type]


def test_schema_json_schema() -> None:
    contract = schema(
        Field("paths", kind=STRING_LIST),
        Field("query", min_length=1),
        Field("language", required=False, description="Output language"),
    )
    assert contract.json_schema() == {
        "type": "object",
        "properties": {
            "paths": {"type": "array", "items": {"type": "string"}},
            "query": {"type": "string", "minLength": 1},
            "language": {"type": "string", "description": "Output language"},
        },
        "required": ["paths", "query"],
    }


def test_call_success() -> None:
    dispatcher = Dispatcher([_module()])
    result = asyncio.run(dispatcher.call("echo", {"text": "hello"}))
    assert result == ToolResult(content=["hello"], is_error=False)


def test_unknown_tool() -> None:
    result = asyncio.run(Dispatcher([_module()]).call("nope", {}))
    assert result.is_error
    assert result.content == ["Error: Unknown tool: nope"]


def test_invalid_arguments_named() -> None:
    result = asyncio.run(Dispatcher([_module()]).call("echo", {"text": ""}))
    assert result.is_error
    assert result.content == [
        "Error: Invalid arguments for echo: text: must be at least 1 characters"
    ]


def test_handler_failure_is_wrapped() -> None:
    result = asyncio.run(Dispatcher([_module()]).call("boom", None))
    assert result.is_error
    assert result.content == ["Error: disk on fire"]


def test_duplicate_tool_names_rejected() -> None:
    with pytest.raises(ValueError, match="Duplicate tool name"):
        Dispatcher([_module("a"), _module("b")])


def test_load_modules_filters_disabled_and_inactive() -> None:
    async def async_ready(config: Any) -> bool:
        return True

    modules = [
        ToolModule("always", []),
        ToolModule("off", [], initialize=lambda config: False),
        ToolModule("async-on", [], initialize=async_ready),
        ToolModule("skipped", [], initialize=lambda config: True),
    ]

    loaded = asyncio.run(load_modules(modules, config=None, disabled=["skipped"]))

    assert [m.name for m in loaded] == ["always", "async-on"]
