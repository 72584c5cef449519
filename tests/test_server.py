from __future__ import annotations

import asyncio
import re
from pathlib import Path

import pytest

from mcp_swissknife import server
from mcp_swissknife.config import ServerConfig, parse_disabled
from mcp_swissknife.dispatcher import ToolResult
from mcp_swissknife.modules import datetime_tools, docgen


def test_parse_disabled() -> None:
    assert parse_disabled(None) == ()
    assert parse_disabled("obsidian, web-fetch ,,") == ("obsidian", "web-fetch")


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SWISSKNIFE_VAULT_PATH", "/env/vault")
    monkeypatch.setenv("SWISSKNIFE_DISABLE", "web-fetch")

    from_env = ServerConfig.from_env()
    from_cli = ServerConfig.from_env(vault_path="/cli/vault", disable="")

    assert from_env.vault_path == "/env/vault"
    assert from_env.disabled_modules == ("web-fetch",)
    assert from_cli.vault_path == "/cli/vault"
    assert from_cli.disabled_modules == ()


def test_parser_options() -> None:
    args = server.build_parser().parse_args(["--vault-path", "~/vault", "--disable", "obsidian", "-vv"])
    assert args.vault_path == "~/vault"
    assert args.disable == "obsidian"
    assert args.verbose == 2


def test_to_call_tool_result() -> None:
    result = server.to_call_tool_result(ToolResult.error("nope"))
    assert result.isError is True
    assert [c.text for c in result.content] == ["Error: nope"]


def test_create_dispatcher_end_to_end(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "a.md").write_text("hi", encoding="utf-8")
    monkeypatch.setattr("mcp_swissknife.modules.gemini_search.shutil.which", lambda name: None)
    config = ServerConfig(vault_path=str(vault), disabled_modules=("web-fetch",))

    dispatcher = asyncio.run(server.create_dispatcher(config))
    names = [spec.name for spec in dispatcher.list_tools()]

    assert "read_notes" in names
    assert "get_current_datetime" in names
    assert "gemini_web_search" not in names
    assert "get_markdown" not in names

    result = asyncio.run(dispatcher.call("read_notes", {"paths": ["a.md"]}))
    assert result.content == ["a.md:\nhi\n"]


def test_current_datetime_format() -> None:
    result = asyncio.run(datetime_tools.get_current_datetime({}))
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", result.content[0])


def test_documentation_prompt_language() -> None:
    assert docgen.build_prompt() == docgen.DOCUMENTATION_PROMPT
    assert docgen.build_prompt("English") == docgen.DOCUMENTATION_PROMPT
    assert docgen.build_prompt("Japanese").endswith("Write all three documents in Japanese.")


def test_create_dispatcher_without_vault(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("mcp_swissknife.modules.gemini_search.shutil.which", lambda name: None)

    dispatcher = asyncio.run(server.create_dispatcher(ServerConfig()))
    names = [spec.name for spec in dispatcher.list_tools()]

    assert {"read_notes", "write_note", "search_notes", "list_allowed_directories"} <= set(names)

    search = asyncio.run(dispatcher.call("search_notes", {"query": "foo"}))
    assert not search.is_error
    assert search.content == ["No matches found"]

    read = asyncio.run(dispatcher.call("read_notes", {"paths": ["a.md"]}))
    write = asyncio.run(dispatcher.call("write_note", {"path": "a.md", "content": "x"}))
    for result in (read, write):
        assert result.is_error
        assert "No vault directory configured" in result.content[0]


def test_create_dispatcher_hidden_vault_drops_notes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    hidden = tmp_path / ".vaults" / "main"
    hidden.mkdir(parents=True)
    monkeypatch.setattr("mcp_swissknife.modules.gemini_search.shutil.which", lambda name: None)

    dispatcher = asyncio.run(server.create_dispatcher(ServerConfig(vault_path=str(hidden))))
    names = [spec.name for spec in dispatcher.list_tools()]

    assert "read_notes" not in names
    assert "get_current_datetime" in names
