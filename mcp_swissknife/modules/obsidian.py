"""
Obsidian vault tools: read, search and write Markdown notes.

Every path argument goes through ``validate_path`` before the filesystem is
touched. Relative note paths are anchored to the first configured vault.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from ..dispatcher import ToolModule, ToolResult, ToolSpec
from ..roots import AllowedRoots, register_roots
from ..schema import STRING_LIST, Field, schema
from ..search import search_notes
from ..security import ConfigurationError, NotConfigured, validate_path

logger = logging.getLogger(__name__)

MODULE_NAME = "obsidian"

READ_NOTES_ARGS = schema(Field("paths", kind=STRING_LIST))
SEARCH_NOTES_ARGS = schema(Field("query"))
WRITE_NOTE_ARGS = schema(Field("path"), Field("content"))
NO_ARGS = schema()


class NotesVault:
    """Vault tools bound to one ``AllowedRoots`` sandbox."""

    def __init__(self, roots: AllowedRoots = AllowedRoots()) -> None:
        self.roots = roots

    def _require_roots(self, tool: str) -> None:
        if not self.roots:
            raise NotConfigured(tool)

    def resolve(self, note_path: str) -> Path:
        return validate_path(os.path.join(self.roots.primary, note_path), self.roots)

    async def _read_one(self, note_path: str) -> str:
        try:
            target = self.resolve(note_path)
            content = await asyncio.to_thread(target.read_text, encoding="utf-8")
        except Exception as exc:  # noqa: BLE001
            return f"{note_path}: Error - {exc}"
        return f"{note_path}:\n{content}\n"

    async def read_notes(self, args: Dict[str, Any]) -> ToolResult:
        self._require_roots("read_notes")
        paths: List[str] = args["paths"]
        results = await asyncio.gather(*(self._read_one(p) for p in paths))
        return ToolResult.text("\n---\n".join(results))

    async def search_notes(self, args: Dict[str, Any]) -> ToolResult:
        result = await search_notes(args["query"], self.roots)
        return ToolResult.text(result.render())

    async def write_note(self, args: Dict[str, Any]) -> ToolResult:
        self._require_roots("write_note")
        note_path: str = args["path"]
        target = self.resolve(note_path)
        await asyncio.to_thread(target.write_text, args["content"], encoding="utf-8")
        logger.info("Wrote note %s", target)
        return ToolResult.text(f"Successfully wrote to {note_path}")

    async def list_allowed_directories(self, args: Dict[str, Any]) -> ToolResult:
        self._require_roots("list_allowed_directories")
        return ToolResult.text("Allowed directories:\n" + "\n".join(self.roots.directories))

    def initialize(self, config: Any) -> bool:
        vault_path = getattr(config, "vault_path", None)
        if not vault_path:
            # Tools stay listed; each one reports the missing vault when called.
            logger.info("No vault configured; start with --vault-path to use Obsidian tools")
            self.roots = AllowedRoots.empty()
            return True
        try:
            self.roots = register_roots([vault_path])
        except ConfigurationError as exc:
            logger.error("Error validating vault path: %s", exc)
            self.roots = AllowedRoots.empty()
            return False
        logger.info("Vault directories: %s", ", ".join(self.roots.directories))
        return True


def create_module(vault: NotesVault | None = None) -> ToolModule:
    vault = vault or NotesVault()
    tools = [
        ToolSpec(
            name="read_notes",
            description=(
                "Read the contents of multiple notes. Each note's content is returned with its "
                "path as a reference. Failed reads for individual notes won't stop "
                "the entire operation. Reading too many at once may result in an error."
            ),
            schema=READ_NOTES_ARGS,
            handler=vault.read_notes,
        ),
        ToolSpec(
            name="search_notes",
            description=(
                "Searches for a note by its name. The search is case-insensitive and matches "
                "partial names. Queries can also be a valid regex. Returns paths of the notes "
                "that match the query."
            ),
            schema=SEARCH_NOTES_ARGS,
            handler=vault.search_notes,
        ),
        ToolSpec(
            name="write_note",
            description=(
                "Create a new note or overwrite an existing one with UTF-8 content. "
                "The containing folder must already exist inside the vault."
            ),
            schema=WRITE_NOTE_ARGS,
            handler=vault.write_note,
        ),
        ToolSpec(
            name="list_allowed_directories",
            description="Return the vault directories this server is allowed to access.",
            schema=NO_ARGS,
            handler=vault.list_allowed_directories,
        ),
    ]
    return ToolModule(name=MODULE_NAME, tools=tools, initialize=vault.initialize)
