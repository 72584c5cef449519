from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Iterator, List

from .roots import AllowedRoots
from .security import AccessDenied, validate_path

logger = logging.getLogger(__name__)

# Maximum number of search results to return
SEARCH_LIMIT = 200
NOTE_SUFFIX = ".md"


@dataclass
class SearchResult:
    """Relative note paths in traversal order, capped at ``SEARCH_LIMIT``."""

    matches: List[str] = field(default_factory=list)
    omitted: int = 0

    def render(self) -> str:
        text = "\n".join(self.matches) if self.matches else "No matches found"
        if self.omitted > 0:
            text += f"\n\n... {self.omitted} more results not shown."
        return text


def note_matches(name: str, query: str) -> bool:
    """Case-insensitive substring or wildcard/regex match on a note file name."""
    if not name.endswith(NOTE_SUFFIX):
        return False
    if query.lower() in name.lower():
        return True
    try:
        return re.search(query.replace("*", ".*"), name, re.IGNORECASE) is not None
    except re.error:
        return False


def _sorted_entries(directory: str) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        logger.debug("Skipping unreadable directory %s: %s", directory, exc)
        entries = []
    return iter(entries)


def walk_notes(base: str, query: str, roots: AllowedRoots) -> List[str]:
    """Pre-order walk of ``base``; every entry is re-validated before it is used."""
    results: List[str] = []
    # One iterator per open directory, so depth is bounded by the tree only.
    stack: List[Iterator[os.DirEntry]] = [_sorted_entries(base)]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        full_path = entry.path
        try:
            validate_path(full_path, roots)
            if entry.is_file() and note_matches(entry.name, query):
                results.append(os.path.relpath(full_path, base).replace(os.sep, "/"))
            if entry.is_dir(follow_symlinks=False):
                stack.append(_sorted_entries(full_path))
        except (AccessDenied, OSError):
            continue

    return results


def _distinct_bases(roots: AllowedRoots) -> List[str]:
    seen: set[str] = set()
    bases: List[str] = []
    for base in roots.bases:
        real = os.path.realpath(base)
        if real in seen:
            continue
        seen.add(real)
        bases.append(base)
    return bases


async def search_notes(query: str, roots: AllowedRoots, limit: int = SEARCH_LIMIT) -> SearchResult:
    """Search every vault concurrently; results are concatenated in vault order."""
    if not roots:
        return SearchResult()

    per_base = await asyncio.gather(
        *(asyncio.to_thread(walk_notes, base, query, roots) for base in _distinct_bases(roots))
    )
    found = [path for paths in per_base for path in paths]
    logger.debug("search_notes(%r) found %d notes", query, len(found))
    return SearchResult(matches=found[:limit], omitted=max(0, len(found) - limit))
