"""
Multi-purpose MCP server with a sandboxed Obsidian vault.
"""

from .roots import AllowedRoots, register_roots
from .search import SearchResult, search_notes
from .security import (
    AccessDenied,
    ConfigurationError,
    NotConfigured,
    expand_home,
    normalize_path,
    validate_path,
)

__all__ = [
    "AccessDenied",
    "AllowedRoots",
    "ConfigurationError",
    "NotConfigured",
    "SearchResult",
    "expand_home",
    "normalize_path",
    "register_roots",
    "search_notes",
    "validate_path",
]
