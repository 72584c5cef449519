from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .roots import AllowedRoots


class ConfigurationError(ValueError):
    """Raised at startup when a configured root cannot be used."""


class AccessDenied(PermissionError):
    """Raised when a requested path is outside the configured sandbox."""

    def __init__(self, reason: str, path: Optional[str] = None) -> None:
        self.reason = reason
        self.path = path
        message = f"Access denied - {reason}"
        if path:
            message = f"{message}: {path}"
        super().__init__(message)


class NotConfigured(RuntimeError):
    """Raised when a filesystem tool is called without any vault directory."""

    def __init__(self, tool: str) -> None:
        super().__init__(
            "No vault directory configured. "
            f"Start the server with --vault-path <dir> to use {tool}."
        )


def expand_home(path: str) -> str:
    """Replace a leading ``~`` (alone or followed by a separator) with the home directory."""
    if path == "~" or path.startswith("~/"):
        return str(Path.home()) + path[1:]
    return path


def normalize_path(path: str) -> str:
    """Collapse ``.``/``..`` and redundant separators without touching the disk."""
    return os.path.normpath(path)


def is_within(path: str, root: str) -> bool:
    """Segment-aware containment: ``/vault-other`` is not inside ``/vault``."""
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def _is_allowed(path: str, directories: Iterable[str]) -> bool:
    return any(is_within(path, root) for root in directories)


def has_hidden_segment(path: str) -> bool:
    return any(part.startswith(".") for part in path.split(os.sep))


def validate_path(candidate: str, roots: "AllowedRoots") -> Path:
    """
    Resolve a user-supplied path and verify it stays inside the sandbox.

    Existing targets are returned as their real (symlink-free) path. A target
    that does not exist yet is accepted when its parent directory exists inside
    the sandbox, and the absolute normalized path is returned so that create
    operations can use it.
    """
    if not candidate:
        raise AccessDenied("path must not be empty")
    if has_hidden_segment(candidate):
        raise AccessDenied("hidden path segment not allowed", candidate)

    expanded = expand_home(candidate)
    if not os.path.isabs(expanded):
        expanded = os.path.join(os.getcwd(), expanded)
    absolute = normalize_path(expanded)

    if not _is_allowed(absolute, roots.directories):
        raise AccessDenied("path outside allowed directories", absolute)

    try:
        real = Path(absolute).resolve(strict=True)
    except (OSError, RuntimeError):
        real = None

    if real is not None:
        if not _is_allowed(normalize_path(str(real)), roots.directories):
            raise AccessDenied("symlink target outside allowed directories", absolute)
        return real

    # A dangling link would be followed by a later write.
    if os.path.islink(absolute):
        target = normalize_path(str(Path(absolute).resolve(strict=False)))
        if not _is_allowed(target, roots.directories):
            raise AccessDenied("symlink target outside allowed directories", absolute)

    parent = os.path.dirname(absolute)
    try:
        real_parent = Path(parent).resolve(strict=True)
    except (OSError, RuntimeError):
        raise AccessDenied("parent directory does not exist", parent) from None
    if not real_parent.is_dir():
        raise AccessDenied("parent directory does not exist", parent)
    if not _is_allowed(normalize_path(str(real_parent)), roots.directories):
        raise AccessDenied("parent directory outside allowed directories", parent)
    return Path(absolute)
