"""Allowed vault directories, built once at startup and shared read-only."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .security import ConfigurationError, expand_home, has_hidden_segment, normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllowedRoots:
    """
    The sandbox a path must resolve into.

    ``directories`` holds every registered form of every root (the normalized
    path as given and, when a symlink is involved, its canonical target) and is
    what containment checks use. ``bases`` keeps one normalized path per root in
    the order the roots were supplied; relative tool paths are anchored to the
    first one and search walks each of them.
    """

    directories: tuple[str, ...] = ()
    bases: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "AllowedRoots":
        return cls()

    @property
    def primary(self) -> str:
        if not self.bases:
            raise LookupError("no allowed directories configured")
        return self.bases[0]

    def __bool__(self) -> bool:
        return bool(self.directories)


def _register_one(raw_root: str) -> tuple[str, str]:
    initial = expand_home(raw_root)
    if not os.path.isabs(initial):
        initial = os.path.join(os.getcwd(), initial)
    initial = normalize_path(initial)
    if has_hidden_segment(initial):
        raise ConfigurationError(
            f"Error: {raw_root} has a hidden path segment; notes under it could never be accessed"
        )

    try:
        real = Path(initial).resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise ConfigurationError(f"Error accessing directory {raw_root}: {exc}") from exc
    if not real.is_dir():
        raise ConfigurationError(f"Error: {raw_root} is not a directory")

    return initial, normalize_path(str(real))


def register_roots(raw_roots: Iterable[str]) -> AllowedRoots:
    """
    Expand, normalize and resolve CLI-supplied roots into an ``AllowedRoots``.

    An empty input yields an empty sandbox, which leaves the filesystem tools
    unusable without failing startup. Any root that is missing, inaccessible,
    not a directory or below a dot-directory raises ``ConfigurationError``.
    """
    directories: List[str] = []
    bases: List[str] = []
    for raw_root in raw_roots:
        if not raw_root:
            raise ConfigurationError("Error: empty vault path")
        initial, canonical = _register_one(raw_root)
        for form in (initial, canonical):
            if form not in directories:
                directories.append(form)
        if initial not in bases:
            bases.append(initial)
        if initial != canonical:
            logger.debug("Vault %s resolves to %s; registering both", initial, canonical)

    return AllowedRoots(directories=tuple(directories), bases=tuple(bases))
