from __future__ import annotations

import sys
from pathlib import Path

import pytest

from mcp_swissknife.roots import AllowedRoots, register_roots

# test_very_deep_tree builds a >1000-level directory tree; shutil.rmtree
# recurses once per level, so pytest's tmp_path cleanup needs more headroom.
sys.setrecursionlimit(max(sys.getrecursionlimit(), 10000))


@pytest.fixture()
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture()
def roots(vault: Path) -> AllowedRoots:
    return register_roots([str(vault)])
