"""Runtime configuration for the Swiss Knife MCP server."""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

SERVER_NAME = "mcp-swissknife"
SERVER_VERSION = "1.0.0"


def parse_disabled(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated module list, e.g. ``"obsidian, web-fetch"``."""
    if not raw:
        return ()
    return tuple(name.strip() for name in raw.split(",") if name.strip())


@dataclass(frozen=True)
class ServerConfig:
    """Startup options; CLI flags take precedence over the environment."""

    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    vault_path: Optional[str] = None
    disabled_modules: Tuple[str, ...] = ()

    @classmethod
    def from_env(
        cls,
        vault_path: Optional[str] = None,
        disable: Optional[str] = None,
    ) -> "ServerConfig":
        vault = vault_path or os.getenv("SWISSKNIFE_VAULT_PATH") or None
        disabled = disable if disable is not None else os.getenv("SWISSKNIFE_DISABLE")
        return cls(vault_path=vault, disabled_modules=parse_disabled(disabled))
