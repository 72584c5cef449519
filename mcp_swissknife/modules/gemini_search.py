"""Web search through the Gemini CLI (``gemini --prompt 'WebSearch: ...'``)."""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Any, Dict, List, Optional

from ..dispatcher import ToolModule, ToolResult, ToolSpec
from ..schema import Field, schema

logger = logging.getLogger(__name__)

MODULE_NAME = "gemini-web-search"
GEMINI_COMMAND = "gemini"
GEMINI_TIMEOUT_SECONDS = 30
FALLBACK_MODEL = "gemini-2.5-flash"

QUOTA_KEYWORDS = (
    "quota exceeded",
    "rate limit",
    "RESOURCE_EXHAUSTED",
    "rateLimitExceeded",
    "Quota exceeded for quota metric",
)
QUOTA_EXHAUSTED_MESSAGE = (
    "Error: Gemini API quota exceeded for both Pro and Flash models. "
    "Please try again later or check your quota limits."
)


class GeminiError(RuntimeError):
    """The Gemini CLI could not produce an answer."""


def is_quota_error(message: str) -> bool:
    lower = message.lower()
    return any(keyword.lower() in lower for keyword in QUOTA_KEYWORDS)


def build_command(query: str, model: Optional[str] = None) -> List[str]:
    cmd = [GEMINI_COMMAND]
    if model:
        cmd.extend(["--model", model])
    cmd.extend(["--prompt", f"WebSearch: {query}"])
    return cmd


async def run_gemini(query: str, model: Optional[str] = None) -> str:
    cmd = build_command(query, model)
    logger.debug("Running gemini (model=%s)", model or "default")
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise GeminiError(
            "Gemini CLI not found. Please install and configure the Gemini CLI tool."
        ) from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=GEMINI_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise GeminiError(f"Gemini search timed out after {GEMINI_TIMEOUT_SECONDS} seconds") from None

    out = stdout.decode("utf-8", errors="replace").strip()
    err = stderr.decode("utf-8", errors="replace").strip()
    if err:
        logger.warning("Gemini stderr: %s", err)
        if is_quota_error(err):
            raise GeminiError(err)
    if proc.returncode != 0:
        raise GeminiError(err or f"Gemini exited with status {proc.returncode}")
    if not out:
        raise GeminiError("Gemini returned empty response")
    return out


async def gemini_web_search(args: Dict[str, Any]) -> ToolResult:
    query: str = args["query"]
    try:
        return ToolResult.text(await run_gemini(query))
    except GeminiError as exc:
        if not is_quota_error(str(exc)):
            raise
        logger.info("Falling back to %s model...", FALLBACK_MODEL)

    try:
        return ToolResult.text(await run_gemini(query, FALLBACK_MODEL))
    except GeminiError as exc:
        if is_quota_error(str(exc)):
            return ToolResult.text(QUOTA_EXHAUSTED_MESSAGE)
        raise


def gemini_available(config: Any = None) -> bool:
    if shutil.which(GEMINI_COMMAND) is None:
        logger.info("Gemini Web Search module disabled: Gemini CLI not available")
        return False
    return True


def create_module() -> ToolModule:
    return ToolModule(
        name=MODULE_NAME,
        tools=[
            ToolSpec(
                name="gemini_web_search",
                description=(
                    "Performs web search using Gemini AI with WebSearch capability. Returns "
                    "comprehensive search results with AI-powered analysis and summarization."
                ),
                schema=schema(Field("query", min_length=1, message="Query cannot be empty")),
                handler=gemini_web_search,
            )
        ],
        initialize=gemini_available,
    )
