"""Fetch web pages as raw text, rendered HTML or Markdown."""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from bs4 import BeautifulSoup
from markdownify import ATX, markdownify
from playwright.async_api import async_playwright

from ..dispatcher import ToolModule, ToolResult, ToolSpec
from ..schema import URL, Field, schema

logger = logging.getLogger(__name__)

MODULE_NAME = "web-fetch"
REQUEST_TIMEOUT_SECONDS = 20.0

ALWAYS_STRIPPED = ["script", "style", "noscript", "template", "head"]
PERIPHERAL_TAGS = ["header", "footer", "nav", "aside"]

URL_ARGS = schema(Field("url", kind=URL, message="Invalid URL format."))


async def render_html(url: str) -> str:
    """Load ``url`` in headless Chromium and return the DOM after it is parsed."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            try:
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=REQUEST_TIMEOUT_SECONDS * 1000,
                )
                return await page.content()
            finally:
                await page.close()
        finally:
            await browser.close()


def html_to_markdown(html: str, main_only: bool = False) -> str:
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""

    stripped = ALWAYS_STRIPPED + (PERIPHERAL_TAGS if main_only else [])
    for tag in soup(stripped):
        tag.decompose()

    body = markdownify(str(soup), heading_style=ATX)
    body = re.sub(r"\n{3,}", "\n\n", body).strip()
    if title:
        return f"# {title}\n\n{body}" if body else f"# {title}"
    return body


class WebFetcher:
    """
    Tool handlers for the web-fetch module.

    ``transport`` is handed to ``httpx.AsyncClient`` and ``renderer`` replaces
    the headless browser; both exist so the network can be faked.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        renderer: Callable[[str], Awaitable[str]] = render_html,
    ) -> None:
        self.transport = transport
        self.renderer = renderer

    async def fetch_text(self, url: str) -> str:
        timeout = httpx.Timeout(REQUEST_TIMEOUT_SECONDS)
        async with httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=self.transport
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def _run(self, action: str, url: str, fn: Callable[[], Awaitable[str]]) -> ToolResult:
        try:
            return ToolResult.text(await fn())
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to %s from %s: %s", action, url, exc)
            raise RuntimeError(f"Failed to {action} from URL: {url}. Error: {exc}") from exc

    async def get_raw_text(self, args: Dict[str, Any]) -> ToolResult:
        url = args["url"]
        return await self._run("fetch raw text", url, lambda: self.fetch_text(url))

    async def get_rendered_html(self, args: Dict[str, Any]) -> ToolResult:
        url = args["url"]
        return await self._run("fetch rendered HTML", url, lambda: self.renderer(url))

    async def _markdown(self, url: str, main_only: bool) -> str:
        return html_to_markdown(await self.renderer(url), main_only=main_only)

    async def get_markdown(self, args: Dict[str, Any]) -> ToolResult:
        url = args["url"]
        return await self._run("convert to Markdown", url, lambda: self._markdown(url, False))

    async def get_markdown_summary(self, args: Dict[str, Any]) -> ToolResult:
        url = args["url"]
        return await self._run("extract main content", url, lambda: self._markdown(url, True))


def create_module(fetcher: Optional[WebFetcher] = None) -> ToolModule:
    fetcher = fetcher or WebFetcher()
    tools = [
        ToolSpec(
            name="get_raw_text",
            description=(
                "Retrieves raw text content directly from a URL without browser rendering. "
                "Ideal for structured data formats like JSON, XML, CSV, TSV, or plain text files."
            ),
            schema=URL_ARGS,
            handler=fetcher.get_raw_text,
        ),
        ToolSpec(
            name="get_rendered_html",
            description=(
                "Fetches fully rendered HTML content using a headless browser, including "
                "JavaScript-generated content. Use for single-page applications or any page "
                "that needs client-side rendering."
            ),
            schema=URL_ARGS,
            handler=fetcher.get_rendered_html,
        ),
        ToolSpec(
            name="get_markdown",
            description=(
                "Converts web page content to well-formatted Markdown, preserving structural "
                "elements like tables and definition lists. Recommended as the default tool "
                "for web content extraction."
            ),
            schema=URL_ARGS,
            handler=fetcher.get_markdown,
        ),
        ToolSpec(
            name="get_markdown_summary",
            description=(
                "Extracts the main content area of a web page as Markdown, removing navigation "
                "menus, headers, footers, and other peripheral content."
            ),
            schema=URL_ARGS,
            handler=fetcher.get_markdown_summary,
        ),
    ]
    return ToolModule(name=MODULE_NAME, tools=tools, initialize=lambda config: True)
