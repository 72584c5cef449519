"""
Tool modules served by the Swiss Knife server.
"""

from typing import List

from ..dispatcher import ToolModule
from . import datetime_tools, docgen, gemini_search, obsidian, web_fetch


def default_modules() -> List[ToolModule]:
    return [
        datetime_tools.create_module(),
        gemini_search.create_module(),
        obsidian.create_module(),
        docgen.create_module(),
        web_fetch.create_module(),
    ]


__all__ = ["default_modules"]
