from __future__ import annotations

from typing import Any, Dict, Optional

from ..dispatcher import ToolModule, ToolResult, ToolSpec
from ..schema import Field, schema

MODULE_NAME = "software-docgen"

DOCUMENTATION_PROMPT = """You are an assistant for creating software project design documents.  Generate the following three Markdown files and output them under the `.tmp/steering` folder.

1. product.md
- Provide a clear overview of the project
- List Core Functionality
- Summarize Key Features
- Describe Target Users

2. structure.md
- Document Root Files (main files in the project root)
- List Key Directories
- Explain Architecture Patterns (design approach, security model, tool implementations, error handling, etc.)
- Specify Naming Conventions and File Organization principles

3. tech.md
- Describe Runtime & Language (programming language, runtime environment, compilation target, module system, etc.)
- List Core Dependencies (main libraries/frameworks)
- Document Build System (how the project is built)
- Provide Common Commands (development, installation, Docker usage, etc.) with code blocks
- Specify Code Style rules
- Explain Distribution methods

Format the output as follows:
.tmp/steering/product.md
------------------------
# Product Overview
...

.tmp/steering/structure.md
--------------------------
# Project Structure
...

.tmp/steering/tech.md
---------------------
# Technology Stack
..."""


def build_prompt(language: Optional[str] = None) -> str:
    if not language or not language.strip() or language.strip().lower() == "english":
        return DOCUMENTATION_PROMPT
    return f"{DOCUMENTATION_PROMPT}\n\nWrite all three documents in {language.strip()}."


async def get_software_documentation_prompt(args: Dict[str, Any]) -> ToolResult:
    return ToolResult.text(build_prompt(args.get("language")))


def create_module() -> ToolModule:
    return ToolModule(
        name=MODULE_NAME,
        tools=[
            ToolSpec(
                name="get_software_documentation_prompt",
                description=(
                    "Get a prompt for creating software project design documents. Returns "
                    "instructions for generating product.md, structure.md, and tech.md files."
                ),
                schema=schema(
                    Field(
                        "language",
                        required=False,
                        description=(
                            'Language for the documentation (e.g., "Japanese", "English", '
                            '"Spanish"). If not specified, defaults to English.'
                        ),
                    )
                ),
                handler=get_software_documentation_prompt,
            )
        ],
        initialize=lambda config: True,
    )
