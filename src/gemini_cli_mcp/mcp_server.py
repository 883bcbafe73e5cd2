"""
gemini-cli-mcp MCP server - expose the Gemini CLI via Model Context Protocol.

Run as: gemini-cli-mcp-server (stdio transport), or gemini-cli-mcp serve
"""

import json
import logging
import sys
from functools import lru_cache
from typing import Any

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from gemini_cli_mcp.adapter import LIST_MODELS, SEND_PROMPT, SET_CONFIG, ToolAdapter
from gemini_cli_mcp.config import get_config
from gemini_cli_mcp.exceptions import ConfigError
from gemini_cli_mcp.models import ToolResponse
from gemini_cli_mcp.utils.logging import configure_logging

logger = logging.getLogger(__name__)

INSTRUCTIONS = """Gemini CLI MCP Server - Access Google's Gemini AI models through the Gemini CLI

## How to reference files
When you want Gemini to analyze files, specify the file paths in your prompt.
The CLI reads the referenced files itself, so you can mention as many as needed.

## Usage Examples:

### Simple prompts:
- "What is the difference between async and sync in JavaScript?"

### File analysis (specify one or many file paths):
- "analyze the code in src/main.py and suggest improvements"
- "review src/api/handler.ts, tests/handler.test.ts, and src/api/types.ts together"

### Code refactoring (any number of files):
- "refactor the database logic across db/connection.js, db/models.js, and db/migrations/*.js"

### Model selection:
- Pass model="gemini-2.5-flash" to send-prompt for faster answers on simple tasks

## Tips:
- Call list-models to see which model identifiers are configured
- Default model is gemini-2.5-pro unless the server config says otherwise
"""

mcp = FastMCP("gemini-cli", instructions=INSTRUCTIONS)


@lru_cache(maxsize=1)
def get_adapter() -> ToolAdapter:
    """Process-wide adapter built from the startup configuration."""
    return ToolAdapter(get_config())


def _params(**kwargs: Any) -> dict[str, Any]:
    """Drop parameters the caller left unset."""
    return {k: v for k, v in kwargs.items() if v is not None}


def _result(response: ToolResponse) -> str:
    """Return text for a success, raise ToolError so the client sees isError."""
    if not response.success:
        raise ToolError(json.dumps(response.error))
    return response.to_text()


@mcp.tool(name=SEND_PROMPT)
async def send_prompt(
    prompt: str,
    model: str | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> str:
    """Send a prompt to the Gemini CLI and return its answer.

    Args:
        prompt: The prompt to send to Gemini. Mention file paths to have
                Gemini read them.
        model: The model to use (optional, e.g. gemini-2.5-flash).
        max_tokens: Maximum number of tokens (optional; accepted but not
                    supported by the CLI).
        temperature: Temperature for sampling (optional; accepted but not
                     supported by the CLI).
    """
    response = await get_adapter().invoke(
        SEND_PROMPT,
        _params(
            prompt=prompt,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
        ),
    )
    return _result(response)


@mcp.tool(name=LIST_MODELS)
async def list_models() -> str:
    """List the Gemini model identifiers usable with send-prompt.

    Returns JSON with the configured models, the default model, and the
    installed CLI version.
    """
    response = await get_adapter().invoke(LIST_MODELS, {})
    return _result(response)


@mcp.tool(name=SET_CONFIG)
async def set_config(api_key: str | None = None) -> str:
    """Configure Gemini CLI settings.

    Without arguments, shows the effective configuration. The API key is
    read from the GEMINI_API_KEY environment variable at startup; a key
    passed here is acknowledged but not stored.

    Args:
        api_key: API key for Gemini (optional).
    """
    response = await get_adapter().invoke(SET_CONFIG, _params(api_key=api_key))
    return _result(response)


def main():
    """Entry point for the gemini-cli-mcp-server command."""
    load_dotenv()
    # After .env so GEMINI_MCP_LOG_LEVEL can come from it; stderr keeps
    # stdout clean for JSON-RPC
    configure_logging()

    try:
        config = get_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e.message}")
        sys.exit(2)

    logger.info(f"Starting Gemini CLI MCP server ({config!r})")
    mcp.run()


if __name__ == "__main__":
    main()
