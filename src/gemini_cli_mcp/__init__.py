"""
gemini-cli-mcp - Let MCP clients talk to the Gemini CLI.

Each MCP tool call becomes one run of the ``gemini`` executable:
1. Validate the tool name and parameters
2. Spawn the CLI with the prompt and model as arguments
3. Return its stdout, or a structured error on failure or timeout
"""

from gemini_cli_mcp.adapter import ToolAdapter

# Config
from gemini_cli_mcp.config import GeminiMcpConfig, get_config

# Exceptions
from gemini_cli_mcp.exceptions import (
    ConfigError,
    ExternalToolFailureError,
    ExternalToolTerminatedError,
    ExternalToolUnavailableError,
    GeminiMcpError,
    InvalidRequestError,
    MissingParameterError,
    ToolTimeoutError,
    UnsupportedOperationError,
)

# Models
from gemini_cli_mcp.models import ToolInvocation, ToolResponse

__version__ = "0.1.0"

__all__ = [
    "ToolAdapter",
    # Models
    "ToolInvocation",
    "ToolResponse",
    # Config
    "GeminiMcpConfig",
    "get_config",
    # Exceptions
    "GeminiMcpError",
    "ConfigError",
    "InvalidRequestError",
    "UnsupportedOperationError",
    "MissingParameterError",
    "ExternalToolUnavailableError",
    "ExternalToolFailureError",
    "ToolTimeoutError",
    "ExternalToolTerminatedError",
]
