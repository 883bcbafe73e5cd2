"""
Utility functions for gemini-cli-mcp.
"""

from gemini_cli_mcp.utils.logging import configure_logging, log_timed
from gemini_cli_mcp.utils.system import find_tool

__all__ = [
    "configure_logging",
    "log_timed",
    "find_tool",
]
