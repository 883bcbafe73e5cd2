"""
External tool wrappers for gemini-cli-mcp.

Provides a clean interface to the Gemini CLI and the shared async
process runner.
"""

from gemini_cli_mcp.tools.base import ExternalTool, PromptTool, ToolResult
from gemini_cli_mcp.tools.gemini import GeminiCliTool
from gemini_cli_mcp.tools.process import run_process

__all__ = [
    "ExternalTool",
    "PromptTool",
    "ToolResult",
    "GeminiCliTool",
    "run_process",
]
