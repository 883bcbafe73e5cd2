"""
Custom exceptions for gemini-cli-mcp.

All gemini-cli-mcp exceptions inherit from GeminiMcpError for easy catching.
Each carries a category so MCP clients can tell failure kinds apart.
"""

from __future__ import annotations

from typing import Any


class GeminiMcpError(Exception):
    """Base exception for all gemini-cli-mcp errors.

    Attributes:
        message: Human-readable error message
        category: Error classification (e.g., "timeout", "tool_failure")
        details: Additional diagnostic information
        suggestion: Recommended remediation steps
    """

    category = "unknown"

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        suggestion: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a structured dict for MCP error responses."""
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
            "category": self.category,
        }
        if self.details:
            result["details"] = self.details
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


class ConfigError(GeminiMcpError):
    """Invalid configuration value."""

    category = "config"


class InvalidRequestError(GeminiMcpError):
    """Request rejected before any subprocess was spawned."""

    category = "invalid_request"


class UnsupportedOperationError(InvalidRequestError):
    """Tool name is not one of the registered operations."""

    def __init__(self, name: str, supported: list[str] | None = None):
        details: dict[str, Any] = {"operation": name}
        if supported:
            details["supported"] = supported
        super().__init__(
            f"Unsupported operation: {name!r}",
            details=details,
            suggestion="Call list-models, send-prompt or set-config.",
        )
        self.name = name


class MissingParameterError(InvalidRequestError):
    """A required parameter is absent or empty."""

    def __init__(self, operation: str, parameter: str):
        super().__init__(
            f"Bad request: {operation} requires a non-empty '{parameter}' parameter",
            details={"operation": operation, "parameter": parameter},
        )
        self.operation = operation
        self.parameter = parameter


class ExternalToolUnavailableError(GeminiMcpError):
    """External CLI could not be launched (not installed or not executable)."""

    category = "tool_unavailable"

    def __init__(self, tool_name: str, message: str | None = None, *, path: str = ""):
        details = {"tool": tool_name}
        if path:
            details["path"] = path
        super().__init__(
            message or f"Required tool '{tool_name}' could not be launched",
            details=details,
            suggestion=(
                "Install the Gemini CLI (npm install -g @google/gemini-cli) "
                "or point GEMINI_CLI_PATH at the executable."
            ),
        )
        self.tool_name = tool_name


class ExternalToolFailureError(GeminiMcpError):
    """External CLI ran but exited with a non-zero status."""

    category = "tool_failure"

    def __init__(self, tool_name: str, returncode: int, stderr: str = ""):
        text = stderr or "no error output"
        super().__init__(
            f"{tool_name} command failed (exit code {returncode}): {text}",
            details={"tool": tool_name, "exit_code": returncode},
        )
        self.tool_name = tool_name
        self.returncode = returncode
        self.stderr = stderr


class ToolTimeoutError(GeminiMcpError):
    """External CLI exceeded its execution window and was killed."""

    category = "timeout"

    def __init__(self, tool_name: str, timeout: float):
        super().__init__(
            f"{tool_name} did not finish within {timeout:g}s and was terminated",
            details={"tool": tool_name, "timeout": timeout},
            suggestion="Raise GEMINI_MCP_TIMEOUT or simplify the prompt.",
        )
        self.tool_name = tool_name
        self.timeout = timeout


class ExternalToolTerminatedError(GeminiMcpError):
    """External CLI was terminated by a signal."""

    category = "terminated"

    def __init__(self, tool_name: str, signal_name: str, stderr: str = ""):
        super().__init__(
            f"{tool_name} was terminated by {signal_name}",
            details={"tool": tool_name, "signal": signal_name},
        )
        self.tool_name = tool_name
        self.signal_name = signal_name
        self.stderr = stderr
