"""
Request, response and parameter models for the tool adapter.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from gemini_cli_mcp.exceptions import GeminiMcpError


@dataclass(frozen=True)
class ToolInvocation:
    """One incoming tool call: operation name plus decoded parameters."""

    name: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls, name: str, parameters: Mapping[str, Any] | None = None
    ) -> ToolInvocation:
        """Build an invocation whose parameters cannot be mutated."""
        return cls(name=name, parameters=MappingProxyType(dict(parameters or {})))


@dataclass(frozen=True)
class ToolResponse:
    """Outcome of one invocation, ready to hand back to the MCP layer."""

    success: bool
    payload: Any = None
    error_message: str | None = None
    error: dict[str, Any] | None = None

    @classmethod
    def ok(cls, payload: Any) -> ToolResponse:
        """Create a successful response."""
        return cls(success=True, payload=payload)

    @classmethod
    def from_error(cls, exc: GeminiMcpError) -> ToolResponse:
        """Create a failed response from an adapter error."""
        return cls(success=False, error_message=exc.message, error=exc.to_dict())

    @property
    def error_type(self) -> str | None:
        return self.error["type"] if self.error else None

    @property
    def error_category(self) -> str | None:
        return self.error["category"] if self.error else None

    def to_text(self) -> str:
        """Render the payload (or error) as MCP text content."""
        if not self.success:
            return json.dumps({"error": self.error}, indent=2)
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, indent=2)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.success:
            result["payload"] = self.payload
        else:
            result["error"] = self.error
        return result


class SendPromptParams(BaseModel):
    """Parameters for send-prompt."""

    model_config = ConfigDict(extra="ignore")

    prompt: str = Field(description="The prompt to send to Gemini")
    model: str | None = Field(
        default=None, description="The model to use (optional)"
    )
    max_tokens: int | None = Field(
        default=None, gt=0, description="Maximum number of tokens (optional)"
    )
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Temperature for sampling (optional)"
    )


class ListModelsParams(BaseModel):
    """list-models takes no parameters."""

    model_config = ConfigDict(extra="ignore")


class SetConfigParams(BaseModel):
    """Parameters for set-config."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(
        default=None, description="API key for Gemini (optional)"
    )
