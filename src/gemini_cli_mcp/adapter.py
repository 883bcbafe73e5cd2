"""
Tool adapter: one MCP tool call in, one Gemini CLI run out.

Each invocation goes Idle -> Dispatched -> (Succeeded | Failed). Requests
are validated before anything is spawned; valid ones run exactly one CLI
process, and its exit status decides between a success payload and a
structured error. Adapters hold no per-call state, so any number of calls
may run concurrently against one instance.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

from pydantic import BaseModel, ValidationError

from gemini_cli_mcp.config.defaults import PROBE_TIMEOUT
from gemini_cli_mcp.exceptions import (
    ExternalToolFailureError,
    ExternalToolTerminatedError,
    GeminiMcpError,
    InvalidRequestError,
    MissingParameterError,
    UnsupportedOperationError,
)
from gemini_cli_mcp.models import (
    ListModelsParams,
    SendPromptParams,
    SetConfigParams,
    ToolInvocation,
    ToolResponse,
)
from gemini_cli_mcp.tools.gemini import GeminiCliTool
from gemini_cli_mcp.utils.logging import log_timed

if TYPE_CHECKING:
    from gemini_cli_mcp.config.loader import GeminiMcpConfig
    from gemini_cli_mcp.tools.base import PromptTool, ToolResult

logger = logging.getLogger(__name__)

SEND_PROMPT = "send-prompt"
LIST_MODELS = "list-models"
SET_CONFIG = "set-config"


@dataclass(frozen=True)
class Operation:
    """A registered operation and how to validate and run it."""

    name: str
    description: str
    params_model: type[BaseModel]
    required: tuple[str, ...]
    handler: Callable[[ToolAdapter, Any], Awaitable[Any]]


class ToolAdapter:
    """Translates tool invocations into Gemini CLI runs.

    Args:
        config: Immutable process-wide configuration.
        tool: CLI implementation; defaults to the real GeminiCliTool.
    """

    def __init__(self, config: GeminiMcpConfig, tool: PromptTool | None = None):
        self.config = config
        self.tool = tool if tool is not None else GeminiCliTool(config)

    @property
    def operation_names(self) -> list[str]:
        return list(OPERATIONS)

    async def invoke(
        self, name: str, parameters: Mapping[str, Any] | None = None
    ) -> ToolResponse:
        """Run one operation and map the outcome to a ToolResponse.

        Never raises for adapter errors; they come back as failed responses
        carrying the error type and category.
        """
        invocation = ToolInvocation.create(name, parameters)
        start = time.monotonic()
        try:
            operation = self._resolve(invocation.name)
            params = self._validate(operation, invocation.parameters)
            payload = await operation.handler(self, params)
        except GeminiMcpError as e:
            logger.warning(f"{invocation.name} failed: [{e.category}] {e.message}")
            return ToolResponse.from_error(e)

        log_timed(f"{invocation.name} succeeded", start)
        return ToolResponse.ok(payload)

    def _resolve(self, name: str) -> Operation:
        operation = OPERATIONS.get(name)
        if operation is None:
            raise UnsupportedOperationError(name, self.operation_names)
        return operation

    @staticmethod
    def _validate(operation: Operation, parameters: Mapping[str, Any]) -> BaseModel:
        """Check required parameters, then types and ranges."""
        for key in operation.required:
            value = parameters.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingParameterError(operation.name, key)

        try:
            return operation.params_model.model_validate(dict(parameters))
        except ValidationError as e:
            errors = [
                {"parameter": ".".join(str(p) for p in err["loc"]), "error": err["msg"]}
                for err in e.errors()
            ]
            raise InvalidRequestError(
                f"Bad request: invalid parameters for {operation.name}",
                details={"operation": operation.name, "errors": errors},
            ) from e

    def _check_result(self, result: ToolResult) -> str:
        """Return stdout for a clean exit, raise a typed error otherwise."""
        if result.signaled:
            raise ExternalToolTerminatedError(
                self.tool.name, result.signal_name, result.stderr_text
            )
        if not result.success:
            raise ExternalToolFailureError(
                self.tool.name,
                result.returncode,
                result.stderr_text or result.stdout_text,
            )
        return result.stdout_text

    async def _send_prompt(self, params: SendPromptParams) -> str:
        if params.max_tokens is not None or params.temperature is not None:
            # The Gemini CLI has no flags for these
            logger.debug(
                f"Ignoring max_tokens={params.max_tokens} "
                f"temperature={params.temperature}: not supported by the CLI"
            )
        logger.info("Calling gemini with prompt")
        result = await self.tool.prompt(params.prompt, model=params.model)
        return self._check_result(result)

    async def _list_models(self, params: ListModelsParams) -> dict[str, Any]:
        result = await self.tool.version(timeout=min(PROBE_TIMEOUT, self.config.timeout))
        version = self._check_result(result)
        return {
            "models": list(self.config.models),
            "default_model": self.config.default_model,
            "cli_version": version,
        }

    async def _set_config(self, params: SetConfigParams) -> str:
        result = await self.tool.version(timeout=min(PROBE_TIMEOUT, self.config.timeout))
        version = self._check_result(result)

        if params.api_key:
            # Configuration is read-only after startup; the key is not stored
            return (
                "Note: the Gemini API key should be set via the GEMINI_API_KEY "
                "(or GOOGLE_API_KEY) environment variable before the server "
                "starts. Keys passed to set-config are not stored."
            )

        return "\n".join(
            [
                "Gemini CLI configuration:",
                f"- CLI version: {version or 'unknown'}",
                "- API key: "
                + (
                    "set"
                    if self.config.api_key
                    else "not set (use GEMINI_API_KEY environment variable)"
                ),
                f"- Project: {self.config.project_id or 'not set (GOOGLE_CLOUD_PROJECT)'}",
                f"- Model: {self.config.default_model or 'CLI default'} "
                "(override per prompt with the model parameter)",
                f"- Timeout: {self.config.timeout:g}s",
            ]
        )


OPERATIONS: dict[str, Operation] = {
    SEND_PROMPT: Operation(
        name=SEND_PROMPT,
        description="Send a prompt to the Gemini CLI",
        params_model=SendPromptParams,
        required=("prompt",),
        handler=ToolAdapter._send_prompt,
    ),
    LIST_MODELS: Operation(
        name=LIST_MODELS,
        description="List the Gemini models available through the CLI",
        params_model=ListModelsParams,
        required=(),
        handler=ToolAdapter._list_models,
    ),
    SET_CONFIG: Operation(
        name=SET_CONFIG,
        description="Configure Gemini CLI settings",
        params_model=SetConfigParams,
        required=(),
        handler=ToolAdapter._set_config,
    ),
}
