"""
Gemini CLI tool wrapper.

Owns the command-line contract of the ``gemini`` executable:

- prompts go in as one ``--prompt=<text>`` argument (or on stdin when
  configured), so a prompt starting with "-" is never read as an option
- an optional ``--model <name>`` selects the model
- ``GOOGLE_CLOUD_PROJECT`` and ``GEMINI_API_KEY`` are passed through the
  environment when configured
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import TYPE_CHECKING

from gemini_cli_mcp.exceptions import ExternalToolUnavailableError
from gemini_cli_mcp.tools.base import PromptTool, ToolResult
from gemini_cli_mcp.tools.process import run_process
from gemini_cli_mcp.utils.system import find_tool

if TYPE_CHECKING:
    from gemini_cli_mcp.config.loader import GeminiMcpConfig

logger = logging.getLogger(__name__)


class GeminiCliTool(PromptTool):
    """Wrapper for the Gemini command-line tool."""

    def __init__(self, config: GeminiMcpConfig):
        self.config = config

    @property
    def name(self) -> str:
        return "gemini"

    def is_available(self) -> bool:
        """Check if the gemini executable can be found."""
        return find_tool(self.config.executable) is not None

    def get_path(self) -> str:
        """Get path to the gemini executable.

        Raises:
            ExternalToolUnavailableError: If the executable is not found.
        """
        path = find_tool(self.config.executable)
        if path is None:
            raise ExternalToolUnavailableError(
                self.name,
                f"Gemini CLI not found: {self.config.executable!r} is not on PATH",
                path=self.config.executable,
            )
        return path

    def build_env(self) -> dict[str, str]:
        """Environment for the child: the server's own plus configured values."""
        env = dict(os.environ)
        if self.config.project_id:
            env["GOOGLE_CLOUD_PROJECT"] = self.config.project_id
        if self.config.api_key:
            env["GEMINI_API_KEY"] = self.config.api_key
        return env

    def build_prompt_args(
        self, prompt: str, model: str | None = None
    ) -> tuple[list[str], bytes | None]:
        """Map a prompt to CLI arguments and stdin bytes.

        Args:
            prompt: Prompt text.
            model: Model name; falls back to the configured default.

        Returns:
            (args, stdin) where stdin is None when the prompt is an argument.
        """
        args: list[str] = []
        stdin = None
        if self.config.prompt_transport == "stdin":
            stdin = prompt.encode("utf-8")
        else:
            args.append(f"--prompt={prompt}")

        model = model or self.config.default_model
        if model:
            args += ["--model", model]

        return args, stdin

    async def run(
        self,
        args: list[str],
        *,
        stdin: bytes | None = None,
        timeout: float | None = None,
    ) -> ToolResult:
        """Run gemini with given arguments."""
        cmd = [self.get_path()] + args
        return await run_process(
            cmd,
            tool_name=self.name,
            env=self.build_env(),
            stdin=stdin,
            timeout=timeout if timeout is not None else self.config.timeout,
        )

    async def prompt(
        self,
        prompt: str,
        model: str | None = None,
        timeout: float | None = None,
    ) -> ToolResult:
        """Send one prompt to the CLI and wait for its answer."""
        args, stdin = self.build_prompt_args(prompt, model)
        return await self.run(args, stdin=stdin, timeout=timeout)

    async def version(self, timeout: float | None = None) -> ToolResult:
        """Run ``gemini --version``."""
        return await self.run(["--version"], timeout=timeout)

    def version_sync(self) -> str | None:
        """Blocking version check for the CLI's validate-config command."""
        try:
            result = subprocess.run(
                [self.get_path(), "--version"],
                capture_output=True,
                text=True,
                timeout=30,
                env=self.build_env(),
            )
        except (ExternalToolUnavailableError, OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"gemini --version failed: {e}")
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()
