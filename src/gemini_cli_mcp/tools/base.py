"""
Base classes for external tool wrappers.
"""

from __future__ import annotations

import signal
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ToolResult:
    """Captured result of one external process run."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def signaled(self) -> bool:
        """True when the process was killed by a signal (POSIX only)."""
        return self.returncode < 0

    @property
    def signal_name(self) -> str:
        try:
            return signal.Signals(-self.returncode).name
        except ValueError:
            return f"signal {-self.returncode}"

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace").strip()

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace").strip()


class ExternalTool(ABC):
    """Abstract base class for external command-line tools.

    Subclasses own the tool's command-line contract: how the executable
    is found, which environment it needs, and how a run is performed.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name for logging and error messages."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the tool is installed and available."""
        pass

    @abstractmethod
    def get_path(self) -> str:
        """Get the path to the tool executable."""
        pass

    @abstractmethod
    async def run(
        self,
        args: list[str],
        *,
        stdin: bytes | None = None,
        timeout: float | None = None,
    ) -> ToolResult:
        """Run the tool once and wait for it to exit.

        Raises:
            ExternalToolUnavailableError: If the process cannot be launched.
            ToolTimeoutError: If the run exceeds timeout (process is killed).
        """
        pass


class PromptTool(ExternalTool):
    """An external CLI that answers prompts.

    The adapter talks to this interface only, so the real CLI can be
    swapped for an in-memory fake in tests.
    """

    @abstractmethod
    async def prompt(
        self,
        prompt: str,
        model: str | None = None,
        timeout: float | None = None,
    ) -> ToolResult:
        """Send one prompt and wait for the answer."""
        pass

    @abstractmethod
    async def version(self, timeout: float | None = None) -> ToolResult:
        """Ask the CLI for its version (cheap reachability probe)."""
        pass
