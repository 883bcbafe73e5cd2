"""
Async subprocess execution with timeout and cleanup.

Every run spawns exactly one child in its own process group. When the
timeout elapses or the awaiting task is cancelled, the whole group is
killed and the child reaped before the error propagates, so no orphaned
CLI process outlives the MCP call that started it. This includes processes
the CLI forked that are still alive after the CLI itself exited.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys
import time

from gemini_cli_mcp.exceptions import ExternalToolUnavailableError, ToolTimeoutError
from gemini_cli_mcp.tools.base import ToolResult

logger = logging.getLogger(__name__)

_POSIX = sys.platform != "win32"


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill the child's process group and reap the child.

    The group is signalled even when the direct child has already exited:
    a grandchild may still be holding the output pipes open.
    """
    with contextlib.suppress(ProcessLookupError, PermissionError):
        if _POSIX:
            os.killpg(process.pid, signal.SIGKILL)
        elif process.returncode is None:
            process.kill()
    await process.wait()


async def run_process(
    cmd: list[str],
    *,
    tool_name: str,
    env: dict[str, str] | None = None,
    stdin: bytes | None = None,
    timeout: float | None = None,
) -> ToolResult:
    """Run a command and capture its exit code, stdout and stderr.

    Standard input is always closed after ``stdin`` (possibly empty) has been
    written, so the child never blocks waiting for interactive input.

    Args:
        cmd: Executable followed by its arguments.
        tool_name: Name used in errors and logs.
        env: Full environment for the child, or None to inherit.
        stdin: Bytes written to the child's standard input.
        timeout: Seconds to wait before killing the child. None waits forever.

    Returns:
        ToolResult with the raw captured output.

    Raises:
        ExternalToolUnavailableError: If the executable cannot be launched.
        ToolTimeoutError: If the child is still running after timeout.
    """
    logger.debug(f"Running {tool_name}: {cmd[0]} with {len(cmd) - 1} args")
    start = time.monotonic()

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            start_new_session=_POSIX,
        )
    except OSError as e:
        raise ExternalToolUnavailableError(
            tool_name,
            f"Failed to launch {tool_name} ({cmd[0]}): {e.strerror or e}",
            path=cmd[0],
        ) from e

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(stdin or b""), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.warning(f"{tool_name} (pid {process.pid}) timed out after {timeout}s")
        await _kill(process)
        raise ToolTimeoutError(tool_name, timeout) from None
    except asyncio.CancelledError:
        logger.info(f"{tool_name} (pid {process.pid}) cancelled, killing")
        await _kill(process)
        raise

    logger.debug(
        f"{tool_name} exited with {process.returncode} "
        f"in {time.monotonic() - start:.2f}s"
    )
    return ToolResult(returncode=process.returncode, stdout=stdout, stderr=stderr)
