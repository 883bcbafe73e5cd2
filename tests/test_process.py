"""Tests for the async process runner."""

import asyncio
import os
import sys

import pytest
from conftest import FORK_STUB, HANG_STUB, process_gone

from gemini_cli_mcp.exceptions import ExternalToolUnavailableError, ToolTimeoutError
from gemini_cli_mcp.tools.base import ToolResult
from gemini_cli_mcp.tools.process import run_process

PY = sys.executable


class TestRunProcess:
    """Tests for run_process."""

    @pytest.mark.asyncio
    async def test_captures_stdout_and_exit_code(self):
        result = await run_process(
            [PY, "-c", "print('hi there')"], tool_name="python", timeout=10
        )

        assert isinstance(result, ToolResult)
        assert result.success
        assert result.returncode == 0
        assert result.stdout_text == "hi there"

    @pytest.mark.asyncio
    async def test_captures_stderr_on_failure(self):
        result = await run_process(
            [PY, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"],
            tool_name="python",
            timeout=10,
        )

        assert not result.success
        assert result.returncode == 3
        assert result.stderr == b"boom"

    @pytest.mark.asyncio
    async def test_writes_stdin_then_closes_it(self):
        result = await run_process(
            [PY, "-c", "import sys; print(sys.stdin.read().upper())"],
            tool_name="python",
            stdin=b"shout",
            timeout=10,
        )

        assert result.stdout_text == "SHOUT"

    @pytest.mark.asyncio
    async def test_stdin_closed_when_not_given(self):
        result = await run_process(
            [PY, "-c", "import sys; print(repr(sys.stdin.read()))"],
            tool_name="python",
            timeout=10,
        )

        assert result.stdout_text == "''"

    @pytest.mark.asyncio
    async def test_passes_environment(self):
        env = dict(os.environ, STUB_MARKER="marker-value")
        result = await run_process(
            [PY, "-c", "import os; print(os.environ['STUB_MARKER'])"],
            tool_name="python",
            env=env,
            timeout=10,
        )

        assert result.stdout_text == "marker-value"

    @pytest.mark.asyncio
    async def test_undecodable_output_is_replaced(self):
        result = await run_process(
            [PY, "-c", "import sys; sys.stdout.buffer.write(b'ok \\xff')"],
            tool_name="python",
            timeout=10,
        )

        assert result.stdout_text == "ok �"

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        missing = str(tmp_path / "definitely-not-here")

        with pytest.raises(ExternalToolUnavailableError) as exc_info:
            await run_process([missing], tool_name="gemini", timeout=10)

        assert exc_info.value.tool_name == "gemini"
        assert exc_info.value.details["path"] == missing

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    async def test_non_executable_file(self, tmp_path):
        script = tmp_path / "gemini"
        script.write_text("#!/bin/sh\necho hi\n")

        with pytest.raises(ExternalToolUnavailableError):
            await run_process([str(script)], tool_name="gemini", timeout=10)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX process groups")
class TestProcessCleanup:
    """A child never outlives its call."""

    @pytest.mark.asyncio
    async def test_timeout_kills_child(self, make_stub, tmp_path, monkeypatch):
        pid_file = tmp_path / "stub.pid"
        monkeypatch.setenv("STUB_PID_FILE", str(pid_file))
        stub = make_stub(HANG_STUB)

        with pytest.raises(ToolTimeoutError) as exc_info:
            await run_process([stub], tool_name="gemini", timeout=1.5)

        assert exc_info.value.timeout == 1.5
        with pytest.raises(ProcessLookupError):
            os.kill(int(pid_file.read_text()), 0)

    @pytest.mark.asyncio
    async def test_cancellation_kills_child(self, make_stub, tmp_path, monkeypatch):
        pid_file = tmp_path / "stub.pid"
        monkeypatch.setenv("STUB_PID_FILE", str(pid_file))
        stub = make_stub(HANG_STUB)

        task = asyncio.create_task(run_process([stub], tool_name="gemini", timeout=60))
        for _ in range(100):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        with pytest.raises(ProcessLookupError):
            os.kill(int(pid_file.read_text()), 0)

    @pytest.mark.asyncio
    async def test_timeout_kills_forked_grandchild(
        self, make_stub, tmp_path, monkeypatch
    ):
        # The stub exits at once but its forked child keeps stdout open
        pid_file = tmp_path / "grandchild.pid"
        monkeypatch.setenv("STUB_PID_FILE", str(pid_file))
        stub = make_stub(FORK_STUB)

        with pytest.raises(ToolTimeoutError):
            await run_process([stub], tool_name="gemini", timeout=1.5)

        assert pid_file.read_text()
        assert process_gone(int(pid_file.read_text()))

    @pytest.mark.asyncio
    async def test_cancellation_kills_forked_grandchild(
        self, make_stub, tmp_path, monkeypatch
    ):
        pid_file = tmp_path / "grandchild.pid"
        monkeypatch.setenv("STUB_PID_FILE", str(pid_file))
        stub = make_stub(FORK_STUB)

        task = asyncio.create_task(run_process([stub], tool_name="gemini", timeout=60))
        for _ in range(100):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert process_gone(int(pid_file.read_text()))
