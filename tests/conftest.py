"""Pytest configuration for gemini-cli-mcp tests."""

import os
import stat
import sys
import textwrap
import time
from pathlib import Path

import pytest

from gemini_cli_mcp.config.loader import build_config, clear_config_cache
from gemini_cli_mcp.tools.base import PromptTool, ToolResult

CONFIG_ENV_VARS = (
    "GEMINI_CLI_PATH",
    "GEMINI_MCP_TIMEOUT",
    "GOOGLE_CLOUD_PROJECT",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_MCP_PROMPT_TRANSPORT",
    "GEMINI_CLI_MCP_ROOT",
)

ECHO_STUB = """
import sys
import time

args = sys.argv[1:]
if "--version" in args:
    print("0.9.0-stub")
    sys.exit(0)
prompts = [a[len("--prompt="):] for a in args if a.startswith("--prompt=")]
prompt = prompts[0] if prompts else sys.stdin.read()
model = args[args.index("--model") + 1] if "--model" in args else "none"
if prompt.startswith("slow"):
    time.sleep(0.3)
print(f"echo: {prompt} [model={model}]")
"""

FAIL_STUB = """
import sys

sys.stderr.write("bad key\\n")
sys.exit(1)
"""

HANG_STUB = """
import os
import sys
import time

with open(os.environ["STUB_PID_FILE"], "w") as f:
    f.write(str(os.getpid()))
time.sleep(3600)
"""

FORK_STUB = """
import os
import sys
import time

if os.fork() == 0:
    with open(os.environ["STUB_PID_FILE"], "w") as f:
        f.write(str(os.getpid()))
    time.sleep(3600)
sys.exit(0)
"""

SIGNAL_STUB = """
import os
import signal

os.kill(os.getpid(), signal.SIGTERM)
"""

ENV_STUB = """
import os

print(os.environ.get("GOOGLE_CLOUD_PROJECT", ""), os.environ.get("GEMINI_API_KEY", ""))
"""


def process_gone(pid: int, wait: float = 5.0) -> bool:
    """True once pid no longer runs. A zombie awaiting its reaper counts as gone."""
    deadline = time.monotonic() + wait
    while True:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return True
        stat_file = Path(f"/proc/{pid}/stat")
        if stat_file.exists():
            try:
                state = stat_file.read_text().rsplit(")", 1)[1].split()[0]
            except (OSError, IndexError):
                return True
            if state == "Z":
                return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(0.05)


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini CLI",
    )


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--run-integration"):
        skip = pytest.mark.skip(reason="needs --run-integration flag")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove config env vars and point the root dir at an empty tmp dir."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    root = tmp_path / "root"
    monkeypatch.setenv("GEMINI_CLI_MCP_ROOT", str(root))
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    yield root
    clear_config_cache()


@pytest.fixture
def make_stub(tmp_path):
    """Write an executable Python script that stands in for the gemini CLI."""

    def _make(body: str, name: str = "gemini") -> str:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        path = bin_dir / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def stub_config(tmp_path, make_stub):
    """Build a config whose executable is a stub script."""

    def _config(body: str = ECHO_STUB, **values):
        values.setdefault("timeout", 10)
        return build_config(
            {"executable": make_stub(body), **values}, root_dir=tmp_path
        )

    return _config


class FakeTool(PromptTool):
    """In-memory PromptTool that records calls instead of spawning."""

    def __init__(self, result: ToolResult | None = None, version: str = "0.9.0"):
        self.result = result or ToolResult(returncode=0, stdout=b"fake answer\n")
        self.version_result = ToolResult(returncode=0, stdout=version.encode())
        self.calls: list[tuple] = []

    @property
    def name(self) -> str:
        return "gemini"

    def is_available(self) -> bool:
        return True

    def get_path(self) -> str:
        return "/fake/gemini"

    async def run(self, args, *, stdin=None, timeout=None):
        self.calls.append(("run", list(args), stdin))
        return self.result

    async def prompt(self, prompt, model=None, timeout=None):
        self.calls.append(("prompt", prompt, model))
        return self.result

    async def version(self, timeout=None):
        self.calls.append(("version",))
        return self.version_result


@pytest.fixture
def fake_tool():
    return FakeTool()
