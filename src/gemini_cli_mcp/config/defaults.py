"""
Default configuration values for gemini-cli-mcp.

Note: Overrides are resolved by config/loader.py, which supports environment
variables, project config, and user config.
"""

# Executable name looked up on PATH
DEFAULT_EXECUTABLE = "gemini"

# Upper bound for a single CLI run (seconds). The Gemini CLI can take minutes
# on large prompts with many referenced files.
DEFAULT_TIMEOUT = 300.0

# Timeout for the --version probe used by list-models and set-config
PROBE_TIMEOUT = 30.0

DEFAULT_MODEL = "gemini-2.5-pro"

DEFAULT_MODELS = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
)

# How the prompt reaches the CLI: "argument" (--prompt) or "stdin"
PROMPT_TRANSPORTS = frozenset({"argument", "stdin"})
DEFAULT_PROMPT_TRANSPORT = "argument"
