"""
Configuration for gemini-cli-mcp.

Contains defaults and the loader that resolves the process-wide config.
"""

from gemini_cli_mcp.config.defaults import (
    DEFAULT_EXECUTABLE,
    DEFAULT_MODEL,
    DEFAULT_MODELS,
    DEFAULT_TIMEOUT,
)
from gemini_cli_mcp.config.loader import (
    ConfigSource,
    GeminiMcpConfig,
    build_config,
    clear_config_cache,
    get_config,
)

__all__ = [
    "DEFAULT_EXECUTABLE",
    "DEFAULT_MODEL",
    "DEFAULT_MODELS",
    "DEFAULT_TIMEOUT",
    # Config loader
    "GeminiMcpConfig",
    "ConfigSource",
    "build_config",
    "get_config",
    "clear_config_cache",
]
