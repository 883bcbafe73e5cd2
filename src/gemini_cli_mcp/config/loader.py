"""
Unified configuration loader with priority resolution.

Root directory (GEMINI_CLI_MCP_ROOT):
- macOS/Linux: ~/.gemini-cli-mcp
- Windows: %APPDATA%\\gemini-cli-mcp
- Override: GEMINI_CLI_MCP_ROOT environment variable

Value priority (highest to lowest):
1. Environment variables (GEMINI_CLI_PATH, GEMINI_MCP_TIMEOUT,
   GOOGLE_CLOUD_PROJECT, GEMINI_API_KEY/GOOGLE_API_KEY, GEMINI_MODEL,
   GEMINI_MCP_PROMPT_TRANSPORT)
2. Project config (.gemini-cli-mcp/config.yaml)
3. User config ({root_dir}/config.yaml)
4. Defaults (config/defaults.py)

YAML structure:
    executable: /usr/local/bin/gemini
    timeout: 120
    project_id: ${GOOGLE_CLOUD_PROJECT}
    api_key: ${GEMINI_API_KEY}
    default_model: gemini-2.5-flash
    models: [gemini-2.5-pro, gemini-2.5-flash]
    prompt_transport: argument

The resolved configuration is frozen; it is read once at startup and shared
read-only by every tool call.
"""

import logging
import os
import re
import sys
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from gemini_cli_mcp.config.defaults import (
    DEFAULT_EXECUTABLE,
    DEFAULT_MODEL,
    DEFAULT_MODELS,
    DEFAULT_PROMPT_TRANSPORT,
    DEFAULT_TIMEOUT,
    PROMPT_TRANSPORTS,
)
from gemini_cli_mcp.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Pattern for ${ENV_VAR} interpolation
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

PROJECT_CONFIG_DIR = ".gemini-cli-mcp"

# Config key -> environment variables checked in order
_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "executable": ("GEMINI_CLI_PATH",),
    "timeout": ("GEMINI_MCP_TIMEOUT",),
    "project_id": ("GOOGLE_CLOUD_PROJECT",),
    "api_key": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "default_model": ("GEMINI_MODEL",),
    "prompt_transport": ("GEMINI_MCP_PROMPT_TRANSPORT",),
}

_VALID_KEYS = frozenset(_ENV_OVERRIDES) | {"models"}


class ConfigSource(Enum):
    """Source of the configuration value."""

    ENV = "env"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True)
class GeminiMcpConfig:
    """Resolved gemini-cli-mcp configuration.

    Attributes:
        root_dir: Directory holding the user config file.
        executable: Name or path of the Gemini CLI executable.
        project_id: Google Cloud project forwarded as GOOGLE_CLOUD_PROJECT.
        api_key: API key forwarded as GEMINI_API_KEY. None if not set.
        timeout: Maximum seconds a single CLI run may take.
        default_model: Model passed with --model when the caller names none.
        models: Model identifiers reported by list-models.
        prompt_transport: "argument" (--prompt) or "stdin".
        source: Highest-priority source that contributed a value.
    """

    root_dir: Path
    executable: str = DEFAULT_EXECUTABLE
    project_id: str | None = None
    api_key: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    default_model: str | None = DEFAULT_MODEL
    models: tuple[str, ...] = DEFAULT_MODELS
    prompt_transport: str = DEFAULT_PROMPT_TRANSPORT
    source: ConfigSource = ConfigSource.DEFAULT

    def __repr__(self) -> str:
        # Never expose the API key in logs or tracebacks
        api_key = "***" if self.api_key else None
        return (
            f"GeminiMcpConfig(executable={self.executable!r}, "
            f"project_id={self.project_id!r}, "
            f"api_key={api_key!r}, "
            f"timeout={self.timeout!r}, default_model={self.default_model!r}, "
            f"prompt_transport={self.prompt_transport!r}, "
            f"source={self.source.value!r})"
        )

    def summary(self) -> dict[str, Any]:
        """Return a JSON-safe view of the config with secrets masked."""
        return {
            "executable": self.executable,
            "project_id": self.project_id,
            "api_key_set": bool(self.api_key),
            "timeout": self.timeout,
            "default_model": self.default_model,
            "models": list(self.models),
            "prompt_transport": self.prompt_transport,
            "source": self.source.value,
        }


def _interpolate_env_vars(value: Any) -> Any:
    """Replace ${ENV_VAR} patterns with environment variable values.

    Recursively processes strings and lists. Missing env vars produce a
    warning and are replaced with empty string.
    """
    if isinstance(value, str):

        def _replace_match(match: re.Match) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                logger.warning(
                    "Environment variable %s not set (referenced in config)",
                    var_name,
                )
                return ""
            return env_value

        return ENV_VAR_PATTERN.sub(_replace_match, value)
    elif isinstance(value, list):
        return [_interpolate_env_vars(v) for v in value]
    return value


def _load_yaml_config(config_path: Path) -> dict[str, Any] | None:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Parsed config dict, or None if file doesn't exist or fails to parse.
    """
    if not config_path.exists():
        return None

    try:
        import yaml

        with open(config_path) as f:
            config = yaml.safe_load(f)
            if config is None:
                return {}
            if not isinstance(config, dict):
                logger.warning(f"Config file {config_path} is not a valid YAML dict")
                return None
            return config
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return None


def _find_project_config() -> Path | None:
    """Find project-level config by walking up from cwd.

    Returns:
        Path to .gemini-cli-mcp/config.yaml if found, None otherwise.
    """
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        config_path = parent / PROJECT_CONFIG_DIR / "config.yaml"
        if config_path.exists():
            return config_path
    return None


def _get_root_dir() -> Path:
    """Get the gemini-cli-mcp root directory.

    Priority:
    1. GEMINI_CLI_MCP_ROOT environment variable
    2. Platform-specific default:
       - Windows: %APPDATA%\\gemini-cli-mcp
       - macOS/Linux: ~/.gemini-cli-mcp
    """
    env_root = os.environ.get("GEMINI_CLI_MCP_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "gemini-cli-mcp"
        return Path.home() / "AppData" / "Roaming" / "gemini-cli-mcp"
    else:
        return Path.home() / ".gemini-cli-mcp"


def _get_user_config_path() -> Path:
    """Get the user-level config path ({root_dir}/config.yaml)."""
    return _get_root_dir() / "config.yaml"


def _clean_file_values(config: dict[str, Any] | None, config_path: Path) -> dict:
    """Keep known keys with non-empty values, interpolating env vars."""
    if not config:
        return {}

    cleaned = {}
    for key, value in config.items():
        if key not in _VALID_KEYS:
            logger.warning(f"Ignoring unknown config key {key!r} in {config_path}")
            continue
        value = _interpolate_env_vars(value)
        if value in (None, "", []):
            continue
        cleaned[key] = value
    return cleaned


def _env_values() -> dict[str, str]:
    """Collect config values set through environment variables."""
    values = {}
    for key, env_vars in _ENV_OVERRIDES.items():
        for env_var in env_vars:
            env_value = os.environ.get(env_var)
            if env_value:
                values[key] = env_value
                break
    return values


def _coerce_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid timeout: {value!r}. Must be a number of seconds.")
    if timeout <= 0:
        raise ConfigError(f"Invalid timeout: {value!r}. Must be greater than zero.")
    return timeout


def _coerce_models(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [m.strip() for m in value.split(",")]
    if not isinstance(value, list):
        raise ConfigError(f"Invalid models list: {value!r}")
    models = tuple(str(m) for m in value if m)
    if not models:
        raise ConfigError("models must list at least one model identifier")
    return models


def build_config(
    values: dict[str, Any],
    root_dir: Path,
    source: ConfigSource = ConfigSource.DEFAULT,
) -> GeminiMcpConfig:
    """Validate raw values and build a frozen config.

    Args:
        values: Merged raw values keyed by config key.
        root_dir: Resolved root directory.
        source: Highest-priority source that contributed a value.

    Raises:
        ConfigError: If a value is invalid.
    """
    kwargs: dict[str, Any] = {"root_dir": root_dir, "source": source}

    if "executable" in values:
        kwargs["executable"] = str(Path(str(values["executable"])).expanduser())
    if "timeout" in values:
        kwargs["timeout"] = _coerce_timeout(values["timeout"])
    if "project_id" in values:
        kwargs["project_id"] = str(values["project_id"])
    if "api_key" in values:
        kwargs["api_key"] = str(values["api_key"])
    if "default_model" in values:
        kwargs["default_model"] = str(values["default_model"])
    if "models" in values:
        kwargs["models"] = _coerce_models(values["models"])
    if "prompt_transport" in values:
        transport = str(values["prompt_transport"]).lower()
        if transport not in PROMPT_TRANSPORTS:
            raise ConfigError(
                f"Invalid prompt_transport {transport!r}. "
                f"Must be one of: {', '.join(sorted(PROMPT_TRANSPORTS))}"
            )
        kwargs["prompt_transport"] = transport

    return GeminiMcpConfig(**kwargs)


def _resolve_config() -> GeminiMcpConfig:
    """Resolve configuration from all sources in priority order.

    Raises:
        ConfigError: If a resolved value is invalid.
    """
    root_dir = _get_root_dir()
    values: dict[str, Any] = {}
    source = ConfigSource.DEFAULT

    # Lowest priority first so later sources overwrite
    user_config_path = _get_user_config_path()
    user_values = _clean_file_values(
        _load_yaml_config(user_config_path), user_config_path
    )
    if user_values:
        logger.info(f"Loaded user config from {user_config_path}")
        values.update(user_values)
        source = ConfigSource.USER

    project_config_path = _find_project_config()
    if project_config_path:
        project_values = _clean_file_values(
            _load_yaml_config(project_config_path), project_config_path
        )
        if project_values:
            logger.info(f"Loaded project config from {project_config_path}")
            values.update(project_values)
            source = ConfigSource.PROJECT

    env_values = _env_values()
    if env_values:
        logger.debug(f"Config overrides from environment: {sorted(env_values)}")
        values.update(env_values)
        source = ConfigSource.ENV

    return build_config(values, root_dir, source)


@lru_cache(maxsize=1)
def get_config() -> GeminiMcpConfig:
    """Get resolved gemini-cli-mcp configuration.

    Results are cached - configuration is resolved once per process.
    To force re-resolution (e.g., after env change), use clear_config_cache().
    """
    return _resolve_config()


def clear_config_cache() -> None:
    """Clear the cached configuration.

    Call this if environment variables or config files have changed
    and you need to re-resolve the configuration.
    """
    get_config.cache_clear()
