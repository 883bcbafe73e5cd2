"""
Logging utilities.
"""

import logging
import os
import sys
import time

logger = logging.getLogger("gemini_cli_mcp")

LOG_FORMAT = "%(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Send all logging to stderr so stdout stays clean for JSON-RPC.

    Args:
        level: Level name; defaults to GEMINI_MCP_LOG_LEVEL or INFO.
    """
    level_name = (level or os.environ.get("GEMINI_MCP_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def log_timed(msg: str, start_time: float | None = None) -> None:
    """Log timestamped message.

    Args:
        msg: Message to log
        start_time: Start time from time.monotonic(), or None for [START]
    """
    elapsed = f"[{time.monotonic() - start_time:.1f}s]" if start_time else "[START]"
    logger.info(f"{elapsed} {msg}")
