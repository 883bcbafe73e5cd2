"""
System utilities for finding executables.
"""

import os
import shutil
import sys
from pathlib import Path


def find_tool(name: str) -> str | None:
    """Find executable, checking venv first.

    Args:
        name: Tool name or path (e.g., "gemini", "/opt/bin/gemini")

    Returns:
        Path to executable, or None if it cannot be found
    """
    # Explicit paths are used as-is
    if os.sep in name or (os.altsep and os.altsep in name):
        path = Path(name)
        return str(path) if path.is_file() else None

    # Check venv bin directory first
    venv = Path(sys.prefix) / "bin" / name
    if venv.exists():
        return str(venv)

    return shutil.which(name)
