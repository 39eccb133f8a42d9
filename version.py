"""
Version information for the board-game session service.

This module provides:
- VERSION constant read from the VERSION file in the project root
- get_version() function for reading the version
"""
from pathlib import Path


def _get_version_file_path() -> Path:
    """Get the path to the VERSION file (project root)."""
    return Path(__file__).parent / "VERSION"


def get_version() -> str:
    """Read and return the version string from VERSION file.

    Returns:
        Version string (e.g., "dev", "v2026.10.18"), or "unknown" if the
        file is missing, empty or unreadable.
    """
    try:
        return _get_version_file_path().read_text(encoding="utf-8").strip() or "unknown"
    except OSError:
        return "unknown"


# Expose VERSION constant at module level
VERSION = get_version()
