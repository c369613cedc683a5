"""Platform-specific window management implementations."""

import sys


def get_platform(exclude_processes=None):
    """Return the appropriate platform implementation for the current OS."""
    if sys.platform == "win32":
        from winstash.platforms.windows import WindowsPlatform
        return WindowsPlatform(exclude_processes=exclude_processes)
    raise RuntimeError(f"Unsupported platform: {sys.platform}")
