"""Source revision lookup shared by the reporting writers."""

from __future__ import annotations

import subprocess


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except (OSError, subprocess.CalledProcessError):  # git may be unavailable in tests
        return "unknown"
