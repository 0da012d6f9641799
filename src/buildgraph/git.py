# git.py
# Small wrapper around the Git CLI. Only what the build needs to find its
# bearings lives here.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Raises subprocess.CalledProcessError on a non-zero exit and
    FileNotFoundError when git itself is not installed.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def repo_root(cwd: Optional[str] = None) -> Path:
    """Absolute path to the root of the enclosing Git repository."""
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def default_root() -> Path:
    """
    Build root used when none is given: the repository root if we are inside
    one, otherwise the current directory.
    """
    try:
        return repo_root()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return Path.cwd()
