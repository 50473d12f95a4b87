"""Subprocess utilities for platform-safe process execution.

This module provides wrappers around subprocess module that automatically
apply platform-specific flags to prevent console window flashing on Windows,
plus helpers to normalize child exit statuses.
"""

import os
import signal
import subprocess
import sys
from typing import Any, Iterable, Mapping, Optional


def get_subprocess_creation_flags() -> int:
    """Get platform-specific subprocess creation flags.

    Returns:
        - Windows: subprocess.CREATE_NO_WINDOW (prevents console window)
        - Other platforms: 0 (no special flags)
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def safe_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """Execute subprocess.run with platform-specific flags.

    Automatically applies:
    - CREATE_NO_WINDOW on Windows (prevents console window)
    - stdin=DEVNULL unless the caller wires stdin or passes input

    Args:
        cmd: Command and arguments (same as subprocess.run)
        **kwargs: Additional arguments passed to subprocess.run

    Returns:
        CompletedProcess result from subprocess.run

    Note:
        - If 'creationflags' is explicitly provided in kwargs,
          it will be OR'd with platform defaults to preserve custom flags.
        - If 'stdin' or 'input' is explicitly provided in kwargs, it will be used as-is.
    """
    default_flags = get_subprocess_creation_flags()

    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    if "stdin" not in kwargs and "input" not in kwargs:
        kwargs["stdin"] = subprocess.DEVNULL

    return subprocess.run(cmd, **kwargs)


def normalize_returncode(returncode: int) -> int:
    """Convert a subprocess return code into a shell-style exit status.

    subprocess reports termination by signal N as -N; shells report 128 + N.

    Args:
        returncode: Return code as reported by subprocess

    Returns:
        Non-negative exit status
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def child_env(overrides: Optional[Mapping[str, str]] = None, unset: Iterable[str] = ()) -> dict[str, str]:
    """Return a copy of os.environ with the given overrides applied.

    Args:
        overrides: Variables to add or replace in the copy
        unset: Variables removed from the copy before overrides are applied

    Returns:
        Environment mapping suitable for the env argument of safe_run
    """
    env = os.environ.copy()
    for key in unset:
        env.pop(key, None)
    if overrides:
        env.update(overrides)
    return env


def signal_name(exit_code: int) -> Optional[str]:
    """Return the signal name for an exit status produced by normalize_returncode."""
    if exit_code <= 128:
        return None
    try:
        return signal.Signals(exit_code - 128).name
    except ValueError:
        return None
