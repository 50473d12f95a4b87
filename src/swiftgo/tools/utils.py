"""Discovery helpers shared by the locator cascades."""

import logging
import os
import shutil
import subprocess
import sys
import sysconfig
from pathlib import Path
from typing import Mapping, Optional

from swiftgo.subprocess_utils import safe_run

logger = logging.getLogger(__name__)


def user_config_dir(environ: Mapping[str, str]) -> Optional[Path]:
    """Return the per-user configuration directory, or None if unknown.

    Mirrors the lookup used by the Go tool: %AppData% on Windows,
    ~/Library/Application Support on macOS, $XDG_CONFIG_HOME or ~/.config
    elsewhere.
    """
    if sys.platform == "win32":
        appdata = environ.get("AppData") or environ.get("APPDATA")
        return Path(appdata) if appdata else None

    home = environ.get("HOME")
    if sys.platform == "darwin":
        return Path(home) / "Library" / "Application Support" if home else None

    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path(home) / ".config" if home else None


def go_env_file(environ: Mapping[str, str]) -> Optional[Path]:
    """Return the location of the Go environment configuration file.

    GOENV overrides the default location; GOENV=off disables the file.
    """
    override = environ.get("GOENV")
    if override:
        return None if override == "off" else Path(override)

    config_dir = user_config_dir(environ)
    if config_dir is None:
        return None
    return config_dir / "go" / "env"


def query_env_file(key: str, environ: Mapping[str, str]) -> str:
    """Extract the value of a variable from the Go environment configuration file.

    Args:
        key: Variable name (e.g., "GOROOT")
        environ: Environment used to locate the file

    Returns:
        The configured value, or an empty string when absent
    """
    # go env ignores names that do not start with a capital latin letter
    if not key or not ("A" <= key[0] <= "Z"):
        return ""

    path = go_env_file(environ)
    if path is None:
        return ""

    prefix = key + "="
    try:
        # other lines may hold arbitrary bytes
        with open(path, encoding="utf-8", errors="surrogateescape") as f:
            for line in f:
                if line.startswith(prefix):
                    return line[len(prefix) :].rstrip("\r\n")
    except OSError:
        return ""

    return ""


def query_root(key: str, environ: Mapping[str, str]) -> str:
    """Return an installation root from the environment or the Go environment file."""
    return environ.get(key) or query_env_file(key, environ)


def query_xcrun(tool: str) -> str:
    """Invoke xcrun to obtain a path to the given tool.

    Returns:
        Absolute path to an executable, or an empty string
    """
    try:
        result = safe_run(["xcrun", "-f", tool], stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, check=False)
    except OSError:
        return ""

    if result.returncode != 0:
        return ""

    candidate = result.stdout.decode(errors="replace").strip()
    if not candidate:
        return ""
    return shutil.which(candidate) or ""


def query_sdk_path() -> str:
    """Invoke xcrun to obtain the path of the active SDK, or an empty string."""
    try:
        result = safe_run(["xcrun", "--show-sdk-path"], stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, check=False)
    except OSError:
        return ""

    if result.returncode != 0:
        return ""
    return result.stdout.decode(errors="replace").strip()


def executable_dirs() -> list[Path]:
    """Directories that hold the currently running program.

    The directory of sys.argv[0] comes first (the console script that was
    invoked), followed by the scripts directory of the running interpreter.
    """
    dirs: list[Path] = []
    if sys.argv and sys.argv[0]:
        dirs.append(Path(os.path.abspath(sys.argv[0])).parent)

    scripts = sysconfig.get_path("scripts")
    if scripts and Path(scripts) not in dirs:
        dirs.append(Path(scripts))

    return dirs


def query_executable_dir(tool: str) -> str:
    """Look for a tool next to the currently running program.

    Returns:
        Absolute path to the executable, or an empty string
    """
    for directory in executable_dirs():
        path = shutil.which(tool, path=str(directory))
        if path:
            return os.path.abspath(path)
    return ""
