"""Build identity of the installed swiftgo distribution.

The identity is "<vcs>-<revision>[-modified]", taken from installation
metadata: PEP 610 direct_url.json records the VCS and commit for installs
from a repository URL; for installs from a local checkout the working tree
is inspected instead. Every other install (package index, archive, checkout
without git) is identified by its release version, "release-<version>". A
distribution that is not installed has the empty identity, which is never
considered compatible with anything.
"""

import json
import logging
import subprocess
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from swiftgo.errors import InvocationError, RevisionMismatchError, ToolNotFoundError
from swiftgo.tools.tool import ForwardMode, Tool

logger = logging.getLogger(__name__)

DISTRIBUTION = "swiftgo"


def _parse_direct_url(text: Optional[str]) -> Optional[dict[str, Any]]:
    if not text:
        return None

    try:
        data = json.loads(text)
    except ValueError:
        logger.debug("Ignoring malformed direct_url.json")
        return None
    return data if isinstance(data, dict) else None


def _git_output(git: Tool, *args: str) -> Optional[str]:
    cmd = git.command(ForwardMode.CAPTURE, *args)
    cmd.stdout = subprocess.PIPE
    try:
        output, exit_code = git.invoke(cmd)
    except InvocationError as e:
        logger.debug("%s", e)
        return None
    if exit_code != 0:
        return None
    return output.decode(errors="replace").strip()


def git_identity(source_dir: Path) -> str:
    """Compute the identity of a git working tree, or return an empty string."""
    if not (source_dir / ".git").exists():
        return ""

    git = Tool(desc='VCS tool "git"', hint="git")
    try:
        git.locate()
    except ToolNotFoundError:
        return ""

    revision = _git_output(git, "-C", str(source_dir), "rev-parse", "HEAD")
    if not revision:
        return ""

    status = _git_output(git, "-C", str(source_dir), "status", "--porcelain")
    modified = "-modified" if status else ""
    return f"git-{revision}{modified}"


def identity_from_direct_url(direct_url: Optional[dict[str, Any]], version: str) -> str:
    """Compute the build identity of an installation.

    Args:
        direct_url: PEP 610 direct_url.json document, or None for index installs
        version: Installed distribution version

    Returns:
        The VCS identity when one is recorded or can be read from the source
        checkout, otherwise "release-<version>"
    """
    direct_url = direct_url or {}
    vcs_info = direct_url.get("vcs_info")
    if isinstance(vcs_info, dict):
        vcs = vcs_info.get("vcs", "")
        commit = vcs_info.get("commit_id", "")
        if vcs and commit:
            return f"{vcs}-{commit}"

    url = direct_url.get("url", "")
    if "dir_info" in direct_url and isinstance(url, str) and url.startswith("file:"):
        identity = git_identity(Path(url2pathname(unquote(urlparse(url).path))))
        if identity:
            return identity

    # archives, index installs and checkouts without git
    return f"release-{version}"


@lru_cache(maxsize=1)
def get_revision() -> str:
    """Return the build identity of the running swiftgo installation, or "" if it is not installed."""
    try:
        dist = metadata.distribution(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return ""

    direct_url = _parse_direct_url(dist.read_text("direct_url.json"))
    return identity_from_direct_url(direct_url, dist.version or "")


def get_version() -> str:
    """Return the version of the installed swiftgo distribution, or an empty string."""
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return ""


def check_revision(driver: str, delegate: str, delegate_desc: str) -> None:
    """Ensure the driver and the delegate come from the same build.

    Raises:
        RevisionMismatchError: If either revision is empty or they differ
    """
    if not driver or not delegate or driver != delegate:
        logger.debug("Revision check failed: driver=%r delegate=%r", driver, delegate)
        raise RevisionMismatchError(f"revision mismatch between driver binary and {delegate_desc}")
