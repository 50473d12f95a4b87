"""Pytest configuration and fixtures for swiftgo tests.

Tools under test are replaced by tiny POSIX shell scripts written into the
test's temporary directory, so these tests are skipped on Windows.
"""

import os
import stat
import sys
from pathlib import Path
from typing import Callable

import pytest

from swiftgo.version import get_revision

PRIVATE_KEYS = (
    "SWIFTGO_GOTOOL",
    "SWIFTGO_SWIFTC",
    "SWIFTGO_SWIFTFLAGS",
    "SWIFTGO_VERBOSE",
    "__SWIFTGO_PRIVATE_CC",
    "__SWIFTGO_PRIVATE_BUILDDIR",
    "__SWIFTGO_PRIVATE_QUERY",
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake tools are shell scripts")


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Ensure no swiftgo variable leaks in from the developer's shell."""
    for key in PRIVATE_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_revision.cache_clear()
    yield
    get_revision.cache_clear()


@pytest.fixture
def make_script(tmp_path) -> Callable[..., Path]:
    """Factory writing an executable shell script and returning its path.

    Example:
        go = make_script("go", 'echo "go version go1.22.3 linux/amd64"')
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        path = bin_dir / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


@pytest.fixture
def fake_go(make_script) -> Callable[..., Path]:
    """Factory for a fake Go tool answering 'version' and 'env -json'.

    Any other invocation appends its arguments and the bridge variables to
    a 'calls' file next to the script, then exits with the given build code.
    """

    def _make(
        version: str = "go version go1.22.3 linux/amd64",
        env_json: str = '{"CC": "clang", "GOROOT": "/usr/local/go"}',
        version_code: int = 0,
        env_code: int = 0,
        build_code: int = 0,
    ) -> Path:
        calls = "$(dirname \"$0\")/calls"
        body = f"""
[ "$1" = "-C" ] && shift 2
case "$1" in
  version) echo '{version}'; exit {version_code} ;;
  env) echo '{env_json}'; exit {env_code} ;;
esac
echo "args=$*" >> {calls}
echo "CC=$CC" >> {calls}
echo "PRIVATE_CC=$__SWIFTGO_PRIVATE_CC" >> {calls}
echo "BUILDDIR=$__SWIFTGO_PRIVATE_BUILDDIR" >> {calls}
echo "QUERY=${{__SWIFTGO_PRIVATE_QUERY-unset}}" >> {calls}
exit {build_code}
"""
        return make_script("go", body)

    return _make


def read_calls(script: Path) -> list[str]:
    """Return the lines recorded by a fake tool, or an empty list."""
    calls = script.parent / "calls"
    if not calls.exists():
        return []
    return calls.read_text().splitlines()


def environ_with(**overrides: str) -> dict[str, str]:
    """Copy of os.environ with the given overrides."""
    env = os.environ.copy()
    env.update(overrides)
    return env
