"""Tests for Go tool discovery."""

import pytest

from conftest import posix_only
from swiftgo.errors import ConfigError, ExitError, UnsupportedVersionError, VersionError
from swiftgo.tools.go import GO_OVERRIDE_KEY, locate_go_tool

pytestmark = posix_only


def test_locate_go_tool_from_override(fake_go):
    go = fake_go()
    tool = locate_go_tool({GO_OVERRIDE_KEY: f"{go} -C ."})

    assert tool.path == str(go)
    assert tool.args == ["-C", "."]
    assert tool.desc == f'Go tool "{go} -C ."'
    assert tool.version[:3] == (1, 22, 3)
    assert tool.env == {"CC": "clang", "GOROOT": "/usr/local/go"}


def test_locate_go_tool_from_goroot(tmp_path, fake_go):
    go = fake_go()
    tool = locate_go_tool({"GOROOT": str(tmp_path), "GOENV": "off"})
    assert tool.path == str(go)
    assert tool.desc == f'Go tool "{go}"'


def test_locate_go_tool_version_exit_code(fake_go):
    go = fake_go(version_code=4)
    with pytest.raises(VersionError, match="Go version could not be retrieved") as excinfo:
        locate_go_tool({GO_OVERRIDE_KEY: str(go)})

    cause = excinfo.value.__cause__
    assert isinstance(cause, ExitError)
    assert cause.exit_code == 4


def test_locate_go_tool_env_exit_code(fake_go):
    go = fake_go(env_code=7)
    with pytest.raises(VersionError, match="Go environment configuration could not be retrieved") as excinfo:
        locate_go_tool({GO_OVERRIDE_KEY: str(go)})
    assert excinfo.value.__cause__.exit_code == 7


def test_locate_go_tool_unsupported_version(fake_go):
    go = fake_go(version="go version devel +abcdef")
    with pytest.raises(UnsupportedVersionError):
        locate_go_tool({GO_OVERRIDE_KEY: str(go)})


def test_locate_go_tool_malformed_env(fake_go):
    go = fake_go(env_json="{not json")
    with pytest.raises(ConfigError):
        locate_go_tool({GO_OVERRIDE_KEY: str(go)})


def test_locate_go_tool_malformed_override():
    with pytest.raises(ConfigError, match=GO_OVERRIDE_KEY):
        locate_go_tool({GO_OVERRIDE_KEY: '"go'})
