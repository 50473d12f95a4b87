"""Tests for the generic locator cascade and its steps."""

import os
from unittest.mock import patch

import pytest

from conftest import posix_only
from swiftgo.errors import ConfigError, ToolNotFoundError
from swiftgo.tools.locator import Locator, Resolution, override_step, root_step, xcrun_step
from swiftgo.tools.tool import ForwardMode, Tool
from swiftgo.tools.utils import go_env_file, query_env_file


def test_override_step_splits_command_line():
    step = override_step("X_TOOL")
    resolution = step({"X_TOOL": "/opt/bin/cc -m64 'two words'"})
    assert resolution.hint == "/opt/bin/cc"
    assert resolution.args == ["-m64", "two words"]
    assert resolution.label == "/opt/bin/cc -m64 'two words'"


def test_override_step_not_applicable_when_unset_or_empty():
    step = override_step("X_TOOL")
    assert step({}) is None
    assert step({"X_TOOL": ""}) is None


def test_override_step_malformed_quoting():
    with pytest.raises(ConfigError, match="X_TOOL environment variable could not be parsed"):
        override_step("X_TOOL")({"X_TOOL": "cc 'unterminated"})


def test_override_step_blank_command():
    with pytest.raises(ConfigError):
        override_step("X_TOOL")({"X_TOOL": "   "})


def test_first_applicable_step_wins():
    calls = []

    def never(environ):
        calls.append("never")
        return None

    def first(environ):
        calls.append("first")
        return Resolution(hint="first")

    def second(environ):
        calls.append("second")
        return Resolution(hint="second")

    locator = Locator("thing", "default", [never, first, second])
    assert locator.resolve({}).hint == "first"
    assert calls == ["never", "first"]


def test_default_hint_when_no_step_applies():
    locator = Locator("thing", "default", [override_step("X_TOOL")])
    assert locator.resolve({}).hint == "default"


@posix_only
def test_locate_preserves_override_prefix(make_script):
    """Every later command keeps override tokens 2..N, in order, before its own args."""
    script = make_script("tool", "exit 0")
    locator = Locator("Test tool", "tool", [override_step("X_TOOL")])
    tool = locator.locate(Tool(), {"X_TOOL": f"{script} -a -b -c"})

    assert tool.path == str(script)
    assert tool.args == ["-a", "-b", "-c"]
    assert tool.desc == f'Test tool "{script} -a -b -c"'
    for mode in (ForwardMode.FORWARD, ForwardMode.CAPTURE):
        assert tool.command(mode, "x").argv == [str(script), "-a", "-b", "-c", "x"]


def test_locate_not_found():
    locator = Locator("Test tool", "swiftgo-test-missing-tool", [])
    with pytest.raises(ToolNotFoundError, match='Test tool "swiftgo-test-missing-tool" not found'):
        locator.locate(Tool(), {})


def test_xcrun_step_uses_resolved_path():
    with patch("swiftgo.tools.locator.query_xcrun", return_value="/Applications/Xcode/clang"):
        resolution = xcrun_step("clang")({})
    assert resolution.hint == "xcrun clang"
    assert resolution.path == "/Applications/Xcode/clang"


def test_xcrun_step_not_applicable_without_xcrun():
    with patch("swiftgo.tools.locator.query_xcrun", return_value=""):
        assert xcrun_step("clang")({}) is None


def test_xcrun_step_skips_search_path_lookup():
    """A path resolved by a step is used as-is, without consulting the hint."""
    with patch("swiftgo.tools.locator.query_xcrun", return_value="/xcode/swiftc"):
        tool = Locator("Swift compiler", "swiftc", [xcrun_step("swiftc")]).locate(Tool(), {})
    assert tool.path == "/xcode/swiftc"
    assert tool.desc == 'Swift compiler "xcrun swiftc"'


def test_root_step_from_environment():
    resolution = root_step("GOROOT", "bin", "go")({"GOROOT": "/usr/local/go"})
    assert resolution.hint == os.path.join("/usr/local/go", "bin", "go")


def test_root_step_uses_first_entry_of_path_list():
    resolution = root_step("GOPATH", "bin", "swiftgocc")({"GOPATH": os.pathsep.join(["/a", "/b"])})
    assert resolution.hint == os.path.join("/a", "bin", "swiftgocc")


def test_root_step_from_go_env_file(tmp_path):
    env_file = tmp_path / "env"
    env_file.write_text("GOPROXY=direct\nGOROOT=/opt/go\n")
    resolution = root_step("GOROOT", "bin", "go")({"GOENV": str(env_file)})
    assert resolution.hint == os.path.join("/opt/go", "bin", "go")


def test_root_step_not_applicable():
    assert root_step("GOROOT", "bin", "go")({"GOENV": "off"}) is None


def test_go_env_file_disabled():
    assert go_env_file({"GOENV": "off"}) is None


@pytest.mark.skipif(os.name == "nt", reason="XDG lookup is POSIX-only")
def test_go_env_file_default_location(tmp_path):
    with patch("swiftgo.tools.utils.sys.platform", "linux"):
        assert go_env_file({"XDG_CONFIG_HOME": str(tmp_path)}) == tmp_path / "go" / "env"


def test_query_env_file_ignores_lowercase_keys(tmp_path):
    env_file = tmp_path / "env"
    env_file.write_text("goroot=/x\n")
    assert query_env_file("goroot", {"GOENV": str(env_file)}) == ""


def test_query_env_file_missing_file(tmp_path):
    assert query_env_file("GOROOT", {"GOENV": str(tmp_path / "missing")}) == ""


def test_root_step_tolerates_non_utf8_go_env_file(tmp_path):
    env_file = tmp_path / "env"
    env_file.write_bytes(b"GOPROXY=caf\xe9\nGOROOT=/opt/go\n")
    resolution = root_step("GOROOT", "bin", "go")({"GOENV": str(env_file)})
    assert resolution.hint == os.path.join("/opt/go", "bin", "go")


def test_query_env_file_non_utf8_value_is_not_an_error(tmp_path):
    env_file = tmp_path / "env"
    env_file.write_bytes(b"GOPATH=/home/caf\xe9/go\n")
    assert query_env_file("GOPATH", {"GOENV": str(env_file)}).startswith("/home/caf")
